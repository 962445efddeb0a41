"""
Permission decorators for role-based access control.
Extends require_bearer with role checks.
"""

from functools import wraps
from flask import g, current_app
from app.exceptions import UnauthorizedError


def require_unrestricted(f):
    """
    Decorator: reject callers whose role is in RESTRICTED_ROLES.

    Restricted roles (distributors) may place and read their own orders but
    not administer prices or discounts.

    Must be used AFTER require_bearer.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user_role') in current_app.config.get('RESTRICTED_ROLES', set()):
            raise UnauthorizedError('You do not have permission to perform this action')
        return f(*args, **kwargs)
    return decorated_function
