"""Middleware for bearer-token authentication."""
from functools import wraps
from flask import g, request
from app.exceptions import AuthenticationError
from app.services.auth_service import decode_token


def load_caller():
    """
    Resolve the caller from the Authorization header into g.

    Sets g.user_id and g.user_role.

    Raises:
        AuthenticationError: 401 when the header is missing or the token is
            invalid, 400 when the header is not "Bearer <token>".
    """
    g.user_id = None
    g.user_role = None

    header = request.headers.get('Authorization')
    if header is None:
        raise AuthenticationError('Authorization header missing')

    parts = header.split()
    if len(parts) != 2 or parts[0] != 'Bearer':
        raise AuthenticationError('Invalid Authorization header format', status_code=400)

    g.user_id, g.user_role = decode_token(parts[1])


def require_bearer(f):
    """
    Decorator: Require a valid bearer token.

    Must be the outermost auth decorator; require_unrestricted relies on the
    caller it loads.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        load_caller()
        return f(*args, **kwargs)
    return decorated_function
