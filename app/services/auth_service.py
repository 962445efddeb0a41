"""
Authentication service.

Issues and verifies the bearer tokens used by the API. A token's subject is
"<user_id>,<role_name>", which is all the order endpoints need to know
about the caller.
"""
import logging
import time
from typing import Tuple

import jwt
from flask import current_app

from app.exceptions import AuthenticationError
from app.models import Role, User

logger = logging.getLogger(__name__)


def issue_token(user: User) -> str:
    """Sign a bearer token for user."""
    now = int(time.time())
    payload = {
        'sub': f'{user.id},{user.role_name}',
        'iat': now,
        'exp': now + current_app.config['JWT_EXPIRES_SECONDS'],
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET_KEY'],
        algorithm=current_app.config['JWT_ALGORITHM']
    )


def decode_token(token: str) -> Tuple[int, str]:
    """
    Verify a bearer token and return (user_id, role_name).

    Raises:
        AuthenticationError: if the token is invalid, expired or its
            subject is malformed.
    """
    try:
        payload = jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']]
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError('Token expired')
    except jwt.InvalidTokenError:
        raise AuthenticationError('Invalid token')

    parts = str(payload.get('sub', '')).split(',')
    if len(parts) != 2 or not parts[0].isdigit() or not parts[1]:
        logger.warning(f"Token with malformed subject: {payload.get('sub')!r}")
        raise AuthenticationError('Invalid sub format in token')

    return int(parts[0]), parts[1]


def authenticate(session, username: str, password: str) -> User:
    """
    Check username/password and return the active user.

    Raises:
        AuthenticationError: unknown username or wrong password.
    """
    user = session.query(User).join(Role, Role.id == User.role_id).filter(
        User.username == username,
        User.deleted_at.is_(None),
        Role.deleted_at.is_(None)
    ).first()

    if not user:
        logger.info(f"Login attempt for unknown username: {username}")
        raise AuthenticationError('Invalid username!')
    if not user.check_password(password):
        logger.info(f"Login attempt with wrong password: {username}")
        raise AuthenticationError('Invalid password!')
    return user
