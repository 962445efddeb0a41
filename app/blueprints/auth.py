"""Authentication blueprint - token issuance."""
import logging
from flask import Blueprint, jsonify
from app.database import get_session
from app.exceptions import BusinessLogicError
from app.services.auth_service import authenticate, issue_token
from app.utils.api import json_body

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

logger = logging.getLogger(__name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Exchange username/password for a bearer token.

    Body: {"username": str, "password": str}
    """
    body = json_body()
    username = (body.get('username') or '').strip()
    password = body.get('password') or ''
    if not username or not password:
        raise BusinessLogicError('username and password are required')

    user = authenticate(get_session(), username, password)
    token = issue_token(user)
    logger.info(f"User {user.id} logged in as {user.role_name}")

    return jsonify({
        'code': 200,
        'message': 'Token generated successfully.',
        'token': token,
        'name': user.name,
        'role': user.role_name,
    }), 200
