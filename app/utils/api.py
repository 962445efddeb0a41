"""Response envelopes and query-string parsing shared by the JSON blueprints."""
from datetime import datetime
from typing import Optional

from flask import current_app, jsonify, request

from app.exceptions import BusinessLogicError
from app.utils.number_format import parse_int, parse_money
from app.utils.pagination import PaginationResult

SUCCESS_MESSAGE = 'Successful.'


def base_response(message: str = SUCCESS_MESSAGE, code: int = 200):
    return jsonify({'code': code, 'message': message}), code


def data_response(data, message: str = SUCCESS_MESSAGE, code: int = 200):
    return jsonify({'code': code, 'message': message, 'data': data}), code


def page_response(result: PaginationResult, message: str = SUCCESS_MESSAGE):
    return jsonify({
        'code': 200,
        'message': message,
        'data': result.data,
        'total': result.total,
        'page': result.page,
        'per_page': result.per_page,
        'page_counts': result.page_counts,
    }), 200


def json_body() -> dict:
    """Request JSON object or a 400."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise BusinessLogicError('Request body must be a JSON object')
    return body


def query_int(name: str, minimum: Optional[int] = None) -> Optional[int]:
    value = request.args.get(name)
    if value in (None, ''):
        return None
    try:
        return parse_int(value, name, minimum=minimum)
    except ValueError as e:
        raise BusinessLogicError(str(e))


def query_money(name: str):
    value = request.args.get(name)
    if value in (None, ''):
        return None
    try:
        return parse_money(value, name)
    except ValueError as e:
        raise BusinessLogicError(str(e))


def query_date(name: str):
    value = request.args.get(name)
    if value in (None, ''):
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise BusinessLogicError(f'{name} must be a date (YYYY-MM-DD)')


def page_args():
    """(page, per_page, max_per_page) from the query string."""
    page = query_int('page', minimum=1)
    per_page = query_int('per_page', minimum=1)
    if page is not None and per_page is None:
        per_page = current_app.config.get('DEFAULT_PER_PAGE')
    return page, per_page, current_app.config.get('MAX_PER_PAGE')
