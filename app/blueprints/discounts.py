"""Discounts blueprint - discount administration."""
from flask import Blueprint, request, current_app, g
from app.database import get_session
from app.middleware import require_bearer
from app.decorators.permissions import require_unrestricted
from app.services import discount_service
from app.utils.api import base_response, data_response, page_response, json_body, page_args

discounts_bp = Blueprint('discounts', __name__, url_prefix='/api/discounts')


@discounts_bp.route('', methods=['GET'])
@require_bearer
def discounts_list():
    page, per_page, max_per_page = page_args()
    result = discount_service.list_discounts(
        get_session(),
        search=request.args.get('search', '').strip() or None,
        page=page,
        per_page=per_page,
        role=g.user_role,
        restricted_roles=current_app.config.get('RESTRICTED_ROLES', set()),
        max_per_page=max_per_page
    )
    result.data = [discount_service.discount_to_dict(d) for d in result.data]
    return page_response(result)


@discounts_bp.route('', methods=['POST'])
@require_bearer
@require_unrestricted
def add_discount():
    """Create a discount; body carries the discount fields and price_ids."""
    discount = discount_service.create_discount(get_session(), json_body())
    return data_response(discount.id)


@discounts_bp.route('/<int:discount_id>', methods=['GET'])
@require_bearer
def get_discount(discount_id: int):
    return data_response(discount_service.get_discount(get_session(), discount_id))


@discounts_bp.route('/<int:discount_id>', methods=['PUT'])
@require_bearer
@require_unrestricted
def update_discount(discount_id: int):
    discount_service.update_discount(get_session(), discount_id, json_body())
    return base_response()


@discounts_bp.route('/<int:discount_id>', methods=['DELETE'])
@require_bearer
@require_unrestricted
def delete_discount(discount_id: int):
    discount_service.delete_discount(get_session(), discount_id)
    return base_response()
