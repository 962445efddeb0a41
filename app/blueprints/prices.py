"""Prices blueprint - priced listing administration."""
from flask import Blueprint, request
from app.database import get_session
from app.middleware import require_bearer
from app.decorators.permissions import require_unrestricted
from app.services import price_ledger_service
from app.utils.api import base_response, data_response, page_response, json_body, page_args

prices_bp = Blueprint('prices', __name__, url_prefix='/api')


@prices_bp.route('/products/<int:product_id>/prices', methods=['GET'])
@require_bearer
def product_prices(product_id: int):
    """List the priced listings of a product."""
    page, per_page, max_per_page = page_args()
    result = price_ledger_service.list_prices(
        get_session(),
        product_id,
        search=request.args.get('search', '').strip() or None,
        page=page,
        per_page=per_page,
        max_per_page=max_per_page
    )
    result.data = [listing.to_dict() for listing in result.data]
    return page_response(result)


@prices_bp.route('/prices', methods=['POST'])
@require_bearer
@require_unrestricted
def add_price():
    listing = price_ledger_service.add_price(get_session(), json_body())
    return data_response(listing.to_dict())


@prices_bp.route('/prices/<int:price_id>', methods=['GET'])
@require_bearer
def get_price(price_id: int):
    listing = price_ledger_service.get_price(get_session(), price_id)
    return data_response(listing.to_dict())


@prices_bp.route('/prices/<int:price_id>', methods=['PUT'])
@require_bearer
@require_unrestricted
def update_price(price_id: int):
    """Replace price, type, package size and remaining quantity."""
    listing = price_ledger_service.update_price(get_session(), price_id, json_body())
    return data_response(listing.to_dict())


@prices_bp.route('/prices/<int:price_id>', methods=['DELETE'])
@require_bearer
@require_unrestricted
def delete_price(price_id: int):
    price_ledger_service.delete_price(get_session(), price_id)
    return base_response()
