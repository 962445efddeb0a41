"""Orders blueprint - order placement and order queries."""
from flask import Blueprint, request, current_app, g
from app.database import get_session
from app.middleware import require_bearer
from app.services.order_service import place_order
from app.services.order_query_service import OrderFilters, list_orders, get_order
from app.blueprints.metrics import track_order_placement
from app.utils.api import data_response, page_response, json_body, page_args, query_date, query_money

orders_bp = Blueprint('orders', __name__, url_prefix='/api/orders')


@orders_bp.route('', methods=['POST'])
@require_bearer
def add_order():
    """
    Place an order for a shop.

    Body: {"shop_id": int, "order_details": [{"price_id": int, "quantity": int}]}

    200 with the new order id, 400 with data 0 when the products are not
    available, 500 when the order could not be stored.
    """
    body = json_body()
    db_session = get_session()
    config = current_app.config

    with track_order_placement():
        order_id = place_order(
            db_session,
            shop_id=body.get('shop_id'),
            user_id=g.user_id,
            order_details=body.get('order_details', []),
            allow_empty=config.get('ORDER_ALLOW_EMPTY', True),
            strict_discounts=config.get('DISCOUNT_LOOKUP_STRICT', False),
            lock_timeout_ms=config.get('ORDER_LOCK_TIMEOUT_MS', 0)
        )
    return data_response(order_id)


@orders_bp.route('', methods=['GET'])
@require_bearer
def orders_list():
    """List orders visible to the caller."""
    page, per_page, max_per_page = page_args()
    filters = OrderFilters(
        search=request.args.get('search', '').strip() or None,
        from_date=query_date('from_date'),
        to_date=query_date('to_date'),
        from_amount=query_money('from_amount'),
        to_amount=query_money('to_amount'),
        status=request.args.get('status') or None
    )

    result = list_orders(
        get_session(),
        filters,
        page=page,
        per_page=per_page,
        role=g.user_role,
        user_id=g.user_id,
        restricted_roles=current_app.config.get('RESTRICTED_ROLES', set()),
        max_per_page=max_per_page
    )
    return page_response(result)


@orders_bp.route('/<int:order_id>', methods=['GET'])
@require_bearer
def order_detail(order_id: int):
    """Show one order with its lines."""
    order = get_order(
        get_session(),
        order_id,
        role=g.user_role,
        user_id=g.user_id,
        restricted_roles=current_app.config.get('RESTRICTED_ROLES', set())
    )
    return data_response(order)
