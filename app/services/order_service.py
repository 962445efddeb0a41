"""
Order placement service with transactional stock reservation.

Places an order for a shop in a single database transaction:

1. Lock every requested priced listing (ascending id order) and check the
   requested quantities against the remaining quantities.
2. Reject the whole order if any line cannot be supplied. Nothing is
   decremented and no order row is written, even for satisfiable lines.
3. Insert the order header, then for each line decrement stock, snapshot
   the listing price and active discount, and insert the detail row.
4. Recompute the order total from the persisted detail rows and commit.

Every failure rolls the transaction back before the exception leaves this
module, so callers never observe a partial order.
"""
import logging
from collections import OrderedDict, namedtuple
from datetime import datetime
from typing import Dict, Iterable, List

from sqlalchemy import func, select

from app.exceptions import (
    BusinessLogicError, DiscountLookupError, InsufficientStockError,
    OrderPlacementError, OrderUnavailableError, ShopUnavailableError
)
from app.models import Order, OrderDetail, OrderStatus, ProductPrice, Shop
from app.services import price_ledger_service
from app.services.discount_service import active_discount_for
from app.utils.number_format import parse_int

logger = logging.getLogger(__name__)

OrderLine = namedtuple('OrderLine', ['price_id', 'quantity'])


def normalize_order_lines(order_details: Iterable) -> List[OrderLine]:
    """
    Validate the requested lines and keep them in submission order.

    Accepts dicts ({'price_id': ..., 'quantity': ...}) or (price_id, quantity)
    pairs.

    Raises:
        BusinessLogicError: on a malformed line or a non-positive quantity.
    """
    if order_details is None or isinstance(order_details, (str, bytes, dict)):
        raise BusinessLogicError('order_details must be a list')

    lines = []
    for index, item in enumerate(order_details):
        if isinstance(item, dict):
            price_id, quantity = item.get('price_id'), item.get('quantity')
        else:
            try:
                price_id, quantity = item
            except (TypeError, ValueError):
                raise BusinessLogicError(f'Line {index + 1}: expected price_id and quantity')

        try:
            lines.append(OrderLine(
                price_id=parse_int(price_id, 'price_id', minimum=1),
                quantity=parse_int(quantity, 'quantity', minimum=1)
            ))
        except ValueError as e:
            raise BusinessLogicError(f'Line {index + 1}: {e}')
    return lines


def requested_per_listing(lines: List[OrderLine]) -> Dict[int, int]:
    """Total quantity asked for each listing; repeated listings are summed."""
    totals = OrderedDict()
    for line in lines:
        totals[line.price_id] = totals.get(line.price_id, 0) + line.quantity
    return totals


def place_order(
    session,
    shop_id: int,
    user_id: int,
    order_details: Iterable,
    allow_empty: bool = True,
    strict_discounts: bool = False,
    lock_timeout_ms: int = 0
) -> int:
    """
    Place an order and reserve its stock atomically.

    Args:
        session: SQLAlchemy session; must not have a transaction in progress
            that the caller still needs, it is committed or rolled back here
        shop_id: Shop the order is placed for
        user_id: Placing user (resolved from the bearer token)
        order_details: Requested (price_id, quantity) lines
        allow_empty: Accept an order without lines (total 0)
        strict_discounts: Abort the order when a discount lookup fails
            instead of placing the line without a discount
        lock_timeout_ms: Upper bound for row-lock waits (PostgreSQL only)

    Returns:
        The new order id (never 0).

    Raises:
        BusinessLogicError: malformed request, nothing was touched
        OrderUnavailableError: shop or listing unavailable, or insufficient
            stock; carries the sentinel order_id 0
        OrderPlacementError: any unexpected failure
    """
    try:
        shop_id = parse_int(shop_id, 'shop_id', minimum=1)
    except ValueError as e:
        raise BusinessLogicError(str(e))

    lines = normalize_order_lines(order_details)
    if not lines and not allow_empty:
        raise BusinessLogicError('An order needs at least one line')

    try:
        _apply_lock_timeout(session, lock_timeout_ms)

        # 1. Validate shop
        shop = session.query(Shop.id).filter(
            Shop.id == shop_id,
            Shop.deleted_at.is_(None)
        ).first()
        if not shop:
            raise ShopUnavailableError(shop_id)

        # 2. Lock listings and validate every line before writing anything
        requested = requested_per_listing(lines)
        listings = price_ledger_service.lock_listings(session, requested.keys())
        _check_availability(requested, listings)

        # 3. Header with placeholder total
        order = Order(
            shop_id=shop_id,
            user_id=user_id,
            status=OrderStatus.PENDING,
            total_amount=0,
            created_at=datetime.now()
        )
        session.add(order)
        session.flush()
        order_id = order.id

        # 4. Reserve stock and snapshot price/discount per line
        for line in lines:
            price_ledger_service.reserve(session, line.price_id, line.quantity)
            session.add(_build_detail(session, order_id, line, listings[line.price_id], strict_discounts))
        session.flush()

        # 5. Total from the persisted rows
        total = _recompute_total(session, order_id)

        session.commit()

    except OrderUnavailableError as e:
        session.rollback()
        logger.warning(f"[ORDERS] Order for shop {shop_id} by user {user_id} rejected: {e.payload}")
        raise
    except BusinessLogicError:
        session.rollback()
        raise
    except Exception as e:
        session.rollback()
        logger.exception(f"[ORDERS] Order for shop {shop_id} by user {user_id} failed: {e}")
        raise OrderPlacementError() from e

    logger.info(
        f"[ORDERS] Order {order_id} placed for shop {shop_id} by user {user_id}: "
        f"{len(lines)} line(s), total {total}"
    )
    return order_id


# =====================================================
# PRIVATE HELPERS
# =====================================================

def _apply_lock_timeout(session, lock_timeout_ms: int):
    """Bound row-lock waits for the current transaction only."""
    if not lock_timeout_ms or session.get_bind().dialect.name != 'postgresql':
        return
    session.execute(
        select(func.set_config('lock_timeout', f'{int(lock_timeout_ms)}ms', True))
    )


def _check_availability(requested: Dict[int, int], listings: Dict[int, ProductPrice]):
    """Raise InsufficientStockError listing every short line."""
    shortfalls = [
        {'price_id': price_id, 'requested': quantity, 'available': listings[price_id].remaining_quantity}
        for price_id, quantity in requested.items()
        if quantity > listings[price_id].remaining_quantity
    ]
    if shortfalls:
        raise InsufficientStockError(shortfalls)


def _build_detail(session, order_id: int, line: OrderLine, listing: ProductPrice, strict_discounts: bool) -> OrderDetail:
    """Detail row carrying the price and discount in force right now."""
    lookup = active_discount_for(session, line.price_id)
    if lookup.failed and strict_discounts:
        raise DiscountLookupError(line.price_id)

    return OrderDetail(
        order_id=order_id,
        price_id=line.price_id,
        quantity=line.quantity,
        price_at_order=listing.price,
        discount_id=lookup.discount_id
    )


def _recompute_total(session, order_id: int):
    """Set orders.total_amount to the sum of its detail lines and return it."""
    total = session.query(
        func.coalesce(func.sum(OrderDetail.price_at_order * OrderDetail.quantity), 0)
    ).filter(OrderDetail.order_id == order_id).scalar_subquery()

    session.query(Order).filter(Order.id == order_id).update(
        {Order.total_amount: total},
        synchronize_session=False
    )
    return session.query(Order.total_amount).filter(Order.id == order_id).scalar()
