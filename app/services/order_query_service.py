"""
Order query service - read side of ordering.

Lists and reads orders joined with their shop and placing user. Callers
whose role is restricted only ever see orders they placed themselves.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, cast

from app.exceptions import BusinessLogicError, NotFoundError
from app.models import Order, OrderDetail, OrderStatus, Product, ProductPrice, Shop, User
from app.utils.formatters import coordinate, iso, money_str
from app.utils.pagination import paginate, PaginationResult


@dataclass
class OrderFilters:
    """Optional filters of the order listing. Ranges need both bounds."""
    search: Optional[str] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    from_amount: Optional[Decimal] = None
    to_amount: Optional[Decimal] = None
    status: Optional[str] = None


def _summary_query(session):
    """order ⋈ shop ⋈ user, skipping soft-deleted shops and users."""
    return session.query(
        Order.id.label('order_id'),
        Shop.shop_name,
        Shop.address.label('shop_address'),
        Shop.latitude.label('shop_latitude'),
        Shop.longitude.label('shop_longitude'),
        User.name.label('distributor_name'),
        Order.created_at.label('order_date'),
        Order.status,
        Order.total_amount,
    ).join(
        Shop, Shop.id == Order.shop_id
    ).join(
        User, User.id == Order.user_id
    ).filter(
        Shop.deleted_at.is_(None),
        User.deleted_at.is_(None)
    )


def _scope_to_caller(query, role: Optional[str], user_id: Optional[int], restricted_roles):
    if role in restricted_roles:
        query = query.filter(Order.user_id == user_id)
    return query


def summary_to_dict(row) -> dict:
    return {
        'order_id': row.order_id,
        'shop_name': row.shop_name,
        'shop_address': row.shop_address,
        'shop_latitude': coordinate(row.shop_latitude),
        'shop_longitude': coordinate(row.shop_longitude),
        'distributor_name': row.distributor_name,
        'order_date': iso(row.order_date),
        'status': row.status.value,
        'total_amount': money_str(row.total_amount),
    }


def list_orders(session, filters: OrderFilters, page: Optional[int] = None,
                per_page: Optional[int] = None, role: Optional[str] = None,
                user_id: Optional[int] = None, restricted_roles=(),
                max_per_page: Optional[int] = None) -> PaginationResult:
    """
    List order summaries, newest first.

    Date range bounds are calendar days, inclusive on both ends. Amount
    range bounds are inclusive. Ranges given with only one bound are
    ignored.
    """
    query = _scope_to_caller(_summary_query(session), role, user_id, restricted_roles)

    if filters.from_date and filters.to_date:
        start = datetime.combine(filters.from_date, time.min)
        end = datetime.combine(filters.to_date + timedelta(days=1), time.min)
        query = query.filter(Order.created_at >= start, Order.created_at < end)

    if filters.from_amount is not None and filters.to_amount is not None:
        query = query.filter(Order.total_amount.between(filters.from_amount, filters.to_amount))

    if filters.status:
        try:
            status = OrderStatus(filters.status)
        except ValueError:
            raise BusinessLogicError(f'Unknown order status: {filters.status}')
        query = query.filter(Order.status == status)

    result = paginate(
        query,
        search=filters.search,
        search_columns=[
            cast(Order.id, String),
            Shop.shop_name,
            Shop.address,
            User.name,
            cast(Order.status, String),
        ],
        order_by=[Order.created_at.desc(), Order.id.desc()],
        page=page,
        per_page=per_page,
        max_per_page=max_per_page
    )
    result.data = [summary_to_dict(row) for row in result.data]
    return result


def get_order(session, order_id: int, role: Optional[str] = None,
              user_id: Optional[int] = None, restricted_roles=()) -> dict:
    """Order summary plus its detail lines."""
    row = _scope_to_caller(
        _summary_query(session), role, user_id, restricted_roles
    ).filter(Order.id == order_id).first()
    if not row:
        raise NotFoundError(f'Order {order_id} not found')

    details = session.query(
        OrderDetail, Product.product_name
    ).join(
        ProductPrice, ProductPrice.id == OrderDetail.price_id
    ).join(
        Product, Product.id == ProductPrice.product_id
    ).filter(
        OrderDetail.order_id == order_id
    ).order_by(OrderDetail.id).all()

    result = summary_to_dict(row)
    result['order_details'] = [
        {
            'order_detail_id': detail.id,
            'price_id': detail.price_id,
            'product_name': product_name,
            'quantity': detail.quantity,
            'price_at_order': money_str(detail.price_at_order),
            'discount_id': detail.discount_id,
            'line_total': money_str(detail.line_total),
        }
        for detail, product_name in details
    ]
    return result
