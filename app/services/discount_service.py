"""
Discount service.

Point-in-time lookup of the discount attached to a priced listing, plus
discount administration. Lookups are a pricing nuance, not a stock
guarantee: they take no locks, and a failed lookup degrades to "no
discount" unless the caller asks for strict behaviour.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import String, cast, or_
from sqlalchemy.exc import SQLAlchemyError

from app.exceptions import BusinessLogicError, NotFoundError
from app.models import Discount, ProductDiscount, ProductPrice, Product
from app.utils.number_format import parse_int, parse_money
from app.utils.pagination import paginate, PaginationResult

logger = logging.getLogger(__name__)


class LookupStatus(enum.Enum):
    PRESENT = 'present'
    ABSENT = 'absent'
    FAILED = 'failed'


@dataclass(frozen=True)
class DiscountLookup:
    """Result of an active-discount lookup."""
    status: LookupStatus
    discount_id: Optional[int] = None

    @property
    def failed(self) -> bool:
        return self.status == LookupStatus.FAILED


def _active_discount_query(session, price_id: int, on_date: date):
    return session.query(ProductDiscount.discount_id).join(
        Discount, Discount.id == ProductDiscount.discount_id
    ).filter(
        ProductDiscount.price_id == price_id,
        ProductDiscount.deleted_at.is_(None),
        Discount.deleted_at.is_(None),
        or_(Discount.start_date.is_(None), Discount.start_date <= on_date),
        or_(Discount.end_date.is_(None), Discount.end_date >= on_date)
    ).order_by(
        Discount.start_date.desc().nulls_last(),
        Discount.id.desc()
    )


def active_discount_for(session, price_id: int, on_date: Optional[date] = None) -> DiscountLookup:
    """
    Look up the discount active for a listing on on_date (default: today).

    Runs inside a SAVEPOINT so a failing lookup cannot abort the enclosing
    order transaction. When several discounts apply, the one that started
    most recently wins.
    """
    on_date = on_date or date.today()
    try:
        with session.begin_nested():
            row = _active_discount_query(session, price_id, on_date).first()
    except SQLAlchemyError as e:
        logger.warning(f"[DISCOUNTS] Lookup failed for price {price_id}: {e}")
        return DiscountLookup(LookupStatus.FAILED)

    if row is None:
        return DiscountLookup(LookupStatus.ABSENT)
    return DiscountLookup(LookupStatus.PRESENT, row[0])


# =====================================================
# ADMINISTRATION
# =====================================================

def _parse_date(value, field_name):
    if value in (None, ''):
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), '%Y-%m-%d').date()
    except ValueError:
        raise BusinessLogicError(f'{field_name} must be a date (YYYY-MM-DD)')


def _parse_discount_data(data: dict) -> dict:
    name = (data.get('discount_name') or '').strip()
    if not name:
        raise BusinessLogicError('discount_name is required')
    discount_type = (data.get('discount_type') or '').strip()
    if not discount_type:
        raise BusinessLogicError('discount_type is required')

    try:
        values = {
            'discount_name': name,
            'discount_type': discount_type,
            'discount_value': parse_money(data.get('discount_value'), 'discount_value'),
            'min_quantity': parse_int(data.get('min_quantity', 0), 'min_quantity', minimum=0),
            'max_quantity': parse_int(data.get('max_quantity', 0), 'max_quantity', minimum=0),
            'conditions': data.get('conditions') or '',
        }
    except ValueError as e:
        raise BusinessLogicError(str(e))

    values['start_date'] = _parse_date(data.get('start_date'), 'start_date')
    values['end_date'] = _parse_date(data.get('end_date'), 'end_date')
    if values['start_date'] and values['end_date'] and values['end_date'] < values['start_date']:
        raise BusinessLogicError('end_date must not be before start_date')
    return values


def _parse_price_ids(session, price_ids) -> List[int]:
    try:
        ids = sorted({parse_int(pid, 'price_ids', minimum=1) for pid in (price_ids or [])})
    except (TypeError, ValueError) as e:
        raise BusinessLogicError(str(e))
    if not ids:
        return []

    found = {pid for (pid,) in session.query(ProductPrice.id).filter(
        ProductPrice.id.in_(ids),
        ProductPrice.deleted_at.is_(None)
    )}
    missing = [pid for pid in ids if pid not in found]
    if missing:
        raise NotFoundError(f'Prices not found: {", ".join(map(str, missing))}')
    return ids


def create_discount(session, data: dict) -> Discount:
    """Create a discount and link it to the given price_ids."""
    values = _parse_discount_data(data)
    price_ids = _parse_price_ids(session, data.get('price_ids'))

    try:
        discount = Discount(**values)
        session.add(discount)
        session.flush()
        for price_id in price_ids:
            session.add(ProductDiscount(price_id=price_id, discount_id=discount.id))
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"[DISCOUNTS] Created discount {discount.id} for prices {price_ids}")
    return discount


def get_discount(session, discount_id: int) -> dict:
    """Get a live discount with the listings it is attached to."""
    discount = session.query(Discount).filter(
        Discount.id == discount_id,
        Discount.deleted_at.is_(None)
    ).first()
    if not discount:
        raise NotFoundError(f'Discount {discount_id} not found')

    linked = session.query(
        ProductPrice.id, Product.id, Product.product_name
    ).join(
        ProductDiscount, ProductDiscount.price_id == ProductPrice.id
    ).join(
        Product, Product.id == ProductPrice.product_id
    ).filter(
        ProductDiscount.discount_id == discount_id,
        ProductDiscount.deleted_at.is_(None)
    ).order_by(ProductPrice.id).all()

    result = discount_to_dict(discount)
    result['product_prices'] = [
        {'price_id': price_id, 'product_id': product_id, 'product_name': product_name}
        for price_id, product_id, product_name in linked
    ]
    return result


def list_discounts(session, search: Optional[str] = None, page: Optional[int] = None,
                   per_page: Optional[int] = None, role: Optional[str] = None,
                   restricted_roles=(), max_per_page: Optional[int] = None) -> PaginationResult:
    """List live discounts. Restricted roles get them by name, others newest first."""
    query = session.query(Discount).filter(Discount.deleted_at.is_(None))
    if role in restricted_roles:
        order_by = [Discount.discount_name, Discount.id]
    else:
        order_by = [Discount.created_at.desc(), Discount.id.desc()]

    return paginate(
        query,
        search=search,
        search_columns=[cast(Discount.id, String), Discount.discount_name, Discount.discount_type],
        order_by=order_by,
        page=page,
        per_page=per_page,
        max_per_page=max_per_page
    )


def update_discount(session, discount_id: int, data: dict) -> Discount:
    """
    Replace a discount's fields and its listing links.

    Order details already placed keep the discount id they were created
    with; only future lookups see the change.
    """
    values = _parse_discount_data(data)
    price_ids = _parse_price_ids(session, data.get('price_ids'))

    try:
        discount = session.query(Discount).filter(
            Discount.id == discount_id,
            Discount.deleted_at.is_(None)
        ).first()
        if not discount:
            raise NotFoundError(f'Discount {discount_id} not found')

        for key, value in values.items():
            setattr(discount, key, value)

        session.query(ProductDiscount).filter(
            ProductDiscount.discount_id == discount_id
        ).delete(synchronize_session=False)
        for price_id in price_ids:
            session.add(ProductDiscount(price_id=price_id, discount_id=discount_id))
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"[DISCOUNTS] Updated discount {discount_id}, prices {price_ids}")
    return discount


def delete_discount(session, discount_id: int) -> None:
    """Soft-delete a discount."""
    try:
        discount = session.query(Discount).filter(
            Discount.id == discount_id,
            Discount.deleted_at.is_(None)
        ).first()
        if not discount:
            raise NotFoundError(f'Discount {discount_id} not found')
        discount.deleted_at = datetime.now()
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"[DISCOUNTS] Deleted discount {discount_id}")


def discount_to_dict(discount: Discount) -> dict:
    return {
        'discount_id': discount.id,
        'discount_name': discount.discount_name,
        'discount_type': discount.discount_type,
        'discount_value': str(discount.discount_value),
        'start_date': discount.start_date.isoformat() if discount.start_date else None,
        'end_date': discount.end_date.isoformat() if discount.end_date else None,
        'min_quantity': discount.min_quantity,
        'max_quantity': discount.max_quantity,
        'conditions': discount.conditions,
        'active': discount.is_active_on(date.today()),
        'created_at': discount.created_at.isoformat() if discount.created_at else None,
    }
