"""
Price ledger service.

Owns every read and write of product_prices.remaining_quantity. Stock is
only ever touched under a row lock (SELECT ... FOR UPDATE) taken inside the
caller's transaction, so concurrent reservations on one listing serialize
at the database and never at the application.
"""
import logging
from datetime import datetime
from typing import Dict, Iterable, Optional

from sqlalchemy import String, cast

from app.exceptions import (
    BusinessLogicError, NotFoundError, InsufficientStockError, ListingUnavailableError
)
from app.models import Product, ProductPrice, PriceType
from app.utils.number_format import parse_int, parse_money
from app.utils.pagination import paginate, PaginationResult

logger = logging.getLogger(__name__)

# Fields an update replaces wholesale
REPLACED_FIELDS = ('price', 'price_type', 'package_quantity', 'remaining_quantity')


# =====================================================
# RESERVATION (called inside the order transaction)
# =====================================================

def lock_listings(session, price_ids: Iterable[int]) -> Dict[int, ProductPrice]:
    """
    Lock priced listings FOR UPDATE and return them keyed by id.

    Locks are requested in ascending id order whatever the order of
    price_ids, so two transactions touching the same listings can never
    wait on each other in a cycle.

    Raises:
        ListingUnavailableError: if any id is missing or soft-deleted.
    """
    ids = sorted(set(price_ids))
    if not ids:
        return {}

    listings = session.query(ProductPrice).filter(
        ProductPrice.id.in_(ids),
        ProductPrice.deleted_at.is_(None)
    ).order_by(ProductPrice.id).with_for_update().populate_existing().all()

    found = {listing.id: listing for listing in listings}
    missing = [pid for pid in ids if pid not in found]
    if missing:
        raise ListingUnavailableError(missing)
    return found


def reserve(session, price_id: int, quantity: int) -> int:
    """
    Decrement a listing's remaining quantity by quantity.

    Must run inside the caller's transaction; the decrement is invisible to
    other transactions until that transaction commits.

    Returns:
        The remaining quantity observed before the decrement.

    Raises:
        ListingUnavailableError: listing missing or soft-deleted
        InsufficientStockError: quantity exceeds the remaining quantity
    """
    listing = lock_listings(session, [price_id])[price_id]
    remaining_before = listing.remaining_quantity

    if quantity > remaining_before:
        raise InsufficientStockError([
            {'price_id': price_id, 'requested': quantity, 'available': remaining_before}
        ])

    # Guarded so the row can never go negative, even without the lock
    updated = session.query(ProductPrice).filter(
        ProductPrice.id == price_id,
        ProductPrice.deleted_at.is_(None),
        ProductPrice.remaining_quantity >= quantity
    ).update(
        {ProductPrice.remaining_quantity: ProductPrice.remaining_quantity - quantity},
        synchronize_session='evaluate'
    )
    if updated != 1:
        raise InsufficientStockError([
            {'price_id': price_id, 'requested': quantity, 'available': remaining_before}
        ])

    return remaining_before


# =====================================================
# ADMINISTRATION
# =====================================================

def _parse_price_data(data: dict) -> dict:
    """Validate an add/update payload and return normalized values."""
    try:
        price = parse_money(data.get('price'), 'price')
        remaining_quantity = parse_int(data.get('remaining_quantity', 0), 'remaining_quantity', minimum=0)
        package_quantity = parse_int(data.get('package_quantity', 1), 'package_quantity', minimum=0)
    except ValueError as e:
        raise BusinessLogicError(str(e))

    try:
        price_type = PriceType(data.get('price_type', PriceType.SINGLE_ITEM.value))
    except ValueError:
        allowed = ', '.join(t.value for t in PriceType)
        raise BusinessLogicError(f'price_type must be one of: {allowed}')

    if price_type == PriceType.PACKAGE and package_quantity < 1:
        raise BusinessLogicError('package_quantity must be >= 1 for package prices')
    if price_type == PriceType.SINGLE_ITEM:
        package_quantity = package_quantity or 1

    return {
        'price': price,
        'price_type': price_type,
        'package_quantity': package_quantity,
        'remaining_quantity': remaining_quantity,
    }


def list_prices(session, product_id: int, search: Optional[str] = None,
                page: Optional[int] = None, per_page: Optional[int] = None,
                max_per_page: Optional[int] = None) -> PaginationResult:
    """List the live priced listings of a product."""
    query = session.query(ProductPrice).filter(
        ProductPrice.product_id == product_id,
        ProductPrice.deleted_at.is_(None)
    )
    return paginate(
        query,
        search=search,
        search_columns=[cast(ProductPrice.id, String), cast(ProductPrice.price_type, String)],
        order_by=[ProductPrice.price_type, ProductPrice.id],
        page=page,
        per_page=per_page,
        max_per_page=max_per_page
    )


def get_price(session, price_id: int) -> ProductPrice:
    """Get a live priced listing or raise NotFoundError."""
    listing = session.query(ProductPrice).filter(
        ProductPrice.id == price_id,
        ProductPrice.deleted_at.is_(None)
    ).first()
    if not listing:
        raise NotFoundError(f'Price {price_id} not found')
    return listing


def add_price(session, data: dict) -> ProductPrice:
    """Create a priced listing for an existing product."""
    try:
        product_id = parse_int(data.get('product_id'), 'product_id', minimum=1)
    except ValueError as e:
        raise BusinessLogicError(str(e))
    values = _parse_price_data(data)

    product = session.query(Product).filter(
        Product.id == product_id,
        Product.deleted_at.is_(None)
    ).first()
    if not product:
        raise NotFoundError(f'Product {product_id} not found')

    try:
        listing = ProductPrice(product_id=product_id, **values)
        session.add(listing)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"[PRICES] Added price {listing.id} for product {product_id} ({values['price']})")
    return listing


def update_price(session, price_id: int, data: dict) -> ProductPrice:
    """
    Replace price, type, package size and remaining quantity of a listing.

    Takes the same row lock as order placement, so an edit waits for any
    in-flight reservation on the listing and vice versa.

    Every replaced field must be present: a missing remaining_quantity
    would otherwise reset the listing's stock.
    """
    missing = [key for key in REPLACED_FIELDS if data.get(key) is None]
    if missing:
        raise BusinessLogicError(f"Missing fields: {', '.join(missing)}")
    values = _parse_price_data(data)

    try:
        listing = session.query(ProductPrice).filter(
            ProductPrice.id == price_id,
            ProductPrice.deleted_at.is_(None)
        ).with_for_update().populate_existing().first()
        if not listing:
            raise NotFoundError(f'Price {price_id} not found')

        for key, value in values.items():
            setattr(listing, key, value)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"[PRICES] Updated price {price_id}: {values['price']} x{values['remaining_quantity']}")
    return listing


def delete_price(session, price_id: int) -> None:
    """Soft-delete a listing. Existing order details keep referencing it."""
    try:
        listing = session.query(ProductPrice).filter(
            ProductPrice.id == price_id,
            ProductPrice.deleted_at.is_(None)
        ).with_for_update().first()
        if not listing:
            raise NotFoundError(f'Price {price_id} not found')

        listing.deleted_at = datetime.now()
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"[PRICES] Deleted price {price_id}")
