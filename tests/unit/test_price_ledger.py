"""
Unit tests for the price ledger service.
"""

import pytest
from decimal import Decimal
from app.exceptions import (
    BusinessLogicError, NotFoundError, InsufficientStockError, ListingUnavailableError
)
from app.models import ProductPrice, PriceType
from app.services import price_ledger_service


class TestLockListings:

    def test_returns_listings_keyed_by_id(self, session, make_listing):
        first, second = make_listing(), make_listing()

        locked = price_ledger_service.lock_listings(session, [second.id, first.id, second.id])

        assert list(locked) == [first.id, second.id]
        session.rollback()

    def test_missing_or_deleted_listing(self, session, make_listing):
        listing = make_listing()
        price_ledger_service.delete_price(session, listing.id)

        with pytest.raises(ListingUnavailableError) as exc_info:
            price_ledger_service.lock_listings(session, [listing.id, 999999])
        assert exc_info.value.price_ids == [listing.id, 999999]
        assert exc_info.value.payload['data'] == 0
        session.rollback()

    def test_no_ids(self, session):
        assert price_ledger_service.lock_listings(session, []) == {}


class TestReserve:

    def test_decrements_and_returns_previous_quantity(self, session, make_listing):
        listing = make_listing(remaining=10)
        listing_id = listing.id

        before = price_ledger_service.reserve(session, listing_id, 4)
        session.commit()

        assert before == 10
        assert session.get(ProductPrice, listing_id).remaining_quantity == 6

    def test_exact_remaining_quantity_empties_listing(self, session, make_listing):
        listing_id = make_listing(remaining=3).id

        price_ledger_service.reserve(session, listing_id, 3)
        session.commit()

        assert session.get(ProductPrice, listing_id).remaining_quantity == 0

    def test_insufficient_stock_leaves_listing_untouched(self, session, make_listing):
        listing_id = make_listing(remaining=2).id

        with pytest.raises(InsufficientStockError) as exc_info:
            price_ledger_service.reserve(session, listing_id, 3)
        session.rollback()

        assert exc_info.value.shortfalls == [{'price_id': listing_id, 'requested': 3, 'available': 2}]
        assert session.get(ProductPrice, listing_id).remaining_quantity == 2


class TestPriceAdministration:

    def test_add_price(self, session, product):
        listing = price_ledger_service.add_price(session, {
            'product_id': product.id,
            'price': '4.5',
            'price_type': 'package',
            'package_quantity': 6,
            'remaining_quantity': 20,
        })

        assert listing.price == Decimal('4.50')
        assert listing.price_type == PriceType.PACKAGE
        assert listing.remaining_quantity == 20

    def test_add_price_unknown_product(self, session):
        with pytest.raises(NotFoundError):
            price_ledger_service.add_price(session, {'product_id': 424242, 'price': '1'})

    @pytest.mark.parametrize('payload', [
        {'price': '-1'},
        {'price': '1', 'price_type': 'crate'},
        {'price': '1', 'price_type': 'package', 'package_quantity': 0},
        {'price': '1', 'remaining_quantity': -5},
    ])
    def test_add_price_rejects_invalid_payload(self, session, product, payload):
        with pytest.raises(BusinessLogicError):
            price_ledger_service.add_price(session, dict(payload, product_id=product.id))

    def test_update_price_replaces_values(self, session, make_listing):
        listing_id = make_listing(price='1.00', remaining=1).id

        price_ledger_service.update_price(session, listing_id, {
            'price': '2.25', 'price_type': 'single_item', 'package_quantity': 1, 'remaining_quantity': 9
        })

        listing = session.get(ProductPrice, listing_id)
        assert listing.price == Decimal('2.25')
        assert listing.remaining_quantity == 9

    @pytest.mark.parametrize('missing', ['price', 'price_type', 'package_quantity', 'remaining_quantity'])
    def test_update_price_requires_every_field(self, session, make_listing, missing):
        """A partial update must not reset the listing's stock or type."""
        listing_id = make_listing(price='1.00', remaining=50).id
        payload = {'price': '4.00', 'price_type': 'single_item', 'package_quantity': 1, 'remaining_quantity': 50}
        del payload[missing]

        with pytest.raises(BusinessLogicError, match=missing):
            price_ledger_service.update_price(session, listing_id, payload)

        session.expire_all()
        listing = session.get(ProductPrice, listing_id)
        assert listing.remaining_quantity == 50
        assert listing.price == Decimal('1.00')

    def test_list_prices_skips_deleted(self, session, product, make_listing):
        kept, deleted = make_listing(), make_listing()
        kept_id = kept.id
        price_ledger_service.delete_price(session, deleted.id)

        result = price_ledger_service.list_prices(session, product.id)

        assert [listing.id for listing in result.data] == [kept_id]
        with pytest.raises(NotFoundError):
            price_ledger_service.get_price(session, deleted.id)
