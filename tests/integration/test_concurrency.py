"""
Concurrent order placement against one listing.
Competing orders must never oversell: stock only goes down by the quantities
of orders that were actually placed.
"""

import threading

import pytest
from app.database import get_session
from app.exceptions import InsufficientStockError
from app.models import Order, OrderDetail, ProductPrice
from app.services.order_service import place_order


def _place_concurrently(requests):
    """Run place_order for every (shop_id, user_id, lines) at once; return outcomes."""
    barrier = threading.Barrier(len(requests))
    outcomes = [None] * len(requests)

    def worker(index, shop_id, user_id, lines):
        thread_session = get_session()
        try:
            barrier.wait()
            outcomes[index] = place_order(thread_session, shop_id, user_id, lines)
        except InsufficientStockError as e:
            outcomes[index] = e
        finally:
            get_session().remove()

    threads = [
        threading.Thread(target=worker, args=(index,) + tuple(request))
        for index, request in enumerate(requests)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return outcomes


@pytest.mark.parametrize('stock,quantity', [(10, 6), (5, 3)])
def test_two_orders_for_last_units(session, shop, admin_user, make_listing, stock, quantity):
    """Two orders that each fit alone but not together: exactly one is placed."""
    listing_id = make_listing(remaining=stock).id
    shop_id, user_id = shop.id, admin_user.id
    # Release this thread's transaction so the workers can take the write lock
    session.commit()
    session.close()

    outcomes = _place_concurrently([
        (shop_id, user_id, [(listing_id, quantity)]),
        (shop_id, user_id, [(listing_id, quantity)]),
    ])

    placed = [o for o in outcomes if isinstance(o, int)]
    rejected = [o for o in outcomes if isinstance(o, InsufficientStockError)]
    assert len(placed) == 1 and placed[0] > 0
    assert len(rejected) == 1
    assert rejected[0].shortfalls == [{'price_id': listing_id, 'requested': quantity, 'available': stock - quantity}]

    assert session.get(ProductPrice, listing_id).remaining_quantity == stock - quantity
    assert session.query(Order).count() == 1


def test_many_orders_never_oversell(session, shop, admin_user, make_listing):
    listing_id = make_listing(remaining=7).id
    other_id = make_listing(remaining=100).id
    shop_id, user_id = shop.id, admin_user.id
    session.commit()
    session.close()

    # Mixed line orders so lock acquisition order is exercised too
    requests = []
    for i in range(8):
        lines = [(listing_id, 2), (other_id, 1)] if i % 2 else [(other_id, 1), (listing_id, 2)]
        requests.append((shop_id, user_id, lines))

    outcomes = _place_concurrently(requests)

    placed = [o for o in outcomes if isinstance(o, int)]
    assert len(placed) == 3
    assert all(isinstance(o, InsufficientStockError) for o in outcomes if o not in placed)

    assert session.get(ProductPrice, listing_id).remaining_quantity == 1
    assert session.get(ProductPrice, other_id).remaining_quantity == 100 - len(placed)
    reserved = session.query(OrderDetail).filter(OrderDetail.price_id == listing_id).all()
    assert sum(d.quantity for d in reserved) == 6
