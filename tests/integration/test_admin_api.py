"""
Integration tests for login, price and discount administration endpoints.
"""

from app.models import ProductPrice


class TestLogin:

    def test_login_returns_usable_token(self, client, session, distributor):
        username = distributor.username

        response = client.post('/api/auth/login', json={'username': username, 'password': 'password123'})

        body = response.get_json()
        assert response.status_code == 200
        assert body['role'] == 'Distributor'
        orders = client.get('/api/orders', headers={'Authorization': f"Bearer {body['token']}"})
        assert orders.status_code == 200

    def test_wrong_password(self, client, session, distributor):
        response = client.post('/api/auth/login', json={'username': distributor.username, 'password': 'nope'})

        assert response.status_code == 401
        assert response.get_json()['message'] == 'Invalid password!'

    def test_unknown_username(self, client, session):
        response = client.post('/api/auth/login', json={'username': 'ghost', 'password': 'whatever'})

        assert response.status_code == 401
        assert response.get_json()['message'] == 'Invalid username!'


class TestPricesApi:

    def test_admin_adds_and_lists_prices(self, client, session, admin_user, product, auth_headers):
        product_id, headers = product.id, auth_headers(admin_user)

        created = client.post('/api/prices', json={
            'product_id': product_id,
            'price': 12.5,
            'price_type': 'package',
            'package_quantity': 24,
            'remaining_quantity': 40,
        }, headers=headers)
        listed = client.get(f'/api/products/{product_id}/prices', headers=headers)

        assert created.status_code == 200
        assert created.get_json()['data']['price'] == '12.50'
        data = listed.get_json()['data']
        assert len(data) == 1
        assert data[0]['price_type'] == 'package'
        assert data[0]['remaining_quantity'] == 40

    def test_distributor_cannot_change_prices(self, client, session, distributor, make_listing, auth_headers):
        listing_id = make_listing(remaining=5).id

        response = client.put(f'/api/prices/{listing_id}', json={
            'price': '1.00', 'remaining_quantity': 500
        }, headers=auth_headers(distributor))

        assert response.status_code == 403
        session.expire_all()
        assert session.get(ProductPrice, listing_id).remaining_quantity == 5

    def test_distributor_can_read_prices(self, client, session, distributor, make_listing, auth_headers):
        listing_id = make_listing(price='3.30', remaining=5).id

        response = client.get(f'/api/prices/{listing_id}', headers=auth_headers(distributor))

        assert response.status_code == 200
        assert response.get_json()['data']['price'] == '3.30'

    def test_update_and_delete(self, client, session, admin_user, make_listing, auth_headers):
        listing_id = make_listing(remaining=5).id
        headers = auth_headers(admin_user)

        partial = client.put(f'/api/prices/{listing_id}', json={'price': '7.00'}, headers=headers)
        updated = client.put(f'/api/prices/{listing_id}', json={
            'price': '7.00', 'price_type': 'package', 'package_quantity': 6, 'remaining_quantity': 11
        }, headers=headers)
        deleted = client.delete(f'/api/prices/{listing_id}', headers=headers)
        missing = client.get(f'/api/prices/{listing_id}', headers=headers)

        assert partial.status_code == 400
        assert updated.get_json()['data']['remaining_quantity'] == 11
        assert updated.get_json()['data']['price_type'] == 'package'
        assert deleted.status_code == 200
        assert missing.status_code == 404

    def test_invalid_price(self, client, session, admin_user, product, auth_headers):
        response = client.post('/api/prices', json={
            'product_id': product.id, 'price': 'free'
        }, headers=auth_headers(admin_user))

        assert response.status_code == 400


class TestDiscountsApi:

    def test_admin_creates_discount_and_order_snapshots_it(self, client, session, admin_user, shop,
                                                         make_listing, auth_headers):
        listing_id = make_listing(remaining=10).id
        shop_id, headers = shop.id, auth_headers(admin_user)

        created = client.post('/api/discounts', json={
            'discount_name': 'Bulk',
            'discount_type': 'percentage',
            'discount_value': '5',
            'price_ids': [listing_id],
        }, headers=headers)
        discount_id = created.get_json()['data']

        order_id = client.post('/api/orders', json={
            'shop_id': shop_id, 'order_details': [{'price_id': listing_id, 'quantity': 1}]
        }, headers=headers).get_json()['data']
        order = client.get(f'/api/orders/{order_id}', headers=headers).get_json()['data']

        assert order['order_details'][0]['discount_id'] == discount_id

    def test_distributor_lists_but_cannot_create(self, client, session, distributor, make_listing,
                                                make_discount, auth_headers):
        make_discount([make_listing()], name='Visible')
        headers = auth_headers(distributor)

        listed = client.get('/api/discounts', headers=headers)
        created = client.post('/api/discounts', json={
            'discount_name': 'Sneaky', 'discount_type': 'fixed', 'discount_value': '1'
        }, headers=headers)

        assert [d['discount_name'] for d in listed.get_json()['data']] == ['Visible']
        assert created.status_code == 403

    def test_unknown_discount(self, client, session, admin_user, auth_headers):
        response = client.get('/api/discounts/424242', headers=auth_headers(admin_user))
        assert response.status_code == 404
