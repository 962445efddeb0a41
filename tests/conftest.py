import pytest
import os
import shutil
import tempfile
import uuid
from decimal import Decimal

# Force a throwaway SQLite database unless one is already configured (e.g. CI Postgres)
_TEST_DB_DIR = None
if 'DATABASE_URL' not in os.environ:
    _TEST_DB_DIR = tempfile.mkdtemp(prefix='orders-test-')
    os.environ['DATABASE_URL'] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ.setdefault('JWT_SECRET_KEY', 'test-jwt-secret-key-with-enough-bytes')
os.environ.setdefault('ORDER_LOCK_TIMEOUT_MS', '5000')

from app import create_app
from app.database import Base, create_tables, get_session
from app.models import (
    Role, User, Township, Ward, Shop, Brand, Product, ProductPrice, PriceType,
    Discount, ProductDiscount
)
from app.services.auth_service import issue_token


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.Config')
    app.config['TESTING'] = True
    with app.app_context():
        create_tables()
    yield app
    if _TEST_DB_DIR:
        shutil.rmtree(_TEST_DB_DIR, ignore_errors=True)


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Create database session for testing; every table is emptied afterwards."""
    ctx = app.app_context()
    ctx.push()
    session = get_session()
    yield session
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.remove()
    ctx.pop()


@pytest.fixture(scope='function')
def admin_role(session):
    role = Role(role_name='Admin')
    session.add(role)
    session.commit()
    return role


@pytest.fixture(scope='function')
def distributor_role(session):
    role = Role(role_name='Distributor')
    session.add(role)
    session.commit()
    return role


def _make_user(session, role, name):
    suffix = str(uuid.uuid4())[:8]
    user = User(name=name, username=f'{name.lower().replace(" ", "_")}_{suffix}', role_id=role.id)
    user.set_password('password123')
    session.add(user)
    session.commit()
    return user


@pytest.fixture(scope='function')
def admin_user(session, admin_role):
    """Unrestricted user."""
    return _make_user(session, admin_role, 'Admin User')


@pytest.fixture(scope='function')
def distributor(session, distributor_role):
    """Restricted user that only sees their own orders."""
    return _make_user(session, distributor_role, 'Distributor One')


@pytest.fixture(scope='function')
def other_distributor(session, distributor_role):
    return _make_user(session, distributor_role, 'Distributor Two')


@pytest.fixture(scope='function')
def ward(session):
    township = Township(township_name='Downtown')
    session.add(township)
    session.flush()
    ward = Ward(ward_name='Ward 1', township_id=township.id)
    session.add(ward)
    session.commit()
    return ward


@pytest.fixture(scope='function')
def shop(session, ward):
    shop = Shop(
        shop_name='Corner Store',
        address='12 Market Street',
        latitude=Decimal('16.800000'),
        longitude=Decimal('96.150000'),
        ward_id=ward.id
    )
    session.add(shop)
    session.commit()
    return shop


@pytest.fixture(scope='function')
def other_shop(session, ward):
    shop = Shop(shop_name='Riverside Mart', address='5 River Road', ward_id=ward.id)
    session.add(shop)
    session.commit()
    return shop


@pytest.fixture(scope='function')
def product(session):
    brand = Brand(brand_name='Acme')
    session.add(brand)
    session.flush()
    product = Product(product_name='Instant Noodles', brand_id=brand.id)
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def make_listing(session, product):
    """Factory for priced listings of the test product."""
    def _make_listing(price='10.00', remaining=10, price_type=PriceType.SINGLE_ITEM, package_quantity=1):
        listing = ProductPrice(
            product_id=product.id,
            price=Decimal(price),
            price_type=price_type,
            package_quantity=package_quantity,
            remaining_quantity=remaining
        )
        session.add(listing)
        session.commit()
        return listing
    return _make_listing


@pytest.fixture(scope='function')
def make_discount(session):
    """Factory for discounts linked to listings."""
    def _make_discount(listings, name='Promo', start_date=None, end_date=None):
        discount = Discount(
            discount_name=name,
            discount_type='percentage',
            discount_value=Decimal('5.00'),
            start_date=start_date,
            end_date=end_date,
            min_quantity=0,
            max_quantity=0,
            conditions=''
        )
        session.add(discount)
        session.flush()
        for listing in listings:
            session.add(ProductDiscount(price_id=listing.id, discount_id=discount.id))
        session.commit()
        return discount
    return _make_discount


@pytest.fixture(scope='function')
def auth_headers(app):
    """Bearer headers for a user."""
    def _auth_headers(user):
        with app.test_request_context():
            token = issue_token(user)
        return {'Authorization': f'Bearer {token}'}
    return _auth_headers
