"""Models package - exports all SQLAlchemy models."""
# Users & roles
from app.models.role import Role
from app.models.user import User

# Geography
from app.models.township import Township
from app.models.ward import Ward
from app.models.shop import Shop

# Catalog
from app.models.brand import Brand
from app.models.product import Product
from app.models.product_price import ProductPrice, PriceType
from app.models.discount import Discount
from app.models.product_discount import ProductDiscount

# Ordering
from app.models.order import Order, OrderStatus
from app.models.order_detail import OrderDetail

__all__ = [
    'Role', 'User',
    'Township', 'Ward', 'Shop',
    'Brand', 'Product', 'ProductPrice', 'PriceType', 'Discount', 'ProductDiscount',
    'Order', 'OrderStatus', 'OrderDetail',
]
