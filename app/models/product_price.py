"""Product Price model - one sellable configuration of a product with its own stock."""
import enum
from sqlalchemy import Column, BigInteger, Integer, Numeric, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class PriceType(enum.Enum):
    """How a listing is sold."""
    SINGLE_ITEM = 'single_item'
    PACKAGE = 'package'


class ProductPrice(Base):
    """
    Priced listing of a product.

    remaining_quantity is the sellable stock of this listing. It is only
    decremented by order placement and replaced by price administration,
    both under a row lock.
    """

    __tablename__ = 'product_prices'
    __table_args__ = (
        CheckConstraint('remaining_quantity >= 0', name='ck_product_prices_remaining_non_negative'),
        CheckConstraint('price >= 0', name='ck_product_prices_price_non_negative'),
    )

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    product_id = Column(BigInteger, ForeignKey('products.id'), nullable=False, index=True)
    price = Column(Numeric(12, 2), nullable=False)
    price_type = Column(
        Enum(PriceType, name='price_type', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PriceType.SINGLE_ITEM
    )
    package_quantity = Column(Integer, nullable=False, default=1, server_default='1')
    remaining_quantity = Column(Integer, nullable=False, default=0, server_default='0')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    product = relationship('Product', back_populates='prices')
    discount_links = relationship('ProductDiscount', back_populates='price')

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    def to_dict(self):
        return {
            'price_id': self.id,
            'product_id': self.product_id,
            'price': str(self.price),
            'price_type': self.price_type.value,
            'package_quantity': self.package_quantity,
            'remaining_quantity': self.remaining_quantity,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<ProductPrice(id={self.id}, price={self.price}, remaining={self.remaining_quantity})>"
