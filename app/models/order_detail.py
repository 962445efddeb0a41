"""Order Detail model."""
from sqlalchemy import Column, BigInteger, Integer, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from app.database import Base, BigIntPK


class OrderDetail(Base):
    """Order line with the price and discount in force when it was placed."""

    __tablename__ = 'order_details'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_order_details_quantity_positive'),
    )

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    order_id = Column(BigInteger, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    price_id = Column(BigInteger, ForeignKey('product_prices.id'), nullable=False)
    quantity = Column(Integer, nullable=False)
    price_at_order = Column(Numeric(12, 2), nullable=False)
    discount_id = Column(BigInteger, ForeignKey('discounts.id'), nullable=True)

    # Relationships
    order = relationship('Order', back_populates='details')
    price = relationship('ProductPrice')
    discount = relationship('Discount')

    @property
    def line_total(self):
        return self.price_at_order * self.quantity

    def __repr__(self):
        return f"<OrderDetail(id={self.id}, price_id={self.price_id}, qty={self.quantity})>"
