"""Product Discount model - links a priced listing to a discount."""
from sqlalchemy import Column, BigInteger, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class ProductDiscount(Base):
    """Association between a priced listing and a discount."""

    __tablename__ = 'product_discounts'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    price_id = Column(BigInteger, ForeignKey('product_prices.id'), nullable=False, index=True)
    discount_id = Column(BigInteger, ForeignKey('discounts.id'), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    price = relationship('ProductPrice', back_populates='discount_links')
    discount = relationship('Discount', back_populates='price_links')

    def __repr__(self):
        return f"<ProductDiscount(price_id={self.price_id}, discount_id={self.discount_id})>"
