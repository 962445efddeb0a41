"""Product model."""
from sqlalchemy import Column, BigInteger, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class Product(Base):
    """Product model."""

    __tablename__ = 'products'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    product_name = Column(String(200), nullable=False)
    brand_id = Column(BigInteger, ForeignKey('brands.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    brand = relationship('Brand')
    prices = relationship('ProductPrice', back_populates='product')

    def __repr__(self):
        return f"<Product(id={self.id}, product_name='{self.product_name}')>"
