"""Shop model."""
from sqlalchemy import Column, BigInteger, String, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class Shop(Base):
    """Shop - the customer an order is placed for."""

    __tablename__ = 'shops'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    shop_name = Column(String(200), nullable=False)
    address = Column(String(500), nullable=False, default='')
    latitude = Column(Numeric(9, 6), nullable=True)
    longitude = Column(Numeric(9, 6), nullable=True)
    image_url = Column(String(255), nullable=True)
    ward_id = Column(BigInteger, ForeignKey('wards.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    ward = relationship('Ward')
    orders = relationship('Order', back_populates='shop')

    def __repr__(self):
        return f"<Shop(id={self.id}, shop_name='{self.shop_name}')>"
