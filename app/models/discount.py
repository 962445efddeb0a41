"""Discount model."""
from sqlalchemy import Column, Integer, String, Text, Numeric, Date, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class Discount(Base):
    """Discount that can be attached to priced listings."""

    __tablename__ = 'discounts'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    discount_name = Column(String(200), nullable=False)
    discount_type = Column(String(50), nullable=False)  # e.g. percentage, fixed
    discount_value = Column(Numeric(12, 2), nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    min_quantity = Column(Integer, nullable=False, default=0)
    max_quantity = Column(Integer, nullable=False, default=0)
    conditions = Column(Text, nullable=False, default='')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    price_links = relationship('ProductDiscount', back_populates='discount')

    def is_active_on(self, day):
        """Check whether day falls inside the discount window."""
        if self.deleted_at is not None:
            return False
        if self.start_date and day < self.start_date:
            return False
        if self.end_date and day > self.end_date:
            return False
        return True

    def __repr__(self):
        return f"<Discount(id={self.id}, discount_name='{self.discount_name}')>"
