"""Brand model."""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class Brand(Base):
    """Brand model."""

    __tablename__ = 'brands'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    brand_name = Column(String(150), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Brand(id={self.id}, brand_name='{self.brand_name}')>"
