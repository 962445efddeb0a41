"""Ward model."""
from sqlalchemy import Column, BigInteger, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class Ward(Base):
    """Ward - subdivision of a township that groups shops."""

    __tablename__ = 'wards'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    ward_name = Column(String(150), nullable=False)
    township_id = Column(BigInteger, ForeignKey('townships.id'), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    township = relationship('Township')

    def __repr__(self):
        return f"<Ward(id={self.id}, ward_name='{self.ward_name}')>"
