"""Township model."""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class Township(Base):
    """Township (top level of the delivery geography)."""

    __tablename__ = 'townships'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    township_name = Column(String(150), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Township(id={self.id}, township_name='{self.township_name}')>"
