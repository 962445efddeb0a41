"""Role model."""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from app.database import Base, BigIntPK


class Role(Base):
    """Role a user acts under (e.g. Admin, Distributor)."""

    __tablename__ = 'roles'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    role_name = Column(String(50), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Role(id={self.id}, role_name='{self.role_name}')>"
