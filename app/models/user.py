"""User model - staff and distributors authenticating with username/password."""
from sqlalchemy import Column, BigInteger, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash, check_password_hash
from app.database import Base, BigIntPK


class User(Base):
    """User model."""

    __tablename__ = 'users'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    username = Column(String(100), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    role_id = Column(BigInteger, ForeignKey('roles.id'), nullable=False)
    shop_id = Column(BigInteger, ForeignKey('shops.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    role = relationship('Role')
    shop = relationship('Shop', foreign_keys=[shop_id])

    def set_password(self, password):
        """Set password hash."""
        self.password_hash = generate_password_hash(password, method='scrypt')

    def check_password(self, password):
        """Check password against hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def role_name(self):
        return self.role.role_name if self.role else None

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"
