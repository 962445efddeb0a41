"""Order model."""
from sqlalchemy import Column, BigInteger, Numeric, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntPK
import enum


class OrderStatus(enum.Enum):
    """Order status enum."""
    PENDING = 'Pending'


class Order(Base):
    """Order header placed by a user for a shop."""

    __tablename__ = 'orders'

    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    shop_id = Column(BigInteger, ForeignKey('shops.id'), nullable=False, index=True)
    user_id = Column(BigInteger, ForeignKey('users.id'), nullable=False, index=True)
    status = Column(
        Enum(OrderStatus, name='order_status', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OrderStatus.PENDING
    )
    # Always recomputed from order_details, never client supplied
    total_amount = Column(Numeric(14, 2), nullable=False, default=0, server_default='0')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    shop = relationship('Shop', back_populates='orders')
    user = relationship('User')
    details = relationship(
        'OrderDetail',
        back_populates='order',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='OrderDetail.id'
    )

    def __repr__(self):
        return f"<Order(id={self.id}, total={self.total_amount}, status={self.status.value})>"
