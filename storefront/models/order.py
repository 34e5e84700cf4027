from sqlalchemy import Column, String, Integer, Float, ForeignKey, DateTime, Text, CheckConstraint
from sqlalchemy.orm import relationship
from storefront.db.base import Base
from storefront.models.enums import ItemStatus, OrderStatus, PaymentStatus, RefundStatus
from storefront.utils.common import generate_id, utcnow

class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        # exactly one of owner / guest session
        CheckConstraint("(user_id IS NULL) <> (guest_session_id IS NULL)", name="ck_orders_owner_xor_guest"),
    )

    order_id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    guest_session_id = Column(String(64), nullable=True, index=True)

    payment_method = Column(String(20), nullable=False)  # razorpay, cod
    payment_status = Column(String(20), default=PaymentStatus.PENDING.value)
    # Written only by the order status aggregator
    status = Column(String(30), default=OrderStatus.PENDING.value)

    total_amount = Column(Float, default=0)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    items = relationship("OrderItem", back_populates="order")
    user = relationship("User", back_populates="orders")

class OrderItem(Base):
    __tablename__ = "order_items"

    order_item_id = Column(String(36), primary_key=True, default=generate_id)
    order_id = Column(String(36), ForeignKey("orders.order_id"), nullable=False, index=True)

    product_id = Column(String(36), nullable=False)
    quantity = Column(Integer, default=1)
    price_at_purchase = Column(Float, default=0)
    size = Column(String(20), nullable=True)
    thumbnail_url = Column(String(500), nullable=True)

    item_status = Column(String(20), nullable=False, default=ItemStatus.PENDING.value)

    cancel_reason = Column(Text, nullable=True)
    return_reason = Column(Text, nullable=True)
    return_requested_at = Column(DateTime(timezone=True), nullable=True)
    return_approved_at = Column(DateTime(timezone=True), nullable=True)

    shipping_partner = Column(String(50), nullable=True)
    tracking_id = Column(String(100), nullable=True)
    tracking_url = Column(String(500), nullable=True)
    shipped_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    refunded_at = Column(DateTime(timezone=True), nullable=True)
    refund_amount = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    order = relationship("Order", back_populates="items")

class Refund(Base):
    """Append-only ledger of money owed back to a customer"""
    __tablename__ = "refunds"

    refund_id = Column(String(36), primary_key=True, default=generate_id)
    order_id = Column(String(36), ForeignKey("orders.order_id"), nullable=False, index=True)
    order_item_id = Column(String(36), ForeignKey("order_items.order_item_id"), nullable=False, index=True)

    refund_amount = Column(Float, nullable=False)
    # initiated here; processed/failed is set by payment reconciliation
    refund_status = Column(String(20), default=RefundStatus.INITIATED.value)
    refund_method = Column(String(20))
    refund_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
