from sqlalchemy import Column, String, Boolean, ForeignKey, DateTime, Text, JSON
from sqlalchemy.orm import relationship
from storefront.db.base import Base
from storefront.utils.common import generate_id, utcnow

class User(Base):
    """Identity provider's user record"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(100), unique=True, nullable=True)
    phone = Column(String(15), nullable=True)
    name = Column(String(100), nullable=True)

    user_metadata = Column(JSON, default=dict)
    app_metadata = Column(JSON, default=dict)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    orders = relationship("Order", back_populates="user")

class UserProfile(Base):
    __tablename__ = "user_profiles"

    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    role = Column(String(20), default="customer")  # customer, admin, superadmin
    created_at = Column(DateTime(timezone=True), default=utcnow)

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_id)
    type = Column(String(50))
    title = Column(String(100))
    message = Column(Text)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    data = Column(JSON, nullable=True)
    read = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
