from storefront.db.base import Base
from storefront.models.user import User, UserProfile, Notification
from storefront.models.order import Order, OrderItem, Refund
