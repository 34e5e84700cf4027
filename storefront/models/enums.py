from enum import Enum


class ItemStatus(str, Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"
    REFUNDED = "refunded"


TERMINAL_ITEM_STATUSES = frozenset({ItemStatus.CANCELLED, ItemStatus.REFUNDED})


class OrderStatus(str, Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    PARTIALLY_SHIPPED = "partially_shipped"
    PARTIALLY_DELIVERED = "partially_delivered"
    PARTIALLY_CANCELLED = "partially_cancelled"
    PARTIALLY_REFUNDED = "partially_refunded"
    MIXED = "mixed"


class PaymentMethod(str, Enum):
    RAZORPAY = "razorpay"
    COD = "cod"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class RefundStatus(str, Enum):
    INITIATED = "initiated"
    PROCESSED = "processed"
    FAILED = "failed"


class ItemAction(str, Enum):
    CANCEL_ITEM = "cancel_item"
    SHIP_ITEM = "ship_item"
    DELIVER_ITEM = "deliver_item"
    REQUEST_RETURN = "request_return"
    APPROVE_RETURN = "approve_return"
    REFUND_ITEM = "refund_item"
