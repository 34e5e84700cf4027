from sqlalchemy.orm import Session

from storefront.models.user import Notification
from storefront.models.enums import ItemStatus
from storefront.utils.common import generate_id

ITEM_STATUS_TITLES = {
    ItemStatus.SHIPPED: "Order Shipped",
    ItemStatus.DELIVERED: "Order Delivered",
    ItemStatus.CANCELLED: "Item Cancelled",
    ItemStatus.RETURNED: "Return Requested",
    ItemStatus.REFUNDED: "Refund Initiated",
}

def create_notification(db: Session, user_id: str = None, type: str = "", title: str = "", message: str = "", data: dict = None):
    """Helper function to create notifications"""
    notification = Notification(
        id=generate_id(),
        type=type,
        title=title,
        message=message,
        user_id=user_id,
        data=data or {},
        read=False
    )
    db.add(notification)
    return notification

def create_item_status_notification(db: Session, user_id: str, order_id: str, order_item_id: str, status: ItemStatus):
    """Tell the order owner that one of their items changed status"""
    status_messages = {
        ItemStatus.SHIPPED: "An item from your order has been shipped.",
        ItemStatus.DELIVERED: "An item from your order has been delivered. Thank you for shopping with us!",
        ItemStatus.CANCELLED: "An item from your order has been cancelled.",
        ItemStatus.RETURNED: "Your return request has been received. We'll review it shortly.",
        ItemStatus.REFUNDED: "A refund has been initiated for an item in your order.",
    }
    return create_notification(
        db=db,
        user_id=user_id,
        type="order_item_status",
        title=ITEM_STATUS_TITLES.get(status, "Order Update"),
        message=status_messages.get(status, f"Item status updated to {status.value}"),
        data={"order_id": order_id, "order_item_id": order_item_id, "status": status.value}
    )
