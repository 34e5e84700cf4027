"""Row-level access to orders, items and refunds.

The state machine and the aggregator take an ``OrderStore`` instead of reaching
for a session themselves, so a test can hand them any object with the same
methods.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.models.order import Order, OrderItem, Refund
from storefront.services.notifications import create_item_status_notification
from storefront.utils.common import generate_id, utcnow


class OrderStore:
    def __init__(self, db: Session):
        self.db = db

    def get_item(self, order_item_id: str) -> Optional[OrderItem]:
        return self.db.query(OrderItem).filter(OrderItem.order_item_id == order_item_id).first()

    def get_order(self, order_id: str) -> Optional[Order]:
        return self.db.query(Order).filter(Order.order_id == order_id).first()

    def item_statuses(self, order_id: str) -> List[str]:
        rows = self.db.query(OrderItem.item_status).filter(OrderItem.order_id == order_id).all()
        return [row[0] for row in rows]

    def transition_item(self, order_item_id: str, expected_status: str, values: dict) -> bool:
        """Compare-and-swap update of an item.

        Only applies when the row still holds ``expected_status``; returns False
        when another writer got there first.
        """
        values = dict(values, updated_at=utcnow())
        updated = (
            self.db.query(OrderItem)
            .filter(OrderItem.order_item_id == order_item_id, OrderItem.item_status == expected_status)
            .update(values, synchronize_session=False)
        )
        return updated == 1

    def update_order(self, order_id: str, values: dict) -> None:
        values = dict(values, updated_at=utcnow())
        self.db.query(Order).filter(Order.order_id == order_id).update(values, synchronize_session=False)

    def insert_refund(self, order_id: str, order_item_id: str, refund_amount: float,
                      refund_method: str, refund_reason: str) -> Refund:
        refund = Refund(
            refund_id=generate_id(),
            order_id=order_id,
            order_item_id=order_item_id,
            refund_amount=refund_amount,
            refund_method=refund_method,
            refund_reason=refund_reason,
        )
        self.db.add(refund)
        return refund

    def notify_owner(self, user_id: str, order_id: str, order_item_id: str, status) -> None:
        create_item_status_notification(self.db, user_id, order_id, order_item_id, status)

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def reload_item(self, order_item_id: str) -> Optional[OrderItem]:
        self.db.expire_all()
        return self.get_item(order_item_id)

    def reload_order(self, order_id: str) -> Optional[Order]:
        self.db.expire_all()
        return self.get_order(order_id)
