"""Order item lifecycle.

Every status change to an order item goes through ``apply_action``. The
transition table names, for each action, the status the item must be in, who
may perform it and where it ends up. Payment-dependent and time-windowed rules
live in the precondition checks below it.

    pending --ship--> shipped --deliver--> delivered --request_return--> returned
       |                                       |                            |
    cancel                                  refund(cod)               approve_return
       v                                       v                            v
    cancelled                               refunded <----------------------+

Prepaid (razorpay) items can be refunded from any status once the payment is
captured.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, FrozenSet, Optional

from sqlalchemy.exc import SQLAlchemyError

from storefront.core.config import settings
from storefront.core.errors import AuthorizationError, ConflictError, ServerError, ValidationError
from storefront.models.enums import ItemAction, ItemStatus, PaymentMethod, PaymentStatus
from storefront.models.order import Order, OrderItem
from storefront.services.authorization import Access
from storefront.services.store import OrderStore
from storefront.utils.common import as_utc, utcnow


@dataclass(frozen=True)
class Transition:
    # None means the precondition depends on the order's payment (refund_item)
    requires: Optional[FrozenSet[ItemStatus]]
    result: ItemStatus
    admin: bool = False
    owner_or_guest: bool = False


TRANSITIONS: Dict[ItemAction, Transition] = {
    ItemAction.CANCEL_ITEM: Transition(frozenset({ItemStatus.PENDING}), ItemStatus.CANCELLED, admin=True, owner_or_guest=True),
    ItemAction.SHIP_ITEM: Transition(frozenset({ItemStatus.PENDING}), ItemStatus.SHIPPED, admin=True),
    ItemAction.DELIVER_ITEM: Transition(frozenset({ItemStatus.SHIPPED}), ItemStatus.DELIVERED, admin=True),
    ItemAction.REQUEST_RETURN: Transition(frozenset({ItemStatus.DELIVERED}), ItemStatus.RETURNED, owner_or_guest=True),
    ItemAction.APPROVE_RETURN: Transition(frozenset({ItemStatus.RETURNED}), ItemStatus.REFUNDED, admin=True),
    ItemAction.REFUND_ITEM: Transition(None, ItemStatus.REFUNDED, admin=True),
}

COD_REFUNDABLE = frozenset({ItemStatus.DELIVERED, ItemStatus.REFUNDED})


def parse_action(value: str) -> ItemAction:
    try:
        return ItemAction(value)
    except ValueError:
        allowed = ", ".join(a.value for a in ItemAction)
        raise ValidationError(f"Unsupported action: {value}. Expected one of: {allowed}")


def authorize(action: ItemAction, access: Access) -> None:
    transition = TRANSITIONS[action]
    if transition.admin and access.is_admin:
        return
    if transition.owner_or_guest and access.is_owner_or_guest:
        return
    raise AuthorizationError(f"Not authorized to perform {action.value}")


def delivered_at_for_return(item: OrderItem, order: Order) -> Optional[datetime]:
    delivered_at = item.refunded_at or order.delivered_at
    return as_utc(delivered_at) if delivered_at else None


def return_deadline(item: OrderItem, order: Order) -> Optional[datetime]:
    delivered_at = delivered_at_for_return(item, order)
    if delivered_at is None:
        return None
    return delivered_at + timedelta(days=settings.RETURN_WINDOW_DAYS)


def _require_status(action: ItemAction, current: ItemStatus, allowed: FrozenSet[ItemStatus]) -> None:
    if current in allowed:
        return
    expected = " or ".join(sorted(s.value for s in allowed))
    raise ConflictError(
        f"Cannot {action.value}: item status is {current.value}, expected {expected}",
        expected=expected,
        actual=current.value,
    )


def check_precondition(action: ItemAction, item: OrderItem, order: Order, now: datetime) -> None:
    """Raise ConflictError unless ``action`` may run against the item as it is now"""
    current = ItemStatus(item.item_status)
    transition = TRANSITIONS[action]

    if action is ItemAction.REFUND_ITEM:
        if order.payment_method == PaymentMethod.RAZORPAY.value and order.payment_status == PaymentStatus.PAID.value:
            return
        if order.payment_method == PaymentMethod.COD.value:
            if current not in COD_REFUNDABLE:
                raise ConflictError(
                    "COD refund allowed only after delivery/payment collected",
                    expected="delivered or refunded",
                    actual=current.value,
                )
            return
        raise ConflictError("Refund not supported for this payment method", actual=current.value)

    _require_status(action, current, transition.requires)

    if action is ItemAction.REQUEST_RETURN:
        deadline = return_deadline(item, order)
        if deadline is None:
            raise ConflictError("Delivered timestamp not available", actual=current.value)
        if as_utc(now) > deadline:
            raise ConflictError(f"Return window expired ({settings.RETURN_WINDOW_DAYS} days)", actual=current.value)


def refund_amount_for(item: OrderItem) -> float:
    if item.refund_amount is not None:
        return item.refund_amount
    return (item.price_at_purchase or 0) * (item.quantity or 0)


def _item_values(action: ItemAction, reason: Optional[str], shipping: Optional[dict], now: datetime) -> dict:
    values = {"item_status": TRANSITIONS[action].result.value}
    if action is ItemAction.CANCEL_ITEM:
        values.update(cancel_reason=reason, refunded_at=None)
    elif action is ItemAction.SHIP_ITEM:
        values["shipped_at"] = now
        values.update({k: v for k, v in (shipping or {}).items() if v})
    elif action is ItemAction.DELIVER_ITEM:
        values["delivered_at"] = now
    elif action is ItemAction.REQUEST_RETURN:
        values.update(return_reason=reason, return_requested_at=now)
    elif action is ItemAction.APPROVE_RETURN:
        values.update(return_approved_at=now, refunded_at=now)
    elif action is ItemAction.REFUND_ITEM:
        values["refunded_at"] = now
    return values


def apply_action(
    store: OrderStore,
    action: ItemAction,
    item: OrderItem,
    order: Order,
    access: Access,
    reason: Optional[str] = None,
    shipping: Optional[dict] = None,
    now: Optional[datetime] = None,
) -> ItemStatus:
    """Authorize, validate and commit one transition; returns the new item status"""
    now = now or utcnow()
    authorize(action, access)
    check_precondition(action, item, order, now)

    current = item.item_status
    result = TRANSITIONS[action].result
    order_item_id = item.order_item_id
    order_id = order.order_id
    owner_id = order.user_id
    refund_method = order.payment_method
    refund_amount = refund_amount_for(item)

    try:
        if not store.transition_item(order_item_id, current, _item_values(action, reason, shipping, now)):
            store.rollback()
            raise ConflictError(
                f"Cannot {action.value}: item status changed from {current} by another request",
                expected=current,
            )

        if action is ItemAction.DELIVER_ITEM:
            store.update_order(order_id, {"delivered_at": now})
        elif action is ItemAction.APPROVE_RETURN:
            store.insert_refund(order_id, order_item_id, refund_amount, refund_method,
                                reason or "Approved by admin")
        elif action is ItemAction.REFUND_ITEM:
            store.insert_refund(order_id, order_item_id, refund_amount, refund_method,
                                reason or "Admin initiated refund")

        if owner_id:
            store.notify_owner(owner_id, order_id, order_item_id, result)

        store.commit()
    except SQLAlchemyError as e:
        store.rollback()
        logging.error("Failed to apply %s to item %s: %s", action.value, order_item_id, e)
        raise ServerError(f"Failed to update order item: {e}") from e

    logging.info("Item %s: %s -> %s via %s", order_item_id, current, result.value, action.value)
    return result


def action_states(item: OrderItem, order: Order, access: Access, now: Optional[datetime] = None) -> dict:
    """Which actions would currently succeed for this caller and item"""
    now = now or utcnow()
    states = {}
    for action in ItemAction:
        try:
            authorize(action, access)
            check_precondition(action, item, order, now)
        except (AuthorizationError, ConflictError):
            states[action] = False
        else:
            states[action] = True
    return states
