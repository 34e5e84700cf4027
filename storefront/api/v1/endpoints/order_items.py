import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from storefront.core.errors import AuthorizationError, NotFoundError, StorefrontError, ValidationError
from storefront.db.session import get_db
from storefront.models.enums import ItemAction
from storefront.schemas.order import ItemStatusRequest, RecomputeOrderStatusRequest
from storefront.services.authorization import AuthorizationResolver, default_role_source, identify_caller
from storefront.services.item_status import action_states, apply_action, parse_action, return_deadline
from storefront.services.order_status import recompute_order_status
from storefront.services.store import OrderStore
from storefront.utils.common import row_to_dict, utcnow

router = APIRouter()

def _load_item_and_order(store: OrderStore, order_item_id: str):
    item = store.get_item(order_item_id)
    if not item:
        raise NotFoundError("Order item not found")
    order = store.get_order(item.order_id)
    if not order:
        raise NotFoundError("Order not found")
    return item, order

@router.post("/functions/update-item-status")
def update_item_status(request: Request, data: Optional[ItemStatusRequest] = None, db: Session = Depends(get_db)):
    if data is None or not data.action or not data.order_item_id:
        raise ValidationError("Missing action or order_item_id")
    action = parse_action(data.action)

    store = OrderStore(db)
    item, order = _load_item_and_order(store, data.order_item_id)
    order_id = order.order_id

    caller = identify_caller(db, request.headers.get("Authorization"), data.guest_session_id)
    access = AuthorizationResolver(default_role_source(db)).resolve(caller, order)

    shipping = None
    if action is ItemAction.SHIP_ITEM:
        shipping = {
            "shipping_partner": data.shipping_partner,
            "tracking_id": data.tracking_id,
            "tracking_url": data.tracking_url,
        }
    apply_action(store, action, item, order, access, reason=data.reason, shipping=shipping)

    # The item change is committed; a failed recompute only leaves the order label stale
    warning = None
    try:
        recompute_order_status(store, order_id)
    except Exception as e:
        store.rollback()
        logging.warning("Failed to recompute order status for %s: %s", order_id, e)
        warning = "Item updated but order status could not be recomputed"

    response = {
        "success": True,
        "item": row_to_dict(store.reload_item(data.order_item_id)),
        "order": row_to_dict(store.reload_order(order_id)),
    }
    if warning:
        response["warning"] = warning
    return response

@router.post("/functions/update-order-status-based-on-items")
def update_order_status_based_on_items(request: Request, data: Optional[RecomputeOrderStatusRequest] = None, db: Session = Depends(get_db)):
    store = OrderStore(db)
    try:
        if data is None or not data.order_id:
            raise ValidationError("order_id is required")
        order = store.get_order(data.order_id)
        if not order:
            raise NotFoundError("Order not found")

        caller = identify_caller(db, request.headers.get("Authorization"), data.guest_session_id)
        access = AuthorizationResolver(default_role_source(db)).resolve(caller, order)
        if not (access.is_admin or access.is_owner_or_guest):
            raise AuthorizationError("Not authorized to update this order")

        new_status = recompute_order_status(store, data.order_id)
    except StorefrontError as e:
        logging.error("Error updating order status: %s", e.message)
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "error": e.message, "error_type": e.category},
        )

    return {
        "success": True,
        "order_id": data.order_id,
        "new_status": new_status.value,
        "message": f"Order status updated to {new_status.value}",
    }

@router.get("/order-items/{order_item_id}/actions")
def get_item_actions(order_item_id: str, request: Request, guest_session_id: Optional[str] = None, db: Session = Depends(get_db)):
    store = OrderStore(db)
    item, order = _load_item_and_order(store, order_item_id)

    caller = identify_caller(db, request.headers.get("Authorization"), guest_session_id)
    access = AuthorizationResolver(default_role_source(db)).resolve(caller, order)
    if not (access.is_admin or access.is_owner_or_guest):
        raise AuthorizationError("Not authorized")

    now = utcnow()
    states = action_states(item, order, access, now)
    info = {
        "order_item_id": item.order_item_id,
        "item_status": item.item_status,
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "can_cancel": states[ItemAction.CANCEL_ITEM],
        "can_ship": states[ItemAction.SHIP_ITEM],
        "can_deliver": states[ItemAction.DELIVER_ITEM],
        "can_return": states[ItemAction.REQUEST_RETURN],
        "can_approve_return": states[ItemAction.APPROVE_RETURN],
        "can_refund": states[ItemAction.REFUND_ITEM],
    }

    deadline = return_deadline(item, order)
    if deadline and item.item_status == "delivered":
        remaining = (deadline - now).total_seconds() / 3600
        info["return_window_remaining"] = max(0, round(remaining, 1))
    return info
