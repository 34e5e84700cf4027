"""Order status aggregation.

An order's ``status`` is a projection of its items' statuses and nothing else.
``derive_order_status`` is the decision table; ``recompute_order_status``
loads the sibling items and writes the label back.
"""
import logging
from collections import Counter
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from storefront.core.errors import NotFoundError, ServerError, ValidationError
from storefront.models.enums import ItemStatus, OrderStatus
from storefront.services.store import OrderStore

P, S, D, C, RT, RF = (
    ItemStatus.PENDING,
    ItemStatus.SHIPPED,
    ItemStatus.DELIVERED,
    ItemStatus.CANCELLED,
    ItemStatus.RETURNED,
    ItemStatus.REFUNDED,
)

# Evaluated top to bottom, first match wins. Each rule is
# (statuses every item must have, statuses of which at least one must appear
# for each group, result). An empty group list means "no extra requirement".
DECISION_TABLE = (
    ({C}, [], OrderStatus.CANCELLED),
    ({P}, [], OrderStatus.PENDING),
    ({S}, [], OrderStatus.SHIPPED),
    ({D}, [], OrderStatus.DELIVERED),
    (None, [{D}, {S, P}], OrderStatus.PARTIALLY_DELIVERED),
    (None, [{S}, {P}], OrderStatus.PARTIALLY_SHIPPED),
    (None, [{C}, {P}], OrderStatus.PARTIALLY_CANCELLED),
    (None, [{RF}], OrderStatus.PARTIALLY_REFUNDED),
)


def _parse_status(value: Optional[str]) -> ItemStatus:
    if value is None:
        return ItemStatus.PENDING
    return ItemStatus(value)


def derive_order_status(statuses: Iterable) -> OrderStatus:
    """Order label for a multiset of item statuses.

    Raises ValueError for an empty order or an unknown item status. Inputs that
    match no rule come out as ``mixed`` and are logged so they can be reviewed.
    """
    present = Counter(_parse_status(s) for s in statuses)
    if not present:
        raise ValueError("Cannot derive a status for an order without items")
    kinds = set(present)

    for every, some_of, result in DECISION_TABLE:
        if every is not None and not kinds <= every:
            continue
        if all(kinds & group for group in some_of):
            return result

    logging.warning("Item statuses %s matched no order status rule; using 'mixed'", dict(present))
    return OrderStatus.MIXED


def recompute_order_status(store: OrderStore, order_id: str) -> OrderStatus:
    if not order_id:
        raise ValidationError("order_id is required")
    if store.get_order(order_id) is None:
        raise NotFoundError("Order not found")

    statuses = store.item_statuses(order_id)
    if not statuses:
        raise NotFoundError("No items found for this order")

    try:
        new_status = derive_order_status(statuses)
    except ValueError as e:
        logging.error("Order %s has an unreadable item status: %s", order_id, e)
        raise ServerError(f"Cannot derive order status: {e}") from e

    try:
        store.update_order(order_id, {"status": new_status.value})
        store.commit()
    except SQLAlchemyError as e:
        store.rollback()
        logging.error("Failed to write status for order %s: %s", order_id, e)
        raise ServerError("Failed to update order status") from e
    logging.info("Order %s status recomputed to %s", order_id, new_status.value)
    return new_status
