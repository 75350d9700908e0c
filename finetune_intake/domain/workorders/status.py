"""Work order status derivation"""

from collections.abc import Iterable

from ...errors import ValidationError
from ...models import ItemStatus, ServiceItem, WorkOrderStatus

_READY_OR_COMPLETE = {ItemStatus.READY, ItemStatus.COMPLETE}


def derive_status(items: Iterable[ServiceItem]) -> WorkOrderStatus:
    """
    Aggregate status of a work order from its item statuses.

    - COMPLETE when every item is COMPLETE
    - READY when every item is READY or COMPLETE
    - IN_PROGRESS once any item has moved past PENDING
    - PENDING while every item is PENDING

    Each rule only depends on items moving forward, so upgrading a single
    item can never move the aggregate backward.
    """
    statuses = [item.status for item in items]
    if not statuses:
        raise ValidationError("items", "A work order must have at least one item")

    if all(s == ItemStatus.COMPLETE for s in statuses):
        return WorkOrderStatus.COMPLETE
    if all(s in _READY_OR_COMPLETE for s in statuses):
        return WorkOrderStatus.READY
    if any(s != ItemStatus.PENDING for s in statuses):
        return WorkOrderStatus.IN_PROGRESS
    return WorkOrderStatus.PENDING
