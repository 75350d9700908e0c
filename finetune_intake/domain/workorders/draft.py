"""The in-progress work order owned by one wizard session"""

from typing import Optional

from pydantic import BaseModel, Field

from ...models import Agreement, Customer, ServiceItem, WorkOrderStatus
from .status import derive_status


class WorkOrderDraft(BaseModel):
    customer: Optional[Customer] = None
    items: list[ServiceItem] = Field(default_factory=list)
    agreement: Optional[Agreement] = None

    @property
    def status(self) -> Optional[WorkOrderStatus]:
        """Derived from the items; None until the first item is added"""
        if not self.items:
            return None
        return derive_status(self.items)

    def frozen(self) -> "WorkOrderDraft":
        """Copy handed to submission so later edits cannot change what is sent"""
        return self.model_copy(deep=True)
