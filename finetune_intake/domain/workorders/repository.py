"""Work order repository - FineTune API operations for work orders"""

from typing import Any, Optional

from ...errors import NetworkError
from ...services.finetune_api import FineTuneAPI


def _as_object(response: Any, what: str) -> dict:
    if response is None:
        return {}
    if not isinstance(response, dict):
        raise NetworkError(f"Unexpected {what} response from the FineTune API")
    return response


class WorkOrderRepository:
    """Repository for work order operations against the FineTune API"""

    def __init__(self, api: FineTuneAPI):
        self.api = api

    async def create(self, payload: dict) -> int:
        """Create the work order and return its id"""
        response = _as_object(await self.api.create_work_order(payload), "create work order")
        if response.get("error"):
            raise NetworkError(response.get("message") or "Failed to create work order")
        work_order_id = response.get("workOrderId")
        if work_order_id is None:
            raise NetworkError("Work order was created without an id")
        return work_order_id

    async def sign_agreement(self, work_order_id: int, payload: dict) -> Optional[str]:
        """Attach the signed agreement; returns the generated PDF url when there is one"""
        response = _as_object(await self.api.sign_agreement(work_order_id, payload), "sign agreement")
        if response.get("success") is False:
            raise NetworkError(response.get("message") or "Failed to sign agreement")
        return response.get("pdfUrl")
