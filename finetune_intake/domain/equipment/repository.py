"""Equipment repository - FineTune API operations for equipment, boots and models"""

import logging

from ...errors import NetworkError
from ...models import BootRecord, EquipmentRecord, SkiModel
from ...services.finetune_api import FineTuneAPI

logger = logging.getLogger(__name__)


class EquipmentRepository:
    """Repository for equipment operations against the FineTune API"""

    def __init__(self, api: FineTuneAPI):
        self.api = api

    async def get_customer_equipment(self, customer_id: int) -> list[EquipmentRecord]:
        records = await self.api.get_customer_equipment(customer_id)
        return [EquipmentRecord.model_validate(r) for r in records]

    async def get_customer_boots(self, customer_id: int) -> list[BootRecord]:
        records = await self.api.get_customer_boots(customer_id)
        return [BootRecord.model_validate(r) for r in records]

    async def get_equipment_boots(self, equipment_id: int) -> list[BootRecord]:
        records = await self.api.get_equipment_boots(equipment_id)
        return [BootRecord.model_validate(r) for r in records]

    async def get_ski_models(self) -> list[SkiModel]:
        """Model catalog; an unavailable catalog just disables auto-fill"""
        try:
            records = await self.api.get_ski_models()
        except NetworkError as e:
            logger.info(f"Ski models not available: {e}")
            return []
        return [SkiModel.model_validate(r) for r in records]
