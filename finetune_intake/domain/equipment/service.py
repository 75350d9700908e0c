"""Equipment service - loading the choices the item builder offers"""

import logging

from ...models import BootRecord, Customer
from .builder import EquipmentOptions, ExistingEquipmentChoice, ItemDraft
from .catalog import ModelCatalog
from .repository import EquipmentRepository

logger = logging.getLogger(__name__)


class EquipmentService:
    """Service layer for equipment lookups"""

    def __init__(self, repo: EquipmentRepository):
        self.repo = repo

    async def load_options(self, customer: Customer) -> EquipmentOptions:
        """Existing equipment and boots for the customer, plus the model catalog"""
        if customer.id is None:
            equipment, boots = [], []
        else:
            equipment = await self.repo.get_customer_equipment(customer.id)
            boots = await self.repo.get_customer_boots(customer.id)
        catalog = ModelCatalog(await self.repo.get_ski_models())
        logger.info(
            f"📦 Loaded {len(equipment)} equipment, {len(boots)} boots, "
            f"{len(catalog.models)} catalog models for customer {customer.id}"
        )
        return EquipmentOptions(equipment=equipment, boots=boots, catalog=catalog)

    async def boot_choices(self, draft: ItemDraft, options: EquipmentOptions) -> list[BootRecord]:
        """
        Boots to offer for a mount.

        Existing equipment is scoped to the boots previously used with it,
        falling back to all of the customer's boots when there are none.
        """
        equipment = draft.equipment
        if isinstance(equipment, ExistingEquipmentChoice) and equipment.equipment_id is not None:
            boots = await self.repo.get_equipment_boots(equipment.equipment_id)
            if boots:
                return boots
        return list(options.boots)
