"""Agreement repository - agreement template lookups"""

import logging

from ...errors import NetworkError
from ...models import AgreementTemplate
from ...services.finetune_api import FineTuneAPI

logger = logging.getLogger(__name__)

DEFAULT_AGREEMENT_TEXT = (
    "I authorize the shop to mount bindings on the equipment listed in this work order "
    "and to set release values based on the boot sole length and skier profile I have "
    "provided. I confirm this information is accurate and understand that incorrect "
    "information may result in release settings that are unsafe. Skiing and snowboarding "
    "involve inherent risks of injury. I agree to inspect the bindings before use and to "
    "return the equipment for adjustment if my boots, weight, or ability level change."
)


class AgreementRepository:
    def __init__(self, api: FineTuneAPI):
        self.api = api

    async def get_template(self, shop_id: str) -> AgreementTemplate:
        """Active template for the shop, or the built-in mounting agreement"""
        try:
            record = await self.api.get_agreement_template(shop_id)
        except NetworkError as e:
            logger.warning(f"⚠️ Could not load agreement template for shop {shop_id}: {e}")
            record = None
        if not record:
            return AgreementTemplate(agreement_text=DEFAULT_AGREEMENT_TEXT)
        return AgreementTemplate.model_validate(record)
