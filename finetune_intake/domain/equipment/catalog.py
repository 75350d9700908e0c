"""Equipment model catalog - brand/model lookups and length auto-fill"""

from typing import Optional

from ...models import SkiModel


class ModelCatalog:
    def __init__(self, models: Optional[list[SkiModel]] = None):
        self.models = list(models or [])

    def __bool__(self) -> bool:
        return bool(self.models)

    def brands(self) -> list[str]:
        seen: list[str] = []
        for entry in self.models:
            if entry.brand not in seen:
                seen.append(entry.brand)
        return seen

    def models_for(self, brand: str) -> list[SkiModel]:
        return [m for m in self.models if m.brand == brand]

    def find(self, brand: Optional[str], model: Optional[str]) -> Optional[SkiModel]:
        if not brand or not model:
            return None
        for entry in self.models:
            if entry.brand == brand and entry.model == model:
                return entry
        return None

    def length_for(self, brand: Optional[str], model: Optional[str]) -> Optional[int]:
        entry = self.find(brand, model)
        return entry.length if entry else None
