"""Equipment domain schemas - Pydantic models for validation"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from ...models import AbilityLevel, Condition, ServiceType, SkiModel
from .builder import EquipmentItemBuilder, EquipmentOptions


class ServiceTypeRequest(BaseModel):
    serviceType: ServiceType


class EquipmentRequest(BaseModel):
    """Existing equipment by id, or a (partial) new equipment description"""

    kind: Literal["existing", "new"]
    equipmentId: Optional[int] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    condition: Optional[Condition] = None
    abilityLevel: Optional[AbilityLevel] = None
    length: Optional[int] = Field(None, gt=0)


class BootRequest(BaseModel):
    """Existing boot by id, or a (partial) new boot description"""

    kind: Literal["existing", "new"]
    bootId: Optional[int] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    bsl: Optional[int] = Field(None, gt=0)


class BindingRequest(BaseModel):
    brand: Optional[str] = None
    model: Optional[str] = None


class ProfileRequest(BaseModel):
    """Skier profile. Height is either total inches or feet plus inches."""

    heightFeet: Optional[int] = Field(None, ge=0)
    heightInches: Optional[int] = Field(None, ge=0)
    weight: Optional[int] = Field(None, gt=0)
    age: Optional[int] = Field(None, gt=0)
    abilityLevel: Optional[AbilityLevel] = None


class EquipmentOptionResponse(BaseModel):
    id: int
    label: str
    brand: Optional[str] = None
    model: Optional[str] = None
    length: Optional[int] = None
    condition: Optional[str] = None


class BootOptionResponse(BaseModel):
    id: int
    brand: Optional[str] = None
    model: Optional[str] = None
    bsl: Optional[int] = None


class CatalogModelResponse(BaseModel):
    model: str
    length: Optional[int] = None


class EquipmentOptionsResponse(BaseModel):
    equipment: list[EquipmentOptionResponse]
    boots: list[BootOptionResponse]
    catalog: dict[str, list[CatalogModelResponse]]

    @classmethod
    def from_options(cls, options: EquipmentOptions) -> "EquipmentOptionsResponse":
        return cls(
            equipment=[
                EquipmentOptionResponse(
                    id=e.id,
                    label=e.label,
                    brand=e.brand,
                    model=e.model,
                    length=e.length,
                    condition=e.condition,
                )
                for e in options.equipment
            ],
            boots=[BootOptionResponse(**b.model_dump()) for b in options.boots],
            catalog={
                brand: [_catalog_entry(m) for m in options.catalog.models_for(brand)]
                for brand in options.catalog.brands()
            },
        )


def _catalog_entry(entry: SkiModel) -> CatalogModelResponse:
    return CatalogModelResponse(model=entry.model, length=entry.length)


class EquipmentStateResponse(BaseModel):
    """Current draft and finalized items of the equipment step"""

    draft: dict[str, Any]
    items: list[dict[str, Any]]
    canRemoveItems: bool

    @classmethod
    def from_builder(cls, builder: EquipmentItemBuilder) -> "EquipmentStateResponse":
        return cls(
            draft=builder.draft.model_dump(mode="json"),
            items=[item.model_dump(mode="json", by_alias=True) for item in builder.items],
            canRemoveItems=len(builder.items) > 1,
        )
