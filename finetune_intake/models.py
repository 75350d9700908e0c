"""
Domain models for the intake workflow.

Persistence lives behind the FineTune API, so these are plain pydantic
models. Field names are snake_case; camelCase aliases let them be built
straight from API responses.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class ServiceType(str, Enum):
    TUNE = "TUNE"
    MOUNT = "MOUNT"
    REPAIR = "REPAIR"


class Condition(str, Enum):
    NEW = "NEW"
    USED = "USED"


class AbilityLevel(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class ItemStatus(str, Enum):
    """Per-item lifecycle stage, in progression order."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    COMPLETE = "COMPLETE"


class WorkOrderStatus(str, Enum):
    """Aggregate work order status. Always derived, never assigned."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    COMPLETE = "COMPLETE"

    @property
    def rank(self) -> int:
        return list(WorkOrderStatus).index(self)


class DomainModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Customers
# ============================================================================


class Customer(DomainModel):
    """Resolved customer. Frozen once the resolver hands it to the wizard."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: Optional[int] = None
    first_name: str
    last_name: str
    email: str
    phone: str

    @field_validator("phone", mode="before")
    @classmethod
    def digits_only(cls, v):
        # API records may carry formatted numbers; matching is on digits
        if isinstance(v, str):
            digits = re.sub(r"\D", "", v)
            return digits or v
        return v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# ============================================================================
# Equipment & boots
# ============================================================================


class ExistingEquipment(DomainModel):
    kind: Literal["existing"] = "existing"
    equipment_id: int


class NewEquipment(DomainModel):
    kind: Literal["new"] = "new"
    brand: str
    model: str
    condition: Condition
    ability_level: AbilityLevel
    length: Optional[int] = None


EquipmentSource = Annotated[Union[ExistingEquipment, NewEquipment], Field(discriminator="kind")]


class ExistingBoot(DomainModel):
    kind: Literal["existing"] = "existing"
    boot_id: int


class NewBoot(DomainModel):
    kind: Literal["new"] = "new"
    brand: str
    model: str
    bsl: int  # boot sole length, mm


BootSource = Annotated[Union[ExistingBoot, NewBoot], Field(discriminator="kind")]


class SkierProfile(DomainModel):
    height_inches: int
    weight: int
    age: int
    ability_level: AbilityLevel

    @classmethod
    def from_feet_inches(
        cls, feet: int, inches: int, weight: int, age: int, ability_level: AbilityLevel
    ) -> "SkierProfile":
        return cls(
            height_inches=feet * 12 + inches,
            weight=weight,
            age=age,
            ability_level=ability_level,
        )


class Binding(DomainModel):
    brand: str
    model: Optional[str] = None


class EquipmentRecord(DomainModel):
    """Equipment already on file for a customer"""

    id: int
    brand: Optional[str] = None
    model: Optional[str] = None
    length: Optional[int] = None
    condition: Optional[str] = None

    @property
    def label(self) -> str:
        parts = [p for p in (self.brand, self.model) if p]
        if self.length:
            parts.append(f"({self.length}cm)")
        label = " ".join(parts) or f"Equipment #{self.id}"
        return f"{label} - {self.condition}" if self.condition else label


class BootRecord(DomainModel):
    id: int
    brand: Optional[str] = None
    model: Optional[str] = None
    bsl: Optional[int] = None


class SkiModel(DomainModel):
    """Model catalog entry used for brand/model/length auto-fill"""

    brand: str
    model: str
    length: Optional[int] = None


# ============================================================================
# Service items
# ============================================================================


class ServiceItem(DomainModel):
    """One finalized line of a work order."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    service_type: ServiceType
    equipment: EquipmentSource
    boot: Optional[BootSource] = None
    binding: Optional[Binding] = None
    profile: Optional[SkierProfile] = None
    status: ItemStatus = ItemStatus.PENDING

    @model_validator(mode="after")
    def mount_fields_only_for_mount(self):
        if self.service_type == ServiceType.MOUNT:
            if self.boot is None or self.binding is None:
                raise ValueError("MOUNT items require a boot and a binding")
            if isinstance(self.boot, NewBoot) and self.profile is None:
                raise ValueError("A new boot requires a skier profile")
            if isinstance(self.boot, ExistingBoot) and self.profile is not None:
                raise ValueError("Skier profile is already on file for an existing boot")
        elif self.boot is not None or self.binding is not None or self.profile is not None:
            raise ValueError(f"{self.service_type.value} items cannot carry boot, binding or profile")
        return self


# ============================================================================
# Agreement
# ============================================================================


class AgreementTemplate(DomainModel):
    title: str = "Binding Mounting Agreement"
    agreement_text: str
    version: Optional[str] = None


class Agreement(DomainModel):
    required: bool = False
    accepted: bool = False
    signature_name: Optional[str] = None
    signature_image: Optional[str] = None  # data:image/png;base64,...
    accepted_at: Optional[datetime] = None
    version: Optional[str] = None

    @model_validator(mode="after")
    def accepted_requires_required(self):
        if self.accepted and not self.required:
            raise ValueError("An agreement can only be accepted when it is required")
        return self
