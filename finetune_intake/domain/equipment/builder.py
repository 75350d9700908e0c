"""
Equipment item builder.

Collects service items one at a time. The draft holds whatever the operator
has entered so far; every exclusive choice (existing vs. new equipment,
existing vs. new boot) is a tagged variant, so both sides can never be set
at once. A draft only becomes a ServiceItem after validate_item() passes.
"""

import logging
from dataclasses import dataclass, field
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from ...errors import ValidationError
from ...models import (
    AbilityLevel,
    Binding,
    BootRecord,
    Condition,
    EquipmentRecord,
    ExistingBoot,
    ExistingEquipment,
    NewBoot,
    NewEquipment,
    ServiceItem,
    ServiceType,
    SkierProfile,
)
from .catalog import ModelCatalog

logger = logging.getLogger(__name__)


# ============================================================================
# Draft forms
# ============================================================================


class ExistingEquipmentChoice(BaseModel):
    kind: Literal["existing"] = "existing"
    equipment_id: Optional[int] = None


class NewEquipmentForm(BaseModel):
    kind: Literal["new"] = "new"
    brand: Optional[str] = None
    model: Optional[str] = None
    condition: Optional[Condition] = None
    ability_level: Optional[AbilityLevel] = None
    length: Optional[int] = None


class ExistingBootChoice(BaseModel):
    kind: Literal["existing"] = "existing"
    boot_id: Optional[int] = None


class NewBootForm(BaseModel):
    kind: Literal["new"] = "new"
    brand: Optional[str] = None
    model: Optional[str] = None
    bsl: Optional[int] = None


class ProfileForm(BaseModel):
    height_inches: Optional[int] = None
    weight: Optional[int] = None
    age: Optional[int] = None
    ability_level: Optional[AbilityLevel] = None


EquipmentChoice = Annotated[
    Union[ExistingEquipmentChoice, NewEquipmentForm], Field(discriminator="kind")
]
BootChoice = Annotated[Union[ExistingBootChoice, NewBootForm], Field(discriminator="kind")]


class ItemDraft(BaseModel):
    service_type: Optional[ServiceType] = None
    equipment: Optional[EquipmentChoice] = None
    boot: Optional[BootChoice] = None
    binding_brand: Optional[str] = None
    binding_model: Optional[str] = None
    profile: Optional[ProfileForm] = None

    @property
    def is_mount(self) -> bool:
        return self.service_type == ServiceType.MOUNT

    @property
    def is_empty(self) -> bool:
        return self == ItemDraft()


@dataclass
class EquipmentOptions:
    """What the operator can pick from for one customer"""

    equipment: list[EquipmentRecord] = field(default_factory=list)
    boots: list[BootRecord] = field(default_factory=list)
    catalog: ModelCatalog = field(default_factory=ModelCatalog)

    def has_equipment(self, equipment_id: int) -> bool:
        return any(e.id == equipment_id for e in self.equipment)

    def has_boot(self, boot_id: int) -> bool:
        return any(b.id == boot_id for b in self.boots)


# ============================================================================
# Validation
# ============================================================================


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_item(draft: ItemDraft) -> ServiceItem:
    """
    Turn a draft into a ServiceItem, surfacing the first violation found.

    Raises:
        ValidationError: On the first missing or inconsistent field
    """
    if draft.service_type is None:
        raise ValidationError("serviceType", "Please select a service type for all equipment items")

    equipment = draft.equipment
    if equipment is None:
        raise ValidationError(
            "equipment", "Please select existing equipment or create new equipment for all items"
        )
    if isinstance(equipment, ExistingEquipmentChoice):
        if equipment.equipment_id is None:
            raise ValidationError("equipmentId", "Select which existing equipment to service")
        equipment_ref = ExistingEquipment(equipment_id=equipment.equipment_id)
    else:
        for name, label in (
            ("brand", "Brand"),
            ("model", "Model"),
            ("condition", "Condition"),
            ("ability_level", "Ability level"),
        ):
            if _blank(getattr(equipment, name)):
                raise ValidationError(f"newEquipment.{name}", f"{label} is required for new equipment")
        equipment_ref = NewEquipment(
            brand=equipment.brand.strip(),
            model=equipment.model.strip(),
            condition=equipment.condition,
            ability_level=equipment.ability_level,
            length=equipment.length,
        )

    if not draft.is_mount:
        return ServiceItem(service_type=draft.service_type, equipment=equipment_ref)

    if _blank(draft.binding_brand):
        raise ValidationError("bindingBrand", "Binding brand is required for mount services")
    binding = Binding(
        brand=draft.binding_brand.strip(),
        model=draft.binding_model.strip() if not _blank(draft.binding_model) else None,
    )

    boot = draft.boot
    if boot is None:
        raise ValidationError("boot", "Select an existing boot or describe a new boot for mount services")
    if isinstance(boot, ExistingBootChoice):
        if boot.boot_id is None:
            raise ValidationError("bootId", "Select which existing boot to use")
        return ServiceItem(
            service_type=draft.service_type,
            equipment=equipment_ref,
            boot=ExistingBoot(boot_id=boot.boot_id),
            binding=binding,
        )

    if _blank(boot.brand) or _blank(boot.model) or not boot.bsl:
        raise ValidationError("newBoot", "All boot information is required for mount services")

    profile = draft.profile or ProfileForm()
    for name, label in (
        ("height_inches", "Height"),
        ("weight", "Weight"),
        ("age", "Age"),
        ("ability_level", "Ability level"),
    ):
        if _blank(getattr(profile, name)):
            raise ValidationError(f"profile.{name}", f"{label} is required for a new boot")

    return ServiceItem(
        service_type=draft.service_type,
        equipment=equipment_ref,
        boot=NewBoot(brand=boot.brand.strip(), model=boot.model.strip(), bsl=boot.bsl),
        binding=binding,
        profile=SkierProfile(
            height_inches=profile.height_inches,
            weight=profile.weight,
            age=profile.age,
            ability_level=profile.ability_level,
        ),
    )


# ============================================================================
# Builder
# ============================================================================


class EquipmentItemBuilder:
    """Builds the item list for one work order, one validated draft at a time"""

    def __init__(self, options: Optional[EquipmentOptions] = None):
        self.options = options or EquipmentOptions()
        self.items: list[ServiceItem] = []
        self.draft = ItemDraft()
        # Boots last offered for the draft's equipment
        self.offered_boots: list[BootRecord] = []

    # --- service type -------------------------------------------------

    def select_service_type(self, service_type: ServiceType) -> ItemDraft:
        self.draft.service_type = ServiceType(service_type)
        if not self.draft.is_mount:
            # Mount-only fields never outlive a switch away from MOUNT
            self.draft.boot = None
            self.draft.binding_brand = None
            self.draft.binding_model = None
            self.draft.profile = None
        return self.draft

    def _require_service_type(self) -> None:
        if self.draft.service_type is None:
            raise ValidationError("serviceType", "Select a service type first")

    def _require_mount(self, field_name: str) -> None:
        self._require_service_type()
        if not self.draft.is_mount:
            raise ValidationError(field_name, "Only available for mount services")

    # --- equipment ----------------------------------------------------

    def use_existing_equipment(self, equipment_id: Optional[int] = None) -> ItemDraft:
        self._require_service_type()
        if equipment_id is not None and not self.options.has_equipment(equipment_id):
            raise ValidationError("equipmentId", "Equipment not found for this customer")
        self.draft.equipment = ExistingEquipmentChoice(equipment_id=equipment_id)
        return self.draft

    def describe_new_equipment(
        self,
        brand: Optional[str] = None,
        model: Optional[str] = None,
        condition: Optional[Condition] = None,
        ability_level: Optional[AbilityLevel] = None,
        length: Optional[int] = None,
    ) -> ItemDraft:
        """Switch to (or keep editing) a new-equipment description"""
        self._require_service_type()
        current = self.draft.equipment
        form = current.model_copy() if isinstance(current, NewEquipmentForm) else NewEquipmentForm()

        if brand is not None:
            if brand != form.brand:
                form.model = None
                form.length = None
            form.brand = brand
        if model is not None:
            if model != form.model:
                form.length = None
            form.model = model
        if condition is not None:
            form.condition = Condition(condition)
        if ability_level is not None:
            form.ability_level = AbilityLevel(ability_level)

        catalog_length = self.options.catalog.length_for(form.brand, form.model)
        if self.options.catalog and self.options.catalog.find(form.brand, form.model):
            if length is not None and length != catalog_length:
                raise ValidationError("length", "Length is set from the selected model")
            form.length = catalog_length
        elif length is not None:
            form.length = length

        self.draft.equipment = form
        return self.draft

    # --- mount: boot, binding, profile ----------------------------------

    def use_existing_boot(self, boot_id: Optional[int] = None) -> ItemDraft:
        self._require_mount("bootId")
        if boot_id is not None and not self._boot_offered(boot_id):
            raise ValidationError("bootId", "Boot not found for this customer")
        self.draft.boot = ExistingBootChoice(boot_id=boot_id)
        # Profile is already on file for an existing boot
        self.draft.profile = None
        return self.draft

    def offer_boots(self, boots: list[BootRecord]) -> None:
        self.offered_boots = list(boots)

    def _boot_offered(self, boot_id: int) -> bool:
        return self.options.has_boot(boot_id) or any(b.id == boot_id for b in self.offered_boots)

    def describe_new_boot(
        self, brand: Optional[str] = None, model: Optional[str] = None, bsl: Optional[int] = None
    ) -> ItemDraft:
        self._require_mount("newBoot")
        current = self.draft.boot
        form = current.model_copy() if isinstance(current, NewBootForm) else NewBootForm()
        if brand is not None:
            form.brand = brand
        if model is not None:
            form.model = model
        if bsl is not None:
            form.bsl = bsl
        self.draft.boot = form
        if self.draft.profile is None:
            self.draft.profile = ProfileForm()
        return self.draft

    def set_binding(self, brand: Optional[str] = None, model: Optional[str] = None) -> ItemDraft:
        self._require_mount("bindingBrand")
        if brand is not None:
            self.draft.binding_brand = brand
        if model is not None:
            self.draft.binding_model = model
        return self.draft

    def set_profile(
        self,
        height_inches: Optional[int] = None,
        weight: Optional[int] = None,
        age: Optional[int] = None,
        ability_level: Optional[AbilityLevel] = None,
        height_feet: Optional[int] = None,
    ) -> ItemDraft:
        """
        Record skier profile fields for a new boot.

        When height_feet is given, height_inches is the remainder in inches
        and the stored value is the total height in inches.
        """
        self._require_mount("profile")
        if not isinstance(self.draft.boot, NewBootForm):
            raise ValidationError("profile", "Skier profile is only collected for a new boot")

        profile = (self.draft.profile or ProfileForm()).model_copy()
        if height_feet is not None:
            profile.height_inches = height_feet * 12 + (height_inches or 0)
        elif height_inches is not None:
            profile.height_inches = height_inches
        if weight is not None:
            profile.weight = weight
        if age is not None:
            profile.age = age
        if ability_level is not None:
            profile.ability_level = AbilityLevel(ability_level)
        self.draft.profile = profile
        return self.draft

    # --- item list ----------------------------------------------------

    def add_item(self) -> ServiceItem:
        """Validate the draft, append it and start a fresh draft"""
        item = validate_item(self.draft)
        self.items.append(item)
        self.draft = ItemDraft()
        self.offered_boots = []
        logger.info(f"➕ Added {item.service_type.value} item ({len(self.items)} total)")
        return item

    def remove_item(self, item_id: str) -> None:
        if not any(item.id == item_id for item in self.items):
            raise ValidationError("items", "Equipment item not found")
        if len(self.items) <= 1:
            raise ValidationError("items", "At least one equipment item is required")
        self.items = [item for item in self.items if item.id != item_id]

    def discard_draft(self) -> None:
        self.draft = ItemDraft()
        self.offered_boots = []

    def validate_all(self) -> list[ServiceItem]:
        """
        Final check before leaving the equipment step.

        A started draft counts as one more item and must be valid too.
        """
        if not self.draft.is_empty:
            self.add_item()
        if not self.items:
            raise ValidationError("items", "At least one equipment item is required")
        for item in self.items:
            validate_item(to_draft(item))
        return list(self.items)


def to_draft(item: ServiceItem) -> ItemDraft:
    """Inverse of validate_item, used to re-check finalized items"""
    if isinstance(item.equipment, ExistingEquipment):
        equipment = ExistingEquipmentChoice(equipment_id=item.equipment.equipment_id)
    else:
        equipment = NewEquipmentForm(**item.equipment.model_dump(exclude={"kind"}))

    boot = None
    if isinstance(item.boot, ExistingBoot):
        boot = ExistingBootChoice(boot_id=item.boot.boot_id)
    elif isinstance(item.boot, NewBoot):
        boot = NewBootForm(**item.boot.model_dump(exclude={"kind"}))

    return ItemDraft(
        service_type=item.service_type,
        equipment=equipment,
        boot=boot,
        binding_brand=item.binding.brand if item.binding else None,
        binding_model=item.binding.model if item.binding else None,
        profile=ProfileForm(**item.profile.model_dump()) if item.profile else None,
    )
