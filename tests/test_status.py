from itertools import product

import pytest

from finetune_intake.domain.workorders.status import derive_status
from finetune_intake.errors import ValidationError
from finetune_intake.models import (
    ExistingEquipment,
    ItemStatus,
    ServiceItem,
    ServiceType,
    WorkOrderStatus,
)


def items_with(*statuses):
    return [
        ServiceItem(service_type=ServiceType.TUNE, equipment=ExistingEquipment(equipment_id=i), status=s)
        for i, s in enumerate(statuses)
    ]


@pytest.mark.parametrize(
    "statuses, expected",
    [
        ([ItemStatus.PENDING], WorkOrderStatus.PENDING),
        ([ItemStatus.PENDING, ItemStatus.PENDING], WorkOrderStatus.PENDING),
        ([ItemStatus.PENDING, ItemStatus.IN_PROGRESS], WorkOrderStatus.IN_PROGRESS),
        ([ItemStatus.PENDING, ItemStatus.READY], WorkOrderStatus.IN_PROGRESS),
        ([ItemStatus.READY, ItemStatus.COMPLETE], WorkOrderStatus.READY),
        ([ItemStatus.READY, ItemStatus.READY], WorkOrderStatus.READY),
        ([ItemStatus.COMPLETE, ItemStatus.COMPLETE], WorkOrderStatus.COMPLETE),
        ([ItemStatus.IN_PROGRESS, ItemStatus.COMPLETE], WorkOrderStatus.IN_PROGRESS),
    ],
)
def test_derive_status(statuses, expected):
    assert derive_status(items_with(*statuses)) == expected


def test_empty_item_list_is_rejected():
    with pytest.raises(ValidationError) as exc:
        derive_status([])
    assert exc.value.field == "items"


def test_upgrading_one_item_never_moves_status_backward():
    order = list(ItemStatus)
    for statuses in product(order, repeat=3):
        before = derive_status(items_with(*statuses)).rank
        for index, current in enumerate(statuses):
            for higher in order[order.index(current) + 1 :]:
                upgraded = list(statuses)
                upgraded[index] = higher
                after = derive_status(items_with(*upgraded)).rank
                assert after >= before, (statuses, upgraded)
