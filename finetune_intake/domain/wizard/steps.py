"""Wizard step machine"""

from enum import Enum

from ...errors import InvalidTransitionError


class Step(str, Enum):
    CUSTOMER = "CUSTOMER"
    EQUIPMENT = "EQUIPMENT"
    AGREEMENT = "AGREEMENT"
    REVIEW = "REVIEW"
    SUBMITTED = "SUBMITTED"
    LIMIT_REACHED = "LIMIT_REACHED"


class Event(str, Enum):
    CUSTOMER_RESOLVED = "CUSTOMER_RESOLVED"
    ITEMS_COMPLETED = "ITEMS_COMPLETED"
    AGREEMENT_ACCEPTED = "AGREEMENT_ACCEPTED"
    BACK = "BACK"
    SUBMIT_SUCCEEDED = "SUBMIT_SUCCEEDED"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"


TERMINAL_STEPS = {Step.SUBMITTED, Step.LIMIT_REACHED}

# (step, event) -> (target when an agreement is required, target otherwise)
TRANSITIONS: dict[tuple[Step, Event], tuple[Step, Step]] = {
    (Step.CUSTOMER, Event.CUSTOMER_RESOLVED): (Step.EQUIPMENT, Step.EQUIPMENT),
    (Step.EQUIPMENT, Event.ITEMS_COMPLETED): (Step.AGREEMENT, Step.REVIEW),
    (Step.EQUIPMENT, Event.BACK): (Step.CUSTOMER, Step.CUSTOMER),
    (Step.AGREEMENT, Event.AGREEMENT_ACCEPTED): (Step.REVIEW, Step.REVIEW),
    (Step.AGREEMENT, Event.BACK): (Step.EQUIPMENT, Step.EQUIPMENT),
    (Step.REVIEW, Event.BACK): (Step.AGREEMENT, Step.EQUIPMENT),
    (Step.REVIEW, Event.SUBMIT_SUCCEEDED): (Step.SUBMITTED, Step.SUBMITTED),
    (Step.REVIEW, Event.QUOTA_EXCEEDED): (Step.LIMIT_REACHED, Step.LIMIT_REACHED),
}


def next_step(step: Step, event: Event, *, agreement_required: bool) -> Step:
    """
    Step reached by applying event in step.

    Raises:
        InvalidTransitionError: If the event is not allowed in this step
    """
    targets = TRANSITIONS.get((Step(step), Event(event)))
    if targets is None:
        raise InvalidTransitionError(f"{Event(event).value} is not allowed during {Step(step).value}")
    if_required, otherwise = targets
    return if_required if agreement_required else otherwise
