"""Status transitions driven by location reports and manual overrides."""
from typing import NamedTuple

from errors import InvalidStateError
from schemas import CANCELLED, DELAYED, DELIVERED, IN_TRANSIT, PENDING, ShipmentStatus

# Manual states that an ordinary location report does not clear.
STICKY_STATUSES = (DELAYED, CANCELLED)


class StatusTransition(NamedTuple):
    status: ShipmentStatus
    delivered_now: bool = False


def next_status(current: ShipmentStatus, destination_name: str, reported_name: str) -> StatusTransition:
    if current == DELIVERED:
        raise InvalidStateError("Cannot update location for delivered shipments.")
    if reported_name == destination_name:
        return StatusTransition(DELIVERED, True)
    if current == PENDING:
        return StatusTransition(IN_TRANSIT)
    if current in STICKY_STATUSES:
        return StatusTransition(current)
    return StatusTransition(IN_TRANSIT)


def apply_override(current: ShipmentStatus, requested: ShipmentStatus) -> StatusTransition:
    """Explicit status change requested by an operator."""
    if current == DELIVERED:
        raise InvalidStateError("Cannot change the status of delivered shipments.")
    return StatusTransition(requested, requested == DELIVERED)
