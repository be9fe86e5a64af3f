"""
ETA estimation.

The model is deliberately flat: every leg of the route is assumed to take
LEG_DURATION regardless of distance. Callers pass `now` in, so results depend
only on the arguments.
"""
from datetime import datetime, timedelta
from typing import Optional, Sequence

from schemas import DELIVERED, Location, ShipmentStatus

LEG_DURATION = timedelta(days=2)


def remaining_legs(route: Sequence[Location], current_location: Optional[Location]) -> int:
    """Legs left between the current position and the end of the route.

    A position that is not on the route counts as the whole journey.
    """
    legs = len(route) - 1
    if current_location is not None:
        for i, loc in enumerate(route):
            if loc.name == current_location.name:
                legs = len(route) - 1 - i
                break
    return max(0, legs)


def estimate(
    route: Sequence[Location],
    current_location: Optional[Location],
    status: ShipmentStatus,
    now: datetime,
    previous_eta: Optional[datetime] = None,
) -> Optional[datetime]:
    if status == DELIVERED:
        return None
    if len(route) < 2:
        # not enough data; keep whatever was estimated before
        return previous_eta

    legs = remaining_legs(route, current_location)
    if legs == 0:
        return now
    return now + legs * LEG_DURATION
