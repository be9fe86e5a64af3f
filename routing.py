"""
Route reconciliation.

Builds the canonical ordered route of a shipment from its anchors (origin,
destination) and the intermediate waypoints supplied by the client. Points are
kept in the order given; nothing here tries to optimise the path.
"""
import logging
from typing import Iterable, List, Optional

from schemas import Location

logger = logging.getLogger(__name__)


def reconcile(
    origin: Optional[Location],
    destination: Optional[Location],
    intermediates: Optional[Iterable[Optional[Location]]] = None,
) -> List[Location]:
    origin_name = origin.name if origin else None
    dest_name = destination.name if destination else None

    points: List[Location] = []
    if origin:
        points.append(origin.model_copy())

    for loc in intermediates or []:
        if loc is None or not loc.name:
            logger.debug("Skipping unnamed intermediate waypoint")
            continue
        if loc.name in (origin_name, dest_name):
            continue
        points.append(loc.model_copy())

    if destination:
        if not points or points[-1].name != dest_name:
            points.append(destination.model_copy())
        else:
            logger.debug("Destination %s already ends the route", dest_name)

    route: List[Location] = []
    seen = set()
    for loc in points:
        if loc.name in seen:
            logger.debug("Skipping duplicate name in route: %s", loc.name)
            continue
        seen.add(loc.name)
        route.append(loc)
    return route


def routable_waypoints(route: Iterable[Location]) -> List[Location]:
    """Route points that carry both coordinates, in route order."""
    return [loc for loc in route if loc.has_coordinates]
