"""
Shipment operations.

Every mutating operation re-derives the route and the ETA before saving, so
the stored derived fields always match the stored inputs. Concurrent updates
of the same shipment are last-write-wins; there is no optimistic locking.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, NamedTuple, Optional

from pydantic import ValidationError as PydanticValidationError

from errors import NotFoundError, UniqueConstraintError, ValidationError
from eta import estimate
from routing import reconcile, routable_waypoints
from schemas import DELIVERED, PENDING, Location, Shipment, ShipmentStatus
from status_policy import StatusTransition, apply_override, next_status
from tracking import TrackingIdGenerator

logger = logging.getLogger(__name__)

TRACKING_ID_ATTEMPTS = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ETAResult(NamedTuple):
    shipment_id: Optional[str]
    tracking_id: Optional[str]
    estimated_eta: Optional[datetime]


class ShipmentService:
    def __init__(
        self,
        repository,
        geometry_gateway,
        generate_tracking_id: Optional[Callable[[], str]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.geometry = geometry_gateway
        self.generate_tracking_id = generate_tracking_id or TrackingIdGenerator()
        self.clock = clock

    # Lookups

    def get(self, sid: str) -> Shipment:
        """Find by primary key, then by tracking id."""
        shipment = self.repository.find_by_id(sid)
        if shipment is None:
            shipment = self.repository.find_by_tracking_id(sid)
        if shipment is None:
            raise NotFoundError(sid)
        return shipment

    def list_all(self) -> List[Shipment]:
        return self.repository.list_all()

    # Mutations

    def create(
        self,
        container_id: Optional[str],
        origin: Optional[Location],
        destination: Optional[Location],
        intermediates: Optional[Iterable[Optional[Location]]] = None,
        status: Optional[ShipmentStatus] = None,
        notes: Optional[str] = None,
    ) -> Shipment:
        container_id = (container_id or "").strip()
        if not container_id or origin is None or destination is None:
            raise ValidationError("Missing required fields: containerId, origin name, destination name")

        now = self.clock()
        # only the route head and the current location carry the departure time
        departed = origin.model_copy(update={"timestamp": now})
        route = reconcile(departed, destination, intermediates)
        status = status or PENDING

        shipment = Shipment(
            containerId=container_id,
            origin=origin,
            destination=destination,
            route=route,
            currentLocation=departed.model_copy(),
            status=status,
            notes=notes.strip() if notes else None,
            actualDeliveryDate=now if status == DELIVERED else None,
        )
        shipment.estimatedETA = estimate(route, shipment.currentLocation, status, now)
        shipment.detailedRouteGeometry = self._route_geometry(container_id, route)

        for attempt in range(1, TRACKING_ID_ATTEMPTS + 1):
            shipment.trackingId = self.generate_tracking_id()
            try:
                saved = self.repository.save(shipment)
            except UniqueConstraintError:
                logger.warning(
                    "Tracking id %s already taken (attempt %d/%d)",
                    shipment.trackingId, attempt, TRACKING_ID_ATTEMPTS,
                )
                if attempt == TRACKING_ID_ATTEMPTS:
                    raise
                continue
            logger.info("Shipment created: %s (container %s)", saved.trackingId, container_id)
            return saved

    def record_location_update(
        self,
        sid: str,
        location_name: Optional[str],
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> Shipment:
        if not location_name or not location_name.strip():
            raise ValidationError("Location name is required in the request body")

        shipment = self.get(sid)
        now = self.clock()
        try:
            current = Location(name=location_name, latitude=latitude, longitude=longitude, timestamp=now)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid location: {e.errors()[0]['msg']}") from e

        transition = next_status(shipment.status, shipment.destination.name, current.name)
        logger.info("Updating location for shipment %s to %s", shipment.trackingId, current.name)

        updated = shipment.model_copy(update={"currentLocation": current})
        return self._apply(updated, transition, now)

    def set_status(self, sid: str, status: ShipmentStatus) -> Shipment:
        shipment = self.get(sid)
        transition = apply_override(shipment.status, status)
        logger.info("Status of shipment %s set to %s", shipment.trackingId, status)
        return self._apply(shipment, transition, self.clock())

    def get_eta(self, sid: str) -> ETAResult:
        """Recompute the ETA from stored state. The result is not persisted."""
        shipment = self.get(sid)
        eta = estimate(
            shipment.route,
            shipment.currentLocation,
            shipment.status,
            self.clock(),
            previous_eta=shipment.estimatedETA,
        )
        return ETAResult(shipment.id, shipment.trackingId, eta)

    # Internals

    def _apply(self, shipment: Shipment, transition: StatusTransition, now: datetime) -> Shipment:
        head = shipment.route[0] if shipment.route and shipment.route[0].name == shipment.origin.name else shipment.origin
        route = reconcile(head, shipment.destination, shipment.route)
        update = {"status": transition.status, "route": route}
        if transition.delivered_now:
            update["actualDeliveryDate"] = now
            update["estimatedETA"] = None
            logger.info("Shipment %s delivered", shipment.trackingId)
        else:
            update["estimatedETA"] = estimate(
                route, shipment.currentLocation, transition.status, now,
                previous_eta=shipment.estimatedETA,
            )
        return self.repository.save(shipment.model_copy(update=update))

    def _route_geometry(self, container_id: str, route: List[Location]):
        waypoints = routable_waypoints(route)
        if len(waypoints) < 2:
            logger.warning(
                "Shipment for container %s lacks coordinates; detailed route not calculated",
                container_id,
            )
            return None
        try:
            geometry = self.geometry.get_route_geometry(waypoints)
        except Exception:
            logger.exception("Route geometry lookup failed for container %s", container_id)
            return None
        if geometry is None:
            logger.warning("Proceeding without detailed route for container %s", container_id)
        return geometry
