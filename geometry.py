"""
Route geometry from an OSRM-compatible routing service.

The geometry is decorative: any failure ends up as "no geometry" so that
shipment creation never depends on the provider being reachable.
"""
import logging
from typing import List, Optional, Sequence

import httpx
from pydantic import ValidationError as PydanticValidationError

from errors import UpstreamUnavailable
from schemas import LineString, Location

logger = logging.getLogger(__name__)


class NullGeometryGateway:
    """Used when no routing service is configured."""

    def get_route_geometry(self, waypoints: Sequence[Location]) -> Optional[LineString]:
        return None

    def close(self):
        pass


class OSRMGateway:
    def __init__(self, base_url: str, timeout: float = 5.0, client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)

    def close(self):
        self.client.close()

    def get_route_geometry(self, waypoints: Sequence[Location]) -> Optional[LineString]:
        coords = [wp for wp in waypoints if wp.has_coordinates]
        if len(coords) < 2:
            logger.warning("Not enough waypoints with coordinates (%d) for routing", len(coords))
            return None
        try:
            data = self._fetch_route(coords)
        except UpstreamUnavailable as e:
            logger.warning("Route geometry unavailable: %s", e.message)
            return None
        return self._parse_geometry(data)

    def _fetch_route(self, waypoints: List[Location]) -> dict:
        # OSRM wants lon,lat pairs separated by ';'
        coordinates = ";".join(f"{wp.longitude},{wp.latitude}" for wp in waypoints)
        url = f"{self.base_url}/route/v1/driving/{coordinates}"
        try:
            response = self.client.get(url, params={"overview": "full", "geometries": "geojson"})
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailable(f"routing service answered {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"routing service unreachable: {e}") from e
        except ValueError as e:
            raise UpstreamUnavailable("routing service returned invalid JSON") from e

    @staticmethod
    def _parse_geometry(data) -> Optional[LineString]:
        routes = data.get("routes") if isinstance(data, dict) else None
        if not routes:
            logger.warning("Routing response did not contain any routes")
            return None
        geometry = routes[0].get("geometry") if isinstance(routes[0], dict) else None
        if not isinstance(geometry, dict) or geometry.get("type") != "LineString":
            logger.warning("Routing response did not contain a LineString geometry")
            return None
        try:
            return LineString.model_validate(geometry)
        except PydanticValidationError:
            logger.warning("Routing response geometry has no usable coordinates")
            return None
