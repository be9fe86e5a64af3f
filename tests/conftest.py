"""Shared fixtures: in-memory persistence, stub geometry gateway, fixed clock."""
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from errors import UniqueConstraintError
from schemas import LineString, Location, Shipment
from shipments import ShipmentService

NOW = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)


class InMemoryShipmentRepository:
    """Mimics ShipmentRepository, including the unique trackingId index."""

    def __init__(self, clock=lambda: NOW):
        self.docs: Dict[str, Shipment] = {}
        self.clock = clock
        self.saves = 0

    def find_by_id(self, sid: str) -> Optional[Shipment]:
        if not ObjectId.is_valid(sid):
            return None
        return self.docs.get(sid)

    def find_by_tracking_id(self, tracking_id: str) -> Optional[Shipment]:
        for doc in self.docs.values():
            if doc.trackingId == tracking_id:
                return doc
        return None

    def list_all(self) -> List[Shipment]:
        return sorted(self.docs.values(), key=lambda s: s.createdAt, reverse=True)

    def save(self, shipment: Shipment) -> Shipment:
        for sid, doc in self.docs.items():
            if doc.trackingId == shipment.trackingId and sid != shipment.id:
                raise UniqueConstraintError("Duplicate value detected for a unique field (e.g., trackingId).")
        now = self.clock()
        saved = shipment.model_copy(update={
            "id": shipment.id or str(ObjectId()),
            "createdAt": shipment.createdAt or now,
            "updatedAt": now,
        })
        self.docs[saved.id] = saved
        self.saves += 1
        return saved


class StubGeometryGateway:
    def __init__(self, geometry: Optional[LineString] = None, error: Optional[Exception] = None):
        self.geometry = geometry
        self.error = error
        self.calls = []

    def get_route_geometry(self, waypoints):
        self.calls.append(list(waypoints))
        if self.error:
            raise self.error
        return self.geometry


class SequenceIds:
    def __init__(self, *ids):
        self.ids = list(ids)

    def __call__(self):
        return self.ids.pop(0)


@pytest.fixture
def repository():
    return InMemoryShipmentRepository()


@pytest.fixture
def gateway():
    return StubGeometryGateway(LineString(coordinates=[[121.5, 31.2], [4.5, 51.9]]))


@pytest.fixture
def service(repository, gateway):
    return ShipmentService(repository, gateway, clock=lambda: NOW)


@pytest.fixture
def shanghai():
    return Location(name="Shanghai", latitude=31.2, longitude=121.5)


@pytest.fixture
def rotterdam():
    return Location(name="Rotterdam", latitude=51.9, longitude=4.5)


@pytest.fixture
def client(service):
    from main import app, get_service

    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
