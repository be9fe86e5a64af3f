"""Persistence of Shipment documents in MongoDB."""
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import PersistenceError, UniqueConstraintError
from schemas import Shipment

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_shipment(doc: dict) -> Shipment:
    doc = dict(doc)
    doc["_id"] = str(doc["_id"])  # serialize
    return Shipment.model_validate(doc)


class ShipmentRepository:
    def __init__(self, collection: Collection, clock: Callable[[], datetime] = _utcnow):
        self.collection = collection
        self.clock = clock

    def find_by_id(self, sid: str) -> Optional[Shipment]:
        # Not an ObjectId: it may still be a tracking id, so this is a miss, not an error.
        if not ObjectId.is_valid(sid):
            return None
        doc = self._call(self.collection.find_one, {"_id": ObjectId(sid)})
        return to_shipment(doc) if doc else None

    def find_by_tracking_id(self, tracking_id: str) -> Optional[Shipment]:
        doc = self._call(self.collection.find_one, {"trackingId": tracking_id})
        return to_shipment(doc) if doc else None

    def list_all(self) -> List[Shipment]:
        docs = self._call(lambda: list(self.collection.find().sort("createdAt", DESCENDING)))
        return [to_shipment(d) for d in docs]

    def save(self, shipment: Shipment) -> Shipment:
        now = self.clock()
        data = shipment.model_dump(exclude={"id"})
        data["updatedAt"] = now
        if shipment.id is None:
            data["createdAt"] = now
            res = self._call(self.collection.insert_one, data)
            return shipment.model_copy(update={"id": str(res.inserted_id), "createdAt": now, "updatedAt": now})

        data["createdAt"] = shipment.createdAt or now
        self._call(self.collection.replace_one, {"_id": ObjectId(shipment.id)}, data)
        return shipment.model_copy(update={"createdAt": data["createdAt"], "updatedAt": now})

    @staticmethod
    def _call(fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except DuplicateKeyError as e:
            raise UniqueConstraintError(
                "Duplicate value detected for a unique field (e.g., trackingId)."
            ) from e
        except PyMongoError as e:
            logger.error("MongoDB operation failed: %s", e)
            raise PersistenceError(str(e)) from e
