"""
MongoDB connection for the Cargo Tracker.

The client is created lazily and shared by the whole process; pymongo pools
connections internally and is safe to use from the request threadpool.
"""
import logging
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from config import DATABASE_NAME, DATABASE_URL

logger = logging.getLogger(__name__)

SHIPMENT_COLLECTION = "shipment"

_client: Optional[MongoClient] = None


def get_client() -> MongoClient:
    global _client
    if _client is None:
        # tz_aware so datetimes come back as UTC-aware values
        _client = MongoClient(DATABASE_URL, tz_aware=True)
    return _client


def get_database() -> Database:
    return get_client()[DATABASE_NAME]


def ensure_indexes(db: Database) -> None:
    shipments = db[SHIPMENT_COLLECTION]
    shipments.create_index([("trackingId", ASCENDING)], unique=True)
    shipments.create_index([("createdAt", DESCENDING)])
    logger.info("Ensured indexes on %s.%s", db.name, SHIPMENT_COLLECTION)


def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
