"""
Database Schemas for the Cargo Tracker

Shipment maps to the MongoDB "shipment" collection. Keys are camelCase so the
stored document and the JSON exchanged with clients have the same shape.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ShipmentStatus = Literal["Pending", "In Transit", "Delayed", "Delivered", "Cancelled"]

PENDING: ShipmentStatus = "Pending"
IN_TRANSIT: ShipmentStatus = "In Transit"
DELAYED: ShipmentStatus = "Delayed"
DELIVERED: ShipmentStatus = "Delivered"
CANCELLED: ShipmentStatus = "Cancelled"


class Location(BaseModel):
    name: str
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    timestamp: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Location name is required")
        return v

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Waypoint(BaseModel):
    """Loosely-typed waypoint as sent by clients; nameless entries are ignored."""
    name: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    def to_location(self) -> Optional[Location]:
        if not self.name or not self.name.strip():
            return None
        return Location(name=self.name, latitude=self.latitude, longitude=self.longitude)


class LineString(BaseModel):
    """GeoJSON LineString, coordinates as [longitude, latitude] pairs."""
    type: Literal["LineString"] = "LineString"
    coordinates: List[List[float]] = Field(..., min_length=1)


class Shipment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    trackingId: Optional[str] = None
    containerId: str
    origin: Location
    destination: Location
    route: List[Location] = []
    currentLocation: Optional[Location] = None
    estimatedETA: Optional[datetime] = None
    status: ShipmentStatus = PENDING
    detailedRouteGeometry: Optional[LineString] = None
    actualDeliveryDate: Optional[datetime] = None
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ShipmentCreate(BaseModel):
    # Required fields are checked by the service so a missing one is reported
    # with the same message whatever the client omitted.
    containerId: Optional[str] = None
    origin: Optional[Waypoint] = None
    destination: Optional[Waypoint] = None
    route: Optional[List[Optional[Waypoint]]] = None
    status: Optional[ShipmentStatus] = None
    notes: Optional[str] = None


class ETAResponse(BaseModel):
    shipmentId: Optional[str] = None
    trackingId: Optional[str] = None
    estimatedETA: Optional[datetime] = None
