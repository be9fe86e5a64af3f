import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

import config
from database import SHIPMENT_COLLECTION, close_client, ensure_indexes, get_database
from errors import PersistenceError, ShipmentError
from geometry import NullGeometryGateway, OSRMGateway
from repository import ShipmentRepository
from schemas import ETAResponse, Shipment, ShipmentCreate, ShipmentStatus
from shipments import ShipmentService

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Geometry gateway is shared by all requests; it holds the HTTP connection pool.
geometry_gateway = OSRMGateway(config.OSRM_URL, timeout=config.OSRM_TIMEOUT) if config.OSRM_URL else NullGeometryGateway()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not config.OSRM_URL:
        logger.warning("OSRM_URL not set; shipments will be created without detailed route geometry")
    try:
        ensure_indexes(get_database())
    except Exception as e:
        logger.error("Could not ensure MongoDB indexes: %s", e)
    yield
    geometry_gateway.close()
    close_client()


# FastAPI app
app = FastAPI(title="Cargo Tracker API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_service() -> ShipmentService:
    repository = ShipmentRepository(get_database()[SHIPMENT_COLLECTION])
    return ShipmentService(repository, geometry_gateway)


# Error handlers
@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Server Error"})


@app.exception_handler(ShipmentError)
async def shipment_error_handler(request: Request, exc: ShipmentError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation Error", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Server Error"})


# Request bodies
class LocationUpdate(BaseModel):
    locationName: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class StatusPatch(BaseModel):
    status: ShipmentStatus


# Root
@app.get("/")
def read_root():
    return {"message": "Cargo Tracker API Running"}


# Shipments
@app.get("/api/shipments", response_model=List[Shipment])
def list_shipments(service: ShipmentService = Depends(get_service)):
    return service.list_all()


@app.post("/api/shipments", response_model=Shipment, status_code=status.HTTP_201_CREATED)
def create_shipment(payload: ShipmentCreate, service: ShipmentService = Depends(get_service)):
    return service.create(
        payload.containerId,
        payload.origin.to_location() if payload.origin else None,
        payload.destination.to_location() if payload.destination else None,
        [wp.to_location() for wp in (payload.route or []) if wp is not None],
        status=payload.status,
        notes=payload.notes,
    )


@app.get("/api/shipments/{sid}", response_model=Shipment)
def get_shipment(sid: str, service: ShipmentService = Depends(get_service)):
    return service.get(sid)


@app.post("/api/shipments/{sid}/update-location", response_model=Shipment)
def update_shipment_location(sid: str, body: LocationUpdate, service: ShipmentService = Depends(get_service)):
    return service.record_location_update(sid, body.locationName, body.latitude, body.longitude)


@app.get("/api/shipments/{sid}/eta", response_model=ETAResponse)
def get_shipment_eta(sid: str, service: ShipmentService = Depends(get_service)):
    result = service.get_eta(sid)
    return ETAResponse(shipmentId=result.shipment_id, trackingId=result.tracking_id, estimatedETA=result.estimated_eta)


@app.patch("/api/shipments/{sid}/status", response_model=Shipment)
def patch_shipment_status(sid: str, body: StatusPatch, service: ShipmentService = Depends(get_service)):
    return service.set_status(sid, body.status)


# Database diagnostics
@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_name": config.DATABASE_NAME,
        "connection_status": "Not Connected",
        "collections": [],
        "routing_service": "✅ Set" if config.OSRM_URL else "❌ Not Set",
        "checked_at": datetime.now(timezone.utc).isoformat(),
    }
    try:
        db = get_database()
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "✅ Available"
        response["connection_status"] = "Connected"
    except Exception as e:
        response["database"] = f"⚠️  Error: {str(e)[:80]}"
    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
