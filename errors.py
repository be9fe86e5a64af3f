"""Error types raised by the shipment service.

Each error carries the HTTP status code the API layer answers with.
"""
from fastapi import status


class ShipmentError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ShipmentError):
    """Missing or malformed required input."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ShipmentError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__("Shipment not found")


class InvalidStateError(ShipmentError):
    """The shipment's current status does not allow the requested change."""
    status_code = status.HTTP_400_BAD_REQUEST


class UniqueConstraintError(ShipmentError):
    status_code = status.HTTP_400_BAD_REQUEST


class PersistenceError(ShipmentError):
    """Storage layer failure. The message is logged, never returned to clients."""


class UpstreamUnavailable(ShipmentError):
    """The route geometry provider could not be used. Handled inside the gateway."""
    status_code = status.HTTP_502_BAD_GATEWAY
