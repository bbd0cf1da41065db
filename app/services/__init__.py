"""
Services package
"""
from app.services.geofence_service import (
    geofence_service, GeofenceService, GeometryValidationError, Coordinate,
    EARTH_RADIUS_METERS, GEOMETRY_FIELDS
)

__all__ = [
    "geofence_service",
    "GeofenceService",
    "GeometryValidationError",
    "Coordinate",
    "EARTH_RADIUS_METERS",
    "GEOMETRY_FIELDS",
]
