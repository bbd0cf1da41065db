"""
Pydantic schemas package
"""
from app.schemas.user import (
    UserBase, UserProfileUpdate, UserUpdate, UserResponse, UserListResponse,
    UserStatsResponse, TokenResponse, RefreshTokenRequest
)
from app.schemas.geofence import (
    CoordinatePoint, GeoJSONGeometry, GeofenceBase, GeofenceCreate, GeofenceUpdate,
    GeofenceResponse, GeofenceListResponse, GeofenceTagListResponse,
    GeofenceByTagResponse, GeofenceCheckRequest, GeofencePointCheckResponse,
    GeofenceCheckResponse
)

__all__ = [
    # User
    "UserBase", "UserProfileUpdate", "UserUpdate", "UserResponse",
    "UserListResponse", "UserStatsResponse", "TokenResponse", "RefreshTokenRequest",
    # Geofence
    "CoordinatePoint", "GeoJSONGeometry", "GeofenceBase", "GeofenceCreate",
    "GeofenceUpdate", "GeofenceResponse", "GeofenceListResponse",
    "GeofenceTagListResponse", "GeofenceByTagResponse", "GeofenceCheckRequest",
    "GeofencePointCheckResponse", "GeofenceCheckResponse",
]
