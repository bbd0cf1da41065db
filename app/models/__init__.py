"""
Database models package
"""
from app.models.database import Base, get_db, init_db
from app.models.user import User, UserRole, AuthProvider
from app.models.geofence import Geofence, GeofenceType

__all__ = [
    "Base",
    "get_db",
    "init_db",
    "User",
    "UserRole",
    "AuthProvider",
    "Geofence",
    "GeofenceType",
]
