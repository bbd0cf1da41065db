"""
Geofence model for user-drawn geographic regions
"""
import uuid
from datetime import datetime
from enum import Enum
from sqlalchemy import (
    Column, String, DateTime, Float, Integer, Boolean, ForeignKey, Uuid,
    Enum as SQLEnum, JSON
)
from sqlalchemy.orm import relationship
from app.models.database import Base


class GeofenceType(str, Enum):
    POLYGON = "polygon"
    CIRCLE = "circle"
    RECTANGLE = "rectangle"


class Geofence(Base):
    __tablename__ = "geofences"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)

    # Shape
    fence_type = Column(SQLEnum(GeofenceType), default=GeofenceType.POLYGON, nullable=False)

    # Drawn vertices as [{"lat": ..., "lng": ...}, ...]
    coordinates = Column(JSON, nullable=False, default=list)

    # For circle type
    center = Column(JSON, nullable=True)
    radius = Column(Float, nullable=True)

    # GeoJSON geometry derived from the shape fields
    geometry = Column(JSON, nullable=True)

    # Presentation
    color = Column(String(20), default="#FF0000")
    fill_color = Column(String(20), default="#FF0000")
    fill_opacity = Column(Float, default=0.3)
    stroke_weight = Column(Integer, default=2)

    tags = Column(JSON, nullable=False, default=list)

    # Status
    is_active = Column(Boolean, default=True, index=True)

    # Ownership
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("User", back_populates="geofences")

    def __repr__(self):
        return f"<Geofence {self.name}>"
