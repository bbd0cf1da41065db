"""
Pydantic schemas for Geofence API
"""
from datetime import datetime
from typing import Any, List, Literal, Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_validator, model_validator
from app.models.geofence import GeofenceType


class CoordinatePoint(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class GeoJSONGeometry(BaseModel):
    type: Literal["Point", "Polygon"]
    coordinates: List[Any]


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _clean_tags(tags):
    if tags is None:
        return tags
    return [tag.strip() for tag in tags if tag and tag.strip()]


class GeofenceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    fence_type: GeofenceType = GeofenceType.POLYGON
    color: Optional[str] = Field(None, max_length=20)
    fill_color: Optional[str] = Field(None, max_length=20)
    fill_opacity: Optional[float] = Field(None, ge=0, le=1)
    stroke_weight: Optional[int] = Field(None, ge=1, le=10)
    tags: List[str] = []

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)

    @field_validator("tags", mode="before")
    @classmethod
    def strip_tags(cls, v):
        return _clean_tags(v)


class GeofenceCreate(GeofenceBase):
    coordinates: List[CoordinatePoint] = Field(..., min_length=1)

    # Circle type
    center: Optional[CoordinatePoint] = None
    radius: Optional[float] = Field(None, gt=0)

    @model_validator(mode='after')
    def validate_geofence_data(self):
        if self.fence_type == GeofenceType.CIRCLE:
            if self.center is None or self.radius is None:
                raise ValueError('Circle geofence requires center and radius')
        elif self.fence_type == GeofenceType.POLYGON:
            if len(self.coordinates) < 3:
                raise ValueError('Polygon geofence requires at least 3 coordinates')
        return self


class GeofenceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    fence_type: Optional[GeofenceType] = None
    coordinates: Optional[List[CoordinatePoint]] = Field(None, min_length=1)
    center: Optional[CoordinatePoint] = None
    radius: Optional[float] = Field(None, gt=0)
    color: Optional[str] = Field(None, max_length=20)
    fill_color: Optional[str] = Field(None, max_length=20)
    fill_opacity: Optional[float] = Field(None, ge=0, le=1)
    stroke_weight: Optional[int] = Field(None, ge=1, le=10)
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)

    @field_validator("tags", mode="before")
    @classmethod
    def strip_tags(cls, v):
        return _clean_tags(v)


class GeofenceResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    fence_type: GeofenceType
    coordinates: List[CoordinatePoint]
    center: Optional[CoordinatePoint] = None
    radius: Optional[float] = None
    geometry: Optional[GeoJSONGeometry] = None
    color: str
    fill_color: str
    fill_opacity: float
    stroke_weight: int
    tags: List[str]
    is_active: bool
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GeofenceListResponse(BaseModel):
    geofences: list[GeofenceResponse]
    total: int


class GeofenceTagListResponse(BaseModel):
    tags: list[str]
    total: int


class GeofenceByTagResponse(GeofenceListResponse):
    tag: str


class GeofenceCheckRequest(CoordinatePoint):
    pass


class GeofencePointCheckResponse(BaseModel):
    point: CoordinatePoint
    is_inside: bool
    geofences: list[GeofenceResponse]
    count: int


class GeofenceCheckResponse(BaseModel):
    inside: bool
    geofence_id: UUID
    geofence_name: str
    distance_from_center: Optional[float] = None  # For circle type
