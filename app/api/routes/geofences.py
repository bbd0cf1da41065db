"""
Geofence management routes
"""
import logging
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.models import get_db, User, UserRole, Geofence, GeofenceType
from app.schemas import (
    CoordinatePoint, GeofenceCreate, GeofenceUpdate, GeofenceResponse, GeofenceListResponse,
    GeofenceTagListResponse, GeofenceByTagResponse, GeofenceCheckRequest,
    GeofencePointCheckResponse, GeofenceCheckResponse
)
from app.core.config import settings
from app.core.security import require_client
from app.services import geofence_service, Coordinate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/geofences", tags=["Geofence Management"])

# Fields a PATCH may explicitly clear
NULLABLE_FIELDS = {"description", "center", "radius"}


async def _active_geofences_for(db: AsyncSession, user: User) -> list[Geofence]:
    result = await db.execute(
        select(Geofence)
        .where(Geofence.created_by == user.id, Geofence.is_active == True)
        .order_by(Geofence.created_at.desc())
    )
    return list(result.scalars().all())


async def _get_geofence(db: AsyncSession, geofence_id: UUID, user: User) -> Geofence:
    """Load a geofence owned by the user; admins may access any"""
    result = await db.execute(select(Geofence).where(Geofence.id == geofence_id))
    geofence = result.scalar_one_or_none()

    if not geofence or (geofence.created_by != user.id and user.role != UserRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Geofence not found"
        )

    return geofence


@router.get("", response_model=GeofenceListResponse)
async def list_geofences(
    current_user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db)
):
    """
    List the current user's active geofences, newest first.
    """
    geofences = await _active_geofences_for(db, current_user)

    return GeofenceListResponse(
        geofences=geofences,
        total=len(geofences)
    )


@router.get("/tags", response_model=GeofenceTagListResponse)
async def list_tags(
    current_user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db)
):
    """
    List the distinct tags used on the current user's active geofences.
    """
    geofences = await _active_geofences_for(db, current_user)
    tags = sorted({
        tag for geofence in geofences for tag in (geofence.tags or [])
        if tag and tag.strip()
    })

    return GeofenceTagListResponse(tags=tags, total=len(tags))


@router.get("/tags/{tag}", response_model=GeofenceByTagResponse)
async def list_geofences_by_tag(
    tag: str,
    current_user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db)
):
    """
    List the current user's active geofences carrying a tag.
    """
    geofences = [
        geofence for geofence in await _active_geofences_for(db, current_user)
        if tag in (geofence.tags or [])
    ]

    return GeofenceByTagResponse(
        geofences=geofences,
        total=len(geofences),
        tag=tag
    )


@router.post("/check-point", response_model=GeofencePointCheckResponse)
async def check_point(
    check_data: GeofenceCheckRequest,
    current_user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db)
):
    """
    Find which of the current user's active geofences contain a point.
    """
    geofences = await _active_geofences_for(db, current_user)
    point = Coordinate(check_data.lat, check_data.lng)

    containing = geofence_service.find_containing(geofences, point)
    logger.debug(
        f"Point {point} inside {len(containing)} of {len(geofences)} geofences "
        f"for user {current_user.id}"
    )

    return GeofencePointCheckResponse(
        point=CoordinatePoint(lat=point.lat, lng=point.lng),
        is_inside=bool(containing),
        geofences=containing,
        count=len(containing)
    )


@router.get("/{geofence_id}", response_model=GeofenceResponse)
async def get_geofence(
    geofence_id: UUID,
    current_user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db)
):
    """
    Get a specific geofence by ID.
    """
    return await _get_geofence(db, geofence_id, current_user)


@router.post("", response_model=GeofenceResponse, status_code=status.HTTP_201_CREATED)
async def create_geofence(
    geofence_data: GeofenceCreate,
    current_user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new geofence.
    """
    geofence_dict = geofence_data.model_dump()

    # Rejects before anything is stored
    geometry = geofence_service.normalize_geometry(
        geofence_dict["fence_type"],
        geofence_dict["coordinates"],
        geofence_dict["center"],
        geofence_dict["radius"]
    )

    if geofence_dict["fence_type"] == GeofenceType.CIRCLE:
        geofence_dict["coordinates"] = geofence_service.circle_vertices(geofence_dict["center"])

    # Presentation defaults
    if geofence_dict["color"] is None:
        geofence_dict["color"] = settings.GEOFENCE_DEFAULT_COLOR
    if geofence_dict["fill_color"] is None:
        geofence_dict["fill_color"] = settings.GEOFENCE_DEFAULT_COLOR
    if geofence_dict["fill_opacity"] is None:
        geofence_dict["fill_opacity"] = settings.GEOFENCE_DEFAULT_FILL_OPACITY
    if geofence_dict["stroke_weight"] is None:
        geofence_dict["stroke_weight"] = settings.GEOFENCE_DEFAULT_STROKE_WEIGHT

    geofence = Geofence(**geofence_dict, geometry=geometry, created_by=current_user.id)
    db.add(geofence)
    await db.commit()
    await db.refresh(geofence)

    logger.info(f"Geofence '{geofence.name}' ({geofence.fence_type.value}) created by {current_user.email}")
    return geofence


@router.patch("/{geofence_id}", response_model=GeofenceResponse)
async def update_geofence(
    geofence_id: UUID,
    geofence_data: GeofenceUpdate,
    current_user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a geofence. The stored geometry is re-derived when the
    shape fields change.
    """
    geofence = await _get_geofence(db, geofence_id, current_user)

    update_data = {
        field: value
        for field, value in geofence_data.model_dump(exclude_unset=True).items()
        if value is not None or field in NULLABLE_FIELDS
    }

    changes = geofence_service.prepare_update(geofence, update_data)
    for field, value in changes.items():
        setattr(geofence, field, value)

    await db.commit()
    await db.refresh(geofence)

    if "geometry" in changes:
        logger.info(f"Geometry re-derived for geofence {geofence.id}")
    return geofence


@router.delete("/{geofence_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_geofence(
    geofence_id: UUID,
    current_user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a geofence. Geofences are deactivated, never removed.
    """
    geofence = await _get_geofence(db, geofence_id, current_user)

    geofence.is_active = False
    await db.commit()

    logger.info(f"Geofence '{geofence.name}' deactivated by {current_user.email}")


@router.post("/{geofence_id}/check", response_model=GeofenceCheckResponse)
async def check_point_in_geofence(
    geofence_id: UUID,
    check_data: GeofenceCheckRequest,
    current_user: User = Depends(require_client),
    db: AsyncSession = Depends(get_db)
):
    """
    Check if a point is inside a specific geofence.
    """
    geofence = await _get_geofence(db, geofence_id, current_user)

    is_inside, distance = geofence_service.check_point(
        geofence, Coordinate(check_data.lat, check_data.lng)
    )

    return GeofenceCheckResponse(
        inside=is_inside,
        geofence_id=geofence.id,
        geofence_name=geofence.name,
        distance_from_center=distance
    )
