"""
User management routes
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.models import get_db, User, UserRole
from app.schemas import (
    UserUpdate, UserResponse, UserListResponse, UserStatsResponse
)
from app.core.security import get_current_user, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["User Management"])

# Window counted as recent registrations
RECENT_REGISTRATION_DAYS = 30


async def _get_user(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return user


def _require_owner_or_admin(user_id: UUID, current_user: User):
    if current_user.id != user_id and current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only access your own account"
        )


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    role: Optional[UserRole] = None,
    is_active: bool = True,
    search: Optional[str] = Query(None, min_length=1),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    List users with filtering and pagination.
    Requires Admin role.
    """
    conditions = [User.is_active == is_active]
    if role:
        conditions.append(User.role == role)
    if search and search.strip():
        search_filter = f"%{search.strip()}%"
        conditions.append(
            (User.first_name.ilike(search_filter)) |
            (User.last_name.ilike(search_filter)) |
            (User.email.ilike(search_filter))
        )

    # Get total count
    total_result = await db.execute(select(func.count(User.id)).where(*conditions))
    total = total_result.scalar()

    query = (
        select(User)
        .where(*conditions)
        .order_by(User.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    result = await db.execute(query)
    users = result.scalars().all()

    return UserListResponse(
        users=users,
        total=total,
        page=page,
        per_page=per_page,
        total_pages=math.ceil(total / per_page)
    )


@router.get("/stats/overview", response_model=UserStatsResponse)
async def user_stats(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    User counts by role and status.
    """
    async def count(*conditions) -> int:
        result = await db.execute(select(func.count(User.id)).where(*conditions))
        return result.scalar()

    since = datetime.utcnow() - timedelta(days=RECENT_REGISTRATION_DAYS)

    return UserStatsResponse(
        total_users=await count(User.is_active == True),
        total_clients=await count(User.role == UserRole.CLIENT, User.is_active == True),
        total_admins=await count(User.role == UserRole.ADMIN, User.is_active == True),
        inactive_users=await count(User.is_active == False),
        recent_registrations=await count(User.created_at >= since, User.is_active == True)
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get a specific user by ID. Users may read their own account.
    """
    _require_owner_or_admin(user_id, current_user)
    return await _get_user(db, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    user_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a user's information.
    Only admins may change role and active status.
    """
    _require_owner_or_admin(user_id, current_user)

    update_data = {
        field: value
        for field, value in user_data.model_dump(exclude_unset=True).items()
        if value is not None
    }

    if ("role" in update_data or "is_active" in update_data) and current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can update role and active status"
        )

    if update_data.get("is_active") is False and user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot deactivate your own account"
        )

    user = await _get_user(db, user_id)
    for field, value in update_data.items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)

    if "role" in update_data:
        logger.info(f"Role of {user.email} set to {user.role.value} by {current_user.email}")
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Deactivate a user (Admin only). Accounts are never removed.
    """
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account"
        )

    user = await _get_user(db, user_id)
    user.is_active = False
    await db.commit()

    logger.info(f"User {user.email} deactivated by {current_user.email}")


@router.post("/{user_id}/activate", response_model=UserResponse)
async def activate_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Activate a user account.
    """
    user = await _get_user(db, user_id)
    user.is_active = True

    await db.commit()
    await db.refresh(user)

    logger.info(f"User {user.email} activated by {current_user.email}")
    return user
