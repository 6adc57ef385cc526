from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from config import get_db
from models import User
from routers.auth.auth import get_current_user
from routers.auth.helpers import auth_helpers
from routers.auth.schemas import UserRole
from dependencies.rbac import (
    require_profile_read, require_profile_write, require_profile_delete,
    require_nearby_read, require_community_interest_read
)
from utils.response_helpers import safe_model_validate, safe_model_validate_list, user_to_dict
from .schemas import UserResponse, UserUpdate, NearbyUserResponse, CommunityInterestListResponse
from .helpers import user_helpers
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["Users"])


async def _load_user(db: AsyncSession, current_user: dict) -> User:
    result = await db.execute(select(User).where(User.id == current_user["user_id"]))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_profile_read)
):
    """Get the caller's account"""
    user = await _load_user(db, current_user)
    return safe_model_validate(UserResponse, user_to_dict(user))


@router.put("/me", response_model=UserResponse)
async def update_current_user_profile(
    profile_update: UserUpdate,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_profile_write)
):
    """Update name, phone number, location or password of the caller's account"""
    try:
        user = await _load_user(db, current_user)

        update_data = profile_update.model_dump(exclude_unset=True, exclude_none=True)

        if "name" in update_data:
            user.name = update_data["name"]
        if "phone_number" in update_data:
            user.phone_number = update_data["phone_number"]
        if profile_update.location is not None:
            user.longitude = profile_update.location.longitude
            user.latitude = profile_update.location.latitude
        if "password" in update_data:
            user.password_hash = auth_helpers.hash_password(update_data["password"])

        await db.commit()
        await db.refresh(user)

        return safe_model_validate(UserResponse, user_to_dict(user))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating user profile: {str(e)}")
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update profile"
        )


@router.delete("/me", response_model=UserResponse)
async def delete_current_user(
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_profile_delete)
):
    """Delete the caller's account and the records that depend on it"""
    try:
        user = await _load_user(db, current_user)
        deleted = safe_model_validate(UserResponse, user_to_dict(user))

        await user_helpers.delete_account(db, user)

        return deleted

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        logger.error(f"Error deleting user: {str(e)}")
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete account"
        )


@router.get("/nearby", response_model=List[NearbyUserResponse])
async def get_nearby_users(
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    role: Optional[UserRole] = Query(None),
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_nearby_read)
):
    """
    Accounts of the requested role within 10 km of (longitude, latitude), nearest first.
    `distance` is in meters.
    """
    if longitude is None or latitude is None or role is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required query parameters"
        )

    try:
        users = await user_helpers.find_nearby_users(db, (longitude, latitude), role.value)
        logger.info(f"Nearby {role.value} search at ({longitude}, {latitude}) returned {len(users)} results")
        return safe_model_validate_list(NearbyUserResponse, users)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error finding nearby users: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch nearby users"
        )


@router.get("/admin/interests", response_model=CommunityInterestListResponse)
async def get_community_interests(
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_community_interest_read)
):
    """Interests expressed by members of the Admin's own community"""
    try:
        community, interests = await user_helpers.get_community_interests(db, current_user["user_id"])

        return CommunityInterestListResponse(
            community_id=str(community.id),
            community_name=community.name,
            interests=interests
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting community interests: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch community interests"
        )
