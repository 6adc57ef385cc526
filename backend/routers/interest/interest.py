from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from config import get_db
from models import User, Produce, Interest
from routers.auth.auth import get_current_user
from dependencies.rbac import require_interest_read, require_interest_write, require_own_interest_read
from utils.response_helpers import safe_model_validate, safe_model_validate_list, interest_to_dict
from .schemas import InterestCreate, InterestResponse, InterestWithDetailsResponse
from typing import List
import config
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interest", tags=["Interest"])


@router.post("", response_model=InterestResponse, status_code=status.HTTP_201_CREATED)
async def create_interest(
    interest_data: InterestCreate,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_interest_write)
):
    """
    Register a non-binding interest in a listing. Stock is not checked or reserved.
    """
    try:
        result = await db.execute(select(Produce.id).where(Produce.id == interest_data.product_id))
        if result.scalar_one_or_none() is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Produce not found"
            )

        if not config.ALLOW_DUPLICATE_INTERESTS:
            existing = await db.execute(
                select(Interest.id).where(
                    and_(
                        Interest.user_id == current_user["user_id"],
                        Interest.product_id == interest_data.product_id
                    )
                )
            )
            if existing.first():
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Interest already registered for this product"
                )

        interest = Interest(
            user_id=current_user["user_id"],
            product_id=interest_data.product_id,
            quantity=interest_data.quantity
        )

        db.add(interest)
        await db.commit()
        await db.refresh(interest)

        logger.info(f"User {current_user['user_id']} registered interest {interest.id}")

        return safe_model_validate(InterestResponse, interest_to_dict(interest))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating interest: {str(e)}")
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create interest"
        )


@router.get("", response_model=List[InterestWithDetailsResponse])
async def get_all_interests(
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_interest_read)
):
    """Every interest across all communities, with user and product names"""
    try:
        result = await db.execute(
            select(Interest, User.name, Produce.name)
            .outerjoin(User, Interest.user_id == User.id)
            .outerjoin(Produce, Interest.product_id == Produce.id)
            .order_by(Interest.created_at.desc())
        )

        interests = []
        for interest, user_name, product_name in result.all():
            interest_dict = interest_to_dict(interest)
            interest_dict["user_name"] = user_name
            interest_dict["product_name"] = product_name
            interests.append(interest_dict)

        return safe_model_validate_list(InterestWithDetailsResponse, interests)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching interests: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch interests"
        )


@router.get("/me", response_model=List[InterestResponse])
async def get_my_interests(
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_own_interest_read)
):
    """The caller's own interests"""
    result = await db.execute(
        select(Interest)
        .where(Interest.user_id == current_user["user_id"])
        .order_by(Interest.created_at.desc())
    )
    interests = result.scalars().all()
    return safe_model_validate_list(InterestResponse, [interest_to_dict(i) for i in interests])
