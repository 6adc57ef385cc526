from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from config import get_db
from models import User, Produce, Order
from routers.auth.auth import get_current_user
from routers.orders.schemas import OrderResponse
from dependencies.rbac import (
    require_produce_read, require_produce_write, require_produce_delete, require_order_read
)
from utils.response_helpers import (
    safe_model_validate, safe_model_validate_list, produce_to_dict, order_to_dict, location_to_geojson
)
from .schemas import ProduceCreate, ProduceUpdate, ProduceResponse, ProduceWithFarmerResponse
from .helpers import produce_helpers
from typing import List
import uuid
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/farmer", tags=["Farmer"])


# =================
# CATALOG
# =================

@router.get("", response_model=List[ProduceWithFarmerResponse])
async def list_produce(
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_produce_read)
):
    """All listings from every farmer, with the farmer's name, phone number and location"""
    try:
        result = await db.execute(
            select(Produce, User)
            .join(User, Produce.farmer_id == User.id)
            .order_by(Produce.created_at.desc())
        )

        produce_list = []
        for produce, farmer in result.all():
            produce_dict = produce_to_dict(produce)
            produce_dict.update({
                "farmer_name": farmer.name,
                "farmer_phone_number": farmer.phone_number,
                "farmer_location": location_to_geojson(farmer.longitude, farmer.latitude)
            })
            produce_list.append(produce_dict)

        return safe_model_validate_list(ProduceWithFarmerResponse, produce_list)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing produce: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch produce"
        )


@router.get("/mine", response_model=List[ProduceResponse])
async def list_my_produce(
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_produce_write)
):
    """The calling farmer's own listings"""
    result = await db.execute(
        select(Produce)
        .where(Produce.farmer_id == current_user["user_id"])
        .order_by(Produce.created_at.desc())
    )
    return safe_model_validate_list(ProduceResponse, [produce_to_dict(p) for p in result.scalars().all()])


@router.post("/create", response_model=ProduceResponse, status_code=status.HTTP_201_CREATED)
async def create_produce(
    produce_data: ProduceCreate,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_produce_write)
):
    """Create a listing owned by the calling farmer"""
    try:
        produce = Produce(
            farmer_id=current_user["user_id"],
            **produce_data.model_dump()
        )

        db.add(produce)
        await db.commit()
        await db.refresh(produce)

        logger.info(f"Farmer {current_user['user_id']} created produce {produce.id}")

        return safe_model_validate(ProduceResponse, produce_to_dict(produce))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating produce: {str(e)}")
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create produce"
        )


@router.put("/update/{produce_id}", response_model=ProduceResponse)
async def update_produce(
    produce_id: uuid.UUID,
    produce_update: ProduceUpdate,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_produce_write)
):
    """Partially update a listing (only by the owning farmer)"""
    try:
        produce = await produce_helpers.get_owned_produce(db, produce_id, current_user["user_id"])

        update_data = produce_update.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in update_data.items():
            setattr(produce, field, value)

        await db.commit()
        await db.refresh(produce)

        return safe_model_validate(ProduceResponse, produce_to_dict(produce))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating produce: {str(e)}")
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update produce"
        )


@router.delete("/delete/{produce_id}", response_model=ProduceResponse)
async def delete_produce(
    produce_id: uuid.UUID,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_produce_delete)
):
    """Delete a listing (only by the owning farmer) together with its interests and orders"""
    try:
        produce = await produce_helpers.get_owned_produce(db, produce_id, current_user["user_id"])
        deleted = safe_model_validate(ProduceResponse, produce_to_dict(produce))

        await produce_helpers.delete_with_dependents(db, produce)

        return deleted

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting produce: {str(e)}")
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete produce"
        )


# =================
# FARMER ORDERS
# =================

@router.get("/orders", response_model=List[OrderResponse])
async def get_farmer_orders(
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_order_read)
):
    """Orders placed against the caller's listings"""
    try:
        result = await db.execute(
            select(Order)
            .where(Order.farmer_id == current_user["user_id"])
            .order_by(Order.created_at.desc())
        )
        orders = result.scalars().all()

        return safe_model_validate_list(OrderResponse, [order_to_dict(order) for order in orders])

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting farmer orders: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch orders"
        )
