from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from config import get_db
from models import Order, Produce
from routers.auth.auth import get_current_user
from dependencies.rbac import (
    require_order_read, require_order_write, require_order_status_write,
    require_tracking_read, require_tracking_write
)
from utils.response_helpers import safe_model_validate, safe_model_validate_list, order_to_dict
from .schemas import (
    OrderCreate, OrderStatusUpdate, TrackingUpdate,
    OrderResponse, OrderWithDetailsResponse, OrderWithTrackingResponse, TrackingResponse
)
from .helpers import order_helpers
from typing import List
import uuid
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/order", tags=["Orders"])


def _tracking_to_dict(tracking) -> dict:
    return {
        "id": str(tracking.id),
        "order_id": str(tracking.order_id),
        "status": tracking.status,
        "updated_at": tracking.updated_at
    }


@router.get("", response_model=List[OrderWithDetailsResponse])
async def get_orders(
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_order_read)
):
    """
    Get all orders with the ordered produce's name
    """
    try:
        result = await db.execute(
            select(Order, Produce.name)
            .outerjoin(Produce, Order.produce_id == Produce.id)
            .order_by(Order.created_at.desc())
        )

        orders_with_details = []
        for order, produce_name in result.all():
            order_dict = order_to_dict(order)
            order_dict["produce_name"] = produce_name
            orders_with_details.append(order_dict)

        return safe_model_validate_list(OrderWithDetailsResponse, orders_with_details)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting orders: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve orders"
        )


@router.put("/status", response_model=OrderResponse)
async def update_order_status(
    status_update: OrderStatusUpdate,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_order_status_write)
):
    """
    Set an order's status. Any authenticated account may call this.
    """
    try:
        order, _tracking = await order_helpers.update_status(db, status_update.order_id, status_update.status)
        return safe_model_validate(OrderResponse, order_to_dict(order))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating order status: {str(e)}")
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update order status"
        )


@router.get("/tracking/{order_id}", response_model=TrackingResponse)
async def get_tracking(
    order_id: uuid.UUID,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_tracking_read)
):
    """Get the tracking record of an order"""
    tracking = await order_helpers.get_tracking(db, order_id)
    return safe_model_validate(TrackingResponse, _tracking_to_dict(tracking))


@router.put("/tracking", response_model=TrackingResponse)
async def update_tracking(
    tracking_update: TrackingUpdate,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_tracking_write)
):
    """Update an order's tracking status; the order status follows"""
    try:
        _order, tracking = await order_helpers.update_status(db, tracking_update.order_id, tracking_update.status)
        return safe_model_validate(TrackingResponse, _tracking_to_dict(tracking))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating tracking: {str(e)}")
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update tracking"
        )


@router.post("/{produce_id}", response_model=OrderWithTrackingResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    produce_id: uuid.UUID,
    order_data: OrderCreate,
    current_user = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: bool = Depends(require_order_write)
):
    """
    Place the Admin's community order for a listing
    """
    try:
        order, tracking = await order_helpers.create_order(
            db, current_user["user_id"], produce_id, order_data.quantity
        )

        order_dict = order_to_dict(order)
        order_dict["tracking"] = _tracking_to_dict(tracking)
        return safe_model_validate(OrderWithTrackingResponse, order_dict)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating order: {str(e)}")
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create order"
        )
