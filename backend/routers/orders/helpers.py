from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, func
from models import Produce, Order, Tracking
from routers.users.helpers import user_helpers
from .schemas import OrderStatus, ALLOWED_TRANSITIONS
from typing import Tuple
import config
import uuid
import logging

logger = logging.getLogger(__name__)


class OrderHelpers:
    """Order placement and status bookkeeping"""

    async def create_order(
        self,
        db: AsyncSession,
        admin_id: uuid.UUID,
        produce_id: uuid.UUID,
        quantity: int
    ) -> Tuple[Order, Tracking]:
        """
        Place the community's single order for a listing. The order and its tracking row
        are committed together; a second order for the same listing is rejected by the
        unique constraint on (community_id, produce_id).
        """
        community = await user_helpers.get_owned_community(db, admin_id)

        result = await db.execute(select(Produce).where(Produce.id == produce_id))
        produce = result.scalar_one_or_none()
        if not produce:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Produce not found"
            )

        community_id = community.id
        order_id = uuid.uuid4()
        order = Order(
            id=order_id,
            community_id=community_id,
            produce_id=produce.id,
            farmer_id=produce.farmer_id,
            ordered_by=admin_id,
            quantity=quantity,
            status=OrderStatus.PENDING.value
        )
        tracking = Tracking(order_id=order_id, status=OrderStatus.PENDING.value)

        db.add(order)
        db.add(tracking)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning(f"Duplicate order for community {community_id} and produce {produce_id}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Order already exists"
            )

        await db.refresh(order)
        await db.refresh(tracking)

        logger.info(f"Community {community_id} ordered {quantity} of produce {produce_id} (order {order_id})")
        return order, tracking

    async def get_order(self, db: AsyncSession, order_id: uuid.UUID) -> Order:
        result = await db.execute(select(Order).where(Order.id == order_id))
        order = result.scalar_one_or_none()
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found"
            )
        return order

    async def get_tracking(self, db: AsyncSession, order_id: uuid.UUID) -> Tracking:
        result = await db.execute(select(Tracking).where(Tracking.order_id == order_id))
        tracking = result.scalar_one_or_none()
        if not tracking:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Tracking info not found"
            )
        return tracking

    def check_transition(self, current: str, new_status: OrderStatus):
        """Reject illegal moves when ENFORCE_ORDER_TRANSITIONS is on; otherwise every status is accepted"""
        if not config.ENFORCE_ORDER_TRANSITIONS:
            return
        current_status = OrderStatus(current)
        if new_status == current_status:
            return
        if new_status not in ALLOWED_TRANSITIONS[current_status]:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Cannot change order status from {current_status.value} to {new_status.value}"
            )

    async def update_status(
        self,
        db: AsyncSession,
        order_id: uuid.UUID,
        new_status: OrderStatus
    ) -> Tuple[Order, Tracking]:
        """Overwrite the order status and bring its tracking row along, creating it if missing"""
        order = await self.get_order(db, order_id)
        self.check_transition(order.status, new_status)

        result = await db.execute(select(Tracking).where(Tracking.order_id == order.id))
        tracking = result.scalar_one_or_none()
        if tracking is None:
            tracking = Tracking(order_id=order.id)
            db.add(tracking)

        old_status = order.status
        order.status = new_status.value
        tracking.status = new_status.value
        tracking.updated_at = func.now()

        await db.commit()
        await db.refresh(order)
        await db.refresh(tracking)

        logger.info(f"Order {order.id} status {old_status} -> {new_status.value}")
        return order, tracking


order_helpers = OrderHelpers()
