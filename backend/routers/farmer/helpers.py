from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_
from models import Produce, Interest, Order, Tracking
import uuid
import logging

logger = logging.getLogger(__name__)


class ProduceHelpers:
    """Ownership checks and cascading removal for produce listings"""

    async def get_owned_produce(
        self,
        db: AsyncSession,
        produce_id: uuid.UUID,
        farmer_id: uuid.UUID
    ) -> Produce:
        """
        The listing if the farmer owns it. A listing that does not exist and one owned
        by someone else produce the same 403.
        """
        result = await db.execute(
            select(Produce).where(
                and_(
                    Produce.id == produce_id,
                    Produce.farmer_id == farmer_id
                )
            )
        )
        produce = result.scalar_one_or_none()
        if not produce:
            logger.warning(f"Farmer {farmer_id} denied access to produce {produce_id}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Unauthorized or produce not found"
            )
        return produce

    async def delete_with_dependents(self, db: AsyncSession, produce: Produce):
        """Hard-delete a listing along with every interest, order and tracking row that references it"""
        produce_id = produce.id
        order_ids = select(Order.id).where(Order.produce_id == produce_id)

        await db.execute(delete(Tracking).where(Tracking.order_id.in_(order_ids)))
        orders = await db.execute(delete(Order).where(Order.produce_id == produce_id))
        interests = await db.execute(delete(Interest).where(Interest.product_id == produce_id))
        await db.execute(delete(Produce).where(Produce.id == produce_id))

        await db.commit()

        logger.info(
            f"Deleted produce {produce_id} with {orders.rowcount} orders and {interests.rowcount} interests"
        )


produce_helpers = ProduceHelpers()
