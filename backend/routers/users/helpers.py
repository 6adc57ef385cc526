from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_
from config import NEARBY_RADIUS_METERS
from models import User, Community, Produce, Interest, Order, Tracking
from utils.geo import haversine_km, bounding_box
from utils.response_helpers import user_to_dict, interest_to_dict
from typing import List, Dict, Any, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


class UserHelpers:
    """Helper functions for user operations"""

    def __init__(self, radius_meters: int = NEARBY_RADIUS_METERS):
        self.radius_meters = radius_meters

    @property
    def radius_km(self) -> float:
        return self.radius_meters / 1000

    async def find_nearby_users(
        self,
        db: AsyncSession,
        center: Tuple[float, float],
        role: str
    ) -> List[Dict[str, Any]]:
        """
        Users with the given role within the fixed radius of center (lon, lat),
        nearest first, each carrying distance in meters and kilometers.
        """
        min_lon, min_lat, max_lon, max_lat = bounding_box(center, self.radius_km)

        # The rectangle is answered from ix_users_location; the circle is checked exactly below
        result = await db.execute(
            select(User).where(
                and_(
                    User.role == role,
                    User.longitude.between(min_lon, max_lon),
                    User.latitude.between(min_lat, max_lat)
                )
            )
        )
        candidates = result.scalars().all()

        nearby = []
        for user in candidates:
            distance_km = haversine_km(center, (user.longitude, user.latitude))
            if distance_km <= self.radius_km:
                nearby.append((distance_km, user))

        nearby.sort(key=lambda pair: pair[0])

        users = []
        for distance_km, user in nearby:
            user_dict = user_to_dict(user)
            user_dict["distance"] = distance_km * 1000
            user_dict["distance_km"] = distance_km
            users.append(user_dict)
        return users

    async def get_owned_community(self, db: AsyncSession, admin_id: uuid.UUID) -> Community:
        result = await db.execute(
            select(Community).where(Community.owner_user_id == admin_id)
        )
        community = result.scalar_one_or_none()
        if not community:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Community not found"
            )
        return community

    async def get_community_interests(
        self,
        db: AsyncSession,
        admin_id: uuid.UUID
    ) -> Tuple[Community, List[Dict[str, Any]]]:
        """
        Interests expressed by the members of the Admin's community, with the
        member's name/phone and the product's name/price/unit attached.
        """
        community = await self.get_owned_community(db, admin_id)

        member_ids = select(User.id).where(
            and_(
                User.role == "User",
                User.community_id == community.id
            )
        )

        result = await db.execute(
            select(Interest, User, Produce)
            .join(User, Interest.user_id == User.id)
            .outerjoin(Produce, Interest.product_id == Produce.id)
            .where(Interest.user_id.in_(member_ids))
            .order_by(Interest.created_at.desc())
        )

        interests = []
        for interest, member, product in result.all():
            interest_dict = interest_to_dict(interest)
            interest_dict.update({
                "user_name": member.name,
                "user_phone_number": member.phone_number,
                "product_name": product.name if product else None,
                "product_price": product.price if product else None,
                "product_unit": product.unit if product else None
            })
            interests.append(interest_dict)

        return community, interests

    async def delete_account(self, db: AsyncSession, user: User):
        """
        Remove an account together with everything that only makes sense while it exists.
        An Admin whose community still has members cannot be removed.
        """
        if user.role == "Admin":
            result = await db.execute(
                select(Community).where(Community.owner_user_id == user.id)
            )
            community = result.scalar_one_or_none()
            if community:
                members = await db.execute(
                    select(User.id).where(User.community_id == community.id).limit(1)
                )
                if members.first():
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail="Community still has members"
                    )
                order_ids = select(Order.id).where(Order.community_id == community.id)
                await db.execute(delete(Tracking).where(Tracking.order_id.in_(order_ids)))
                await db.execute(delete(Order).where(Order.community_id == community.id))
                await db.execute(delete(Community).where(Community.id == community.id))

        elif user.role == "Farmer":
            produce_ids = select(Produce.id).where(Produce.farmer_id == user.id)
            order_ids = select(Order.id).where(Order.produce_id.in_(produce_ids))
            await db.execute(delete(Tracking).where(Tracking.order_id.in_(order_ids)))
            await db.execute(delete(Order).where(Order.produce_id.in_(produce_ids)))
            await db.execute(delete(Interest).where(Interest.product_id.in_(produce_ids)))
            await db.execute(delete(Produce).where(Produce.farmer_id == user.id))

        else:
            await db.execute(delete(Interest).where(Interest.user_id == user.id))

        await db.execute(delete(User).where(User.id == user.id))
        await db.commit()

        logger.info(f"Deleted {user.role} account {user.id}")


user_helpers = UserHelpers()
