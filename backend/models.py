from sqlalchemy import (
    String,
    DateTime,
    Float,
    Integer,
    CheckConstraint,
    UniqueConstraint,
    Index,
    ForeignKey,
    Uuid,
    func
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, declarative_base
from typing import Optional, List
from datetime import datetime
import uuid

Base = declarative_base()


class User(Base):
    """
    Marketplace account. Every account has exactly one role:
    Farmer (sells produce), Admin (owns a community and places bulk orders)
    or User (belongs to a community and registers interest).
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('Farmer', 'Admin', 'User')", name="users_role_check"),
        CheckConstraint(
            "(role = 'User' AND community_id IS NOT NULL) OR (role != 'User' AND community_id IS NULL)",
            name="users_community_membership_check",
        ),
        # Serves the bounding-box prefilter of the nearby query
        Index("ix_users_location", "longitude", "latitude"),
        Index("ix_users_role", "role"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False)

    # Point location, [longitude, latitude] on the wire
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)

    community_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("communities.id", ondelete="CASCADE"),
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    community: Mapped[Optional["Community"]] = relationship(
        "Community",
        foreign_keys=[community_id],
        back_populates="members"
    )
    owned_community: Mapped[Optional["Community"]] = relationship(
        "Community",
        foreign_keys="Community.owner_user_id",
        back_populates="owner",
        uselist=False
    )
    produce: Mapped[List["Produce"]] = relationship("Produce", back_populates="farmer")


class Community(Base):
    """
    Named group of Users under one Admin. The name is what Users type at signup to join.
    """
    __tablename__ = "communities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    owner_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE", use_alter=True, name="communities_owner_user_id_fkey"),
        unique=True,
        nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    owner: Mapped["User"] = relationship(
        "User",
        foreign_keys=[owner_user_id],
        back_populates="owned_community"
    )
    members: Mapped[List["User"]] = relationship(
        "User",
        foreign_keys="User.community_id",
        back_populates="community"
    )


class Produce(Base):
    """
    A farmer's listing. Quantity is informational and only changes through the owner's updates.
    """
    __tablename__ = "produce"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="produce_quantity_check"),
        CheckConstraint("price > 0", name="produce_price_check"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(50), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(500))
    farmer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    farmer: Mapped["User"] = relationship("User", back_populates="produce")


class Order(Base):
    """
    Binding bulk order placed by an Admin for their community against one listing
    """
    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("community_id", "produce_id", name="unique_order_per_community_produce"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'shipped', 'delivered', 'cancelled')",
            name="orders_status_check",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    community_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("communities.id", ondelete="CASCADE"),
        nullable=False
    )
    produce_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("produce.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    # Copied from the listing owner when the order is placed
    farmer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    ordered_by: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    tracking: Mapped[Optional["Tracking"]] = relationship(
        "Tracking",
        back_populates="order",
        uselist=False,
        cascade="all, delete-orphan"
    )


class Interest(Base):
    """
    Non-binding quantity a User would like from a listing, visible to their community's Admin
    """
    __tablename__ = "interests"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="interests_quantity_check"),
        Index("ix_interests_user_product", "user_id", "product_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("produce.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class Tracking(Base):
    """
    Delivery status record, one per order
    """
    __tablename__ = "tracking"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("orders.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    order: Mapped["Order"] = relationship("Order", back_populates="tracking")
