from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum
import uuid


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Only consulted when ENFORCE_ORDER_TRANSITIONS is on
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


class OrderCreate(BaseModel):
    quantity: int = Field(gt=0)


class OrderStatusUpdate(BaseModel):
    order_id: uuid.UUID
    status: OrderStatus


class TrackingUpdate(BaseModel):
    order_id: uuid.UUID
    status: OrderStatus


class TrackingResponse(BaseModel):
    id: str
    order_id: str
    status: str
    updated_at: datetime


class OrderResponse(BaseModel):
    id: str
    community_id: str
    produce_id: str
    farmer_id: str
    ordered_by: str
    quantity: int
    status: str
    created_at: datetime
    updated_at: datetime


class OrderWithDetailsResponse(OrderResponse):
    produce_name: Optional[str] = None


class OrderWithTrackingResponse(OrderResponse):
    tracking: TrackingResponse
