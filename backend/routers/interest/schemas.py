from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import uuid


class InterestCreate(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(gt=0)


class InterestResponse(BaseModel):
    id: str
    user_id: str
    product_id: str
    quantity: int
    created_at: datetime
    updated_at: datetime


class InterestWithDetailsResponse(InterestResponse):
    user_name: Optional[str] = None
    product_name: Optional[str] = None
