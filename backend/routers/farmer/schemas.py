from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from routers.users.schemas import GeoPoint


class ProduceCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(..., ge=0)
    price: float = Field(..., gt=0)
    unit: str = Field(..., min_length=1, max_length=50)
    image_url: Optional[str] = Field(None, max_length=500, alias="imageURL")


class ProduceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    quantity: Optional[int] = Field(None, ge=0)
    price: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=50)


class ProduceResponse(BaseModel):
    id: str
    name: str
    quantity: int
    price: float
    unit: str
    image_url: Optional[str] = None
    farmer_id: str
    created_at: datetime
    updated_at: datetime


class ProduceWithFarmerResponse(ProduceResponse):
    farmer_name: str
    farmer_phone_number: Optional[str] = None
    farmer_location: GeoPoint
