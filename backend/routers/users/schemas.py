from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime


class GeoPoint(BaseModel):
    """GeoJSON Point, coordinates are [longitude, latitude]"""
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2)

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v):
        longitude, latitude = v
        if not -180 <= longitude <= 180:
            raise ValueError("longitude must be between -180 and 180")
        if not -90 <= latitude <= 90:
            raise ValueError("latitude must be between -90 and 90")
        return v

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str
    phone_number: str
    location: GeoPoint
    community_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone_number: Optional[str] = Field(None, min_length=1, max_length=20)
    location: Optional[GeoPoint] = None
    password: Optional[str] = Field(None, min_length=6)


class NearbyUserResponse(BaseModel):
    id: str
    name: str
    role: str
    phone_number: str
    location: GeoPoint
    community_id: Optional[str] = None
    distance: float = Field(..., description="Distance from the search center in meters")
    distance_km: float


class CommunityInterestResponse(BaseModel):
    id: str
    user_id: str
    product_id: str
    quantity: int
    user_name: Optional[str] = None
    user_phone_number: Optional[str] = None
    product_name: Optional[str] = None
    product_price: Optional[float] = None
    product_unit: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CommunityInterestListResponse(BaseModel):
    community_id: str
    community_name: str
    interests: List[CommunityInterestResponse]
