from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from enum import Enum
from routers.users.schemas import GeoPoint, UserResponse


class UserRole(str, Enum):
    FARMER = "Farmer"
    ADMIN = "Admin"
    USER = "User"


# Request schemas
class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole
    phone_number: str = Field(..., min_length=1, max_length=20)
    location: GeoPoint
    community_name: Optional[str] = Field(None, max_length=100)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


# Response schemas
class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
    message: Optional[str] = None
