from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
from config import get_db
from models import User, Community
from utils.response_helpers import safe_model_validate, user_to_dict
from routers.users.schemas import UserResponse
from .schemas import UserRegister, UserLogin, AuthResponse, UserRole
from .helpers import auth_helpers
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
):
    """Get current user from the bearer token"""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"}
        )

    token_user = auth_helpers.verify_token(credentials.credentials)

    # The account may have been deleted after the token was issued
    result = await db.execute(select(User).where(User.id == token_user["user_id"]))
    user = result.scalar_one_or_none()
    if not user:
        logger.warning(f"Token presented for unknown user {token_user['user_id']}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )

    current_user = {
        "user_id": user.id,
        "email": user.email,
        "role": user.role,
        "community_id": user.community_id
    }

    request.state.current_user = current_user
    return current_user


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    try:
        community_name = (user_data.community_name or "").strip()

        if user_data.role == UserRole.FARMER and community_name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Community name should not be provided for Farmers"
            )
        if user_data.role != UserRole.FARMER and not community_name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Community name is required"
            )

        email = user_data.email.lower()
        existing_user = await db.execute(select(User).where(User.email == email))
        if existing_user.scalar_one_or_none():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered"
            )

        community = None
        if user_data.role == UserRole.ADMIN:
            existing_community = await db.execute(
                select(Community).where(Community.name == community_name)
            )
            if existing_community.scalar_one_or_none():
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Community already exists"
                )
        elif user_data.role == UserRole.USER:
            result = await db.execute(
                select(Community).where(Community.name == community_name)
            )
            community = result.scalar_one_or_none()
            if not community:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Community not found"
                )

        new_user = User(
            name=user_data.name,
            email=email,
            password_hash=auth_helpers.hash_password(user_data.password),
            role=user_data.role.value,
            phone_number=user_data.phone_number,
            longitude=user_data.location.longitude,
            latitude=user_data.location.latitude,
            community_id=community.id if community else None
        )
        db.add(new_user)
        await db.flush()

        if user_data.role == UserRole.ADMIN:
            db.add(Community(name=community_name, owner_user_id=new_user.id))

        await db.commit()
        await db.refresh(new_user)

        logger.info(f"Registered {new_user.role} account {new_user.id}")

        access_token = auth_helpers.create_access_token(new_user.id, new_user.role)

        return AuthResponse(
            access_token=access_token,
            user=safe_model_validate(UserResponse, user_to_dict(new_user)),
            message="User created successfully"
        )

    except HTTPException:
        await db.rollback()
        raise
    except IntegrityError as e:
        # Lost a race with a concurrent signup for the same email or community name
        await db.rollback()
        logger.warning(f"Registration conflict: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email or community name already registered"
        )
    except Exception as e:
        await db.rollback()
        logger.error(f"Registration failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed"
        )


@router.post("/login", response_model=AuthResponse)
async def login(
    user_data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    try:
        result = await db.execute(select(User).where(User.email == user_data.email.lower()))
        user = result.scalar_one_or_none()

        if user is None or not auth_helpers.verify_password(user_data.password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        access_token = auth_helpers.create_access_token(user.id, user.role)

        return AuthResponse(
            access_token=access_token,
            user=safe_model_validate(UserResponse, user_to_dict(user))
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )
