from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime

from careermate.database import get_db
from careermate.models.user import User
from careermate.middleware.auth import generate_token, get_current_user
from careermate.middleware.rate_limit import limiter, REGISTER_LIMIT, LOGIN_LIMIT
from careermate.schemas.auth import RegisterRequest, LoginRequest, ProfileUpdate
from careermate.utils.logger import get_logger

router = APIRouter()
logger = get_logger("routes.auth")


@router.get("/health")
async def auth_health():
    return {
        "status": "OK",
        "message": "Authentication endpoints are working",
        "endpoints": [
            "POST /api/auth/register",
            "POST /api/auth/login",
            "GET /api/auth/profile",
            "PUT /api/auth/profile",
        ],
    }


@router.post("/register", status_code=201)
@limiter.limit(REGISTER_LIMIT)
async def register_user(
    request: Request,
    user_data: RegisterRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new user

    Rate limited per IP to prevent account creation spam.

    Returns:
        - token: session token for the Authorization header
        - user: public profile
    """
    email = user_data.email.lower().strip()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="User with this email already exists")

    user = User.create_user(
        email=email,
        password=user_data.password,
        first_name=user_data.firstName,
        last_name=user_data.lastName,
        profile=user_data.profile,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(f"[Auth] Registered user {user.id}")
    return {
        "message": "User registered successfully",
        "token": generate_token(user.id),
        "user": user.public_profile(),
    }


@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
async def login_user(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(User).where(User.email == credentials.email.lower().strip()))
    user = result.scalar_one_or_none()

    # Same answer for unknown email and wrong password
    if not user or not user.check_password(credentials.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="User account is disabled")

    user.last_login = datetime.utcnow()
    await db.commit()
    await db.refresh(user)

    return {
        "message": "Login successful",
        "token": generate_token(user.id),
        "user": user.public_profile(),
    }


@router.get("/profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get current authenticated user info"""
    return {"user": current_user.public_profile()}


@router.put("/profile")
async def update_profile(
    update: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update name fields; profile keys are merged into the stored profile"""
    if update.firstName:
        current_user.first_name = update.firstName
    if update.lastName:
        current_user.last_name = update.lastName
    if update.profile:
        # Reassign so the JSON column is flagged dirty
        current_user.profile = {**(current_user.profile or {}), **update.profile}

    await db.commit()
    await db.refresh(current_user)

    return {
        "message": "Profile updated successfully",
        "user": current_user.public_profile(),
    }
