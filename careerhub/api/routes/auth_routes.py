"""
Authentication Routes

POST /auth/register - Register new user
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info

Registrations and logins are published to the admin live feed.
"""

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text

from careerhub.db.postgres import get_db_session
from careerhub.core.auth import hash_password, verify_password, create_access_token, get_current_user
from careerhub.services.activity_hub import ActivityHub, get_activity_hub
from careerhub.schemas.schemas import (
    ActivityCategory, RegisterRequest, LoginRequest, TokenResponse, UserResponse, MessageResponse,
    Severity
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest, hub: ActivityHub = Depends(get_activity_hub)):
    """
    Register a new user account, then login to get an access token.
    """
    with get_db_session() as db:
        # Check email exists
        result = db.execute(
            text("SELECT user_id FROM users WHERE email = :email"),
            {"email": request.email}
        )
        if result.fetchone():
            raise HTTPException(status_code=400, detail="Email already registered")

        db.execute(
            text("""
                INSERT INTO users (email, password_hash, full_name, role)
                VALUES (:email, :password_hash, :full_name, :role)
            """),
            {
                "email": request.email,
                "password_hash": hash_password(request.password),
                "full_name": request.full_name,
                "role": request.role.value
            }
        )

    await hub.publish_activity(
        ActivityCategory.registration, request.full_name, f"Registered as {request.role.value}"
    )
    return MessageResponse(message=f"Registered successfully as {request.role.value}. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, hub: ActivityHub = Depends(get_activity_hub)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        result = db.execute(
            text("SELECT user_id, password_hash, full_name, role, is_active FROM users WHERE email = :email"),
            {"email": request.email}
        )
        user = result.fetchone()

    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    user_id, password_hash, full_name, role, is_active = user

    if not is_active:
        raise HTTPException(status_code=403, detail="Account deactivated")

    if not verify_password(request.password, password_hash):
        await hub.publish_activity(
            ActivityCategory.login, request.email, "Failed login attempt", Severity.warning
        )
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token(data={"sub": str(user_id), "role": role, "email": request.email})
    await hub.publish_activity(ActivityCategory.login, full_name, "Logged in")

    return TokenResponse(access_token=token, user_id=user_id, role=role)


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    with get_db_session() as db:
        result = db.execute(
            text("SELECT user_id, email, full_name, role, is_active, created_at FROM users WHERE user_id = :id"),
            {"id": user["user_id"]}
        )
        row = result.fetchone()

    return UserResponse(
        user_id=row[0], email=row[1], full_name=row[2], role=row[3], is_active=row[4], created_at=row[5]
    )
