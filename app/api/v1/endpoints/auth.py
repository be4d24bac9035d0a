# ============================================================================
# FILE: app/api/v1/endpoints/auth.py
# ============================================================================
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.api.dependencies import require_current_user
from app.schemas.user import UserCreate, UserLogin, UserResponse
from app.services.user_service import user_service
from app.core.responses import message_response, success_response
from app.core.security import create_access_token
from app.config import settings
from app.db.models.user import User
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

def attach_auth_cookie(response: JSONResponse, user: User) -> JSONResponse:
    """Issue a token for ``user`` and store it in an httpOnly cookie"""
    token = create_access_token(data={"sub": user.id, "role": user.role.value})
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
        path="/",
    )
    return response

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """
    Register a new user account and sign it in
    """
    user = user_service.create_user(db, user_data)
    response = success_response(UserResponse.model_validate(user), status.HTTP_201_CREATED)
    return attach_auth_cookie(response, user)

@router.post("/login")
async def login(
    credentials: UserLogin,
    db: Session = Depends(get_db)
):
    """
    Login with email or username and password
    Sets the auth cookie
    """
    user = user_service.authenticate_user(db, credentials)
    logger.info(f"User logged in: {user.username}")
    return attach_auth_cookie(success_response(UserResponse.model_validate(user)), user)

@router.post("/logout")
async def logout():
    """Clear the auth cookie"""
    response = message_response("Logged out")
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )
    return response

@router.get("/me")
async def get_current_user_info(
    current_user: User = Depends(require_current_user)
):
    """
    Get current user information
    Requires authentication
    """
    return success_response(UserResponse.model_validate(current_user))
