# ============================================================================
# FILE: app/api/v1/endpoints/user.py
# ============================================================================
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.api.dependencies import require_current_user
from app.schemas.user import UserProfileUpdate, UserResponse
from app.services.user_service import user_service
from app.core.responses import success_response
from app.db.models.user import User

router = APIRouter()

@router.get("/me")
async def get_profile(current_user: User = Depends(require_current_user)):
    return success_response(UserResponse.model_validate(current_user))

@router.patch("/me")
async def update_profile(
    update_data: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Update the current user's display name or avatar
    Requires authentication
    """
    user = user_service.update_profile(db, current_user, update_data)
    return success_response(UserResponse.model_validate(user))
