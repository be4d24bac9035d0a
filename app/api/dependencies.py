# ============================================================================
# FILE: app/api/dependencies.py
# ============================================================================
from fastapi import Depends, HTTPException, Query, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from app.config import settings
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.core.pagination import Pagination, parse_pagination
from app.db.session import get_db
from app.core.security import decode_access_token
from app.db.models.user import User, UserRole
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Get current authenticated user from the auth cookie (or a Bearer token)
    Returns None if no token or invalid token (allows anonymous access)
    """
    token = request.cookies.get(settings.AUTH_COOKIE_NAME) or token
    if not token:
        return None

    try:
        payload = decode_access_token(token)
        user_id = int(payload["sub"])
    except (HTTPException, ValueError) as e:
        logger.warning(f"Invalid auth token: {e}")
        return None

    return db.query(User).filter(User.id == user_id).first()

def require_current_user(
    current_user: Optional[User] = Depends(get_current_user)
) -> User:
    """
    Require authenticated user (raises 401 if not authenticated)
    Use this dependency for protected endpoints
    """
    if current_user is None:
        raise UnauthorizedError("Not authenticated")
    return current_user

def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Build a dependency that only lets users with one of ``roles`` through"""

    def dependency(current_user: User = Depends(require_current_user)) -> User:
        if current_user.role not in roles:
            raise ForbiddenError("Insufficient permissions")
        return current_user

    return dependency

require_manager = require_roles(UserRole.MANAGER, UserRole.ADMIN)
require_admin = require_roles(UserRole.ADMIN)

def get_pagination(
    page: Optional[int] = Query(None),
    page_size: Optional[int] = Query(None, alias="pageSize"),
    limit: Optional[int] = Query(None),
) -> Pagination:
    """Pagination query parameters (``limit`` is accepted as a pageSize alias)"""
    return parse_pagination(page, page_size or limit)

def get_search(search: Optional[str] = Query(None)) -> Optional[str]:
    search = (search or "").strip()
    return search or None
