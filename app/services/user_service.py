# ============================================================================
# FILE: app/services/user_service.py
# ============================================================================
from typing import List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError, UnauthorizedError
from app.core.pagination import Pagination
from app.db.models.user import User, UserRole
from app.schemas.user import AdminUserCreate, AdminUserUpdate, UserCreate, UserLogin, UserProfileUpdate
from app.core.security import get_password_hash, verify_password
from app.services.stats_service import stats_service
import logging

logger = logging.getLogger(__name__)

class UserService:
    """Service layer for user operations"""

    def create_user(self, db: Session, user_data: UserCreate) -> User:
        """
        Create a new user account, rejecting a taken email or username.
        Admin-created accounts may carry a role; registrations are USER.
        """
        role = user_data.role if isinstance(user_data, AdminUserCreate) else UserRole.USER
        if self.get_user_by_identifier(db, user_data.email, user_data.username):
            raise ConflictError("Email or username is already registered")

        try:
            user = User(
                email=user_data.email,
                username=user_data.username,
                name=user_data.name,
                avatar=user_data.avatar,
                password_hash=get_password_hash(user_data.password),
                role=role,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info(f"User created: {user.username}")
            stats_service.invalidate()
            return user
        except Exception as e:
            db.rollback()
            logger.error(f"Error creating user: {e}")
            raise

    def get_user(self, db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    def get_user_by_identifier(self, db: Session, *identifiers: str) -> Optional[User]:
        """Get the first user whose email or username matches any identifier"""
        return db.query(User).filter(
            or_(User.email.in_(identifiers), User.username.in_(identifiers))
        ).first()

    def authenticate_user(self, db: Session, credentials: UserLogin) -> User:
        """Authenticate with an email or username and a password"""
        user = self.get_user_by_identifier(db, credentials.identifier)
        if not user or not verify_password(credentials.password, user.password_hash):
            logger.info(f"Failed login for {credentials.identifier}")
            raise UnauthorizedError("Incorrect account or password")
        return user

    def update_profile(self, db: Session, user: User, update_data: UserProfileUpdate) -> User:
        changes = update_data.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidArgumentError("Request body must not be empty")

        try:
            for field, value in changes.items():
                setattr(user, field, value)
            db.commit()
            db.refresh(user)
            logger.info(f"Profile updated: {user.username}")
            return user
        except Exception as e:
            db.rollback()
            logger.error(f"Error updating profile: {e}")
            raise

    def list_users(
        self, db: Session, pagination: Pagination, search: Optional[str] = None, role: Optional[UserRole] = None
    ) -> Tuple[List[User], int]:
        query = db.query(User)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                User.username.ilike(pattern),
                User.email.ilike(pattern),
                User.name.ilike(pattern),
            ))
        if role:
            query = query.filter(User.role == role)

        total = query.count()
        users = query.order_by(User.created_at.desc(), User.id.desc()).offset(pagination.skip).limit(pagination.take).all()
        return users, total

    def get_existing_user(self, db: Session, user_id: int) -> User:
        user = self.get_user(db, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_user(self, db: Session, user_id: int, update_data: AdminUserUpdate, acting_user: User) -> User:
        """Admin edit of any account. Email and username stay unique; admins cannot demote themselves."""
        changes = update_data.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidArgumentError("Request body must not be empty")

        user = self.get_existing_user(db, user_id)
        for field in ("email", "username"):
            value = changes.get(field)
            if value and value != getattr(user, field):
                taken = db.query(User.id).filter(getattr(User, field) == value, User.id != user.id).first()
                if taken:
                    raise ConflictError(f"{field.capitalize()} is already in use")
        role = changes.get("role")
        if role and user.id == acting_user.id and role != UserRole.ADMIN:
            raise InvalidArgumentError("You cannot remove your own admin role")

        try:
            password = changes.pop("password", None)
            if password:
                user.password_hash = get_password_hash(password)
            for field, value in changes.items():
                if field in ("email", "username", "role") and value is None:
                    continue
                setattr(user, field, value)
            db.commit()
            db.refresh(user)
            logger.info(f"User {user.username} updated by {acting_user.username}")
            return user
        except Exception as e:
            db.rollback()
            logger.error(f"Error updating user: {e}")
            raise

    def delete_user(self, db: Session, user_id: int, acting_user: User) -> None:
        """Delete an account together with its playlists and follows"""
        user = self.get_existing_user(db, user_id)
        if user.id == acting_user.id:
            raise InvalidArgumentError("You cannot delete your own account")

        try:
            db.delete(user)
            db.commit()
            logger.info(f"User {user_id} deleted by {acting_user.username}")
            stats_service.invalidate()
        except Exception as e:
            db.rollback()
            logger.error(f"Error deleting user: {e}")
            raise

    def set_role(self, db: Session, user_id: int, role: UserRole, acting_user: User) -> User:
        """Change a user's role. Admins cannot demote themselves."""
        user = self.get_existing_user(db, user_id)
        if user.id == acting_user.id and role != UserRole.ADMIN:
            raise InvalidArgumentError("You cannot remove your own admin role")

        try:
            user.role = role
            db.commit()
            db.refresh(user)
            logger.info(f"User {user.username} role set to {role.value} by {acting_user.username}")
            return user
        except Exception as e:
            db.rollback()
            logger.error(f"Error updating role: {e}")
            raise

# Create singleton instance
user_service = UserService()
