# ============================================================================
# FILE: app/services/follow_service.py
# ============================================================================
from typing import List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.core.exceptions import InvalidArgumentError, NotFoundError
from app.core.pagination import Pagination
from app.db.models.playlist import Playlist, PlaylistFollow
import logging

logger = logging.getLogger(__name__)

class FollowService:
    """Following other users' public playlists"""

    def follow(self, db: Session, playlist_id: int, user_id: int) -> bool:
        """
        Follow a public playlist.

        Returns False when the user already follows it (the call is idempotent).
        """
        playlist = db.query(Playlist).filter(Playlist.id == playlist_id).first()
        if not playlist or not playlist.is_public:
            raise NotFoundError("Playlist not found")
        if playlist.user_id == user_id:
            raise InvalidArgumentError("You cannot follow your own playlist")

        existing = db.query(PlaylistFollow).filter(
            PlaylistFollow.playlist_id == playlist_id,
            PlaylistFollow.user_id == user_id,
        ).first()
        if existing:
            return False

        try:
            db.add(PlaylistFollow(playlist_id=playlist_id, user_id=user_id))
            db.commit()
            logger.info(f"User {user_id} followed playlist {playlist_id}")
            return True
        except Exception as e:
            db.rollback()
            logger.error(f"Error following playlist: {e}")
            raise

    def unfollow(self, db: Session, playlist_id: int, user_id: int) -> None:
        follow = db.query(PlaylistFollow).filter(
            PlaylistFollow.playlist_id == playlist_id,
            PlaylistFollow.user_id == user_id,
        ).first()
        if not follow:
            raise NotFoundError("You are not following this playlist")

        try:
            db.delete(follow)
            db.commit()
            logger.info(f"User {user_id} unfollowed playlist {playlist_id}")
        except Exception as e:
            db.rollback()
            logger.error(f"Error unfollowing playlist: {e}")
            raise

    def list_followed(
        self, db: Session, user_id: int, pagination: Pagination, search: Optional[str] = None
    ) -> Tuple[List[PlaylistFollow], int]:
        """Follows of public playlists, most recent first"""
        query = (
            db.query(PlaylistFollow)
            .join(PlaylistFollow.playlist)
            .filter(PlaylistFollow.user_id == user_id, Playlist.is_public.is_(True))
        )
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Playlist.name.ilike(pattern), Playlist.description.ilike(pattern)))

        total = query.count()
        follows = (
            query.order_by(PlaylistFollow.created_at.desc(), PlaylistFollow.id.desc())
            .offset(pagination.skip)
            .limit(pagination.take)
            .all()
        )
        return follows, total

# Create singleton instance
follow_service = FollowService()
