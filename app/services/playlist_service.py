# ============================================================================
# FILE: app/services/playlist_service.py
# ============================================================================
from typing import List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.pagination import Pagination
from app.core.exceptions import ForbiddenError, InvalidArgumentError, NotFoundError
from app.db.models.catalog import Song, Tag
from app.db.models.playlist import Playlist, PlaylistFollow, PlaylistSong, PlaylistType
from app.db.models.user import User
from app.schemas.playlist import PlaylistCreate, PlaylistUpdate
from app.services.stats_service import stats_service
import logging

logger = logging.getLogger(__name__)

FAVORITES_NAME = "Liked Songs"
FAVORITES_DESCRIPTION = "Songs I like"

class PlaylistService:
    """Service layer for playlist operations"""

    def create_playlist(self, db: Session, user_id: int, playlist_data: PlaylistCreate) -> Playlist:
        """Create a new playlist for a user (public unless stated otherwise)"""
        try:
            playlist = Playlist(
                user_id=user_id,
                name=playlist_data.name,
                description=playlist_data.description,
                cover_url=playlist_data.cover_url,
                is_public=True if playlist_data.is_public is None else playlist_data.is_public,
            )
            db.add(playlist)
            db.commit()
            db.refresh(playlist)
            logger.info(f"Playlist created: {playlist.id} for user {user_id}")
            stats_service.invalidate()
            return playlist
        except Exception as e:
            db.rollback()
            logger.error(f"Error creating playlist: {e}")
            raise

    def list_public_playlists(
        self,
        db: Session,
        pagination: Pagination,
        search: Optional[str] = None,
        tag_id: Optional[int] = None,
    ) -> Tuple[List[Playlist], int]:
        """
        Public playlists, newest first, optionally matching name or owner
        username and holding at least one song with ``tag_id``
        """
        query = db.query(Playlist).join(Playlist.user).filter(Playlist.is_public.is_(True))
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Playlist.name.ilike(pattern), User.username.ilike(pattern)))
        if tag_id:
            query = query.filter(Playlist.songs.any(
                PlaylistSong.song.has(Song.tags.any(Tag.id == tag_id))
            ))

        total = query.count()
        items = (
            query.order_by(Playlist.created_at.desc(), Playlist.id.desc())
            .offset(pagination.skip)
            .limit(pagination.take)
            .all()
        )
        return items, total

    def get_user_playlists(self, db: Session, user_id: int) -> List[Playlist]:
        """Get all playlists for a user"""
        return (
            db.query(Playlist)
            .filter(Playlist.user_id == user_id)
            .order_by(Playlist.created_at.desc(), Playlist.id.desc())
            .all()
        )

    def get_playlist(self, db: Session, playlist_id: int, viewer_id: Optional[int] = None) -> Playlist:
        """
        Get a playlist visible to ``viewer_id``.

        Private playlists only exist for their owner; anybody else gets the
        same NotFound as for a missing id.
        """
        playlist = db.query(Playlist).filter(Playlist.id == playlist_id).first()
        if not playlist or (not playlist.is_public and playlist.user_id != viewer_id):
            raise NotFoundError("Playlist not found")
        return playlist

    def get_owned_playlist(self, db: Session, playlist_id: int, user_id: int, action: str = "edit it") -> Playlist:
        """Get a playlist and verify that ``user_id`` owns it"""
        playlist = db.query(Playlist).filter(Playlist.id == playlist_id).first()
        if not playlist:
            raise NotFoundError("Playlist not found")
        if playlist.user_id != user_id:
            raise ForbiddenError(f"Only the playlist owner can {action}")
        return playlist

    def update_playlist(self, db: Session, playlist_id: int, user_id: int, update_data: PlaylistUpdate) -> Playlist:
        """Update playlist details"""
        changes = update_data.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidArgumentError("Request body must not be empty")

        playlist = self.get_owned_playlist(db, playlist_id, user_id)
        try:
            for field, value in changes.items():
                if field in ("name", "is_public") and value is None:
                    continue
                setattr(playlist, field, value)

            db.commit()
            db.refresh(playlist)
            logger.info(f"Playlist updated: {playlist_id}")
            return playlist
        except Exception as e:
            db.rollback()
            logger.error(f"Error updating playlist: {e}")
            raise

    def delete_playlist(self, db: Session, playlist_id: int, user_id: int) -> None:
        """Delete a playlist along with its memberships and follows"""
        playlist = self.get_owned_playlist(db, playlist_id, user_id, action="delete it")

        try:
            db.delete(playlist)
            db.commit()
            logger.info(f"Playlist deleted: {playlist_id}")
            stats_service.invalidate()
        except Exception as e:
            db.rollback()
            logger.error(f"Error deleting playlist: {e}")
            raise

    def _find_favorites(self, db: Session, user_id: int) -> Optional[Playlist]:
        return db.query(Playlist).filter(
            Playlist.user_id == user_id,
            Playlist.type == PlaylistType.FAVORITES,
        ).first()

    def get_or_create_favorites(self, db: Session, user_id: int) -> Playlist:
        """
        Return the user's favorites playlist, creating it on first access.

        A concurrent first access that loses the insert race gets the
        playlist the winner created.
        """
        playlist = self._find_favorites(db, user_id)
        if playlist:
            return playlist

        try:
            playlist = Playlist(
                user_id=user_id,
                name=FAVORITES_NAME,
                description=FAVORITES_DESCRIPTION,
                is_public=False,
                type=PlaylistType.FAVORITES,
            )
            db.add(playlist)
            db.commit()
            db.refresh(playlist)
        except IntegrityError:
            db.rollback()
            logger.info(f"Favorites playlist for user {user_id} created concurrently, reusing it")
            playlist = self._find_favorites(db, user_id)
            if not playlist:
                raise
            return playlist
        except Exception as e:
            db.rollback()
            logger.error(f"Error creating favorites playlist: {e}")
            raise

        logger.info(f"Favorites playlist created: {playlist.id} for user {user_id}")
        stats_service.invalidate()
        return playlist

    def is_following(self, db: Session, playlist_id: int, user_id: Optional[int]) -> bool:
        if user_id is None:
            return False
        return db.query(PlaylistFollow.id).filter(
            PlaylistFollow.playlist_id == playlist_id,
            PlaylistFollow.user_id == user_id,
        ).first() is not None

# Create singleton instance
playlist_service = PlaylistService()
