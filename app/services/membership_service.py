# ============================================================================
# FILE: app/services/membership_service.py
# ============================================================================
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from app.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from app.db.models.catalog import Song
from app.db.models.playlist import PlaylistSong
from app.services.playlist_service import playlist_service
from app.services.stats_service import stats_service
import logging

logger = logging.getLogger(__name__)


def shift_orders(db: Session, playlist_id: int, start: int, delta: int) -> None:
    """
    Move every membership of ``playlist_id`` with ``order >= start`` by ``delta``.

    Rows are first parked on negative orders and then flipped back, so no two
    rows ever share an order, even mid-statement, and the (playlist, order)
    unique constraint is never tripped by the shift itself.
    """
    base = db.query(PlaylistSong).filter(PlaylistSong.playlist_id == playlist_id)
    base.filter(PlaylistSong.order >= start).update(
        {PlaylistSong.order: -(PlaylistSong.order + delta)},
        synchronize_session=False,
    )
    base.filter(PlaylistSong.order < 0).update(
        {PlaylistSong.order: -PlaylistSong.order},
        synchronize_session=False,
    )


def detach_membership(db: Session, membership: PlaylistSong) -> None:
    """Delete a membership row and close the gap it leaves. Does not commit."""
    playlist_id, removed_order = membership.playlist_id, membership.order
    db.delete(membership)
    db.flush()
    shift_orders(db, playlist_id, removed_order + 1, -1)


class PlaylistMembershipManager:
    """
    Ordered playlist membership.

    Keeps the orders of a playlist's songs dense (exactly 1..N) across
    insertions and removals. Only the playlist owner may change membership.
    Each operation is a single transaction: it either commits entirely or is
    rolled back with no renumbering visible.
    """

    def add_song(
        self,
        db: Session,
        playlist_id: int,
        user_id: int,
        song_id: int,
        order: Optional[int] = None,
    ) -> PlaylistSong:
        """
        Insert ``song_id`` at 1-based position ``order`` (append when omitted).

        Members at or after the target position move down by one.
        """
        playlist_service.get_owned_playlist(db, playlist_id, user_id, action="change its songs")

        if not db.query(Song.id).filter(Song.id == song_id).first():
            raise NotFoundError("Song not found")

        try:
            existing = db.query(PlaylistSong.id).filter(
                PlaylistSong.playlist_id == playlist_id,
                PlaylistSong.song_id == song_id,
            ).first()
            if existing:
                raise ConflictError("Song is already in the playlist")

            count = db.query(PlaylistSong).filter(PlaylistSong.playlist_id == playlist_id).count()
            target = order if order is not None else count + 1
            if target < 1 or target > count + 1:
                raise InvalidArgumentError(f"Position must be between 1 and {count + 1}")

            shift_orders(db, playlist_id, target, 1)
            membership = PlaylistSong(playlist_id=playlist_id, song_id=song_id, order=target)
            db.add(membership)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Concurrent change to playlist {playlist_id} while adding song {song_id}: {e.orig}")
            raise ConflictError("Playlist was modified concurrently, please retry")
        except Exception:
            db.rollback()
            raise

        logger.info(f"Song {song_id} added to playlist {playlist_id} at position {target}")
        stats_service.invalidate()
        return (
            db.query(PlaylistSong)
            .options(joinedload(PlaylistSong.song))
            .filter(PlaylistSong.id == membership.id)
            .one()
        )

    def remove_song(self, db: Session, playlist_id: int, song_id: int, user_id: int) -> None:
        """Remove ``song_id`` and move every later member up by one"""
        playlist_service.get_owned_playlist(db, playlist_id, user_id, action="change its songs")

        try:
            membership = db.query(PlaylistSong).filter(
                PlaylistSong.playlist_id == playlist_id,
                PlaylistSong.song_id == song_id,
            ).first()
            if not membership:
                raise NotFoundError("Song is not in the playlist")

            removed_order = membership.order
            detach_membership(db, membership)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Concurrent change to playlist {playlist_id} while removing song {song_id}: {e.orig}")
            raise ConflictError("Playlist was modified concurrently, please retry")
        except Exception:
            db.rollback()
            raise

        logger.info(f"Song {song_id} removed from playlist {playlist_id} (was position {removed_order})")
        stats_service.invalidate()

# Create singleton instance
membership_manager = PlaylistMembershipManager()
