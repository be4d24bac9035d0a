# ============================================================================
# FILE: app/api/v1/endpoints/playlist.py
# ============================================================================
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional
from app.db.session import get_db
from app.api.dependencies import get_current_user, get_pagination, get_search, require_current_user
from app.core.pagination import Pagination
from app.core.responses import message_response, success_response
from app.schemas.playlist import (
    FavoriteSongAdd,
    FollowStatus,
    PlaylistCreate,
    PlaylistDetailResponse,
    PlaylistResponse,
    PlaylistSongAdd,
    PlaylistSongResponse,
    PlaylistUpdate,
)
from app.services.follow_service import follow_service
from app.services.membership_service import membership_manager
from app.services.playlist_service import playlist_service
from app.db.models.playlist import Playlist
from app.db.models.user import User
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

def playlist_detail(db: Session, playlist: Playlist, viewer: Optional[User]) -> PlaylistDetailResponse:
    detail = PlaylistDetailResponse.model_validate(playlist)
    is_following = playlist_service.is_following(db, playlist.id, viewer.id if viewer else None)
    return detail.model_copy(update={"is_following": is_following})

@router.get("")
async def list_public_playlists(
    pagination: Pagination = Depends(get_pagination),
    search: Optional[str] = Depends(get_search),
    db: Session = Depends(get_db),
):
    """
    Browse public playlists, newest first
    Search matches playlist name or creator username
    """
    playlists, total = playlist_service.list_public_playlists(db, pagination, search)
    items = [PlaylistResponse.model_validate(p) for p in playlists]
    return success_response(pagination.page_of(items, total))

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_playlist(
    playlist_data: PlaylistCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Create a new playlist
    Requires authentication
    """
    playlist = playlist_service.create_playlist(db, current_user.id, playlist_data)
    return success_response(PlaylistDetailResponse.model_validate(playlist), status.HTTP_201_CREATED)

@router.get("/my")
async def get_my_playlists(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Get all playlists for the current user
    Requires authentication
    """
    playlists = playlist_service.get_user_playlists(db, current_user.id)
    return success_response([PlaylistResponse.model_validate(p) for p in playlists])

@router.get("/followed")
async def get_followed_playlists(
    pagination: Pagination = Depends(get_pagination),
    search: Optional[str] = Depends(get_search),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Public playlists the current user follows, most recently followed first
    """
    follows, total = follow_service.list_followed(db, current_user.id, pagination, search)
    items = []
    for follow in follows:
        item = PlaylistResponse.model_validate(follow.playlist).model_dump(by_alias=True)
        item.update({"isFollowing": True, "followedAt": follow.created_at})
        items.append(item)
    return success_response(pagination.page_of(items, total))

@router.get("/favorites")
async def get_favorites(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    The current user's liked songs playlist (created on first access)
    """
    playlist = playlist_service.get_or_create_favorites(db, current_user.id)
    return success_response(playlist_detail(db, playlist, current_user))

@router.post("/favorites/songs", status_code=status.HTTP_201_CREATED)
async def add_favorite_song(
    song_data: FavoriteSongAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """Like a song by appending it to the favorites playlist"""
    playlist = playlist_service.get_or_create_favorites(db, current_user.id)
    membership = membership_manager.add_song(db, playlist.id, current_user.id, song_data.song_id)
    return success_response(PlaylistSongResponse.model_validate(membership), status.HTTP_201_CREATED)

@router.delete("/favorites/songs/{song_id}")
async def remove_favorite_song(
    song_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """Unlike a song"""
    playlist = playlist_service.get_or_create_favorites(db, current_user.id)
    membership_manager.remove_song(db, playlist.id, song_id, current_user.id)
    return message_response("Song removed from favorites")

@router.get("/{playlist_id}")
async def get_playlist(
    playlist_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user)
):
    """
    Get a playlist with its ordered songs
    Private playlists are only visible to their owner
    """
    playlist = playlist_service.get_playlist(db, playlist_id, current_user.id if current_user else None)
    return success_response(playlist_detail(db, playlist, current_user))

@router.put("/{playlist_id}")
async def update_playlist(
    playlist_id: int,
    update_data: PlaylistUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Update playlist details (name, description, cover, visibility)
    Requires authentication and ownership
    """
    playlist = playlist_service.update_playlist(db, playlist_id, current_user.id, update_data)
    return success_response(playlist_detail(db, playlist, current_user))

@router.delete("/{playlist_id}")
async def delete_playlist(
    playlist_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Delete a playlist
    Requires authentication and ownership
    """
    playlist_service.delete_playlist(db, playlist_id, current_user.id)
    return message_response("Playlist deleted successfully")

@router.post("/{playlist_id}/songs", status_code=status.HTTP_201_CREATED)
async def add_song_to_playlist(
    playlist_id: int,
    song_data: PlaylistSongAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Add a song to a playlist, optionally at a 1-based position
    Requires authentication and ownership
    """
    membership = membership_manager.add_song(
        db, playlist_id, current_user.id, song_data.song_id, song_data.order
    )
    return success_response(PlaylistSongResponse.model_validate(membership), status.HTTP_201_CREATED)

@router.delete("/{playlist_id}/songs/{song_id}")
async def remove_song_from_playlist(
    playlist_id: int,
    song_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Remove a song from a playlist
    Requires authentication and ownership
    """
    membership_manager.remove_song(db, playlist_id, song_id, current_user.id)
    return message_response("Song removed from playlist")

@router.get("/{playlist_id}/follow")
async def get_follow_status(
    playlist_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    is_following = playlist_service.is_following(db, playlist_id, current_user.id)
    return success_response(FollowStatus(playlist_id=playlist_id, is_following=is_following))

@router.post("/{playlist_id}/follow")
async def follow_playlist(
    playlist_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    """
    Follow someone else's public playlist
    Following twice is not an error
    """
    created = follow_service.follow(db, playlist_id, current_user.id)
    message = "Playlist followed" if created else "Already following this playlist"
    return message_response(message, isFollowing=True)

@router.delete("/{playlist_id}/follow")
async def unfollow_playlist(
    playlist_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_current_user)
):
    follow_service.unfollow(db, playlist_id, current_user.id)
    return message_response("Playlist unfollowed", isFollowing=False)
