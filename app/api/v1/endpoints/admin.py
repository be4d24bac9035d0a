# ============================================================================
# FILE: app/api/v1/endpoints/admin.py
# ============================================================================
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from app.db.session import get_db
from app.api.dependencies import get_pagination, get_search, require_admin, require_manager
from app.core.pagination import Pagination
from app.core.responses import message_response, success_response
from app.schemas.catalog import (
    AlbumCreate,
    AlbumResponse,
    AlbumUpdate,
    ArtistCreate,
    ArtistResponse,
    ArtistUpdate,
    SongCreate,
    SongResponse,
    SongUpdate,
    TagCreate,
    TagResponse,
    TagUpdate,
)
from app.schemas.stats import SystemStats, TagCoverage
from app.schemas.user import AdminUserCreate, AdminUserUpdate, UserResponse, UserRoleUpdate
from app.services.catalog_service import catalog_service
from app.services.stats_service import stats_service
from app.services.user_service import user_service
from app.db.models.user import User, UserRole

# Every catalog route requires at least the MANAGER role
router = APIRouter(dependencies=[Depends(require_manager)])

# ---------------------------------------------------------------------------
# Songs
# ---------------------------------------------------------------------------

@router.get("/songs")
async def admin_list_songs(
    pagination: Pagination = Depends(get_pagination),
    search: Optional[str] = Depends(get_search),
    artist_id: Optional[int] = Query(None, alias="artistId"),
    album_id: Optional[int] = Query(None, alias="albumId"),
    tag_id: Optional[int] = Query(None, alias="tagId"),
    db: Session = Depends(get_db),
):
    songs, total = catalog_service.list_songs(db, pagination, search, artist_id, album_id, tag_id)
    return success_response(pagination.page_of([SongResponse.model_validate(s) for s in songs], total))

@router.get("/songs/category-stats")
async def admin_song_tag_coverage(db: Session = Depends(get_db)):
    """Tagged and untagged song counts and the most used tags"""
    return success_response(TagCoverage(**stats_service.get_tag_coverage(db)))

@router.post("/songs", status_code=status.HTTP_201_CREATED)
async def admin_create_song(song_data: SongCreate, db: Session = Depends(get_db)):
    song = catalog_service.create_song(db, song_data)
    return success_response(SongResponse.model_validate(song), status.HTTP_201_CREATED)

@router.get("/songs/{song_id}")
async def admin_get_song(song_id: int, db: Session = Depends(get_db)):
    return success_response(SongResponse.model_validate(catalog_service.get_song(db, song_id)))

@router.put("/songs/{song_id}")
async def admin_update_song(song_id: int, song_data: SongUpdate, db: Session = Depends(get_db)):
    song = catalog_service.update_song(db, song_id, song_data)
    return success_response(SongResponse.model_validate(song))

@router.delete("/songs/{song_id}")
async def admin_delete_song(song_id: int, db: Session = Depends(get_db)):
    """Delete a song; it is also removed from every playlist"""
    catalog_service.delete_song(db, song_id)
    return message_response("Song deleted")

# ---------------------------------------------------------------------------
# Artists
# ---------------------------------------------------------------------------

@router.get("/artists")
async def admin_list_artists(
    pagination: Pagination = Depends(get_pagination),
    search: Optional[str] = Depends(get_search),
    db: Session = Depends(get_db),
):
    artists, total = catalog_service.list_artists(db, pagination, search)
    return success_response(pagination.page_of([ArtistResponse.model_validate(a) for a in artists], total))

@router.post("/artists", status_code=status.HTTP_201_CREATED)
async def admin_create_artist(artist_data: ArtistCreate, db: Session = Depends(get_db)):
    artist = catalog_service.create_artist(db, artist_data)
    return success_response(ArtistResponse.model_validate(artist), status.HTTP_201_CREATED)

@router.put("/artists/{artist_id}")
async def admin_update_artist(artist_id: int, artist_data: ArtistUpdate, db: Session = Depends(get_db)):
    artist = catalog_service.update_artist(db, artist_id, artist_data)
    return success_response(ArtistResponse.model_validate(artist))

@router.delete("/artists/{artist_id}")
async def admin_delete_artist(artist_id: int, db: Session = Depends(get_db)):
    catalog_service.delete_artist(db, artist_id)
    return message_response("Artist deleted")

# ---------------------------------------------------------------------------
# Albums
# ---------------------------------------------------------------------------

@router.get("/albums")
async def admin_list_albums(
    pagination: Pagination = Depends(get_pagination),
    search: Optional[str] = Depends(get_search),
    artist_id: Optional[int] = Query(None, alias="artistId"),
    db: Session = Depends(get_db),
):
    albums, total = catalog_service.list_albums(db, pagination, search, artist_id)
    return success_response(pagination.page_of([AlbumResponse.model_validate(a) for a in albums], total))

@router.post("/albums", status_code=status.HTTP_201_CREATED)
async def admin_create_album(album_data: AlbumCreate, db: Session = Depends(get_db)):
    album = catalog_service.create_album(db, album_data)
    return success_response(AlbumResponse.model_validate(album), status.HTTP_201_CREATED)

@router.put("/albums/{album_id}")
async def admin_update_album(album_id: int, album_data: AlbumUpdate, db: Session = Depends(get_db)):
    album = catalog_service.update_album(db, album_id, album_data)
    return success_response(AlbumResponse.model_validate(album))

@router.delete("/albums/{album_id}")
async def admin_delete_album(album_id: int, db: Session = Depends(get_db)):
    catalog_service.delete_album(db, album_id)
    return message_response("Album deleted")

# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

@router.post("/tags", status_code=status.HTTP_201_CREATED)
async def admin_create_tag(tag_data: TagCreate, db: Session = Depends(get_db)):
    tag = catalog_service.create_tag(db, tag_data)
    return success_response(TagResponse.model_validate(tag), status.HTTP_201_CREATED)

@router.put("/tags/{tag_id}")
async def admin_update_tag(tag_id: int, tag_data: TagUpdate, db: Session = Depends(get_db)):
    tag = catalog_service.update_tag(db, tag_id, tag_data)
    return success_response(TagResponse.model_validate(tag))

@router.delete("/tags/{tag_id}")
async def admin_delete_tag(tag_id: int, db: Session = Depends(get_db)):
    catalog_service.delete_tag(db, tag_id)
    return message_response("Tag deleted")

# ---------------------------------------------------------------------------
# Users & stats
# ---------------------------------------------------------------------------

@router.get("/users")
async def admin_list_users(
    pagination: Pagination = Depends(get_pagination),
    search: Optional[str] = Depends(get_search),
    role: Optional[UserRole] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """List users. ADMIN only."""
    users, total = user_service.list_users(db, pagination, search, role)
    return success_response(pagination.page_of([UserResponse.model_validate(u) for u in users], total))

@router.post("/users", status_code=status.HTTP_201_CREATED)
async def admin_create_user(
    user_data: AdminUserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Create an account with any role. ADMIN only."""
    user = user_service.create_user(db, user_data)
    return success_response(UserResponse.model_validate(user), status.HTTP_201_CREATED)

@router.get("/users/{user_id}")
async def admin_get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return success_response(UserResponse.model_validate(user_service.get_existing_user(db, user_id)))

@router.put("/users/{user_id}")
async def admin_update_user(
    user_id: int,
    user_data: AdminUserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Edit any account, including its role and password. ADMIN only."""
    user = user_service.update_user(db, user_id, user_data, current_user)
    return success_response(UserResponse.model_validate(user))

@router.patch("/users/{user_id}")
async def admin_update_user_role(
    user_id: int,
    role_data: UserRoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Change a user's role. ADMIN only."""
    user = user_service.set_role(db, user_id, role_data.role, current_user)
    return success_response(UserResponse.model_validate(user))

@router.delete("/users/{user_id}")
async def admin_delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Delete an account and its playlists. ADMIN only."""
    user_service.delete_user(db, user_id, current_user)
    return message_response("User deleted")

@router.get("/stats")
async def admin_stats(db: Session = Depends(get_db)):
    """Dashboard counters, growth rates, rankings and data quality"""
    return success_response(SystemStats(**stats_service.get_system_stats(db)))
