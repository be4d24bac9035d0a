# ============================================================================
# FILE: app/schemas/playlist.py
# ============================================================================
from pydantic import AfterValidator, Field, field_validator
from typing import Annotated, Optional, List
from datetime import datetime
import re
from app.db.models.playlist import PlaylistType
from app.schemas.catalog import SongResponse
from app.schemas.common import CamelModel
from app.schemas.user import UserSummary

COVER_PATTERN = re.compile(r"^(https?://|/)")

def validate_cover(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not COVER_PATTERN.match(value):
        raise ValueError("Cover path must be a valid URL or start with /")
    return value

CoverUrl = Annotated[Optional[str], AfterValidator(validate_cover)]

class PlaylistCreate(CamelModel):
    """Schema for creating a playlist"""
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    cover_url: CoverUrl = None
    is_public: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

class PlaylistUpdate(CamelModel):
    """Schema for updating a playlist"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    cover_url: CoverUrl = None
    is_public: Optional[bool] = None

class PlaylistSongAdd(CamelModel):
    """Schema for adding a song to playlist"""
    song_id: int = Field(gt=0)
    order: Optional[int] = None

class FavoriteSongAdd(CamelModel):
    song_id: int = Field(gt=0)

class PlaylistSongResponse(CamelModel):
    """Schema for playlist song response"""
    id: int
    playlist_id: int
    song_id: int
    order: int
    added_at: datetime
    song: SongResponse

class PlaylistResponse(CamelModel):
    """Schema for playlist response (list views)"""
    id: int
    name: str
    description: Optional[str] = None
    cover_url: Optional[str] = None
    is_public: bool
    type: PlaylistType
    user_id: int
    user: UserSummary
    song_count: int = 0
    follower_count: int = 0
    created_at: datetime
    updated_at: datetime

class PlaylistDetailResponse(PlaylistResponse):
    """Playlist with its ordered songs"""
    songs: List[PlaylistSongResponse] = []
    is_following: bool = False

class FollowStatus(CamelModel):
    playlist_id: int
    is_following: bool
