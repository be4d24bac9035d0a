# ============================================================================
# FILE: app/schemas/catalog.py
# ============================================================================
from pydantic import BeforeValidator, Field
from typing import Annotated, List, Optional
from datetime import date, datetime
import re
from app.schemas.common import CamelModel

DURATION_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")

def parse_duration(value):
    """Accept seconds as an int or a ``mm:ss`` string"""
    if value is None or isinstance(value, int):
        return value
    match = DURATION_PATTERN.match(str(value))
    if not match:
        raise ValueError("duration must be mm:ss")
    minutes, seconds = int(match.group(1)), int(match.group(2))
    if seconds >= 60:
        raise ValueError("seconds must be between 00 and 59")
    return minutes * 60 + seconds

Duration = Annotated[Optional[int], BeforeValidator(parse_duration)]

class ArtistCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    avatar: Optional[str] = None
    description: Optional[str] = Field(None, max_length=5000)
    country: Optional[str] = Field(None, max_length=100)

class ArtistUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    avatar: Optional[str] = None
    description: Optional[str] = Field(None, max_length=5000)
    country: Optional[str] = Field(None, max_length=100)

class ArtistResponse(CamelModel):
    id: int
    name: str
    avatar: Optional[str] = None
    description: Optional[str] = None
    country: Optional[str] = None
    created_at: datetime

class AlbumCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    cover_url: Optional[str] = None
    release_date: Optional[date] = None
    description: Optional[str] = Field(None, max_length=5000)
    artist_id: int = Field(gt=0)

class AlbumUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    cover_url: Optional[str] = None
    release_date: Optional[date] = None
    description: Optional[str] = Field(None, max_length=5000)
    artist_id: Optional[int] = Field(None, gt=0)

class AlbumSummary(CamelModel):
    id: int
    title: str
    cover_url: Optional[str] = None
    release_date: Optional[date] = None

class AlbumResponse(AlbumSummary):
    description: Optional[str] = None
    artist: ArtistResponse
    created_at: datetime

class TagCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=r"^#?[0-9a-fA-F]{3,8}$")

class TagUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=r"^#?[0-9a-fA-F]{3,8}$")

class TagResponse(CamelModel):
    id: int
    name: str
    color: Optional[str] = None

class TagWithCount(TagResponse):
    song_count: int = 0

class SongCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    duration: Duration = None
    file_url: Optional[str] = None
    cover_url: Optional[str] = None
    lyrics: Optional[str] = None
    artist_id: int = Field(gt=0)
    album_id: Optional[int] = Field(None, gt=0)
    tag_ids: Optional[List[int]] = None
    track_number: Optional[int] = Field(None, gt=0)

class SongUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    duration: Duration = None
    file_url: Optional[str] = None
    cover_url: Optional[str] = None
    lyrics: Optional[str] = None
    artist_id: Optional[int] = Field(None, gt=0)
    album_id: Optional[int] = Field(None, gt=0)
    tag_ids: Optional[List[int]] = None
    track_number: Optional[int] = Field(None, gt=0)

class SongResponse(CamelModel):
    """Song with its artist, album and tags"""
    id: int
    title: str
    duration: Optional[int] = None
    file_url: Optional[str] = None
    cover_url: Optional[str] = None
    track_number: Optional[int] = None
    artist: ArtistResponse
    album: Optional[AlbumSummary] = None
    tags: List[TagResponse] = []
    created_at: datetime
