# ============================================================================
# FILE: app/schemas/discover.py
# ============================================================================
from typing import List
from app.schemas.catalog import SongResponse, TagWithCount
from app.schemas.common import CamelModel
from app.schemas.playlist import PlaylistResponse

class DiscoverResponse(CamelModel):
    """Landing page content: newest songs, newest public playlists and all tags"""
    featured_songs: List[SongResponse] = []
    featured_playlists: List[PlaylistResponse] = []
    tags: List[TagWithCount] = []
