# ============================================================================
# FILE: app/schemas/stats.py
# ============================================================================
from datetime import datetime
from typing import Dict, List, Optional
from app.schemas.common import CamelModel

class TopSong(CamelModel):
    id: int
    title: str
    cover_url: Optional[str] = None
    artist: str
    playlist_count: int

class TopArtist(CamelModel):
    id: int
    name: str
    avatar: Optional[str] = None
    song_count: int

class TopUser(CamelModel):
    id: int
    name: str
    avatar: Optional[str] = None
    playlist_count: int

class DataQuality(CamelModel):
    songs_without_cover: int
    songs_without_duration: int
    empty_albums: int
    empty_playlists: int

class RecentActivity(CamelModel):
    """A recently created catalog item, playlist or user"""
    id: int
    type: str
    action: str
    name: str
    timestamp: datetime

class DailyCount(CamelModel):
    date: str
    songs: int
    users: int

class TagCount(CamelModel):
    name: str
    count: int

class TrendData(CamelModel):
    daily_stats: List[DailyCount]
    tag_distribution: List[TagCount]

class SystemStats(CamelModel):
    total_songs: int
    total_artists: int
    total_albums: int
    total_playlists: int
    total_users: int
    growth: Dict[str, str]
    recent_activity: List[RecentActivity]
    top_songs: List[TopSong]
    top_artists: List[TopArtist]
    top_users: List[TopUser]
    data_quality: DataQuality
    trend_data: TrendData

class TagShare(CamelModel):
    tag_id: int
    name: str
    count: int
    color: str

class TagCoverage(CamelModel):
    """How much of the catalog carries at least one tag"""
    total_songs: int
    tagged_songs: int
    untagged_songs: int
    coverage_rate: float
    tag_distribution: List[TagShare]
