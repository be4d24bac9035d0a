# ============================================================================
# FILE: app/services/stats_service.py
# ============================================================================
from collections import Counter
from datetime import datetime, time, timedelta
from typing import Dict, List, Optional
from sqlalchemy import distinct, func
from sqlalchemy.orm import Session
from app.config import settings
from app.core.cache import cache
from app.db.models.catalog import Album, Artist, Song, Tag, song_tags
from app.db.models.playlist import Playlist, PlaylistSong
from app.db.models.user import User
import logging

logger = logging.getLogger(__name__)

STATS_CACHE_KEY = "admin:stats"
GROWTH_WINDOW_DAYS = 30
TOP_LIMIT = 5
RECENT_PER_TYPE = 5
RECENT_LIMIT = 15
TREND_DAYS = 30
COVERAGE_TAG_LIMIT = 15
DEFAULT_TAG_COLOR = "#3B82F6"

def calculate_growth_rate(current: int, previous: int) -> str:
    """
    Format the change from ``previous`` to ``current`` as a signed percentage
    rounded to one decimal place, e.g. ``+12.5%``, ``-3%`` or ``0%``.
    """
    if previous == 0:
        return "+100%" if current > 0 else "0%"

    rounded = round((current - previous) / previous * 100, 1)
    if rounded == 0:
        return "0%"
    text = f"{rounded:g}"
    return f"+{text}%" if rounded > 0 else f"{text}%"

class StatsService:
    """Aggregate counters for the admin dashboard"""

    GROWTH_MODELS = {
        "songs": Song,
        "artists": Artist,
        "albums": Album,
        "playlists": Playlist,
        "users": User,
    }

    def get_system_stats(self, db: Session, use_cache: bool = True) -> Dict:
        if use_cache:
            cached = cache.get_cache(STATS_CACHE_KEY)
            if cached:
                logger.info("Cache hit for admin stats")
                return cached

        stats = self._compute(db)
        if use_cache:
            cache.set_cache(STATS_CACHE_KEY, stats, expire=settings.CACHE_EXPIRE_SECONDS)
        return stats

    def invalidate(self) -> None:
        cache.delete_cache(STATS_CACHE_KEY)

    def _compute(self, db: Session, now: Optional[datetime] = None) -> Dict:
        now = now or datetime.utcnow()
        since = now - timedelta(days=GROWTH_WINDOW_DAYS)

        totals: Dict[str, int] = {}
        growth: Dict[str, str] = {}
        for name, model in self.GROWTH_MODELS.items():
            total = db.query(func.count(model.id)).scalar()
            recent = db.query(func.count(model.id)).filter(model.created_at >= since).scalar()
            totals[name] = total
            growth[name] = calculate_growth_rate(total, total - recent)

        return {
            "totalSongs": totals["songs"],
            "totalArtists": totals["artists"],
            "totalAlbums": totals["albums"],
            "totalPlaylists": totals["playlists"],
            "totalUsers": totals["users"],
            "growth": growth,
            "recentActivity": self._recent_activity(db),
            "topSongs": self._top_songs(db),
            "topArtists": self._top_artists(db),
            "topUsers": self._top_users(db),
            "dataQuality": self._data_quality(db),
            "trendData": self._trend_data(db, now),
        }

    def _recent_activity(self, db: Session) -> List[Dict]:
        """The newest creations across every entity type, newest first"""
        sources = [
            ("song", Song, lambda s: s.title),
            ("artist", Artist, lambda a: a.name),
            ("album", Album, lambda a: a.title),
            ("playlist", Playlist, lambda p: p.name),
            ("user", User, lambda u: u.name or u.username),
        ]
        activities = []
        for kind, model, label in sources:
            rows = (
                db.query(model)
                .order_by(model.created_at.desc(), model.id.desc())
                .limit(RECENT_PER_TYPE)
                .all()
            )
            activities.extend(
                {"id": row.id, "type": kind, "action": "created", "name": label(row), "timestamp": row.created_at}
                for row in rows
            )

        activities.sort(key=lambda a: a["timestamp"], reverse=True)
        return [
            dict(a, timestamp=a["timestamp"].isoformat())
            for a in activities[:RECENT_LIMIT]
        ]

    def _daily_counts(self, db: Session, model, start: datetime) -> Counter:
        created = db.query(model.created_at).filter(model.created_at >= start).all()
        return Counter(row[0].date() for row in created)

    def _trend_data(self, db: Session, now: datetime) -> Dict:
        """Per-day song and user creations over the last 30 days, and songs per tag"""
        first_day = now.date() - timedelta(days=TREND_DAYS - 1)
        start = datetime.combine(first_day, time.min)
        songs = self._daily_counts(db, Song, start)
        users = self._daily_counts(db, User, start)

        daily_stats = []
        for offset in range(TREND_DAYS):
            day = first_day + timedelta(days=offset)
            daily_stats.append({"date": day.isoformat(), "songs": songs[day], "users": users[day]})

        song_count = func.count(song_tags.c.song_id)
        rows = (
            db.query(Tag.name, song_count)
            .outerjoin(song_tags, song_tags.c.tag_id == Tag.id)
            .group_by(Tag.id, Tag.name)
            .order_by(Tag.name.asc())
            .all()
        )
        return {
            "dailyStats": daily_stats,
            "tagDistribution": [{"name": name, "count": count} for name, count in rows],
        }

    def get_tag_coverage(self, db: Session) -> Dict:
        """Tagged vs untagged songs, plus the most used tags"""
        total = db.query(func.count(Song.id)).scalar()
        tagged = db.query(func.count(distinct(song_tags.c.song_id))).scalar()

        song_count = func.count(song_tags.c.song_id).label("song_count")
        rows = (
            db.query(Tag.id, Tag.name, Tag.color, song_count)
            .outerjoin(song_tags, song_tags.c.tag_id == Tag.id)
            .group_by(Tag.id, Tag.name, Tag.color)
            .order_by(song_count.desc(), Tag.name.asc())
            .limit(COVERAGE_TAG_LIMIT)
            .all()
        )
        return {
            "totalSongs": total,
            "taggedSongs": tagged,
            "untaggedSongs": total - tagged,
            "coverageRate": round(tagged / total * 100, 2) if total else 0.0,
            "tagDistribution": [
                {"tagId": r[0], "name": r[1], "color": r[2] or DEFAULT_TAG_COLOR, "count": r[3]}
                for r in rows
            ],
        }

    def _top_songs(self, db: Session) -> List[Dict]:
        playlist_count = func.count(PlaylistSong.id).label("playlist_count")
        rows = (
            db.query(Song.id, Song.title, Song.cover_url, Artist.name, playlist_count)
            .join(Artist, Song.artist_id == Artist.id)
            .join(PlaylistSong, PlaylistSong.song_id == Song.id)
            .group_by(Song.id, Song.title, Song.cover_url, Artist.name)
            .order_by(playlist_count.desc(), Song.id.asc())
            .limit(TOP_LIMIT)
            .all()
        )
        return [
            {"id": r[0], "title": r[1], "coverUrl": r[2], "artist": r[3], "playlistCount": r[4]}
            for r in rows
        ]

    def _top_artists(self, db: Session) -> List[Dict]:
        song_count = func.count(Song.id).label("song_count")
        rows = (
            db.query(Artist.id, Artist.name, Artist.avatar, song_count)
            .join(Song, Song.artist_id == Artist.id)
            .group_by(Artist.id, Artist.name, Artist.avatar)
            .order_by(song_count.desc(), Artist.id.asc())
            .limit(TOP_LIMIT)
            .all()
        )
        return [{"id": r[0], "name": r[1], "avatar": r[2], "songCount": r[3]} for r in rows]

    def _top_users(self, db: Session) -> List[Dict]:
        playlist_count = func.count(Playlist.id).label("playlist_count")
        rows = (
            db.query(User.id, User.username, User.name, User.avatar, playlist_count)
            .join(Playlist, Playlist.user_id == User.id)
            .group_by(User.id, User.username, User.name, User.avatar)
            .order_by(playlist_count.desc(), User.id.asc())
            .limit(TOP_LIMIT)
            .all()
        )
        return [
            {"id": r[0], "name": r[2] or r[1], "avatar": r[3], "playlistCount": r[4]}
            for r in rows
        ]

    def _data_quality(self, db: Session) -> Dict:
        return {
            "songsWithoutCover": db.query(func.count(Song.id)).filter(Song.cover_url.is_(None)).scalar(),
            "songsWithoutDuration": db.query(func.count(Song.id)).filter(Song.duration.is_(None)).scalar(),
            "emptyAlbums": db.query(func.count(Album.id)).filter(~Album.songs.any()).scalar(),
            "emptyPlaylists": db.query(func.count(Playlist.id)).filter(~Playlist.songs.any()).scalar(),
        }

# Create singleton instance
stats_service = StatsService()
