# ============================================================================
# FILE: app/db/models/playlist.py
# ============================================================================
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, Enum, Index, UniqueConstraint, text
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from app.db.base import Base

class PlaylistType(str, enum.Enum):
    NORMAL = "NORMAL"
    FAVORITES = "FAVORITES"

class Playlist(Base):
    """Playlist model for user-created playlists"""
    __tablename__ = "playlists"
    __table_args__ = (
        # At most one favorites playlist per user
        Index(
            "uq_playlist_favorites_user",
            "user_id",
            unique=True,
            sqlite_where=text("type = 'FAVORITES'"),
            postgresql_where=text("type = 'FAVORITES'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    cover_url = Column(String, nullable=True)
    is_public = Column(Boolean, default=True, nullable=False)
    type = Column(Enum(PlaylistType), default=PlaylistType.NORMAL, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="playlists")
    songs = relationship(
        "PlaylistSong",
        back_populates="playlist",
        cascade="all, delete-orphan",
        order_by="PlaylistSong.order",
    )
    followers = relationship("PlaylistFollow", back_populates="playlist", cascade="all, delete-orphan")

    @property
    def song_count(self) -> int:
        return len(self.songs)

    @property
    def follower_count(self) -> int:
        return len(self.followers)

class PlaylistSong(Base):
    """
    Membership of a song in a playlist at a 1-based position.

    For a given playlist the ``order`` values are always exactly 1..N.
    """
    __tablename__ = "playlist_songs"
    __table_args__ = (
        UniqueConstraint("playlist_id", "song_id", name="uq_playlist_song"),
        UniqueConstraint("playlist_id", "order", name="uq_playlist_order"),
    )

    id = Column(Integer, primary_key=True, index=True)
    playlist_id = Column(Integer, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False, index=True)
    song_id = Column(Integer, ForeignKey("songs.id", ondelete="CASCADE"), nullable=False)
    order = Column("order", Integer, nullable=False)
    added_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    playlist = relationship("Playlist", back_populates="songs")
    song = relationship("Song", back_populates="playlist_songs")

class PlaylistFollow(Base):
    """A user following someone else's public playlist"""
    __tablename__ = "playlist_follows"
    __table_args__ = (UniqueConstraint("user_id", "playlist_id", name="uq_playlist_follow"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    playlist_id = Column(Integer, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="follows")
    playlist = relationship("Playlist", back_populates="followers")
