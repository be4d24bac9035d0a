# ============================================================================
# FILE: app/db/models/catalog.py
# ============================================================================
from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey, Text, Table
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.base import Base

song_tags = Table(
    "song_tags",
    Base.metadata,
    Column("song_id", Integer, ForeignKey("songs.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

class Artist(Base):
    """Performing artist"""
    __tablename__ = "artists"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    avatar = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    country = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    songs = relationship("Song", back_populates="artist", cascade="all, delete-orphan")
    albums = relationship("Album", back_populates="artist", cascade="all, delete-orphan")

class Album(Base):
    """Album released by an artist"""
    __tablename__ = "albums"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, index=True)
    cover_url = Column(String, nullable=True)
    release_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    artist_id = Column(Integer, ForeignKey("artists.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    artist = relationship("Artist", back_populates="albums")
    songs = relationship("Song", back_populates="album")

class Tag(Base):
    """Free-form genre / mood label"""
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    color = Column(String(16), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    songs = relationship("Song", secondary=song_tags, back_populates="tags")

class Song(Base):
    """Song in the catalog. Referenced, never owned, by playlists."""
    __tablename__ = "songs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, index=True)
    duration = Column(Integer, nullable=True)  # Duration in seconds
    file_url = Column(String, nullable=True)
    cover_url = Column(String, nullable=True)
    lyrics = Column(Text, nullable=True)
    track_number = Column(Integer, nullable=True)
    artist_id = Column(Integer, ForeignKey("artists.id"), nullable=False)
    album_id = Column(Integer, ForeignKey("albums.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    artist = relationship("Artist", back_populates="songs")
    album = relationship("Album", back_populates="songs")
    tags = relationship("Tag", secondary=song_tags, back_populates="songs")
    playlist_songs = relationship("PlaylistSong", back_populates="song", cascade="all, delete-orphan")
