# ============================================================================
# FILE: app/services/catalog_service.py
# ============================================================================
from typing import Iterable, List, Optional, Tuple
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from app.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from app.core.pagination import Pagination
from app.db.models.catalog import Album, Artist, Song, Tag, song_tags
from app.db.models.playlist import PlaylistSong
from app.schemas.catalog import (
    AlbumCreate,
    AlbumUpdate,
    ArtistCreate,
    ArtistUpdate,
    SongCreate,
    SongUpdate,
    TagCreate,
    TagUpdate,
)
from app.services.membership_service import detach_membership
from app.services.playlist_service import playlist_service
from app.services.stats_service import stats_service
import logging

logger = logging.getLogger(__name__)

class CatalogService:
    """Songs, artists, albums and tags"""

    # -- lookups -------------------------------------------------------------

    def _ensure_artist(self, db: Session, artist_id: int) -> None:
        if not db.query(Artist.id).filter(Artist.id == artist_id).first():
            raise InvalidArgumentError("Artist does not exist")

    def _ensure_album(self, db: Session, album_id: Optional[int]) -> None:
        if album_id and not db.query(Album.id).filter(Album.id == album_id).first():
            raise InvalidArgumentError("Album does not exist")

    def _load_tags(self, db: Session, tag_ids: Iterable[int]) -> List[Tag]:
        tag_ids = set(tag_ids)
        if not tag_ids:
            return []
        tags = db.query(Tag).filter(Tag.id.in_(tag_ids)).all()
        if len(tags) != len(tag_ids):
            raise InvalidArgumentError("Some tags do not exist")
        return tags

    def _save(self, db: Session, obj, action: str):
        try:
            db.add(obj)
            db.commit()
            db.refresh(obj)
            logger.info(f"{type(obj).__name__} {action}: {obj.id}")
            stats_service.invalidate()
            return obj
        except Exception as e:
            db.rollback()
            logger.error(f"Error saving {type(obj).__name__}: {e}")
            raise

    def _remove(self, db: Session, obj) -> None:
        obj_id = obj.id
        try:
            db.delete(obj)
            db.commit()
            logger.info(f"{type(obj).__name__} deleted: {obj_id}")
            stats_service.invalidate()
        except Exception as e:
            db.rollback()
            logger.error(f"Error deleting {type(obj).__name__}: {e}")
            raise

    # -- songs ---------------------------------------------------------------

    def list_songs(
        self,
        db: Session,
        pagination: Pagination,
        search: Optional[str] = None,
        artist_id: Optional[int] = None,
        album_id: Optional[int] = None,
        tag_id: Optional[int] = None,
    ) -> Tuple[List[Song], int]:
        """Songs newest first, filtered by title/artist/album text and ids"""
        query = db.query(Song).join(Song.artist).outerjoin(Song.album)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Song.title.ilike(pattern),
                Artist.name.ilike(pattern),
                Album.title.ilike(pattern),
            ))
        if artist_id:
            query = query.filter(Song.artist_id == artist_id)
        if album_id:
            query = query.filter(Song.album_id == album_id)
        if tag_id:
            query = query.filter(Song.tags.any(Tag.id == tag_id))

        total = query.count()
        songs = query.order_by(Song.created_at.desc(), Song.id.desc()).offset(pagination.skip).limit(pagination.take).all()
        return songs, total

    def get_song(self, db: Session, song_id: int) -> Song:
        song = db.query(Song).filter(Song.id == song_id).first()
        if not song:
            raise NotFoundError("Song not found")
        return song

    def create_song(self, db: Session, data: SongCreate) -> Song:
        self._ensure_artist(db, data.artist_id)
        self._ensure_album(db, data.album_id)
        tags = self._load_tags(db, data.tag_ids or [])

        song = Song(**data.model_dump(exclude={"tag_ids"}))
        song.tags = tags
        return self._save(db, song, "created")

    def update_song(self, db: Session, song_id: int, data: SongUpdate) -> Song:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidArgumentError("Request body must not be empty")

        song = self.get_song(db, song_id)
        if changes.get("artist_id"):
            self._ensure_artist(db, changes["artist_id"])
        self._ensure_album(db, changes.get("album_id"))
        if "tag_ids" in changes:
            song.tags = self._load_tags(db, changes.pop("tag_ids") or [])

        for field, value in changes.items():
            if field in ("title", "artist_id") and value is None:
                continue
            setattr(song, field, value)
        return self._save(db, song, "updated")

    def delete_song(self, db: Session, song_id: int) -> None:
        """Delete a song, closing the gap it leaves in every playlist"""
        song = self.get_song(db, song_id)
        try:
            memberships = db.query(PlaylistSong).filter(PlaylistSong.song_id == song_id).all()
            for membership in memberships:
                detach_membership(db, membership)
            db.delete(song)
            db.commit()
            logger.info(f"Song deleted: {song_id} (removed from {len(memberships)} playlists)")
            stats_service.invalidate()
        except Exception as e:
            db.rollback()
            logger.error(f"Error deleting song: {e}")
            raise

    # -- artists -------------------------------------------------------------

    def list_artists(self, db: Session, pagination: Pagination, search: Optional[str] = None) -> Tuple[List[Artist], int]:
        query = db.query(Artist)
        if search:
            query = query.filter(Artist.name.ilike(f"%{search}%"))
        total = query.count()
        artists = query.order_by(Artist.name.asc(), Artist.id.asc()).offset(pagination.skip).limit(pagination.take).all()
        return artists, total

    def get_artist(self, db: Session, artist_id: int) -> Artist:
        artist = db.query(Artist).filter(Artist.id == artist_id).first()
        if not artist:
            raise NotFoundError("Artist not found")
        return artist

    def create_artist(self, db: Session, data: ArtistCreate) -> Artist:
        return self._save(db, Artist(**data.model_dump()), "created")

    def update_artist(self, db: Session, artist_id: int, data: ArtistUpdate) -> Artist:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidArgumentError("Request body must not be empty")
        artist = self.get_artist(db, artist_id)
        for field, value in changes.items():
            if field == "name" and value is None:
                continue
            setattr(artist, field, value)
        return self._save(db, artist, "updated")

    def delete_artist(self, db: Session, artist_id: int) -> None:
        """Delete an artist that no longer has songs or albums"""
        artist = self.get_artist(db, artist_id)
        if artist.songs or artist.albums:
            raise ConflictError("Artist still has songs or albums")
        self._remove(db, artist)

    # -- albums --------------------------------------------------------------

    def list_albums(
        self, db: Session, pagination: Pagination, search: Optional[str] = None, artist_id: Optional[int] = None
    ) -> Tuple[List[Album], int]:
        query = db.query(Album)
        if search:
            query = query.filter(Album.title.ilike(f"%{search}%"))
        if artist_id:
            query = query.filter(Album.artist_id == artist_id)
        total = query.count()
        albums = query.order_by(Album.created_at.desc(), Album.id.desc()).offset(pagination.skip).limit(pagination.take).all()
        return albums, total

    def get_album(self, db: Session, album_id: int) -> Album:
        album = db.query(Album).filter(Album.id == album_id).first()
        if not album:
            raise NotFoundError("Album not found")
        return album

    def create_album(self, db: Session, data: AlbumCreate) -> Album:
        self._ensure_artist(db, data.artist_id)
        return self._save(db, Album(**data.model_dump()), "created")

    def update_album(self, db: Session, album_id: int, data: AlbumUpdate) -> Album:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidArgumentError("Request body must not be empty")
        album = self.get_album(db, album_id)
        if changes.get("artist_id"):
            self._ensure_artist(db, changes["artist_id"])
        for field, value in changes.items():
            if field in ("title", "artist_id") and value is None:
                continue
            setattr(album, field, value)
        return self._save(db, album, "updated")

    def delete_album(self, db: Session, album_id: int) -> None:
        """Delete an album; its songs stay in the catalog without an album"""
        self._remove(db, self.get_album(db, album_id))

    # -- tags ----------------------------------------------------------------

    def list_tags(self, db: Session) -> List[Tag]:
        return db.query(Tag).order_by(Tag.name.asc()).all()

    def list_tags_with_counts(self, db: Session) -> List[dict]:
        """Every tag with the number of songs carrying it, by name"""
        song_count = func.count(song_tags.c.song_id)
        rows = (
            db.query(Tag.id, Tag.name, Tag.color, song_count)
            .outerjoin(song_tags, song_tags.c.tag_id == Tag.id)
            .group_by(Tag.id, Tag.name, Tag.color)
            .order_by(Tag.name.asc())
            .all()
        )
        return [{"id": r[0], "name": r[1], "color": r[2], "song_count": r[3]} for r in rows]

    def _get_tag(self, db: Session, tag_id: int) -> Tag:
        tag = db.query(Tag).filter(Tag.id == tag_id).first()
        if not tag:
            raise NotFoundError("Tag not found")
        return tag

    def create_tag(self, db: Session, data: TagCreate) -> Tag:
        if db.query(Tag.id).filter(Tag.name == data.name).first():
            raise ConflictError("Tag already exists")
        return self._save(db, Tag(**data.model_dump()), "created")

    def update_tag(self, db: Session, tag_id: int, data: TagUpdate) -> Tag:
        """Rename or recolor a tag; the new name must not belong to another tag"""
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidArgumentError("Request body must not be empty")

        tag = self._get_tag(db, tag_id)
        name = changes.get("name")
        if name and name != tag.name:
            if db.query(Tag.id).filter(Tag.name == name).first():
                raise ConflictError("Tag already exists")
        for field, value in changes.items():
            if field == "name" and value is None:
                continue
            setattr(tag, field, value)
        return self._save(db, tag, "updated")

    def delete_tag(self, db: Session, tag_id: int) -> None:
        self._remove(db, self._get_tag(db, tag_id))

    # -- discover ------------------------------------------------------------

    def discover(
        self, db: Session, tag_id: Optional[int] = None, limit_songs: int = 10, limit_playlists: int = 12
    ) -> dict:
        """
        Newest songs, newest public playlists and all tags with song counts.

        With ``tag_id`` only songs carrying the tag, and public playlists
        holding at least one such song, are returned.
        """
        songs, _ = self.list_songs(db, Pagination(page=1, page_size=limit_songs), tag_id=tag_id)
        playlists, _ = playlist_service.list_public_playlists(
            db, Pagination(page=1, page_size=limit_playlists), tag_id=tag_id
        )
        return {
            "featured_songs": songs,
            "featured_playlists": playlists,
            "tags": self.list_tags_with_counts(db),
        }

# Create singleton instance
catalog_service = CatalogService()
