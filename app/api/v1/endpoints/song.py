# ============================================================================
# FILE: app/api/v1/endpoints/song.py
# ============================================================================
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from app.db.session import get_db
from app.api.dependencies import get_pagination, get_search
from app.core.pagination import Pagination
from app.core.responses import success_response
from app.schemas.catalog import SongResponse, TagResponse, TagWithCount
from app.schemas.discover import DiscoverResponse
from app.schemas.playlist import PlaylistResponse
from app.services.catalog_service import catalog_service

router = APIRouter()

@router.get("/songs")
async def list_songs(
    pagination: Pagination = Depends(get_pagination),
    search: Optional[str] = Depends(get_search),
    artist_id: Optional[int] = Query(None, alias="artistId"),
    album_id: Optional[int] = Query(None, alias="albumId"),
    tag_id: Optional[int] = Query(None, alias="tagId"),
    db: Session = Depends(get_db),
):
    """
    Browse the song catalog, newest first
    Search matches song title, artist name or album title
    """
    songs, total = catalog_service.list_songs(db, pagination, search, artist_id, album_id, tag_id)
    items = [SongResponse.model_validate(s) for s in songs]
    return success_response(pagination.page_of(items, total))

@router.get("/songs/{song_id}")
async def get_song(song_id: int, db: Session = Depends(get_db)):
    return success_response(SongResponse.model_validate(catalog_service.get_song(db, song_id)))

@router.get("/tags")
async def list_tags(db: Session = Depends(get_db)):
    return success_response([TagResponse.model_validate(t) for t in catalog_service.list_tags(db)])

@router.get("/discover")
async def discover(
    tag_id: Optional[int] = Query(None, alias="tagId"),
    limit_songs: int = Query(10, alias="limitSongs", ge=1, le=50),
    limit_playlists: int = Query(12, alias="limitPlaylists", ge=1, le=50),
    db: Session = Depends(get_db),
):
    """
    Newest songs and public playlists plus every tag with its song count
    ``tagId`` narrows songs and playlists to that tag
    """
    content = catalog_service.discover(db, tag_id, limit_songs, limit_playlists)
    return success_response(DiscoverResponse(
        featured_songs=[SongResponse.model_validate(s) for s in content["featured_songs"]],
        featured_playlists=[PlaylistResponse.model_validate(p) for p in content["featured_playlists"]],
        tags=[TagWithCount(**t) for t in content["tags"]],
    ))
