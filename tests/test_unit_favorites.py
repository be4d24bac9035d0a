"""Unit tests for the per-user favorites playlist."""

import pytest
from sqlalchemy.exc import IntegrityError

from app.db.models.playlist import Playlist, PlaylistType
from app.services.playlist_service import PlaylistService, playlist_service
from tests.helpers.factories import make_playlist


def favorites_of(db, user):
    return db.query(Playlist).filter(
        Playlist.user_id == user.id,
        Playlist.type == PlaylistType.FAVORITES,
    ).all()


def test_created_once_then_reused(db, owner):
    first = playlist_service.get_or_create_favorites(db, owner.id)
    second = playlist_service.get_or_create_favorites(db, owner.id)

    assert first.id == second.id
    assert first.is_public is False
    assert len(favorites_of(db, owner)) == 1


def test_database_rejects_second_favorites_playlist(db, owner):
    playlist_service.get_or_create_favorites(db, owner.id)

    db.add(Playlist(user_id=owner.id, name="Again", is_public=False, type=PlaylistType.FAVORITES))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()

    assert len(favorites_of(db, owner)) == 1


def test_normal_playlists_are_not_limited(db, owner):
    playlist_service.get_or_create_favorites(db, owner.id)
    make_playlist(db, owner, "One")
    make_playlist(db, owner, "Two")

    assert db.query(Playlist).filter(Playlist.user_id == owner.id).count() == 3


def test_losing_the_creation_race_returns_the_winner(db, owner, stranger, monkeypatch):
    winner = playlist_service.get_or_create_favorites(db, owner.id)
    calls = []

    def stale_lookup(db, user_id):
        # The first lookup runs before the concurrent insert is visible
        calls.append(user_id)
        if len(calls) == 1:
            return None
        return PlaylistService._find_favorites(playlist_service, db, user_id)

    monkeypatch.setattr(playlist_service, "_find_favorites", stale_lookup)

    playlist = playlist_service.get_or_create_favorites(db, owner.id)

    assert playlist.id == winner.id
    assert len(calls) == 2
    assert len(favorites_of(db, owner)) == 1
    # Other users still get their own
    assert playlist_service.get_or_create_favorites(db, stranger.id).user_id == stranger.id
