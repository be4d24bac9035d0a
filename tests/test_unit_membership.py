"""Unit tests for ordered playlist membership."""

import pytest

from app.core.exceptions import ConflictError, ForbiddenError, InvalidArgumentError, NotFoundError
from app.db.models.playlist import PlaylistSong
from app.services import membership_service
from app.services.membership_service import membership_manager
from tests.helpers.factories import make_playlist, make_song


def orders(db, playlist_id):
    """Return ``{song_id: order}`` straight from the table."""
    rows = db.query(PlaylistSong.song_id, PlaylistSong.order).filter(
        PlaylistSong.playlist_id == playlist_id
    ).all()
    return {song_id: order for song_id, order in rows}


@pytest.fixture
def playlist(db, owner):
    return make_playlist(db, owner)


@pytest.fixture
def songs(db):
    return [make_song(db, title) for title in ("A", "B", "C", "D")]


class TestAddSong:
    """Adding songs at explicit and implicit positions."""

    def test_append_to_empty_playlist(self, db, owner, playlist, songs):
        membership = membership_manager.add_song(db, playlist.id, owner.id, songs[0].id)

        assert membership.order == 1
        assert membership.song.title == "A"
        assert orders(db, playlist.id) == {songs[0].id: 1}

    def test_append_without_position_goes_last(self, db, owner, playlist, songs):
        for song in songs[:3]:
            membership_manager.add_song(db, playlist.id, owner.id, song.id)

        assert orders(db, playlist.id) == {songs[0].id: 1, songs[1].id: 2, songs[2].id: 3}

    def test_insert_at_front_shifts_everyone(self, db, owner, playlist, songs):
        a, b, c = songs[:3]
        membership_manager.add_song(db, playlist.id, owner.id, a.id)
        membership_manager.add_song(db, playlist.id, owner.id, b.id)

        membership = membership_manager.add_song(db, playlist.id, owner.id, c.id, order=1)

        assert membership.order == 1
        assert orders(db, playlist.id) == {c.id: 1, a.id: 2, b.id: 3}

    def test_insert_in_middle(self, db, owner, playlist, songs):
        a, b, c, d = songs
        for song in (a, b, c):
            membership_manager.add_song(db, playlist.id, owner.id, song.id)

        membership_manager.add_song(db, playlist.id, owner.id, d.id, order=2)

        assert orders(db, playlist.id) == {a.id: 1, d.id: 2, b.id: 3, c.id: 4}

    def test_explicit_position_one_past_end_appends(self, db, owner, playlist, songs):
        membership_manager.add_song(db, playlist.id, owner.id, songs[0].id)

        membership = membership_manager.add_song(db, playlist.id, owner.id, songs[1].id, order=2)

        assert membership.order == 2

    def test_duplicate_song_conflicts_and_leaves_table(self, db, owner, playlist, songs):
        membership_manager.add_song(db, playlist.id, owner.id, songs[0].id)
        before = orders(db, playlist.id)

        with pytest.raises(ConflictError):
            membership_manager.add_song(db, playlist.id, owner.id, songs[0].id, order=1)

        assert orders(db, playlist.id) == before

    @pytest.mark.parametrize("position", [0, -1, 3, 5])
    def test_out_of_range_position_rejected(self, db, owner, playlist, songs, position):
        membership_manager.add_song(db, playlist.id, owner.id, songs[0].id)

        with pytest.raises(InvalidArgumentError):
            membership_manager.add_song(db, playlist.id, owner.id, songs[1].id, order=position)

        assert orders(db, playlist.id) == {songs[0].id: 1}

    def test_missing_playlist(self, db, owner, songs):
        with pytest.raises(NotFoundError):
            membership_manager.add_song(db, 999, owner.id, songs[0].id)

    def test_missing_song(self, db, owner, playlist):
        with pytest.raises(NotFoundError):
            membership_manager.add_song(db, playlist.id, owner.id, 999)

    def test_non_owner_forbidden_even_with_bad_input(self, db, stranger, playlist):
        # Ownership is checked before the song or position
        with pytest.raises(ForbiddenError):
            membership_manager.add_song(db, playlist.id, stranger.id, 999, order=42)

    def test_same_song_in_two_playlists_has_independent_order(self, db, owner, songs):
        first = make_playlist(db, owner, "First")
        second = make_playlist(db, owner, "Second")
        membership_manager.add_song(db, first.id, owner.id, songs[0].id)
        membership_manager.add_song(db, first.id, owner.id, songs[1].id)

        membership = membership_manager.add_song(db, second.id, owner.id, songs[1].id)

        assert membership.order == 1
        assert orders(db, first.id) == {songs[0].id: 1, songs[1].id: 2}


class TestRemoveSong:
    """Removing songs closes the gap they leave."""

    def test_remove_middle_song_shifts_later_songs(self, db, owner, playlist, songs):
        a, b, c = songs[:3]
        for song in (a, b, c):
            membership_manager.add_song(db, playlist.id, owner.id, song.id)

        membership_manager.remove_song(db, playlist.id, b.id, owner.id)

        assert orders(db, playlist.id) == {a.id: 1, c.id: 2}

    def test_remove_last_song(self, db, owner, playlist, songs):
        a, b = songs[:2]
        membership_manager.add_song(db, playlist.id, owner.id, a.id)
        membership_manager.add_song(db, playlist.id, owner.id, b.id)

        membership_manager.remove_song(db, playlist.id, b.id, owner.id)

        assert orders(db, playlist.id) == {a.id: 1}

    def test_remove_song_not_in_playlist(self, db, owner, playlist, songs):
        membership_manager.add_song(db, playlist.id, owner.id, songs[0].id)

        with pytest.raises(NotFoundError):
            membership_manager.remove_song(db, playlist.id, songs[1].id, owner.id)

        assert orders(db, playlist.id) == {songs[0].id: 1}

    def test_remove_from_missing_playlist(self, db, owner, songs):
        with pytest.raises(NotFoundError):
            membership_manager.remove_song(db, 999, songs[0].id, owner.id)

    def test_non_owner_cannot_remove(self, db, owner, stranger, playlist, songs):
        membership_manager.add_song(db, playlist.id, owner.id, songs[0].id)

        with pytest.raises(ForbiddenError):
            membership_manager.remove_song(db, playlist.id, songs[0].id, stranger.id)

        assert orders(db, playlist.id) == {songs[0].id: 1}


class TestLostRace:
    """A uniqueness violation from the database rolls the whole change back."""

    def test_add_position_collision_conflicts(self, db, owner, playlist, songs, monkeypatch):
        a, b, c = songs[:3]
        membership_manager.add_song(db, playlist.id, owner.id, a.id)
        membership_manager.add_song(db, playlist.id, owner.id, b.id)
        # Without the shift, the new row lands on an order that is taken
        monkeypatch.setattr(membership_service, "shift_orders", lambda *args: None)

        with pytest.raises(ConflictError):
            membership_manager.add_song(db, playlist.id, owner.id, c.id, order=1)

        assert orders(db, playlist.id) == {a.id: 1, b.id: 2}

    def test_remove_collision_conflicts_and_restores_row(self, db, owner, playlist, songs, monkeypatch):
        a, b, c = songs[:3]
        for song in (a, b, c):
            membership_manager.add_song(db, playlist.id, owner.id, song.id)

        def collapse_orders(db, playlist_id, start, delta):
            db.query(PlaylistSong).filter(PlaylistSong.playlist_id == playlist_id).update(
                {PlaylistSong.order: 1}, synchronize_session=False
            )

        monkeypatch.setattr(membership_service, "shift_orders", collapse_orders)

        with pytest.raises(ConflictError):
            membership_manager.remove_song(db, playlist.id, a.id, owner.id)

        assert orders(db, playlist.id) == {a.id: 1, b.id: 2, c.id: 3}


def test_documented_scenario(db, owner, playlist, songs):
    """Append A, append B, insert C first, remove A -> {C: 1, B: 2}."""
    a, b, c = songs[:3]

    assert membership_manager.add_song(db, playlist.id, owner.id, a.id).order == 1
    assert membership_manager.add_song(db, playlist.id, owner.id, b.id).order == 2
    assert membership_manager.add_song(db, playlist.id, owner.id, c.id, order=1).order == 1
    assert orders(db, playlist.id) == {c.id: 1, a.id: 2, b.id: 3}

    membership_manager.remove_song(db, playlist.id, a.id, owner.id)

    assert orders(db, playlist.id) == {c.id: 1, b.id: 2}
