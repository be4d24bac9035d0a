"""API tests for playlist routes and the song membership endpoints."""

import pytest

from app.db.models.playlist import PlaylistSong
from tests.helpers.factories import auth_client, make_playlist, make_song, make_user


def song_orders(db, playlist_id):
    rows = db.query(PlaylistSong.song_id, PlaylistSong.order).filter(
        PlaylistSong.playlist_id == playlist_id
    ).all()
    return dict(rows)


@pytest.fixture
def owner_client(owner):
    return auth_client(owner)


@pytest.fixture
def playlist(db, owner):
    return make_playlist(db, owner)


class TestAddSongEndpoint:

    def test_add_returns_201_with_membership(self, db, owner_client, playlist):
        song = make_song(db, "Intro")

        response = owner_client.post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": song.id})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["order"] == 1
        assert body["data"]["songId"] == song.id
        assert body["data"]["song"]["title"] == "Intro"
        assert body["data"]["song"]["artist"]["name"] == "Intro Artist"

    def test_add_at_position(self, db, owner_client, playlist):
        first, second = make_song(db, "First"), make_song(db, "Second")
        owner_client.post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": first.id})

        response = owner_client.post(
            f"/api/v1/playlists/{playlist.id}/songs", json={"songId": second.id, "order": 1}
        )

        assert response.json()["data"]["order"] == 1
        assert song_orders(db, playlist.id) == {second.id: 1, first.id: 2}

    def test_duplicate_returns_409(self, db, owner_client, playlist):
        song = make_song(db)
        owner_client.post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": song.id})

        response = owner_client.post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": song.id})

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "error": {"message": "Song is already in the playlist", "code": "CONFLICT"},
        }

    def test_out_of_range_returns_400(self, db, owner_client, playlist):
        first, second = make_song(db, "First"), make_song(db, "Second")
        owner_client.post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": first.id})

        response = owner_client.post(
            f"/api/v1/playlists/{playlist.id}/songs", json={"songId": second.id, "order": 5}
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert song_orders(db, playlist.id) == {first.id: 1}

    def test_unknown_song_returns_404(self, owner_client, playlist):
        response = owner_client.post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": 12345})

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Song not found"

    def test_unknown_playlist_returns_404(self, db, owner_client):
        song = make_song(db)

        response = owner_client.post("/api/v1/playlists/999/songs", json={"songId": song.id})

        assert response.status_code == 404

    def test_stranger_gets_403(self, db, stranger, playlist):
        song = make_song(db)

        response = auth_client(stranger).post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": song.id})

        assert response.status_code == 403
        assert song_orders(db, playlist.id) == {}

    def test_anonymous_gets_401(self, db, client, playlist):
        song = make_song(db)

        response = client.post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": song.id})

        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.parametrize("payload", [{}, {"songId": 0}, {"songId": "abc"}, {"songId": 1, "order": "first"}])
    def test_invalid_body_returns_422(self, owner_client, playlist, payload):
        response = owner_client.post(f"/api/v1/playlists/{playlist.id}/songs", json=payload)

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize("order", [0, -3])
    def test_non_positive_position_returns_400(self, db, owner_client, playlist, order):
        song = make_song(db)

        response = owner_client.post(
            f"/api/v1/playlists/{playlist.id}/songs", json={"songId": song.id, "order": order}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ARGUMENT"
        assert song_orders(db, playlist.id) == {}

    def test_stranger_gets_403_even_with_bad_position(self, db, stranger, playlist):
        song = make_song(db)

        response = auth_client(stranger).post(
            f"/api/v1/playlists/{playlist.id}/songs", json={"songId": song.id, "order": 0}
        )

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Only the playlist owner can change its songs"


class TestRemoveSongEndpoint:

    def test_remove_returns_message_and_renumbers(self, db, owner_client, playlist):
        songs = [make_song(db, t) for t in ("A", "B", "C")]
        for song in songs:
            owner_client.post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": song.id})

        response = owner_client.delete(f"/api/v1/playlists/{playlist.id}/songs/{songs[0].id}")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"message": "Song removed from playlist"}}
        assert song_orders(db, playlist.id) == {songs[1].id: 1, songs[2].id: 2}

    def test_remove_missing_member_returns_404(self, db, owner_client, playlist):
        song = make_song(db)

        response = owner_client.delete(f"/api/v1/playlists/{playlist.id}/songs/{song.id}")

        assert response.status_code == 404

    def test_stranger_cannot_remove(self, db, owner_client, stranger, playlist):
        song = make_song(db)
        owner_client.post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": song.id})

        response = auth_client(stranger).delete(f"/api/v1/playlists/{playlist.id}/songs/{song.id}")

        assert response.status_code == 403
        assert song_orders(db, playlist.id) == {song.id: 1}


class TestPlaylistCrud:

    def test_create_defaults_to_public(self, owner_client):
        response = owner_client.post("/api/v1/playlists", json={"name": "  Road trip  "})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Road trip"
        assert data["isPublic"] is True
        assert data["type"] == "NORMAL"
        assert data["songs"] == []

    def test_create_rejects_bad_cover(self, owner_client):
        response = owner_client.post("/api/v1/playlists", json={"name": "X", "coverUrl": "ftp://nope"})

        assert response.status_code == 422

    def test_detail_lists_songs_in_order(self, db, owner_client, playlist):
        first, second = make_song(db, "First"), make_song(db, "Second")
        owner_client.post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": first.id})
        owner_client.post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": second.id, "order": 1})

        data = owner_client.get(f"/api/v1/playlists/{playlist.id}").json()["data"]

        assert [s["song"]["title"] for s in data["songs"]] == ["Second", "First"]
        assert [s["order"] for s in data["songs"]] == [1, 2]
        assert data["songCount"] == 2
        assert data["user"]["username"] == "owner"

    def test_private_playlist_hidden_from_others(self, db, owner, stranger, client):
        private = make_playlist(db, owner, "Secret", is_public=False)

        assert auth_client(owner).get(f"/api/v1/playlists/{private.id}").status_code == 200
        assert auth_client(stranger).get(f"/api/v1/playlists/{private.id}").status_code == 404
        assert client.get(f"/api/v1/playlists/{private.id}").status_code == 404

    def test_update_by_owner(self, owner_client, playlist):
        response = owner_client.put(f"/api/v1/playlists/{playlist.id}", json={"name": "Renamed", "isPublic": False})

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Renamed"
        assert response.json()["data"]["isPublic"] is False

    def test_update_with_empty_body(self, owner_client, playlist):
        response = owner_client.put(f"/api/v1/playlists/{playlist.id}", json={})

        assert response.status_code == 400

    def test_update_by_stranger_forbidden(self, stranger, playlist):
        response = auth_client(stranger).put(f"/api/v1/playlists/{playlist.id}", json={"name": "Mine now"})

        assert response.status_code == 403

    def test_delete_cascades_memberships(self, db, owner_client, playlist):
        song = make_song(db)
        owner_client.post(f"/api/v1/playlists/{playlist.id}/songs", json={"songId": song.id})

        response = owner_client.delete(f"/api/v1/playlists/{playlist.id}")

        assert response.status_code == 200
        assert owner_client.get(f"/api/v1/playlists/{playlist.id}").status_code == 404
        assert db.query(PlaylistSong).count() == 0

    def test_delete_by_stranger_forbidden(self, stranger, playlist):
        assert auth_client(stranger).delete(f"/api/v1/playlists/{playlist.id}").status_code == 403

    def test_my_playlists(self, db, owner, stranger, owner_client):
        make_playlist(db, owner, "Mine")
        make_playlist(db, stranger, "Theirs")

        data = owner_client.get("/api/v1/playlists/my").json()["data"]

        assert [p["name"] for p in data] == ["Mine"]


class TestPublicListing:

    def test_only_public_playlists_paginated(self, db, owner, client):
        for i in range(3):
            make_playlist(db, owner, f"Public {i}")
        make_playlist(db, owner, "Hidden", is_public=False)

        body = client.get("/api/v1/playlists", params={"page": 1, "pageSize": 2}).json()["data"]

        assert len(body["items"]) == 2
        assert body["pagination"] == {"page": 1, "pageSize": 2, "total": 3, "totalPages": 2}
        assert all(item["isPublic"] for item in body["items"])

    def test_search_matches_owner_username(self, db, owner, client):
        other = make_user(db, "dj_bob")
        make_playlist(db, owner, "Chill")
        make_playlist(db, other, "Party")

        items = client.get("/api/v1/playlists", params={"search": "bob"}).json()["data"]["items"]

        assert [p["name"] for p in items] == ["Party"]


class TestFollowing:

    def test_follow_and_unfollow(self, db, owner, stranger, playlist):
        fan = auth_client(stranger)

        assert fan.post(f"/api/v1/playlists/{playlist.id}/follow").status_code == 200
        assert fan.get(f"/api/v1/playlists/{playlist.id}/follow").json()["data"] == {
            "playlistId": playlist.id,
            "isFollowing": True,
        }
        assert fan.get(f"/api/v1/playlists/{playlist.id}").json()["data"]["followerCount"] == 1

        followed = fan.get("/api/v1/playlists/followed").json()["data"]
        assert [p["id"] for p in followed["items"]] == [playlist.id]
        assert followed["items"][0]["isFollowing"] is True

        assert fan.delete(f"/api/v1/playlists/{playlist.id}/follow").status_code == 200
        assert fan.delete(f"/api/v1/playlists/{playlist.id}/follow").status_code == 404

    def test_follow_twice_is_idempotent(self, stranger, playlist):
        fan = auth_client(stranger)
        fan.post(f"/api/v1/playlists/{playlist.id}/follow")

        response = fan.post(f"/api/v1/playlists/{playlist.id}/follow")

        assert response.status_code == 200
        assert response.json()["data"]["isFollowing"] is True

    def test_cannot_follow_own_playlist(self, owner_client, playlist):
        assert owner_client.post(f"/api/v1/playlists/{playlist.id}/follow").status_code == 400

    def test_cannot_follow_private_playlist(self, db, owner, stranger):
        private = make_playlist(db, owner, "Secret", is_public=False)

        assert auth_client(stranger).post(f"/api/v1/playlists/{private.id}/follow").status_code == 404


class TestFavorites:

    def test_favorites_created_on_first_access(self, owner_client):
        first = owner_client.get("/api/v1/playlists/favorites").json()["data"]
        second = owner_client.get("/api/v1/playlists/favorites").json()["data"]

        assert first["id"] == second["id"]
        assert first["type"] == "FAVORITES"
        assert first["isPublic"] is False

    def test_like_and_unlike_song(self, db, owner_client):
        song = make_song(db)

        response = owner_client.post("/api/v1/playlists/favorites/songs", json={"songId": song.id})
        assert response.status_code == 201
        assert response.json()["data"]["order"] == 1

        assert owner_client.post("/api/v1/playlists/favorites/songs", json={"songId": song.id}).status_code == 409
        assert owner_client.delete(f"/api/v1/playlists/favorites/songs/{song.id}").status_code == 200
        assert owner_client.get("/api/v1/playlists/favorites").json()["data"]["songs"] == []
