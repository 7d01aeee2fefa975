"""
Integration tests for the reels session API.
"""
from fastapi.testclient import TestClient

AUTH = {"Authorization": "Bearer u1"}


def _open(client: TestClient, **body) -> dict:
    response = client.post("/v1/reels/sessions", json=body, headers=AUTH)
    assert response.status_code == 201
    return response.json()


def _phases(data: dict) -> dict:
    return {view["item"]["id"]: view["playback"]["phase"] for view in data["items"]}


class TestReelsSessionAPI:
    def test_open_session(self, test_client: TestClient):
        data = _open(test_client)

        assert data["status"] == "ready"
        assert data["active_index"] == 0
        assert [v["item"]["id"] for v in data["items"]] == ["v1", "v2", "v3", "v4"]
        assert data["items"][0]["item"]["author"]["username"] == "alice"
        assert data["items"][1]["engagement"] == {"is_liked": True, "count": 1, "comments_count": 0}
        assert data["commands"] == [
            {"item_id": "v1", "action": "play", "target": None, "muted": None}
        ]

    def test_commands_are_drained(self, test_client: TestClient):
        sid = _open(test_client)["session_id"]

        response = test_client.get(f"/v1/reels/sessions/{sid}")

        assert response.status_code == 200
        assert response.json()["commands"] == []

    def test_scroll_moves_playback(self, test_client: TestClient):
        sid = _open(test_client)["session_id"]

        response = test_client.post(
            f"/v1/reels/sessions/{sid}/scroll",
            json={"offset": 1600, "item_height": 800},
        )

        data = response.json()
        assert data["active_index"] == 2
        assert _phases(data) == {
            "v1": "inactive",
            "v2": "inactive",
            "v3": "active_playing",
            "v4": "inactive",
        }
        assert [(c["item_id"], c["action"]) for c in data["commands"]] == [("v1", "pause"), ("v3", "play")]

    def test_zero_item_height_rejected(self, test_client: TestClient):
        sid = _open(test_client)["session_id"]

        response = test_client.post(
            f"/v1/reels/sessions/{sid}/scroll",
            json={"offset": 100, "item_height": 0},
        )

        assert response.status_code == 422

    def test_overflowing_scroll_ratio_is_ignored(self, test_client: TestClient):
        sid = _open(test_client)["session_id"]

        response = test_client.post(
            f"/v1/reels/sessions/{sid}/scroll",
            json={"offset": 1e308, "item_height": 1e-10},
        )

        assert response.status_code == 200
        assert response.json()["active_index"] == 0
        assert _phases(response.json())["v1"] == "active_playing"

    def test_non_finite_scroll_rejected(self, test_client: TestClient):
        sid = _open(test_client)["session_id"]

        response = test_client.post(
            f"/v1/reels/sessions/{sid}/scroll",
            content='{"offset": Infinity, "item_height": 800}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422

    def test_landscape_then_user_exit(self, test_client: TestClient):
        sid = _open(test_client)["session_id"]
        base = f"/v1/reels/sessions/{sid}"

        data = test_client.post(f"{base}/orientation", json={"orientation": "landscape"}).json()
        assert _phases(data)["v1"] == "active_fullscreen"
        assert data["commands"][0]["target"] == "container"

        data = test_client.post(
            f"{base}/items/v1/fullscreen-events",
            json={"source": "standard", "is_fullscreen": False},
        ).json()
        assert _phases(data)["v1"] == "active_playing"
        assert data["items"][0]["playback"]["user_exited_fullscreen"] is True

        # Re-entry needs a fresh portrait -> landscape edge.
        test_client.post(f"{base}/orientation", json={"orientation": "portrait"})
        data = test_client.post(f"{base}/orientation", json={"orientation": "landscape"}).json()
        assert _phases(data)["v1"] == "active_fullscreen"

    def test_tap_mute_and_manual_fullscreen(self, test_client: TestClient):
        sid = _open(test_client)["session_id"]
        base = f"/v1/reels/sessions/{sid}/items/v1"

        data = test_client.post(f"{base}/tap").json()
        assert _phases(data)["v1"] == "active_paused"

        data = test_client.post(f"{base}/mute").json()
        assert data["items"][0]["playback"]["is_muted"] is True
        assert data["commands"] == [{"item_id": "v1", "action": "mute", "target": None, "muted": True}]

        data = test_client.post(f"{base}/fullscreen").json()
        assert _phases(data)["v1"] == "active_fullscreen"

        data = test_client.delete(f"{base}/fullscreen").json()
        assert _phases(data)["v1"] == "active_paused"

    def test_autoplay_blocked(self, test_client: TestClient):
        data = _open(test_client, capabilities={"autoplay": False})

        assert _phases(data)["v1"] == "active_paused"
        assert data["commands"] == []

    def test_play_rejected_event(self, test_client: TestClient):
        sid = _open(test_client)["session_id"]

        data = test_client.post(
            f"/v1/reels/sessions/{sid}/items/v1/playback-events",
            json={"event": "play_rejected"},
        ).json()

        assert _phases(data)["v1"] == "active_paused"

    def test_unknown_item(self, test_client: TestClient):
        sid = _open(test_client)["session_id"]

        response = test_client.post(f"/v1/reels/sessions/{sid}/items/nope/tap")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_close_session(self, test_client: TestClient):
        sid = _open(test_client)["session_id"]

        assert test_client.delete(f"/v1/reels/sessions/{sid}").status_code == 204
        assert test_client.get(f"/v1/reels/sessions/{sid}").status_code == 404

    def test_unknown_session(self, test_client: TestClient):
        response = test_client.get("/v1/reels/sessions/does-not-exist")

        assert response.status_code == 404


class TestReelsEngagementAPI:
    def test_like_round_trip(self, test_client: TestClient, backend):
        sid = _open(test_client)["session_id"]
        url = f"/v1/reels/sessions/{sid}/items/v1/like"

        data = test_client.post(url).json()
        assert data["engagement"]["is_liked"] is True
        assert data["engagement"]["count"] == 3

        data = test_client.post(url).json()
        assert data["engagement"]["is_liked"] is False
        assert data["engagement"]["count"] == 2

    def test_like_requires_sign_in(self, test_client: TestClient):
        response = test_client.post("/v1/reels/sessions", json={})
        sid = response.json()["session_id"]

        response = test_client.post(f"/v1/reels/sessions/{sid}/items/v1/like")

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Please sign in to like posts"

    def test_like_rolls_back_on_write_failure(self, test_client: TestClient, backend):
        sid = _open(test_client)["session_id"]
        backend.write_failures.add("likes")

        response = test_client.post(f"/v1/reels/sessions/{sid}/items/v1/like")
        assert response.status_code == 502

        data = test_client.get(f"/v1/reels/sessions/{sid}").json()
        assert data["items"][0]["engagement"]["count"] == 2
        assert data["items"][0]["engagement"]["is_liked"] is False

    def test_comments(self, test_client: TestClient):
        sid = _open(test_client)["session_id"]
        base = f"/v1/reels/sessions/{sid}/items/v1/comments"

        response = test_client.post(base, json={"content": "so good"}, headers=AUTH)
        assert response.status_code == 201
        assert response.json()["user_id"] == "u1"

        comments = test_client.get(base).json()
        assert [c["content"] for c in comments] == ["Gorgeous", "so good"]

        data = test_client.get(f"/v1/reels/sessions/{sid}").json()
        assert data["items"][0]["engagement"]["comments_count"] == 2

    def test_share(self, test_client: TestClient):
        sid = _open(test_client)["session_id"]

        data = test_client.post(f"/v1/reels/sessions/{sid}/items/v2/share").json()

        assert data == {"item_id": "v2", "url": "https://reelview.app/reels/v2"}

    def test_load_failure_is_error_state(self, test_client: TestClient, backend):
        backend.read_failures.add("videos")

        data = _open(test_client)

        assert data["status"] == "error"
        assert data["items"] == []
        assert data["error"]
