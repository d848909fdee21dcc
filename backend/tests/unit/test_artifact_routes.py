"""Route tests for saved images, notes, profiles, bookmarks and system endpoints."""

import logging

import httpx
import pytest

from backend.src.api.routes import system
from backend.tests.unit.helpers import bearer

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"
PROVIDER_URL = "https://provider.example/tmp/generated.png"


def provider(request: httpx.Request) -> httpx.Response:
    if request.url.host == "provider.example":
        return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/png"})
    if request.url.host == "www.googleapis.com":
        return httpx.Response(
            200,
            json={
                "items": [{"id": {"videoId": "abc"}, "snippet": {"title": "Lo-fi beats"}}],
                "pageInfo": {"totalResults": 1, "resultsPerPage": 1},
            },
        )
    return httpx.Response(404)


def save_image(client, prompt: str = "a red fox in the snow", **fields) -> str:
    body = {"imageUrl": PROVIDER_URL, "prompt": prompt}
    body.update(fields)
    response = client.post("/api/images", json=body, headers=bearer())
    assert response.status_code == 201
    return response.json()["id"]


class TestImageRoutes:
    def test_save_list_and_download(self, api) -> None:
        client, _ = api(provider)

        image_id = save_image(client, size="1792x1024", category="animals")
        listing = client.get("/api/images", headers=bearer()).json()

        assert [image["id"] for image in listing] == [image_id]
        saved = listing[0]
        assert saved["size"] == "1792x1024"
        assert saved["isFavorite"] is False
        assert saved["storageUrl"].startswith("http://testserver/files/users/user-1/ai-images/")

        download = client.get(saved["storageUrl"])
        assert download.status_code == 200
        assert download.content == PNG_BYTES

    def test_images_are_private(self, api) -> None:
        client, _ = api(provider)
        image_id = save_image(client)

        assert client.get("/api/images", headers=bearer("user-2")).json() == []
        response = client.get(f"/api/images/{image_id}", headers=bearer("user-2"))
        assert response.status_code == 404
        assert response.json()["code"] == "image_not_found"

    def test_favorites_and_filters(self, api) -> None:
        client, _ = api(provider)
        fox = save_image(client, "a red fox", category="animals")
        save_image(client, "neon skyline", category="cities")

        set_response = client.put(
            f"/api/images/{fox}/favorite", json={"isFavorite": True}, headers=bearer()
        )
        assert set_response.json()["isFavorite"] is True

        favorites = client.get("/api/images", params={"favorites": "true"}, headers=bearer())
        assert [image["id"] for image in favorites.json()] == [fox]

        searched = client.get("/api/images", params={"search": "NEON"}, headers=bearer())
        assert [image["prompt"] for image in searched.json()] == ["neon skyline"]

        toggled = client.post(f"/api/images/{fox}/favorite/toggle", headers=bearer())
        assert toggled.json()["isFavorite"] is False

    def test_update_stats_and_delete(self, api) -> None:
        client, _ = api(provider)
        image_id = save_image(client)

        updated = client.patch(
            f"/api/images/{image_id}", json={"category": "wildlife"}, headers=bearer()
        )
        assert updated.json()["category"] == "wildlife"

        stats = client.get("/api/images/stats", headers=bearer()).json()
        assert stats["totalImages"] == 1
        assert stats["categoryCounts"] == {"wildlife": 1}

        assert client.delete(f"/api/images/{image_id}", headers=bearer()).status_code == 204
        assert client.get(f"/api/images/{image_id}", headers=bearer()).status_code == 404

    def test_conversion_failure_is_reported(self, api) -> None:
        client, services = api(provider)

        response = client.post(
            "/api/images",
            json={"imageUrl": "https://elsewhere.example/missing.png", "prompt": "fox"},
            headers=bearer(),
        )

        assert response.status_code == 422
        assert response.json()["code"] == "conversion_failed"
        assert services.images.get_user_images("user-1") == []

    def test_missing_prompt_is_a_validation_error(self, api) -> None:
        client, _ = api(provider)

        response = client.post("/api/images", json={"imageUrl": PROVIDER_URL}, headers=bearer())

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"


class TestNoteRoutes:
    def test_crud(self, api) -> None:
        client, _ = api()

        created = client.post(
            "/api/notes", json={"title": "Groceries", "content": "milk and eggs"}, headers=bearer()
        )
        assert created.status_code == 201
        note_id = created.json()["id"]

        note = client.get(f"/api/notes/{note_id}", headers=bearer()).json()
        assert note["type"] == "text"
        assert note["tags"] == ["milk", "eggs"]

        updated = client.patch(
            f"/api/notes/{note_id}", json={"content": "bread"}, headers=bearer()
        )
        assert updated.json()["content"] == "bread"
        assert updated.json()["title"] == "Groceries"

        toggled = client.post(f"/api/notes/{note_id}/favorite/toggle", headers=bearer())
        assert toggled.json()["isFavorite"] is True

        assert client.delete(f"/api/notes/{note_id}", headers=bearer()).status_code == 204
        assert client.get(f"/api/notes/{note_id}", headers=bearer()).status_code == 404

    def test_voice_note_with_uploaded_audio(self, api) -> None:
        client, _ = api()

        upload = client.post(
            "/api/notes/audio",
            files={"audio": ("clip.webm", b"webm-bytes", "audio/webm")},
            headers=bearer(),
        )
        assert upload.status_code == 201
        audio = upload.json()
        assert audio["audioPath"].startswith("users/user-1/voice-notes/")

        created = client.post(
            "/api/notes",
            json={
                "title": "Standup",
                "content": "hello world",
                "type": "voice",
                "language": "english",
                "audioUrl": audio["audioUrl"],
            },
            headers=bearer(),
        )
        note_id = created.json()["id"]

        voice_notes = client.get("/api/notes", params={"type": "voice"}, headers=bearer()).json()
        assert [note["id"] for note in voice_notes] == [note_id]
        assert voice_notes[0]["audioUrl"] == audio["audioUrl"]
        assert client.get(audio["audioUrl"]).content == b"webm-bytes"

    def test_empty_audio_upload(self, api) -> None:
        client, _ = api()

        response = client.post(
            "/api/notes/audio",
            files={"audio": ("clip.webm", b"", "audio/webm")},
            headers=bearer(),
        )

        assert response.status_code == 400

    def test_notes_require_authentication(self, api) -> None:
        client, _ = api()

        assert client.get("/api/notes").status_code == 401


class TestProfileRoutes:
    def test_profile_created_from_token_claims(self, api) -> None:
        client, _ = api()
        headers = bearer("user-9", email="nine@example.com", name="Nine")

        profile = client.get("/api/profile", headers=headers).json()

        assert profile["uid"] == "user-9"
        assert profile["email"] == "nine@example.com"
        assert profile["displayName"] == "Nine"
        assert profile["preferences"] == {"theme": "light", "notifications": True}

    def test_missing_name_uses_default(self, api) -> None:
        client, _ = api()

        assert client.get("/api/profile", headers=bearer()).json()["displayName"] == "Anonymous User"

    def test_update_merges_preferences(self, api) -> None:
        client, _ = api()

        response = client.patch(
            "/api/profile",
            json={"bio": "Hello", "preferences": {"theme": "dark"}},
            headers=bearer(),
        )

        profile = response.json()
        assert profile["bio"] == "Hello"
        assert profile["preferences"] == {"theme": "dark", "notifications": True}


class TestVideoRoutes:
    def test_search_without_key_is_bad_gateway(self, api) -> None:
        client, _ = api(provider)

        response = client.get("/api/videos/search", params={"q": "lofi"}, headers=bearer())

        assert response.status_code == 502
        assert response.json()["code"] == "video_search_failed"

    def test_search(self, api, monkeypatch) -> None:
        from backend.src.services import config as config_module

        monkeypatch.setenv("YOUTUBE_API_KEY", "yt-test-key")
        config_module.reload_config()
        client, _ = api(provider)

        response = client.get(
            "/api/videos/search", params={"q": "lofi", "maxResults": 1}, headers=bearer()
        )

        assert response.status_code == 200
        assert response.json()["items"][0]["id"]["videoId"] == "abc"

    def test_bookmarks(self, api) -> None:
        client, _ = api()
        body = {"videoId": "abc", "title": "Lo-fi beats", "channelTitle": "Chill"}

        first = client.post("/api/bookmarks", json=body, headers=bearer())
        again = client.post("/api/bookmarks", json=body, headers=bearer())

        assert first.status_code == 201
        assert again.json()["id"] == first.json()["id"]
        listing = client.get("/api/bookmarks", headers=bearer()).json()
        assert [bookmark["videoId"] for bookmark in listing] == ["abc"]

        bookmark_id = first.json()["id"]
        assert client.delete(f"/api/bookmarks/{bookmark_id}", headers=bearer("user-2")).status_code == 404
        assert client.delete(f"/api/bookmarks/{bookmark_id}", headers=bearer()).status_code == 204
        assert client.get("/api/bookmarks", headers=bearer()).json() == []


class TestSystemRoutes:
    def test_health(self, api) -> None:
        client, _ = api()

        assert client.get("/health").json() == {"status": "healthy"}

    def test_client_config_is_public(self, api) -> None:
        client, _ = api()

        config = client.get("/api/config").json()

        assert config["publishableKey"] == "pk_test_playground"
        assert config["identityConfigured"] is True
        assert [size["value"] for size in config["imageSizes"]] == [
            "1024x1024",
            "1792x1024",
            "1024x1792",
        ]
        assert config["transcriptionLanguages"] == ["english", "spanish", "french", "turkish"]

    def test_logs_capture_extras(self, api) -> None:
        client, _ = api()
        system.install_log_buffer("INFO")
        logging.getLogger("backend.test").info("Saved image", extra={"image_id": "img-1"})

        response = client.get("/api/system/logs", headers=bearer())

        assert response.status_code == 200
        entry = next(e for e in response.json() if e["message"] == "Saved image")
        assert entry["level"] == "INFO"
        assert entry["extra"] == {"image_id": "img-1"}

    def test_logs_require_authentication(self, api) -> None:
        client, _ = api()

        assert client.get("/api/system/logs").status_code == 401

    @pytest.mark.parametrize("path", ["/files/users/user-1/missing.png", "/files/users/user-2/ai-images/none.png"])
    def test_missing_files(self, api, path: str) -> None:
        client, _ = api()

        assert client.get(path).status_code == 404
