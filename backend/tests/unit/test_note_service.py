"""Unit tests for note persistence and voice-note audio."""

from unittest.mock import patch

import pytest

from backend.src.models.note import NoteCreate, NoteType, NoteUpdate
from backend.src.services.document_store import DocumentStoreError
from backend.src.services.gallery import NOTES_COLLECTION, ArtifactNotFoundError
from backend.src.services.note_service import (
    AUDIO_UPLOAD_FAILED,
    DEFAULT_NOTE_TITLE,
    NOTE_SAVE_FAILED,
    NoteSaveError,
    NoteService,
)
from backend.src.services.object_store import ObjectNotFoundError, ObjectStoreError


@pytest.fixture
def notes(store, objects, gallery) -> NoteService:
    return NoteService(store, objects, gallery)


def test_save_trims_and_defaults_title(notes) -> None:
    note_id = notes.save_note("user-1", NoteCreate(title="   ", content="  Buy milk and bread  "))

    note = notes.get_note("user-1", note_id)
    assert note.title == DEFAULT_NOTE_TITLE
    assert note.content == "Buy milk and bread"
    assert note.type == NoteType.TEXT
    assert note.tags == ["buy", "milk", "bread"]
    assert note.is_favorite is False


def test_save_strips_null_fields(notes, store) -> None:
    note_id = notes.save_note("user-1", NoteCreate(title="t", content="x"))

    record = store.get(NOTES_COLLECTION, note_id)
    for key in ("language", "audioUrl", "audioPath", "tags"):
        assert key not in record


def test_write_failure_raises_note_save_error(notes) -> None:
    with patch.object(notes.store, "create", side_effect=DocumentStoreError("locked")):
        with pytest.raises(NoteSaveError) as excinfo:
            notes.save_note("user-1", NoteCreate(title="t", content="c"))

    assert excinfo.value.message == NOTE_SAVE_FAILED


def test_upload_audio_is_durable(notes, objects) -> None:
    upload = notes.upload_audio("user-1", b"RIFFdata", "clip.webm", "audio/webm")

    assert upload.audio_path.startswith("users/user-1/voice-notes/")
    assert upload.audio_path.endswith(".webm")
    assert objects.path_from_url(upload.audio_url) == upload.audio_path
    assert objects.read(upload.audio_path) == (b"RIFFdata", "audio/webm")


def test_upload_audio_failure(notes) -> None:
    with patch.object(notes.objects, "upload", side_effect=ObjectStoreError("disk full")):
        with pytest.raises(NoteSaveError) as excinfo:
            notes.upload_audio("user-1", b"x", "clip.webm")

    assert excinfo.value.message == AUDIO_UPLOAD_FAILED
    assert excinfo.value.status_code == 503


def test_voice_note_keeps_durable_audio(notes) -> None:
    upload = notes.upload_audio("user-1", b"audio", "clip.webm", "audio/webm")

    note_id = notes.save_note(
        "user-1",
        NoteCreate(
            title="Standup",
            content="hello world",
            type=NoteType.VOICE,
            language="english",
            audio_url=upload.audio_url,
            audio_path=upload.audio_path,
        ),
    )

    note = notes.get_note("user-1", note_id)
    assert note.audio_url == upload.audio_url
    assert note.audio_path == upload.audio_path


@pytest.mark.parametrize(
    "audio_url",
    ["blob:http://localhost:3000/5b1e", "data:audio/webm;base64,AAAA", "https://cdn.example/a.webm"],
)
def test_non_durable_audio_is_dropped(notes, audio_url: str) -> None:
    note_id = notes.save_note(
        "user-1",
        NoteCreate(title="t", content="c", type=NoteType.VOICE, audio_url=audio_url),
    )

    note = notes.get_note("user-1", note_id)
    assert note.audio_url is None
    assert note.audio_path is None
    assert note.type == NoteType.VOICE


def test_update_recomputes_tags(notes) -> None:
    note_id = notes.save_note("user-1", NoteCreate(title="t", content="apples"))

    updated = notes.update_note("user-1", note_id, NoteUpdate(content="oranges and pears"))

    assert updated.content == "oranges and pears"
    assert updated.tags == ["oranges", "pears"]
    assert updated.title == "t"


def test_search_and_type_filter(notes) -> None:
    notes.save_note("user-1", NoteCreate(title="Groceries", content="milk"))
    notes.save_note("user-1", NoteCreate(title="Ideas", content="Build a MILKshake bar", type=NoteType.VOICE))
    notes.save_note("user-2", NoteCreate(title="Milk", content="not mine"))

    assert {n.title for n in notes.search_user_notes("user-1", "milk")} == {"Groceries", "Ideas"}
    assert [n.title for n in notes.get_user_notes("user-1", note_type=NoteType.VOICE)] == ["Ideas"]


def test_toggle_favorite_twice_restores_state(notes) -> None:
    note_id = notes.save_note("user-1", NoteCreate(title="t", content="c"))

    assert notes.toggle_favorite("user-1", note_id).is_favorite is True
    assert notes.toggle_favorite("user-1", note_id).is_favorite is False


def test_delete_removes_audio(notes, objects) -> None:
    upload = notes.upload_audio("user-1", b"audio", "clip.webm")
    note_id = notes.save_note(
        "user-1",
        NoteCreate(title="t", content="c", type=NoteType.VOICE, audio_url=upload.audio_url),
    )

    notes.delete_note("user-1", note_id)

    with pytest.raises(ArtifactNotFoundError):
        notes.get_note("user-1", note_id)
    with pytest.raises(ObjectNotFoundError):
        objects.read(upload.audio_path)


def test_cannot_touch_other_users_notes(notes) -> None:
    note_id = notes.save_note("user-1", NoteCreate(title="t", content="c"))

    with pytest.raises(ArtifactNotFoundError):
        notes.update_note("user-2", note_id, NoteUpdate(title="mine now"))
    with pytest.raises(ArtifactNotFoundError):
        notes.delete_note("user-2", note_id)


def test_other_users_object_is_not_accepted_as_audio(notes, objects) -> None:
    victim_url = objects.upload(b"png", "users/victim/ai-images/1-abc-fox.png", content_type="image/png")

    note_id = notes.save_note(
        "attacker",
        NoteCreate(title="t", content="c", type=NoteType.VOICE, audio_url=victim_url),
    )
    notes.delete_note("attacker", note_id)

    assert objects.read("users/victim/ai-images/1-abc-fox.png") == (b"png", "image/png")


def test_traversal_out_of_own_folder_is_not_accepted(notes, objects) -> None:
    objects.upload(b"png", "users/victim/ai-images/fox.png")
    url = objects.get_url("users/victim/ai-images/fox.png").replace(
        "users/victim", "users/attacker/../victim"
    )

    note_id = notes.save_note("attacker", NoteCreate(title="t", content="c", audio_url=url))

    assert notes.get_note("attacker", note_id).audio_path is None


def test_delete_leaves_foreign_audio_path_alone(notes, objects, store) -> None:
    objects.upload(b"png", "users/victim/ai-images/fox.png")
    note_id = store.create(
        NOTES_COLLECTION,
        {"userId": "attacker", "title": "t", "audioPath": "users/victim/ai-images/fox.png"},
    )

    notes.delete_note("attacker", note_id)

    assert objects.read("users/victim/ai-images/fox.png")[0] == b"png"
    with pytest.raises(ArtifactNotFoundError):
        notes.get_note("attacker", note_id)
