"""Command-driven state machines for the generate-and-save and voice-note flows.

A UI (or a test) drives these objects through discrete calls; each call either moves
the workflow to its next state or raises ``WorkflowError`` and leaves the state as
documented on the method.
"""

from __future__ import annotations

from enum import Enum
import logging
from typing import Callable, List, Optional, Protocol

from pydantic import ValidationError

from ..models.image import GeneratedImage, ImageQuality, ImageSize, ImageStyle, SaveImageRequest
from ..models.note import AudioUpload, NoteCreate, NoteType
from .catalog import TRANSCRIPTION_LANGUAGES
from .image_service import ImageSaveError, ImageService
from .note_service import NoteService

logger = logging.getLogger(__name__)

DEFAULT_VOICE_TITLE = "Voice Note"


class WorkflowError(Exception):
    """Raised when a command is not valid in the current state or fails."""


class ImageWorkflowState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    PREVIEW_READY = "preview_ready"
    SAVING = "saving"
    SAVED = "saved"
    DISCARDED = "discarded"


class VoiceWorkflowState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    RECORDED = "recorded"
    TRANSCRIBING = "transcribing"
    TRANSCRIPT_READY = "transcript_ready"
    SAVING = "saving"
    SAVED = "saved"


class ImageGenerator(Protocol):
    async def generate_image(
        self, prompt: str, size: str, style: str, quality: str
    ) -> List[GeneratedImage]: ...


class AudioCapture(Protocol):
    """Exclusive recording device; ``release`` must always follow ``start``."""

    def start(self) -> None: ...

    def stop(self) -> bytes: ...

    def release(self) -> None: ...


class Transcriber(Protocol):
    async def transcribe_audio(
        self, data: bytes, filename: str, content_type: str, language_code: str
    ) -> str: ...


class ImageGenerationWorkflow:
    """Idle -> Generating -> PreviewReady -> (Saving -> Saved) | Discarded."""

    def __init__(
        self,
        user_id: str,
        generator: ImageGenerator,
        images: ImageService,
        on_saved: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.user_id = user_id
        self.generator = generator
        self.images = images
        self.on_saved = on_saved
        self.state = ImageWorkflowState.IDLE
        self.preview: Optional[GeneratedImage] = None
        self.prompt: Optional[str] = None
        self.size = ImageSize.SQUARE
        self.style = ImageStyle.VIVID
        self.quality = ImageQuality.STANDARD
        self.saved_id: Optional[str] = None
        self.error: Optional[str] = None
        self._generation = 0

    async def submit(
        self,
        prompt: str,
        size: ImageSize = ImageSize.SQUARE,
        style: ImageStyle = ImageStyle.VIVID,
        quality: ImageQuality = ImageQuality.STANDARD,
    ) -> Optional[GeneratedImage]:
        """
        Generate a preview for ``prompt``.

        Returns ``None`` when the workflow was discarded while the request was in
        flight; the late result is dropped.
        """
        if self.state in (ImageWorkflowState.GENERATING, ImageWorkflowState.SAVING):
            raise WorkflowError(f"Cannot start a generation while {self.state.value}")
        if not prompt or not prompt.strip():
            raise WorkflowError("Prompt is required")

        self._generation += 1
        token = self._generation
        self.state = ImageWorkflowState.GENERATING
        self.prompt = prompt.strip()
        self.size, self.style, self.quality = size, style, quality
        self.preview = None
        self.saved_id = None
        self.error = None

        try:
            results = await self.generator.generate_image(
                self.prompt, size.value, style.value, quality.value
            )
        except Exception as exc:
            if token == self._generation:
                self.state = ImageWorkflowState.IDLE
                self.error = str(exc)
            raise

        if token != self._generation:
            logger.info("Dropping generation result for a discarded preview")
            return None
        if not results:
            self.state = ImageWorkflowState.IDLE
            self.error = "No image was generated"
            raise WorkflowError(self.error)

        self.preview = results[0]
        self.state = ImageWorkflowState.PREVIEW_READY
        return self.preview

    async def save(self, category: Optional[str] = None) -> str:
        """Persist the preview; on failure the preview stays available for a retry."""
        if self.state != ImageWorkflowState.PREVIEW_READY or self.preview is None:
            raise WorkflowError(f"Nothing to save while {self.state.value}")

        try:
            request = SaveImageRequest(
                image_url=self.preview.url,
                prompt=self.prompt or "",
                revised_prompt=self.preview.revised_prompt,
                size=self.size,
                style=self.style,
                quality=self.quality,
                category=category,
            )
        except ValidationError as exc:
            raise WorkflowError(f"Invalid image: {exc.errors()[0].get('msg')}") from exc

        self.state = ImageWorkflowState.SAVING
        try:
            image_id = await self.images.save_generated_image(self.user_id, request)
        except Exception as exc:
            self.state = ImageWorkflowState.PREVIEW_READY
            self.error = exc.message if isinstance(exc, ImageSaveError) else str(exc)
            raise

        self.saved_id = image_id
        self.error = None
        self.state = ImageWorkflowState.SAVED
        if self.on_saved is not None:
            self.on_saved(image_id)
        return image_id

    def discard(self) -> None:
        """Close the preview without saving; an in-flight result is ignored."""
        if self.state == ImageWorkflowState.SAVING:
            raise WorkflowError("Cannot discard while saving")
        if self.state == ImageWorkflowState.IDLE:
            return
        self._generation += 1
        self.preview = None
        self.state = ImageWorkflowState.DISCARDED

    def reset(self) -> None:
        if self.state in (ImageWorkflowState.GENERATING, ImageWorkflowState.SAVING):
            raise WorkflowError(f"Cannot reset while {self.state.value}")
        self.preview = None
        self.prompt = None
        self.saved_id = None
        self.error = None
        self.state = ImageWorkflowState.IDLE


class VoiceNoteWorkflow:
    """Idle -> Recording -> Recorded -> Transcribing -> TranscriptReady -> Saving -> Saved."""

    def __init__(
        self,
        user_id: str,
        capture: AudioCapture,
        transcriber: Transcriber,
        notes: NoteService,
        filename: str = "recording.webm",
        content_type: str = "audio/webm",
        on_saved: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.user_id = user_id
        self.capture = capture
        self.transcriber = transcriber
        self.notes = notes
        self.filename = filename
        self.content_type = content_type
        self.on_saved = on_saved
        self.state = VoiceWorkflowState.IDLE
        self.audio: Optional[bytes] = None
        self.transcript: Optional[str] = None
        self.language: Optional[str] = None
        self.saved_id: Optional[str] = None
        self._upload: Optional[AudioUpload] = None

    def _require(self, *states: VoiceWorkflowState) -> None:
        if self.state not in states:
            raise WorkflowError(f"Command not allowed while {self.state.value}")

    def _clear(self) -> None:
        self.audio = None
        self.transcript = None
        self.language = None
        self._upload = None

    def start_recording(self) -> None:
        self._require(VoiceWorkflowState.IDLE, VoiceWorkflowState.SAVED)
        self._clear()
        self.saved_id = None
        try:
            self.capture.start()
        except Exception as exc:
            self.capture.release()
            self.state = VoiceWorkflowState.IDLE
            raise WorkflowError(f"Could not start recording: {exc}") from exc
        self.state = VoiceWorkflowState.RECORDING

    def stop_recording(self) -> bytes:
        self._require(VoiceWorkflowState.RECORDING)
        try:
            audio = self.capture.stop()
        except Exception as exc:
            self.state = VoiceWorkflowState.IDLE
            raise WorkflowError(f"Recording failed: {exc}") from exc
        finally:
            self.capture.release()

        if not audio:
            self.state = VoiceWorkflowState.IDLE
            raise WorkflowError("No audio was captured")
        self.audio = audio
        self.state = VoiceWorkflowState.RECORDED
        return audio

    def discard_recording(self) -> None:
        if self.state == VoiceWorkflowState.RECORDING:
            try:
                self.capture.stop()
            except Exception as exc:
                raise WorkflowError(f"Recording failed: {exc}") from exc
            finally:
                self.capture.release()
                self._clear()
                self.state = VoiceWorkflowState.IDLE
            return
        self._require(VoiceWorkflowState.RECORDED)
        self._clear()
        self.state = VoiceWorkflowState.IDLE

    async def transcribe(self, language: str = "english") -> str:
        self._require(VoiceWorkflowState.RECORDED)
        language_code = TRANSCRIPTION_LANGUAGES.get(language)
        if language_code is None:
            raise WorkflowError(f"Unsupported language: {language}")

        self.state = VoiceWorkflowState.TRANSCRIBING
        try:
            text = await self.transcriber.transcribe_audio(
                self.audio or b"", self.filename, self.content_type, language_code
            )
        except Exception:
            self.state = VoiceWorkflowState.RECORDED
            raise

        self.transcript = text.strip()
        self.language = language
        self.state = VoiceWorkflowState.TRANSCRIPT_READY
        return self.transcript

    def edit_transcript(self, text: str) -> None:
        self._require(VoiceWorkflowState.TRANSCRIPT_READY)
        self.transcript = text

    def cancel_transcript(self) -> None:
        self._require(VoiceWorkflowState.TRANSCRIPT_READY)
        self._clear()
        self.state = VoiceWorkflowState.IDLE

    def save(self, title: str = "") -> str:
        """Upload the recording (once) and persist the transcript as a voice note."""
        self._require(VoiceWorkflowState.TRANSCRIPT_READY)
        try:
            note = NoteCreate(
                title=title.strip() or DEFAULT_VOICE_TITLE,
                content=self.transcript or "",
                type=NoteType.VOICE,
                language=self.language,
            )
        except ValidationError as exc:
            raise WorkflowError(f"Invalid note: {exc.errors()[0].get('msg')}") from exc

        self.state = VoiceWorkflowState.SAVING
        try:
            if self._upload is None:
                self._upload = self.notes.upload_audio(
                    self.user_id, self.audio or b"", self.filename, self.content_type
                )
            note_id = self.notes.save_note(
                self.user_id,
                note.model_copy(
                    update={
                        "audio_url": self._upload.audio_url,
                        "audio_path": self._upload.audio_path,
                    }
                ),
            )
        except Exception:
            self.state = VoiceWorkflowState.TRANSCRIPT_READY
            raise

        self.saved_id = note_id
        self.state = VoiceWorkflowState.SAVED
        if self.on_saved is not None:
            self.on_saved(note_id)
        return note_id

    def reset(self) -> None:
        self._require(VoiceWorkflowState.SAVED, VoiceWorkflowState.IDLE)
        self._clear()
        self.saved_id = None
        self.state = VoiceWorkflowState.IDLE


__all__ = [
    "WorkflowError",
    "ImageWorkflowState",
    "VoiceWorkflowState",
    "ImageGenerationWorkflow",
    "VoiceNoteWorkflow",
    "AudioCapture",
    "Transcriber",
    "ImageGenerator",
]
