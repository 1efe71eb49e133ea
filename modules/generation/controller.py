"""Generation state machine shared by the UI callbacks."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Protocol, Tuple, Union

from modules.presets.catalog import DEFAULT_ASPECT_RATIO, DEFAULT_STYLE, is_aspect_ratio, is_style
from modules.services.errors import GenerationError, ServiceError, ValidationError
from modules.services.history_service import GenerationHistoryService, HistoryEntry
from modules.services.image_client import GenerationResult
from modules.utils.image_utils import build_data_url

logger = logging.getLogger(__name__)


class GenerationStatus(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ImageClient(Protocol):
    async def generate(self, prompt: str, aspect_ratio: str) -> GenerationResult:
        ...


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """Validated user input for one generation."""

    prompt: str
    style: str
    aspect_ratio: str

    def full_prompt(self) -> str:
        """Prompt sent to the service: user text followed by the style modifier."""
        return f"{self.prompt.strip()}, {self.style}"


@dataclass(frozen=True, slots=True)
class ViewState:
    """Snapshot of everything the presentation layer renders."""

    status: GenerationStatus
    prompt: str
    style: str
    aspect_ratio: str
    image_url: Optional[str]
    error: Optional[str]
    history: Tuple[HistoryEntry, ...]

    @property
    def is_loading(self) -> bool:
        return self.status is GenerationStatus.GENERATING


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class GenerationController:
    """Owns prompt selection, the in-flight flag, the visible result and history."""

    def __init__(
        self,
        client: ImageClient,
        history_service: GenerationHistoryService,
        clock: Callable[[], str] = _utc_timestamp,
    ) -> None:
        self.client = client
        self.history_service = history_service
        self._clock = clock
        self.status = GenerationStatus.IDLE
        self.prompt = ""
        self.style = DEFAULT_STYLE
        self.aspect_ratio = DEFAULT_ASPECT_RATIO
        self.image_url: Optional[str] = None
        self.error: Optional[str] = None
        self.history: List[HistoryEntry] = history_service.load()

    @property
    def is_generating(self) -> bool:
        return self.status is GenerationStatus.GENERATING

    def can_generate(self, prompt: str) -> bool:
        return bool((prompt or "").strip()) and not self.is_generating

    def view(self) -> ViewState:
        return ViewState(
            status=self.status,
            prompt=self.prompt,
            style=self.style,
            aspect_ratio=self.aspect_ratio,
            image_url=self.image_url,
            error=self.error,
            history=tuple(self.history),
        )

    async def generate(self, prompt: str, style: str, aspect_ratio: str) -> bool:
        """Run one generation; returns True when a new image is shown.

        Blank prompts and calls made while another generation is in flight
        are ignored. The guard runs before the first await, so it cannot race
        with another call on the same event loop.
        """
        if not (prompt or "").strip():
            logger.debug("Ignoring generate request with an empty prompt")
            return False
        if self.is_generating:
            logger.info("Generation already in progress; ignoring new request")
            return False
        request = self._build_request(prompt, style, aspect_ratio)

        self.status = GenerationStatus.GENERATING
        self.prompt = request.prompt
        self.style = request.style
        self.aspect_ratio = request.aspect_ratio
        self.image_url = None
        self.error = None

        logger.info("Generating image (aspect ratio %s)", request.aspect_ratio)
        try:
            result = await self.client.generate(request.full_prompt(), request.aspect_ratio)
        except asyncio.CancelledError:
            logger.info("Generation task cancelled before completion")
            self.status = GenerationStatus.IDLE
            raise
        except GenerationError as exc:
            self._fail(exc)
            return False
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error during image generation")
            self._fail(ServiceError())
            return False

        image_url = build_data_url(result.image_data, result.mime_type)
        entry = HistoryEntry(
            id=self._new_entry_id(),
            prompt=request.prompt,
            style=request.style,
            aspect_ratio=request.aspect_ratio,
            image_url=image_url,
        )
        try:
            self.history = self.history_service.append(entry, self.history)
        except OSError:
            # The image is still shown; history keeps its last persisted state.
            logger.exception("Failed to save generation history")
        self.image_url = image_url
        self.status = GenerationStatus.SUCCEEDED
        logger.info("Image generated; history now holds %d item(s)", len(self.history))
        return True

    def select_history(self, item: Union[HistoryEntry, int]) -> HistoryEntry:
        """Show a stored entry without touching the in-flight status.

        A generation that is still running will replace this view when it
        completes.
        """
        entry = self.history[item] if isinstance(item, int) else item
        self.prompt = entry.prompt
        self.style = entry.style
        self.aspect_ratio = entry.aspect_ratio
        self.image_url = entry.image_url
        self.error = None
        return entry

    # Internal helpers ---------------------------------------------------------
    @staticmethod
    def _build_request(prompt: str, style: str, aspect_ratio: str) -> GenerationRequest:
        if not is_style(style):
            raise ValidationError(f"Unknown style preset: {style!r}")
        if not is_aspect_ratio(aspect_ratio):
            raise ValidationError(f"Unsupported aspect ratio: {aspect_ratio!r}")
        return GenerationRequest(prompt=prompt, style=style, aspect_ratio=aspect_ratio)

    def _fail(self, exc: GenerationError) -> None:
        self.error = exc.user_message
        self.image_url = None
        self.status = GenerationStatus.FAILED

    def _new_entry_id(self) -> str:
        base = self._clock()
        existing = {entry.id for entry in self.history}
        candidate = base
        suffix = 1
        while candidate in existing:
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate
