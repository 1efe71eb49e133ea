"""Imagen API client used by the generation controller."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from config.settings import DEFAULT_IMAGE_MODEL, AppConfig
from modules.presets.catalog import is_aspect_ratio
from modules.services.errors import (
    ConfigurationError,
    GenerationError,
    InvalidCredential,
    NoImageProduced,
    ServiceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_INVALID_KEY_MARKERS = ("API key not valid", "API_KEY_INVALID")


@dataclass(slots=True)
class GenerationResult:
    """Image produced for a single request."""

    image_data: str  # base64 text
    mime_type: str = "image/jpeg"


class ImageGenerationClient:
    """Facade around ``genai.Client`` that issues one request per image."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: str = DEFAULT_IMAGE_MODEL,
        output_mime_type: str = "image/jpeg",
        client: Any = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ConfigurationError("An API key is required to create the Imagen client")
            client = genai.Client(api_key=api_key)
        self._client = client
        self.model = model
        self.output_mime_type = output_mime_type

    @classmethod
    def from_config(cls, config: AppConfig) -> "ImageGenerationClient":
        return cls(
            config.api_key,
            model=config.image_model,
            output_mime_type=config.output_mime_type,
        )

    async def generate(self, prompt: str, aspect_ratio: str) -> GenerationResult:
        """Generate one image and return it as base64 text.

        Every failure is raised as a GenerationError subclass; the original
        exception is logged and chained but its text never reaches the UI.
        """
        if not is_aspect_ratio(aspect_ratio):
            raise ValidationError(f"Unsupported aspect ratio: {aspect_ratio!r}")

        try:
            response = await self._client.aio.models.generate_images(
                model=self.model,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type=self.output_mime_type,
                    aspect_ratio=aspect_ratio,
                ),
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("Error generating image with the Imagen API: %s", exc, exc_info=exc)
            raise self._translate_error(exc) from exc

        image_bytes = self._first_image_bytes(response)
        if not image_bytes:
            logger.warning(
                "Imagen returned no image for prompt %r (filtered reason: %s)",
                prompt,
                self._filtered_reason(response),
            )
            raise NoImageProduced()

        if isinstance(image_bytes, bytes):
            image_data = base64.b64encode(image_bytes).decode("ascii")
        else:
            image_data = str(image_bytes)
        return GenerationResult(image_data=image_data, mime_type=self.output_mime_type)

    # Internal helpers ---------------------------------------------------------
    @staticmethod
    def _first_image_bytes(response: Any) -> Any:
        generated = getattr(response, "generated_images", None) or []
        if not generated:
            return None
        image = getattr(generated[0], "image", None)
        return getattr(image, "image_bytes", None) if image is not None else None

    @staticmethod
    def _filtered_reason(response: Any) -> Optional[str]:
        for item in getattr(response, "generated_images", None) or []:
            reason = getattr(item, "rai_filtered_reason", None)
            if reason:
                return str(reason)
        return None

    @staticmethod
    def _translate_error(exc: Exception) -> GenerationError:
        """Map SDK and transport exceptions onto the closed error set."""
        text = str(exc)
        status = ""
        if isinstance(exc, genai_errors.APIError):
            text = f"{text} {exc.message or ''}"
            status = str(exc.status or "")

        if "SAFETY" in text:
            return NoImageProduced()
        if status == "UNAUTHENTICATED" or any(marker in text for marker in _INVALID_KEY_MARKERS):
            return InvalidCredential()
        return ServiceError()
