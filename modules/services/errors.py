"""Error types shared by the generation services."""

from __future__ import annotations


class ImagenAppError(Exception):
    """Base class for application errors."""


class ConfigurationError(ImagenAppError):
    """Required runtime configuration is missing."""


class ValidationError(ImagenAppError):
    """A generation request failed local validation."""


class PersistedStateCorrupt(ImagenAppError):
    """Stored history could not be decoded."""


class GenerationError(ImagenAppError):
    """Image generation failed; ``user_message`` is safe to show in the UI."""

    user_message = "Failed to generate image. Please check the logs for more details."

    def __init__(self, user_message: str | None = None) -> None:
        if user_message:
            self.user_message = user_message
        super().__init__(self.user_message)


class NoImageProduced(GenerationError):
    """The service answered without an image, usually a safety block."""

    user_message = (
        "Image generation was blocked, most likely by safety settings. "
        "Please modify your prompt and try again."
    )


class InvalidCredential(GenerationError):
    """The service rejected the configured API key."""

    user_message = "The provided API key is not valid. Please check your configuration."


class ServiceError(GenerationError):
    """Any other transport or service failure."""
