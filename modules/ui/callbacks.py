"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import dataclasses
import html
import logging
from typing import Any, AsyncIterator, Optional

from PIL import Image

from modules.generation.controller import GenerationController, GenerationStatus, ViewState
from modules.utils.image_utils import data_url_to_image, download_filename, parse_data_url

logger = logging.getLogger(__name__)

PLACEHOLDER_MESSAGE = (
    "**Your generated image will appear here.**\n\n"
    'Enter a prompt and click "Generate Image" to start.'
)
LOADING_MESSAGE = "Generating your image..."
GENERATE_LABEL = "Generate Image"
GENERATING_LABEL = "Generating..."

# Order of the values returned by every rendering callback.
OUTPUT_FIELDS = (
    "prompt",
    "style",
    "aspect_ratio",
    "image",
    "status",
    "download",
    "gallery",
    "generate_label",
    "generate_enabled",
)


def _decode_preview(url: str) -> Optional[Image.Image]:
    try:
        return data_url_to_image(url)
    except (ValueError, OSError) as exc:
        logger.warning("Could not decode stored image: %s", exc)
        return None


def _download_link(url: str) -> str:
    try:
        mime_type, _ = parse_data_url(url)
    except ValueError:
        return ""
    filename = download_filename(mime_type)
    return (
        f'<a href="{html.escape(url, quote=True)}" download="{html.escape(filename, quote=True)}">'
        "Download High-Res Image</a>"
    )


def render_view(view: ViewState) -> tuple[Any, ...]:
    """Turn a controller snapshot into component values (see OUTPUT_FIELDS)."""
    image = None
    download = ""
    if view.is_loading:
        status = LOADING_MESSAGE
    elif view.error:
        status = f"### Generation Failed\n\n{view.error}"
    elif view.image_url:
        status = ""
        image = _decode_preview(view.image_url)
        download = _download_link(view.image_url)
    else:
        status = PLACEHOLDER_MESSAGE

    gallery = []
    for entry in view.history:
        preview = _decode_preview(entry.image_url)
        if preview is None:
            # Keep gallery indices aligned with the history list.
            preview = Image.new("RGB", (64, 64), "gray")
        gallery.append((preview, entry.prompt))

    return (
        view.prompt,
        view.style,
        view.aspect_ratio,
        image,
        status,
        download,
        gallery,
        GENERATING_LABEL if view.is_loading else GENERATE_LABEL,
        bool(view.prompt.strip()) and not view.is_loading,
    )


def build_callbacks(controller: GenerationController) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions."""

    def can_generate(prompt: str) -> bool:
        return controller.can_generate(prompt)

    def on_load() -> tuple[Any, ...]:
        return render_view(controller.view())

    async def on_generate(
        prompt: str,
        style: str,
        aspect_ratio: str,
    ) -> AsyncIterator[tuple[Any, ...]]:
        if not controller.can_generate(prompt):
            yield render_view(controller.view())
            return

        pending = dataclasses.replace(
            controller.view(),
            status=GenerationStatus.GENERATING,
            prompt=prompt,
            style=style,
            aspect_ratio=aspect_ratio,
            image_url=None,
            error=None,
        )
        yield render_view(pending)

        await controller.generate(prompt, style, aspect_ratio)
        yield render_view(controller.view())

    def on_select_history(index: int) -> tuple[Any, ...]:
        try:
            controller.select_history(int(index))
        except (IndexError, TypeError, ValueError):
            logger.warning("Ignoring selection of unknown history item %r", index)
        return render_view(controller.view())

    return {
        "can_generate": can_generate,
        "on_load": on_load,
        "on_generate": on_generate,
        "on_select_history": on_select_history,
    }
