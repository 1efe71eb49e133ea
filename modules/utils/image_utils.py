"""Helpers for data URLs and image previews."""

from __future__ import annotations

import base64
import binascii
import io
import time
from typing import Optional, Tuple

from PIL import Image

_EXTENSIONS = {
    "image/jpeg": "jpeg",
    "image/png": "png",
    "image/webp": "webp",
}


def build_data_url(image_data: str, mime_type: str = "image/jpeg") -> str:
    """Wrap base64 image text into a ``data:`` URL usable as an image source."""
    return f"data:{mime_type};base64,{image_data}"


def parse_data_url(url: str) -> Tuple[str, bytes]:
    """Return ``(mime_type, raw_bytes)`` for a base64 data URL."""
    header, sep, payload = url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URL")
    mime_type = header[len("data:") : -len(";base64")] or "application/octet-stream"
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base64 payload: {exc}") from exc


def data_url_to_image(url: str) -> Image.Image:
    """Decode a data URL into a PIL image for Gradio components."""
    _, raw = parse_data_url(url)
    image = Image.open(io.BytesIO(raw))
    image.load()
    return image


def file_extension(mime_type: str) -> str:
    return _EXTENSIONS.get(mime_type, mime_type.rpartition("/")[2] or "bin")


def download_filename(mime_type: str = "image/jpeg", now_ms: Optional[int] = None) -> str:
    """Filename offered when downloading the visible image."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"imagen-ai-{now_ms}.{file_extension(mime_type)}"
