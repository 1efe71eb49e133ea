"""Gradio UI callback tests."""

from __future__ import annotations

import asyncio
import base64
import io
from typing import Optional

from PIL import Image

from modules.generation.controller import GenerationController
from modules.presets.catalog import DEFAULT_STYLE, STYLE_PRESETS
from modules.services.errors import InvalidCredential
from modules.services.history_service import GenerationHistoryService, HistoryEntry
from modules.services.image_client import GenerationResult
from modules.services.storage_service import InMemoryStorage
from modules.ui import callbacks


def png_base64(color: str = "red") -> str:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


class DummyClient:
    """Stub image client returning a tiny PNG."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.error: Optional[Exception] = None

    async def generate(self, prompt: str, aspect_ratio: str) -> GenerationResult:
        self.calls.append((prompt, aspect_ratio))
        if self.error is not None:
            raise self.error
        return GenerationResult(image_data=png_base64(), mime_type="image/png")


def build_callbacks(client: DummyClient, storage: Optional[InMemoryStorage] = None):
    controller = GenerationController(client, GenerationHistoryService(storage or InMemoryStorage()))
    return controller, callbacks.build_callbacks(controller)


def as_dict(values) -> dict:
    assert len(values) == len(callbacks.OUTPUT_FIELDS)
    return dict(zip(callbacks.OUTPUT_FIELDS, values))


def run_generate(cb_map, prompt: str, style: str = DEFAULT_STYLE, aspect_ratio: str = "1:1"):
    async def collect():
        return [as_dict(values) async for values in cb_map["on_generate"](prompt, style, aspect_ratio)]

    return asyncio.run(collect())


def test_on_load_shows_placeholder():
    _, cb_map = build_callbacks(DummyClient())

    view = as_dict(cb_map["on_load"]())

    assert view["image"] is None
    assert "will appear here" in view["status"]
    assert view["download"] == ""
    assert view["gallery"] == []
    assert view["generate_label"] == callbacks.GENERATE_LABEL
    assert view["generate_enabled"] is False


def test_on_generate_yields_loading_then_result():
    client = DummyClient()
    _, cb_map = build_callbacks(client)

    loading, final = run_generate(cb_map, "a red fox", STYLE_PRESETS[2].value, "9:16")

    assert loading["status"] == callbacks.LOADING_MESSAGE
    assert loading["generate_label"] == callbacks.GENERATING_LABEL
    assert loading["generate_enabled"] is False
    assert loading["image"] is None

    assert client.calls == [("a red fox, cyberpunk, futuristic, neon lights, dystopian", "9:16")]
    assert isinstance(final["image"], Image.Image)
    assert final["status"] == ""
    assert 'download="imagen-ai-' in final["download"]
    assert ".png" in final["download"]
    assert "data:image/png;base64," in final["download"]
    assert len(final["gallery"]) == 1
    assert final["gallery"][0][1] == "a red fox"
    assert final["aspect_ratio"] == "9:16"
    assert final["generate_enabled"] is True


def test_on_generate_with_blank_prompt_does_nothing():
    client = DummyClient()
    _, cb_map = build_callbacks(client)

    (only,) = run_generate(cb_map, "   ")

    assert client.calls == []
    assert "will appear here" in only["status"]


def test_on_generate_failure_shows_message():
    client = DummyClient()
    client.error = InvalidCredential()
    _, cb_map = build_callbacks(client)

    final = run_generate(cb_map, "a red fox")[-1]

    assert "Generation Failed" in final["status"]
    assert "API key is not valid" in final["status"]
    assert final["image"] is None
    assert final["download"] == ""
    assert final["gallery"] == []


def test_on_select_history_restores_fields():
    storage = InMemoryStorage()
    entry = HistoryEntry(
        id="2026-10-19T09:00:00+00:00",
        prompt="a lighthouse",
        style=STYLE_PRESETS[3].value,
        aspect_ratio="4:3",
        image_url=f"data:image/png;base64,{png_base64('blue')}",
    )
    GenerationHistoryService(storage).append(entry, [])
    _, cb_map = build_callbacks(DummyClient(), storage)

    view = as_dict(cb_map["on_select_history"](0))

    assert view["prompt"] == "a lighthouse"
    assert view["style"] == STYLE_PRESETS[3].value
    assert view["aspect_ratio"] == "4:3"
    assert isinstance(view["image"], Image.Image)
    assert view["generate_enabled"] is True


def test_on_select_history_ignores_unknown_index():
    _, cb_map = build_callbacks(DummyClient())

    view = as_dict(cb_map["on_select_history"](7))

    assert view["prompt"] == ""
    assert view["image"] is None


def test_undecodable_history_image_keeps_gallery_aligned():
    storage = InMemoryStorage()
    service = GenerationHistoryService(storage)
    good = HistoryEntry("b", "good", DEFAULT_STYLE, "1:1", f"data:image/png;base64,{png_base64()}")
    bad = HistoryEntry("a", "bad", DEFAULT_STYLE, "1:1", "data:image/png;base64,bm90IGFuIGltYWdl")
    service.append(good, service.append(bad, []))
    _, cb_map = build_callbacks(DummyClient(), storage)

    view = as_dict(cb_map["on_load"]())

    assert [caption for _, caption in view["gallery"]] == ["good", "bad"]


def test_can_generate_tracks_prompt_text():
    _, cb_map = build_callbacks(DummyClient())

    assert cb_map["can_generate"]("a cat") is True
    assert cb_map["can_generate"]("  ") is False
