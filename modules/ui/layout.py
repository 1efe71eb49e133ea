"""Gradio layout composition for prompt, result and history panels."""

from __future__ import annotations

from typing import Any, Optional, Sequence

import gradio as gr

from config.settings import AppConfig
from modules.generation.controller import GenerationController
from modules.presets.catalog import (
    DEFAULT_ASPECT_RATIO,
    DEFAULT_STYLE,
    aspect_ratio_choices,
    style_choices,
)
from modules.services.history_service import GenerationHistoryService
from modules.services.image_client import ImageGenerationClient
from modules.services.storage_service import FileStorage
from modules.ui.callbacks import PLACEHOLDER_MESSAGE, build_callbacks


def build_controller(config: AppConfig) -> GenerationController:
    """Wire the Imagen client and file-backed history into a controller."""
    history = GenerationHistoryService(
        FileStorage(config.data_dir),
        key=config.history_key,
        limit=config.history_limit,
    )
    return GenerationController(ImageGenerationClient.from_config(config), history)


def _as_updates(values: Sequence[Any]) -> tuple[Any, ...]:
    *component_values, label, enabled = values
    return (*component_values, gr.update(value=label, interactive=enabled))


def build_app(config: AppConfig, controller: Optional[GenerationController] = None) -> Any:
    """Compose and return the Gradio application."""
    controller = controller or build_controller(config)
    callbacks_map = build_callbacks(controller)

    with gr.Blocks(title="Imagen AI") as demo:
        gr.Markdown("## Imagen AI")

        with gr.Row():
            with gr.Column(scale=1):
                prompt = gr.Textbox(
                    label="1. Describe your image",
                    lines=5,
                    placeholder="e.g., A hyper-detailed 8K photograph of a futuristic city at sunset",
                )
                style_select = gr.Dropdown(
                    label="Style Preset",
                    choices=style_choices(),
                    value=DEFAULT_STYLE,
                )
                aspect_select = gr.Radio(
                    label="Aspect Ratio",
                    choices=aspect_ratio_choices(),
                    value=DEFAULT_ASPECT_RATIO,
                )
                generate_btn = gr.Button("Generate Image", variant="primary", interactive=False)

            with gr.Column(scale=2):
                output_image = gr.Image(label="Result", type="pil", interactive=False)
                status = gr.Markdown(PLACEHOLDER_MESSAGE)
                download = gr.HTML()

        history_gallery = gr.Gallery(
            label="Generation History",
            columns=3,
            allow_preview=False,
        )

        outputs = [
            prompt,
            style_select,
            aspect_select,
            output_image,
            status,
            download,
            history_gallery,
            generate_btn,
        ]

        async def _on_generate(prompt_text: str, style: str, aspect_ratio: str):
            async for values in callbacks_map["on_generate"](prompt_text, style, aspect_ratio):
                yield _as_updates(values)

        def _on_select(evt: gr.SelectData):
            return _as_updates(callbacks_map["on_select_history"](evt.index))

        def _on_prompt_change(prompt_text: str):
            return gr.update(interactive=callbacks_map["can_generate"](prompt_text))

        demo.load(fn=lambda: _as_updates(callbacks_map["on_load"]()), outputs=outputs)

        prompt.change(fn=_on_prompt_change, inputs=prompt, outputs=generate_btn)

        generate_btn.click(
            fn=_on_generate,
            inputs=[prompt, style_select, aspect_select],
            outputs=outputs,
        )

        history_gallery.select(fn=_on_select, outputs=outputs)

    return demo
