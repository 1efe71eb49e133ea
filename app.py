"""Application entry point for the Imagen AI project."""

from __future__ import annotations

from typing import Optional

from config.settings import load_config
from modules.ui.layout import build_app
from modules.utils.logging import setup_logging


def main(config_path: Optional[str] = None) -> None:
    """Load configuration and launch the Gradio interface.

    load_config raises ConfigurationError when no API key is set, so the UI
    never starts without a credential.
    """
    config = load_config(config_path)
    logger = setup_logging(config)
    logger.info("Starting Imagen AI with model %s", config.image_model)
    app = build_app(config)
    app.queue()
    app.launch(
        server_name=config.server_name,
        server_port=config.server_port,
        share=False,
        inbrowser=False,
    )


if __name__ == "__main__":
    main()
