"""One-off script for checking a real Imagen call end to end."""

import asyncio
import sys
from pathlib import Path

from config.settings import load_config
from modules.generation.controller import GenerationController
from modules.presets.catalog import STYLE_PRESETS
from modules.services.history_service import GenerationHistoryService
from modules.services.image_client import ImageGenerationClient
from modules.services.storage_service import InMemoryStorage
from modules.utils.image_utils import download_filename, parse_data_url
from modules.utils.logging import setup_logging


async def run(prompt: str) -> None:
    # 1. Real configuration and client; history stays in memory.
    config = load_config()
    setup_logging(config)
    controller = GenerationController(
        ImageGenerationClient.from_config(config),
        GenerationHistoryService(InMemoryStorage()),
    )

    # 2. Generate with the first style preset and a square image.
    ok = await controller.generate(prompt, STYLE_PRESETS[0].value, "1:1")
    view = controller.view()
    print("Status:", view.status.value)
    if not ok or view.image_url is None:
        print("Error:", view.error)
        return

    # 3. Save the image next to the current directory.
    mime_type, raw = parse_data_url(view.image_url)
    out_path = Path(download_filename(mime_type))
    out_path.write_bytes(raw)
    print("Image saved:", out_path.resolve())


if __name__ == "__main__":
    asyncio.run(run(" ".join(sys.argv[1:]) or "a red fox in a snowy forest"))
