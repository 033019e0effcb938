import asyncio
import logging
import os
from typing import List, Protocol, Tuple

import aiofiles

from studio.models import GeneratedImage

logger = logging.getLogger(__name__)


class ExportSink(Protocol):
    async def save(self, data: bytes, filename: str):
        ...


class DirectoryExportSink:
    """Writes exported images into a folder on disk, never over an earlier file."""

    def __init__(self, directory: str):
        self.directory = directory

    async def save(self, data: bytes, filename: str) -> str:
        os.makedirs(self.directory, exist_ok=True)
        stem, ext = os.path.splitext(filename)
        candidate = filename
        copy = 0
        while True:
            path = os.path.join(self.directory, candidate)
            try:
                # "x" fails if the name is taken, so concurrent exports cannot share a path
                async with aiofiles.open(path, "xb") as f:
                    await f.write(data)
                break
            except FileExistsError:
                copy += 1
                candidate = f"{stem}-{copy}{ext}"
        logger.info("Exported %s (%d bytes)", path, len(data))
        return path


async def export_items(plan: List[Tuple[str, GeneratedImage]], sink: ExportSink, stagger_ms: int = 200):
    """Hand each image to the sink, one at a time, `stagger_ms` apart."""
    for index, (filename, image) in enumerate(plan):
        if index and stagger_ms:
            await asyncio.sleep(stagger_ms / 1000)
        try:
            await sink.save(image.png_bytes(), filename)
        except Exception:
            logger.exception("Export of %s failed", filename)
