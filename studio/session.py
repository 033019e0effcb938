"""
Studio Session

The one object that owns the mutable studio state: status flag, source
image, chosen preset, the gallery, batch progress and the last error
message. HTTP handlers only ever talk to this object.
"""

import base64
import binascii
import logging
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from studio.collection import CollectionManager
from studio.errors import InvalidImageError, NoSourceImageError, OperationInProgressError
from studio.gemini import ImageGenerator
from studio.models import GeneratedImage, Progress, SessionSnapshot, to_clean_base64
from studio.orchestrator import GenerationOrchestrator
from studio.presets import StudioPreset

logger = logging.getLogger(__name__)

IDLE = "idle"
GENERATING = "generating"
EDITING = "editing"
ERROR = "error"

BUSY = (GENERATING, EDITING)

REFINE_FAILED_MESSAGE = "The refine process was unsuccessful."


def decode_source(payload: str) -> bytes:
    """Turn a base64 string (or data: URL) into image bytes Pillow can open."""
    try:
        data = base64.b64decode(to_clean_base64(payload), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"Source image is not valid base64: {e}")
    check_image(data)
    return data


def check_image(data: bytes):
    try:
        Image.open(BytesIO(data)).verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidImageError(f"Source is not a readable image: {e}")


class StudioSession:

    def __init__(self, generator: ImageGenerator, orchestrator: Optional[GenerationOrchestrator] = None):
        self.generator = generator
        self.orchestrator = orchestrator or GenerationOrchestrator(generator)
        self.collection = CollectionManager()
        self.status = IDLE
        self.source: Optional[bytes] = None
        self.preset = StudioPreset.editorial
        self.progress: Optional[Progress] = None
        self.error_message: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self.status in BUSY

    def _ensure_free(self):
        if self.busy:
            raise OperationInProgressError(self.status)

    def _reset_results(self):
        self.collection.clear()
        self.error_message = None

    # --- Inputs ---

    def set_source(self, data: bytes):
        self._ensure_free()
        check_image(data)
        self.source = data
        self._reset_results()
        self.status = IDLE

    def set_source_base64(self, payload: str):
        self.set_source(decode_source(payload))

    def set_preset(self, preset: StudioPreset):
        self._ensure_free()
        self.preset = StudioPreset(preset)

    # --- Batch generation ---

    def begin_batch(self, preset: Optional[StudioPreset] = None):
        """
        Claim the studio for a new batch.

        Must run synchronously before the batch is scheduled, so a second
        request arriving meanwhile sees the `generating` flag and is refused.
        """
        self._ensure_free()
        if self.source is None:
            raise NoSourceImageError()
        if preset is not None:
            self.set_preset(preset)
        self._reset_results()
        self.status = GENERATING
        self.progress = Progress(current=0, total=len(self.orchestrator.angles))

    async def run_batch(self):
        try:
            outcome = await self.orchestrator.run_batch(
                self.source,
                self.preset,
                on_image=self.collection.append,
                on_progress=self._set_progress,
            )
        finally:
            self.progress = None
            self.status = IDLE

        self.error_message = outcome.message
        if outcome.succeeded == 0:
            self.status = ERROR
        return outcome

    async def generate(self, preset: Optional[StudioPreset] = None):
        self.begin_batch(preset)
        return await self.run_batch()

    def _set_progress(self, progress: Progress):
        self.progress = progress

    # --- Refinement ---

    async def refine(self, image_id: str, prompt: str) -> Optional[GeneratedImage]:
        self._ensure_free()
        base = self.collection.get(image_id)
        self.status = EDITING
        self.error_message = None
        try:
            data = await self.generator.refine(base.png_bytes(), prompt)
        except Exception as e:
            logger.error("Refine of %s failed: %s", image_id, e)
            self.error_message = REFINE_FAILED_MESSAGE
            return None
        finally:
            self.status = IDLE

        item = GeneratedImage.from_png(data, f"Refined: {prompt}")
        self.collection.append(item)
        self.collection.set_preview(item.id)
        return item

    # --- Curation ---

    def delete(self, image_id: str):
        self.collection.delete(image_id)

    def bulk_delete(self) -> int:
        return self.collection.bulk_delete()

    def toggle_select(self, image_id: str):
        self.collection.toggle_select(image_id)

    def select_all(self):
        self.collection.select_all()

    def set_preview(self, image_id: str):
        self.collection.set_preview(image_id)

    def export_plan(self):
        return self.collection.export_plan()

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            status=self.status,
            preset=self.preset,
            hasSource=self.source is not None,
            progress=self.progress,
            images=list(self.collection.items),
            selectedIds=self.collection.selected_ids(),
            previewId=self.collection.preview_id,
            errorMessage=self.error_message,
        )
