"""
Generation Orchestrator

Runs one batch: a strictly sequential pass over ANGLES, one request per
angle. Requests never overlap, to stay under the upstream rate limit.
A failed angle is logged and skipped; the batch always makes all N
attempts and then reports how it went.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from studio.gemini import ImageGenerator
from studio.models import GeneratedImage, Progress
from studio.presets import ANGLES, StudioPreset, style_directive

logger = logging.getLogger(__name__)

NO_IMAGES_MESSAGE = "No images could be generated. Please check your API key or try a different product shot."
PARTIAL_MESSAGE = "Successfully generated {done} of {total} images. Some angles failed due to studio constraints."


@dataclass
class BatchOutcome:
    total: int
    images: List[GeneratedImage] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.images)

    @property
    def message(self) -> Optional[str]:
        if self.succeeded == 0:
            return NO_IMAGES_MESSAGE
        if self.succeeded < self.total:
            return PARTIAL_MESSAGE.format(done=self.succeeded, total=self.total)
        return None


class GenerationOrchestrator:

    def __init__(self, generator: ImageGenerator, angles: Sequence[str] = ANGLES):
        self.generator = generator
        self.angles = list(angles)

    async def run_batch(
        self,
        source: bytes,
        preset: StudioPreset,
        on_image: Optional[Callable[[GeneratedImage], None]] = None,
        on_progress: Optional[Callable[[Progress], None]] = None,
    ) -> BatchOutcome:
        preset = StudioPreset(preset)
        style = style_directive(preset)
        outcome = BatchOutcome(total=len(self.angles))
        logger.info("Starting %s batch of %d angles", preset.value, outcome.total)

        for i, angle in enumerate(self.angles):
            try:
                data = await self.generator.generate(source, style, angle)
            except Exception as e:
                # One bad angle must not sink the rest of the batch
                logger.error("Error generating angle %s: %s", angle, e)
                outcome.failures.append(angle)
                continue

            item = GeneratedImage.from_png(data, f"{angle} ({preset.value})")
            outcome.images.append(item)
            if on_image:
                on_image(item)
            if on_progress:
                on_progress(Progress(current=i + 1, total=outcome.total))

        logger.info("Batch finished: %d of %d angles rendered", outcome.succeeded, outcome.total)
        return outcome
