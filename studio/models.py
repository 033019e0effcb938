import base64
import time
import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from studio.presets import StudioPreset

DATA_URL_PREFIX = "data:image/png;base64,"


def to_clean_base64(data: str) -> str:
    """Strip a `data:<mime>;base64,` prefix if there is one."""
    parts = data.split(",", 1)
    return parts[1] if len(parts) > 1 else data


class GeneratedImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    url: str = Field(..., description="data: URL holding the PNG bytes.")
    prompt: str
    timestamp: int = Field(..., description="Creation time in epoch milliseconds.")

    @classmethod
    def from_png(cls, data: bytes, prompt: str) -> "GeneratedImage":
        return cls(
            id=uuid.uuid4().hex[:9],
            url=DATA_URL_PREFIX + base64.b64encode(data).decode("ascii"),
            prompt=prompt,
            timestamp=int(time.time() * 1000),
        )

    def png_bytes(self) -> bytes:
        return base64.b64decode(to_clean_base64(self.url))


class Progress(BaseModel):
    current: int
    total: int


# --- Request payloads ---

class SourcePayload(BaseModel):
    sourceImage: str = Field(..., description="Base64 image, optionally as a data: URL.")


class SourceUrlPayload(BaseModel):
    url: str


class PresetPayload(BaseModel):
    preset: StudioPreset


class GeneratePayload(BaseModel):
    preset: Optional[StudioPreset] = None


class RefinePayload(BaseModel):
    prompt: str = Field(..., min_length=1)


# --- Responses ---

class SessionSnapshot(BaseModel):
    status: str
    preset: StudioPreset
    hasSource: bool
    progress: Optional[Progress] = None
    images: List[GeneratedImage]
    selectedIds: List[str]
    previewId: Optional[str] = None
    errorMessage: Optional[str] = None


class ExportResponse(BaseModel):
    filenames: List[str]


class PresetInfo(BaseModel):
    id: StudioPreset
    label: str


class PresetCatalog(BaseModel):
    presets: List[PresetInfo]
    angles: List[str]
