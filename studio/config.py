import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass
class Settings:
    gemini_api_key: Optional[str] = None
    image_model: str = "gemini-2.5-flash-image"
    export_dir: str = "exports"
    export_stagger_ms: int = 200
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            image_model=os.getenv("STUDIO_IMAGE_MODEL", "gemini-2.5-flash-image"),
            export_dir=os.getenv("EXPORT_DIR", "exports"),
            export_stagger_ms=int(os.getenv("EXPORT_STAGGER_MS", "200")),
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "8000")),
            cors_origins=_origins(os.getenv("CORS_ORIGINS", "*")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
