import asyncio
import base64
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app import create_app
from studio.config import Settings
from studio.errors import GenerationError


def make_png(color=(200, 30, 30)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (8, 8), color).save(buf, format="PNG")
    return buf.getvalue()


def as_data_url(data: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


class FakeGenerator:
    """Scripted stand-in for the Gemini client."""

    def __init__(self, fail_angles=(), refine_fails=False):
        self.fail_angles = set(fail_angles)
        self.refine_fails = refine_fails
        self.calls = []
        self.refines = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.on_call = None

    async def generate(self, image, style, angle):
        if self.on_call:
            self.on_call(angle)
        self.calls.append((image, style, angle))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if angle in self.fail_angles:
                raise GenerationError(f"The AI studio failed to render the {angle} image.")
            return make_png()
        finally:
            self.in_flight -= 1

    async def refine(self, image, prompt):
        self.refines.append((image, prompt))
        if self.refine_fails:
            raise GenerationError("blocked")
        return make_png((10, 10, 200))


class MemorySink:
    def __init__(self):
        self.saved = []

    async def save(self, data, filename):
        self.saved.append((filename, data))


@pytest.fixture
def source_png():
    return make_png((240, 240, 240))


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def sink():
    return MemorySink()


@pytest.fixture
def client(generator, sink):
    app = create_app(Settings(export_stagger_ms=0), generator=generator, sink=sink)
    with TestClient(app) as test_client:
        yield test_client
