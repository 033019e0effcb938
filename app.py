import logging
from typing import Optional

import httpx
import uvicorn
from fastapi import APIRouter, BackgroundTasks, Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from studio.config import Settings
from studio.errors import (
    InvalidImageError,
    NoSourceImageError,
    OperationInProgressError,
    StudioError,
    UnknownImageError,
)
from studio.export import DirectoryExportSink, export_items
from studio.gemini import GeminiStudioClient
from studio.models import (
    ExportResponse,
    GeneratePayload,
    PresetCatalog,
    PresetInfo,
    PresetPayload,
    RefinePayload,
    SessionSnapshot,
    SourcePayload,
    SourceUrlPayload,
)
from studio.presets import ANGLES, PRESET_LABELS
from studio.session import StudioSession

logger = logging.getLogger(__name__)

# --- 1. Error mapping ---
STATUS_CODES = {
    OperationInProgressError: 409,
    NoSourceImageError: 400,
    InvalidImageError: 400,
    UnknownImageError: 404,
}


async def studio_error_handler(request: Request, exc: StudioError):
    status_code = STATUS_CODES.get(type(exc), 500)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def get_session(request: Request) -> StudioSession:
    return request.app.state.session


# --- 2. API Endpoints ---
router = APIRouter()


@router.get("/session", response_model=SessionSnapshot)
async def get_snapshot(session: StudioSession = Depends(get_session)):
    return session.snapshot()


@router.get("/presets", response_model=PresetCatalog)
async def list_presets():
    return PresetCatalog(
        presets=[PresetInfo(id=preset, label=label) for preset, label in PRESET_LABELS.items()],
        angles=ANGLES,
    )


@router.put("/preset", response_model=SessionSnapshot)
async def choose_preset(payload: PresetPayload, session: StudioSession = Depends(get_session)):
    session.set_preset(payload.preset)
    return session.snapshot()


@router.post("/source", response_model=SessionSnapshot)
async def upload_source(payload: SourcePayload, session: StudioSession = Depends(get_session)):
    session.set_source_base64(payload.sourceImage)
    return session.snapshot()


@router.post("/source/url", response_model=SessionSnapshot)
async def fetch_source(payload: SourceUrlPayload, session: StudioSession = Depends(get_session)):
    headers = {
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
        "Accept": "image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
        "Referer": "https://www.google.com/"
    }
    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(payload.url, follow_redirects=True, timeout=15, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise HTTPException(status_code=e.response.status_code, detail=f"Image server error: {e.response.status_code}")
        except httpx.RequestError as e:
            raise HTTPException(status_code=400, detail=f"Failed to fetch image: {e}")

    content_type = response.headers.get('content-type', '')
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="URL is not a direct image link.")
    session.set_source(response.content)
    return session.snapshot()


@router.post("/generate", status_code=202, response_model=SessionSnapshot)
async def generate_collection(
    background_tasks: BackgroundTasks,
    payload: Optional[GeneratePayload] = None,
    session: StudioSession = Depends(get_session),
):
    # Claim the studio now; the batch itself runs after the response is sent
    session.begin_batch(payload.preset if payload else None)
    background_tasks.add_task(session.run_batch)
    return session.snapshot()


@router.get(
    "/images/{image_id}",
    response_class=Response,
    responses={
        200: {
            "content": {"image/png": {}},
            "description": "The generated studio shot in PNG format."
        }
    }
)
async def download_image(image_id: str, session: StudioSession = Depends(get_session)):
    image = session.collection.get(image_id)
    return Response(
        content=image.png_bytes(),
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{image.id}.png"'},
    )


@router.delete("/images/{image_id}", response_model=SessionSnapshot)
async def delete_image(image_id: str, session: StudioSession = Depends(get_session)):
    session.delete(image_id)
    return session.snapshot()


@router.post("/images/{image_id}/select", response_model=SessionSnapshot)
async def toggle_select(image_id: str, session: StudioSession = Depends(get_session)):
    session.toggle_select(image_id)
    return session.snapshot()


@router.post("/images/{image_id}/preview", response_model=SessionSnapshot)
async def set_preview(image_id: str, session: StudioSession = Depends(get_session)):
    session.set_preview(image_id)
    return session.snapshot()


@router.post("/images/{image_id}/refine", response_model=SessionSnapshot)
async def refine_image(image_id: str, payload: RefinePayload, session: StudioSession = Depends(get_session)):
    await session.refine(image_id, payload.prompt)
    return session.snapshot()


@router.post("/selection/all", response_model=SessionSnapshot)
async def select_all(session: StudioSession = Depends(get_session)):
    session.select_all()
    return session.snapshot()


@router.delete("/selection", response_model=SessionSnapshot)
async def bulk_delete(session: StudioSession = Depends(get_session)):
    removed = session.bulk_delete()
    logger.info("Deleted %d selected images", removed)
    return session.snapshot()


@router.post("/selection/export", response_model=ExportResponse)
async def bulk_export(request: Request, background_tasks: BackgroundTasks, session: StudioSession = Depends(get_session)):
    plan = session.export_plan()
    stagger_ms = request.app.state.settings.export_stagger_ms
    background_tasks.add_task(export_items, plan, request.app.state.sink, stagger_ms)
    return ExportResponse(filenames=[filename for filename, _ in plan])


# --- 3. FastAPI Application Setup ---
def create_app(settings: Optional[Settings] = None, generator=None, sink=None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="E-Com Studio API",
        description="Turns one product photo into a gallery of studio shots from ten angles.",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StudioError, studio_error_handler)

    app.state.settings = settings
    app.state.session = StudioSession(generator or GeminiStudioClient.from_settings(settings))
    app.state.sink = sink or DirectoryExportSink(settings.export_dir)

    app.include_router(router)
    return app


app = create_app()


# --- 4. Run the Application ---
if __name__ == "__main__":
    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
