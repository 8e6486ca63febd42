"""FastAPI application entrypoint for media ingestion."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from media_stash.config import Settings, ensure_directories
from media_stash.errors import MediaStashError, StagingError, UnsupportedInputError, ValidationError
from media_stash.log_setup import setup_logging
from media_stash.models.media import Outcome, OutcomeStatus, StagedUpload
from media_stash.models.schemas import (
  ErrorResponse,
  HealthResponse,
  MediaCreateRequest,
  MediaCreateResponse,
  UploadResponse,
)
from media_stash.services.ingest import IngestionCoordinator
from media_stash.services.media_utils import discard_staged, save_upload_to_disk
from media_stash.services.registry import MediaRegistry
from media_stash.services.storage import StorageBackend, get_backend

logger = logging.getLogger(__name__)

router = APIRouter()


def get_settings(request: Request) -> Settings:
  return request.app.state.settings


def get_registry(request: Request) -> MediaRegistry:
  return request.app.state.registry


def get_coordinator(request: Request) -> IngestionCoordinator:
  return request.app.state.coordinator


@router.get("/health", response_model=HealthResponse)
async def health():
  return HealthResponse(message="Something tells me everything is not going to be fine.")


@router.post("/v1/media", response_model=MediaCreateResponse, responses={400: {"model": ErrorResponse}})
async def create_media(payload: MediaCreateRequest, registry: MediaRegistry = Depends(get_registry)):
  """Register a title that files will be uploaded against."""
  entry = registry.register(payload.id, payload.type, payload.name)
  return MediaCreateResponse(id=entry.id)


@router.put(
  "/v1/media/{media_id}",
  response_model=UploadResponse,
  response_model_exclude_none=True,
  responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def add_media(
  media_id: str,
  request: Request,
  settings: Settings = Depends(get_settings),
  registry: MediaRegistry = Depends(get_registry),
  coordinator: IngestionCoordinator = Depends(get_coordinator),
):
  """Upload endpoint: stages the file, then names and stores it for the entry."""
  form = await request.form()
  form_id = form.get("id")
  entry = registry.get(form_id if isinstance(form_id, str) and form_id else media_id)
  logger.info("media:add %s %s", entry.id, entry.name)

  files = [value for _, value in form.multi_items() if isinstance(value, UploadFile)]
  logger.debug("media:files %s", [f.filename for f in files])
  if not files:
    raise ValidationError("Missing file")

  staged: List[StagedUpload] = []
  try:
    try:
      for upload in files:
        staged.append(await run_in_threadpool(save_upload_to_disk, upload, settings.upload_dir))
    except OSError as e:
      raise StagingError("Internal Server Error") from e

    if len(staged) != 1:
      discard_staged(s.temp_path for s in staged)
      raise UnsupportedInputError("Multiple files is currently unsupported")

    upload = staged[0]
    if not upload.temp_path.exists():
      logger.error("staged file '%s' doesn't exist", upload.temp_path)
      raise StagingError("Internal Server Error")

    def locked_ingest() -> Outcome:
      with registry.lock(entry.id):
        return coordinator.ingest(entry, upload)

    outcome = await run_in_threadpool(locked_ingest)
  finally:
    if not settings.keep_uploads:
      discard_staged(s.temp_path for s in staged)

  if outcome.status is OutcomeStatus.SKIPPED:
    return UploadResponse(message="Media was skipped.")
  return UploadResponse(path=str(outcome.path))


async def media_stash_error_handler(request: Request, exc: MediaStashError) -> JSONResponse:
  if exc.status_code >= 500:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc.__cause__)
  else:
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
  body = ErrorResponse(retryable=exc.retryable, message=exc.message)
  return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def create_app(settings: Optional[Settings] = None, backend: Optional[StorageBackend] = None) -> FastAPI:
  """Build the application.

  Args:
    settings: Defaults to Settings.from_env().
    backend: Overrides the backend named in settings.
  """
  settings = settings or Settings.from_env()
  backend = backend or get_backend(settings)

  @asynccontextmanager
  async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, settings.log_file)
    ensure_directories(settings)
    logger.info("storage %s (%s)", settings.storage_root if backend.name == "fs" else settings.s3_bucket, backend.name)
    yield

  app = FastAPI(title="Media Stash", version="0.1.0", lifespan=lifespan)
  app.state.settings = settings
  app.state.registry = MediaRegistry()
  app.state.coordinator = IngestionCoordinator(
    backend,
    type_paths=settings.type_paths,
    season_retry_limit=settings.season_retry_limit,
  )

  @app.middleware("http")
  async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response

  app.add_exception_handler(MediaStashError, media_stash_error_handler)
  app.include_router(router)
  return app


app = create_app()


def run() -> None:
  import uvicorn

  settings = app.state.settings
  uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
  run()
