"""Pydantic models (schemas) for API requests and responses."""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field


class MediaCreateRequest(BaseModel):
  """Registration payload for a new media entry.

  Fields are optional here so that missing values get the service's own 400
  response instead of FastAPI's generic 422.
  """

  type: Optional[str] = Field(None, description="Media type, 'tv' or 'movie'")
  name: Optional[str] = Field(None, description="Series or movie title, may include a 'Season N' suffix")
  id: Optional[str] = Field(None, description="Caller-chosen entry id")


class MediaCreateResponse(BaseModel):
  success: bool = True
  id: str


class UploadResponse(BaseModel):
  """Response payload for PUT /v1/media/{id}."""

  success: bool = True
  path: Optional[str] = Field(None, description="Storage path the upload was written to")
  message: Optional[str] = Field(None, description="Set when the upload was skipped")


class HealthResponse(BaseModel):
  message: str


class ErrorResponse(BaseModel):
  success: bool = False
  retryable: bool = False
  message: str
