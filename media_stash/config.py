"""Application configuration utilities.
All environment variables are read here.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from media_stash.errors import ConfigError

PROJECT_ROOT = Path(__file__).resolve().parent.parent

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: str) -> bool:
  return os.getenv(name, default).lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
  raw = os.getenv(name)
  if raw is None or raw == "":
    return default
  try:
    return int(raw)
  except ValueError as e:
    raise ConfigError(f"{name} must be an integer, got '{raw}'") from e


def _parse_type_paths(raw: Optional[str]) -> Dict[str, str]:
  """Parse the MEDIA_TYPE_PATHS JSON object mapping media types to directories."""
  if not raw:
    return {}
  try:
    data = json.loads(raw)
  except json.JSONDecodeError as e:
    raise ConfigError(f"MEDIA_TYPE_PATHS is not valid JSON: {e}") from e
  if not isinstance(data, dict):
    raise ConfigError("MEDIA_TYPE_PATHS must be a JSON object")
  return {str(k): str(v) for k, v in data.items()}


@dataclass
class Settings:
  """Holds application settings from environment variables."""

  debug: bool = False
  log_level: str = "INFO"
  log_file: Optional[Path] = None
  upload_dir: Path = Path(tempfile.gettempdir()) / "media-stash"
  keep_uploads: bool = False
  storage_backend: str = "fs"
  storage_location: Path = Path("media")
  type_paths: Dict[str, str] = field(default_factory=dict)
  season_retry_limit: int = 1
  s3_bucket: str = "triton-media"
  s3_endpoint_url: Optional[str] = None
  s3_access_key: Optional[str] = None
  s3_secret_key: Optional[str] = None
  s3_region: Optional[str] = None
  host: str = "0.0.0.0"
  port: int = 8001

  @staticmethod
  def from_env() -> "Settings":
    debug = _env_flag("APP_DEBUG", "false")
    log_file = os.getenv("LOG_FILE")
    season_retry_limit = _env_int("SEASON_RETRY_LIMIT", 1)
    if season_retry_limit < 0:
      raise ConfigError("SEASON_RETRY_LIMIT must not be negative")

    return Settings(
      debug=debug,
      log_level=os.getenv("LOG_LEVEL", "DEBUG" if debug else "INFO"),
      log_file=Path(log_file) if log_file else None,
      upload_dir=Path(os.getenv("UPLOAD_DIR", str(Settings.upload_dir))),
      keep_uploads=_env_flag("KEEP_UPLOADS", "false"),
      storage_backend=os.getenv("STORAGE_BACKEND", "fs").lower(),
      storage_location=Path(os.getenv("STORAGE_LOCATION", "media")),
      type_paths=_parse_type_paths(os.getenv("MEDIA_TYPE_PATHS")),
      season_retry_limit=season_retry_limit,
      s3_bucket=os.getenv("S3_BUCKET", "triton-media"),
      s3_endpoint_url=os.getenv("S3_ENDPOINT_URL") or None,
      s3_access_key=os.getenv("S3_ACCESS_KEY") or None,
      s3_secret_key=os.getenv("S3_SECRET_KEY") or None,
      s3_region=os.getenv("S3_REGION") or None,
      host=os.getenv("HOST", "0.0.0.0"),
      port=_env_int("PORT", 8001),
    )

  @property
  def storage_root(self) -> Path:
    """Local storage root; relative locations are anchored at the project root."""
    if self.storage_location.is_absolute():
      return self.storage_location
    return PROJECT_ROOT / self.storage_location


def ensure_directories(settings: Settings) -> None:
  """Create required directories if they do not exist."""
  settings.upload_dir.mkdir(parents=True, exist_ok=True)
  if settings.storage_backend == "fs":
    settings.storage_root.mkdir(parents=True, exist_ok=True)
