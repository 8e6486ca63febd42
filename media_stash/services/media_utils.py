"""Utilities for handling uploaded media files."""

from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import Iterable

from starlette.datastructures import UploadFile

from media_stash.models.media import StagedUpload

logger = logging.getLogger(__name__)


def save_upload_to_disk(upload: UploadFile, upload_dir: Path) -> StagedUpload:
  """Save an uploaded file to disk with a unique name.

  Args:
    upload: Multipart file from the request.
    upload_dir: Staging directory.

  Returns:
    StagedUpload pointing at the saved file and keeping the client's filename.
  """
  original_name = upload.filename or "uploaded"
  suffix = Path(original_name).suffix or ""
  dest = upload_dir / f"{uuid.uuid4().hex}{suffix}"
  upload.file.seek(0)
  with dest.open("wb") as f:
    shutil.copyfileobj(upload.file, f)
  return StagedUpload(temp_path=dest, original_name=Path(original_name).name)


def discard_staged(paths: Iterable[Path]) -> None:
  """Remove staged files; failures are logged and ignored."""
  for path in paths:
    try:
      path.unlink(missing_ok=True)
    except OSError as e:
      logger.warning("Failed to remove staged upload '%s': %s", path, e)
