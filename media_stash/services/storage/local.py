"""Local filesystem backend."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Union

from media_stash.errors import AlreadyExistsError, BackendError, InvalidPathError, ObjectNotFoundError, PathTraversalError
from media_stash.services.storage.base import PathLike, StorageBackend, as_storage_path

logger = logging.getLogger(__name__)


class LocalFilesystemBackend(StorageBackend):
  """Stores files under a base directory, keeping every path inside it."""

  name = "fs"

  def __init__(self, base_dir: Union[str, Path]) -> None:
    self.base_dir = Path(base_dir).resolve()

  def _construct_path(self, path: PathLike) -> Path:
    """Map a storage path to a filesystem path inside the base directory.

    Raises:
      InvalidPathError: the path is empty or holds control characters.
      PathTraversalError: the path has a `..` segment or resolves outside the base directory.
    """
    storage_path = as_storage_path(path)
    full_path = self.base_dir.joinpath(*storage_path.parts)
    # Symlinks inside the base directory could still point elsewhere.
    if not full_path.resolve().is_relative_to(self.base_dir):
      raise PathTraversalError(f"Path '{storage_path}' escapes the storage root")
    return full_path

  def path_exists(self, path: PathLike) -> bool:
    try:
      return self._construct_path(path).exists()
    except (OSError, ValueError, InvalidPathError) as e:
      logger.warning("[%s] existence check failed for '%s': %s", self.name, path, e)
      return False

  def unlink(self, path: PathLike) -> None:
    full_path = self._construct_path(path)
    if not self.path_exists(path):
      raise ObjectNotFoundError(f"Failed to find file '{path}'")

    try:
      full_path.unlink()
    except OSError as e:
      raise BackendError(f"Failed to remove path '{path}': {e}") from e
    logger.debug("[%s] removed '%s'", self.name, full_path)

  def create(self, source: Path, dest: PathLike) -> None:
    full_dest = self._construct_path(dest)
    if self.path_exists(dest):
      raise AlreadyExistsError(f"Object already exists '{dest}'")

    try:
      full_dest.parent.mkdir(parents=True, exist_ok=True)
      shutil.move(str(source), str(full_dest))
    except OSError as e:
      raise BackendError(f"Failed to move '{source}' to '{dest}': {e}") from e
    logger.debug("[%s] moved '%s' -> '%s'", self.name, source, full_dest)
