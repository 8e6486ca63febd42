"""Storage backend interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from media_stash.models.media import StoragePath

PathLike = Union[StoragePath, str]


def as_storage_path(path: PathLike) -> StoragePath:
  """Accept raw strings at the backend boundary; they are validated the same way."""
  if isinstance(path, StoragePath):
    return path
  return StoragePath(path)


class StorageBackend(ABC):
  """Where ingested media ends up.

  Implementations are interchangeable: the coordinator only relies on the three
  operations below.
  """

  name = "storage"

  @abstractmethod
  def path_exists(self, path: PathLike) -> bool:
    """Report whether `path` holds a file.

    Never raises. Backend failures are reported as "does not exist".
    """

  @abstractmethod
  def unlink(self, path: PathLike) -> None:
    """Remove `path`.

    Raises:
      ObjectNotFoundError: nothing is stored at `path`.
      BackendError: the removal itself failed.
    """

  @abstractmethod
  def create(self, source: Path, dest: PathLike) -> None:
    """Store the local file `source` at `dest`.

    On success `source` no longer exists.

    Raises:
      AlreadyExistsError: `dest` is already occupied.
      BackendError: the write failed.
    """
