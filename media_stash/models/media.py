"""Domain types shared by the resolver, the storage backends and the coordinator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from media_stash.errors import InvalidPathError, PathTraversalError


class MediaKind(str, Enum):
  MOVIE = "movie"
  SERIES = "tv"


@dataclass
class MediaEntry:
  """A registered title awaiting uploads.

  `season` starts at 1 and only moves forward through collision resolution.
  It carries no meaning for movies.
  """

  id: str
  name: str
  kind: MediaKind
  type: str
  season: int = 1


@dataclass(frozen=True)
class ResolvedName:
  filename: str
  season: int
  episode: int


@dataclass(frozen=True)
class StagedUpload:
  """An uploaded file already written to local disk by the transport."""

  temp_path: Path
  original_name: str


@dataclass(frozen=True)
class StoragePath:
  """Backend-relative path with forward-slash separators.

  Construction fails for any `..` segment or control character, so such a path
  never reaches a backend.
  """

  key: str

  def __post_init__(self) -> None:
    object.__setattr__(self, "key", "/".join(_split_segments(self.key)))
    if not self.key:
      raise InvalidPathError("Storage path must not be empty")

  @classmethod
  def join(cls, *parts: str) -> "StoragePath":
    segments = []
    for part in parts:
      segments.extend(_split_segments(part))
    return cls("/".join(segments))

  @property
  def parts(self) -> Tuple[str, ...]:
    return tuple(self.key.split("/"))

  @property
  def name(self) -> str:
    return self.parts[-1]

  def __str__(self) -> str:
    return self.key


def _split_segments(raw: str) -> list:
  segments = []
  for segment in raw.replace("\\", "/").split("/"):
    if segment in ("", "."):
      continue
    if segment == "..":
      raise PathTraversalError(f"Refusing path with parent directory segment: '{raw}'")
    if any(ord(c) < 32 or ord(c) == 127 for c in segment):
      raise InvalidPathError(f"Refusing path with control characters: {raw!r}")
    segments.append(segment)
  return segments


class OutcomeStatus(str, Enum):
  STORED = "stored"
  SKIPPED = "skipped"


@dataclass(frozen=True)
class Outcome:
  """Successful end state of one ingest call."""

  status: OutcomeStatus
  path: Optional[StoragePath] = None
  reason: Optional[str] = None

  @classmethod
  def stored(cls, path: StoragePath) -> "Outcome":
    return cls(status=OutcomeStatus.STORED, path=path)

  @classmethod
  def skipped(cls, reason: str) -> "Outcome":
    return cls(status=OutcomeStatus.SKIPPED, reason=reason)
