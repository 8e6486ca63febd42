"""Stores one upload for a registered entry.

Steps per call: name the file, build its destination, resolve a collision if
the destination is taken, write, and undo a partial write when the write
fails. The only state kept between calls is the entry's season counter.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Tuple

from media_stash.errors import AlreadyExistsError, LinkError, ObjectNotFoundError, StorageError
from media_stash.models.media import MediaEntry, MediaKind, Outcome, StagedUpload, StoragePath
from media_stash.services.media_utils import discard_staged
from media_stash.services.naming import movie_filename, resolve_episode_name
from media_stash.services.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class IngestionCoordinator:
  """Places uploads into a storage backend.

  Args:
    backend: Where files are written.
    type_paths: Media type -> top-level directory. Unmapped types use the type itself.
    season_retry_limit: How many times a colliding series upload may move to
      the next season before the write is attempted anyway.
  """

  def __init__(
    self,
    backend: StorageBackend,
    type_paths: Optional[Mapping[str, str]] = None,
    season_retry_limit: int = 1,
  ) -> None:
    self.backend = backend
    self.type_paths = dict(type_paths or {})
    self.season_retry_limit = season_retry_limit

  def directory_for(self, entry: MediaEntry) -> str:
    type_path = self.type_paths.get(entry.type)
    if type_path:
      logger.info("config:type:path %s -> %s", entry.type, type_path)
      return type_path
    return entry.type

  def destination(self, entry: MediaEntry, filename: str) -> StoragePath:
    return StoragePath.join(self.directory_for(entry), entry.name, filename)

  def _resolve_filename(self, entry: MediaEntry, original_name: str) -> Optional[Tuple[str, Optional[int]]]:
    if entry.kind is MediaKind.MOVIE:
      return movie_filename(entry.name), None

    info = resolve_episode_name(entry.name, original_name, entry.season)
    if info is None:
      return None
    return info.filename, info.season

  def ingest(self, entry: MediaEntry, upload: StagedUpload) -> Outcome:
    """Store `upload` for `entry`.

    Returns:
      Outcome.stored with the final path, or Outcome.skipped when no filename
      can be derived (no storage call is made in that case).

    Raises:
      PathTraversalError: the destination would leave the storage root.
      LinkError: the file could not be written; resubmitting may succeed.
    """
    resolved = self._resolve_filename(entry, upload.original_name)
    if resolved is None:
      logger.warning("skipped '%s', unable to determine information from name", upload.original_name)
      return Outcome.skipped(f"Unable to determine episode information from '{upload.original_name}'")

    filename, _ = resolved
    dest = self.destination(entry, filename)
    logger.info("%s -> %s", upload.original_name, dest)

    try:
      dest = self._resolve_collision(entry, upload, dest)
    except StorageError as e:
      logger.error("Failed to replace existing '%s': %s", dest, e)
      raise LinkError("Failed to link media") from e

    logger.info("Uploading media file '%s' to %s", upload.temp_path.name, self.backend.name)
    try:
      self.backend.create(upload.temp_path, dest)
    except StorageError as e:
      self._rollback(upload, dest, e)
      logger.error("Failed to create file '%s': %s", dest, e)
      raise LinkError("Failed to link media") from e

    return Outcome.stored(dest)

  def _resolve_collision(self, entry: MediaEntry, upload: StagedUpload, dest: StoragePath) -> StoragePath:
    """Return the destination to write to once existing files are accounted for.

    Series uploads move to the next season; movies replace the existing file.
    """
    bumps = 0
    while self.backend.path_exists(dest):
      if entry.kind is MediaKind.MOVIE:
        logger.warning("removed existing %s", dest)
        self.backend.unlink(dest)
        break

      if bumps >= self.season_retry_limit:
        logger.warning("'%s' still exists after %s season change(s), writing anyway", dest, bumps)
        break

      bumps += 1
      entry.season += 1
      logger.warning("file exists, assuming new season %s", entry.season)

      resolved = self._resolve_filename(entry, upload.original_name)
      if resolved is None:
        # Resolution only depends on the season hint; it matched a moment ago.
        break
      filename, season = resolved
      if season is not None and season != entry.season:
        logger.warning(
          "we suspected the season was %s but got %s during parsing. Using that.", entry.season, season
        )
        entry.season = season

      dest = self.destination(entry, filename)
      logger.info("new path %s", dest)

    return dest

  def _rollback(self, upload: StagedUpload, dest: StoragePath, error: StorageError) -> None:
    """Undo what a failed write may have left behind. Never raises."""
    if not self.backend.path_exists(dest):
      return

    logger.error("cleaning up stale link")
    discard_staged([upload.temp_path])

    if isinstance(error, AlreadyExistsError):
      # The file at dest predates this call.
      return

    try:
      self.backend.unlink(dest)
    except ObjectNotFoundError:
      pass
    except StorageError as e:
      logger.warning("cleanup:file Failed to cleanup file '%s': %s", dest, e)
