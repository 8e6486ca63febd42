"""In-memory registry of media entries awaiting uploads.

Entries live as long as the owning app instance; nothing is persisted.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from media_stash.errors import EntryNotFoundError, ValidationError
from media_stash.models.media import MediaEntry, MediaKind
from media_stash.services.naming import normalize_series_name

logger = logging.getLogger(__name__)


class MediaRegistry:
  def __init__(self) -> None:
    self._entries: Dict[str, MediaEntry] = {}
    self._locks: Dict[str, threading.Lock] = {}
    self._guard = threading.Lock()

  def register(self, id: Optional[str], type: Optional[str], name: Optional[str]) -> MediaEntry:
    """Create or replace the entry for `id`.

    Raises:
      ValidationError: a field is missing or empty, or the type is unknown.
    """
    name = name.strip() if name else name
    if not type or not name or not id:
      raise ValidationError("Missing type, name, or id")

    try:
      kind = MediaKind(type)
    except ValueError as e:
      raise ValidationError(f"Unsupported media type '{type}'") from e

    series_name = normalize_series_name(name)
    if not series_name:
      raise ValidationError(f"Name '{name}' has no title before its season suffix")

    entry = MediaEntry(id=id, name=series_name, kind=kind, type=type)
    with self._guard:
      if id in self._entries:
        logger.info("Replacing media entry %s", id)
      self._entries[id] = entry
    logger.info("new %s '%s' (%s)", type, entry.name, id)
    return entry

  def get(self, id: str) -> MediaEntry:
    with self._guard:
      entry = self._entries.get(id)
    if entry is None:
      raise EntryNotFoundError("Media ID not found")
    return entry

  def lock(self, id: str) -> threading.Lock:
    """Lock serializing ingests for one entry id."""
    with self._guard:
      return self._locks.setdefault(id, threading.Lock())

  def __contains__(self, id: object) -> bool:
    return id in self._entries

  def __len__(self) -> int:
    return len(self._entries)
