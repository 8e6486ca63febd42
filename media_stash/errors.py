"""Error taxonomy for media ingestion.

Every error carries the HTTP status the transport answers with and whether the
caller may resubmit the same request unchanged.
"""

from __future__ import annotations


class MediaStashError(Exception):
  """Base class for application-specific errors."""

  status_code = 500
  retryable = False

  def __init__(self, message: str) -> None:
    super().__init__(message)
    self.message = message


class ConfigError(MediaStashError):
  """Invalid or missing configuration."""


class ValidationError(MediaStashError):
  """Bad or missing request fields."""

  status_code = 400


class UnsupportedInputError(ValidationError):
  """Request shape the service does not handle, e.g. several files at once."""


class InvalidPathError(ValidationError):
  """A storage path is empty or holds characters no backend accepts."""


class PathTraversalError(InvalidPathError):
  """A storage path tried to escape its root."""


class EntryNotFoundError(MediaStashError):
  """No media entry is registered under the requested id."""

  status_code = 404


class StorageError(MediaStashError):
  """Base class for storage backend failures."""

  retryable = True


class BackendError(StorageError):
  """I/O or connectivity failure inside a backend."""


class ObjectNotFoundError(StorageError):
  status_code = 404
  retryable = False


class AlreadyExistsError(StorageError):
  status_code = 409


class IngestError(MediaStashError):
  """Failure while storing an upload."""

  retryable = True


class LinkError(IngestError):
  """The upload could not be placed at its destination."""


class StagingError(IngestError):
  """The staged upload is missing or unreadable."""
