"""Storage backends and the factory that picks one from settings."""

from __future__ import annotations

from media_stash.config import Settings
from media_stash.errors import ConfigError
from media_stash.services.storage.base import StorageBackend
from media_stash.services.storage.local import LocalFilesystemBackend
from media_stash.services.storage.s3 import ObjectStoreBackend, new_client


def get_backend(settings: Settings) -> StorageBackend:
  """Build the storage backend named by `settings.storage_backend`."""
  if settings.storage_backend == LocalFilesystemBackend.name:
    return LocalFilesystemBackend(settings.storage_root)

  if settings.storage_backend == ObjectStoreBackend.name:
    client = new_client(
      endpoint_url=settings.s3_endpoint_url,
      access_key=settings.s3_access_key,
      secret_key=settings.s3_secret_key,
      region=settings.s3_region,
    )
    return ObjectStoreBackend(settings.s3_bucket, client, region=settings.s3_region)

  raise ConfigError(f"Unknown storage backend '{settings.storage_backend}'")


__all__ = [
  "LocalFilesystemBackend",
  "ObjectStoreBackend",
  "StorageBackend",
  "get_backend",
]
