"""S3-compatible object storage backend (AWS S3, MinIO, ...)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from media_stash.errors import AlreadyExistsError, BackendError, InvalidPathError, ObjectNotFoundError
from media_stash.services.storage.base import PathLike, StorageBackend, as_storage_path

logger = logging.getLogger(__name__)

_MISSING_BUCKET_CODES = {"404", "NoSuchBucket", "NotFound"}


def new_client(
  endpoint_url: Optional[str] = None,
  access_key: Optional[str] = None,
  secret_key: Optional[str] = None,
  region: Optional[str] = None,
) -> Any:
  """Build a boto3 S3 client; unset values fall back to boto3's own lookup."""
  return boto3.client(
    "s3",
    endpoint_url=endpoint_url,
    aws_access_key_id=access_key,
    aws_secret_access_key=secret_key,
    region_name=region,
  )


class ObjectStoreBackend(StorageBackend):
  """Stores files as objects in a single bucket.

  The bucket is looked up, and created if missing, on the first `create`
  call. The result is cached for the life of the instance, so a bucket removed
  out of band afterwards is not noticed.
  """

  name = "s3"

  def __init__(self, bucket: str, client: Any, region: Optional[str] = None) -> None:
    self.bucket = bucket
    self.region = region
    self._client = client
    self._bucket_ready = False

  def path_exists(self, path: PathLike) -> bool:
    try:
      key = str(as_storage_path(path))
    except InvalidPathError as e:
      logger.warning("[%s] existence check failed for '%s': %s", self.name, path, e)
      return False

    try:
      self._client.head_object(Bucket=self.bucket, Key=key)
    except (ClientError, BotoCoreError) as e:
      logger.debug("[%s] head_object '%s' failed: %s", self.name, key, e)
      return False
    return True

  def unlink(self, path: PathLike) -> None:
    key = str(as_storage_path(path))
    if not self.path_exists(key):
      raise ObjectNotFoundError(f"Failed to find object '{key}'")

    try:
      self._client.delete_object(Bucket=self.bucket, Key=key)
    except (ClientError, BotoCoreError) as e:
      raise BackendError(f"Failed to remove object '{key}': {e}") from e
    logger.debug("[%s] removed '%s'", self.name, key)

  def _ensure_bucket(self) -> None:
    if self._bucket_ready:
      return

    try:
      self._client.head_bucket(Bucket=self.bucket)
    except ClientError as e:
      code = str(e.response.get("Error", {}).get("Code", ""))
      if code not in _MISSING_BUCKET_CODES:
        raise BackendError(f"Failed to look up bucket '{self.bucket}': {e}") from e
      logger.info("[%s] creating bucket '%s'", self.name, self.bucket)
      self._create_bucket()
    except BotoCoreError as e:
      raise BackendError(f"Failed to look up bucket '{self.bucket}': {e}") from e

    self._bucket_ready = True

  def _create_bucket(self) -> None:
    kwargs = {"Bucket": self.bucket}
    # us-east-1 rejects an explicit location constraint.
    if self.region and self.region != "us-east-1":
      kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
    try:
      self._client.create_bucket(**kwargs)
    except (ClientError, BotoCoreError) as e:
      raise BackendError(f"Failed to create bucket '{self.bucket}': {e}") from e

  def create(self, source: Path, dest: PathLike) -> None:
    key = str(as_storage_path(dest))
    self._ensure_bucket()
    if self.path_exists(key):
      raise AlreadyExistsError(f"Object already exists '{key}'")

    try:
      self._client.upload_file(str(source), self.bucket, key)
    except (S3UploadFailedError, ClientError, BotoCoreError, OSError) as e:
      raise BackendError(f"Failed to upload '{source}' to '{key}': {e}") from e
    logger.debug("[%s] uploaded '%s' -> '%s'", self.name, source, key)

    try:
      Path(source).unlink()
    except FileNotFoundError:
      pass
    except OSError as e:
      logger.warning("[%s] failed to remove uploaded temp file '%s': %s", self.name, source, e)
