# tests/conftest.py
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure the app package is findable by pytest by adding the project root to the path
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

from media_stash.config import Settings
from media_stash.main import create_app
from media_stash.models.media import MediaEntry, MediaKind, StagedUpload
from media_stash.services.ingest import IngestionCoordinator
from media_stash.services.storage.local import LocalFilesystemBackend


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
  root = tmp_path / "storage"
  root.mkdir()
  return root


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
  staging = tmp_path / "staging"
  staging.mkdir()
  return staging


@pytest.fixture
def local_backend(storage_root: Path) -> LocalFilesystemBackend:
  return LocalFilesystemBackend(storage_root)


@pytest.fixture
def settings(storage_root: Path, staging_dir: Path) -> Settings:
  return Settings(
    upload_dir=staging_dir,
    storage_location=storage_root,
    type_paths={"tv": "TV Shows", "movie": "Movies"},
    log_level="DEBUG",
  )


@pytest.fixture
def coordinator(local_backend) -> IngestionCoordinator:
  return IngestionCoordinator(local_backend, type_paths={"tv": "TV Shows", "movie": "Movies"})


@pytest.fixture
def make_upload(staging_dir: Path):
  """Write a staged file and describe it the way the transport would."""
  counter = {"n": 0}

  def _make(original_name: str, content: bytes = b"new upload") -> StagedUpload:
    counter["n"] += 1
    temp_path = staging_dir / f"staged-{counter['n']}.bin"
    temp_path.write_bytes(content)
    return StagedUpload(temp_path=temp_path, original_name=original_name)

  return _make


@pytest.fixture
def series_entry() -> MediaEntry:
  return MediaEntry(id="1", name="Show", kind=MediaKind.SERIES, type="tv")


@pytest.fixture
def movie_entry() -> MediaEntry:
  return MediaEntry(id="2", name="Film", kind=MediaKind.MOVIE, type="movie")


@pytest.fixture
def client(settings):
  with TestClient(create_app(settings)) as test_client:
    yield test_client
