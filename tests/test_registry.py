# tests/test_registry.py

import threading

import pytest

from media_stash.errors import EntryNotFoundError, ValidationError
from media_stash.models.media import MediaKind
from media_stash.services.registry import MediaRegistry


@pytest.fixture
def registry():
  return MediaRegistry()


def test_register_normalizes_series_name(registry):
  entry = registry.register("42", "tv", "Foo Season 2")
  assert entry.name == "Foo"
  assert entry.kind is MediaKind.SERIES
  assert entry.type == "tv"
  assert entry.season == 1
  assert registry.get("42") is entry
  assert "42" in registry


def test_register_movie(registry):
  entry = registry.register("7", "movie", "Film")
  assert entry.kind is MediaKind.MOVIE


def test_register_replaces_existing_entry(registry):
  first = registry.register("1", "tv", "Show")
  first.season = 4
  second = registry.register("1", "tv", "Other Show")
  assert registry.get("1") is second
  assert second.season == 1
  assert len(registry) == 1


@pytest.mark.parametrize("id, type, name", [
  ("", "tv", "Show"),
  ("1", "", "Show"),
  ("1", "tv", ""),
  (None, "tv", "Show"),
  ("1", None, "Show"),
  ("1", "tv", None),
])
def test_register_requires_all_fields(registry, id, type, name):
  with pytest.raises(ValidationError, match="Missing type, name, or id"):
    registry.register(id, type, name)


def test_register_rejects_unknown_type(registry):
  with pytest.raises(ValidationError, match="Unsupported media type"):
    registry.register("1", "music", "Album")


def test_get_unknown_id(registry):
  with pytest.raises(EntryNotFoundError):
    registry.get("missing")
  assert EntryNotFoundError.status_code == 404
  assert EntryNotFoundError.retryable is False


def test_lock_is_per_id(registry):
  lock_a = registry.lock("a")
  assert registry.lock("a") is lock_a
  assert registry.lock("b") is not lock_a
  assert isinstance(lock_a, type(threading.Lock()))


def test_register_strips_name(registry):
  assert registry.register("1", "movie", "  Film  ").name == "Film"


@pytest.mark.parametrize("name", ["   ", "\t\n"])
def test_register_rejects_blank_name(registry, name):
  with pytest.raises(ValidationError, match="Missing type, name, or id"):
    registry.register("1", "tv", name)
  assert "1" not in registry


def test_register_rejects_name_that_normalizes_to_nothing(registry, mocker):
  mocker.patch("media_stash.services.registry.normalize_series_name", return_value="")
  with pytest.raises(ValidationError, match="no title"):
    registry.register("1", "tv", "Show Season 1")
  assert "1" not in registry
