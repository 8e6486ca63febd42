# tests/test_local_backend.py

import pytest

from media_stash.errors import AlreadyExistsError, BackendError, ObjectNotFoundError, PathTraversalError
from media_stash.models.media import StoragePath


def test_create_moves_source_into_place(local_backend, storage_root, tmp_path):
  source = tmp_path / "upload.tmp"
  source.write_bytes(b"video")

  local_backend.create(source, StoragePath("tv/Show/Show - S1E1.mkv"))

  assert not source.exists()
  assert (storage_root / "tv" / "Show" / "Show - S1E1.mkv").read_bytes() == b"video"
  assert local_backend.path_exists("tv/Show/Show - S1E1.mkv")


def test_create_refuses_existing_destination(local_backend, storage_root, tmp_path):
  (storage_root / "movie").mkdir()
  (storage_root / "movie" / "Film.mkv").write_bytes(b"old")
  source = tmp_path / "upload.tmp"
  source.write_bytes(b"new")

  with pytest.raises(AlreadyExistsError):
    local_backend.create(source, "movie/Film.mkv")

  assert source.exists()
  assert (storage_root / "movie" / "Film.mkv").read_bytes() == b"old"


def test_create_wraps_io_errors(local_backend, tmp_path):
  with pytest.raises(BackendError):
    local_backend.create(tmp_path / "missing.tmp", "tv/a.mkv")


def test_unlink_removes_file(local_backend, storage_root):
  (storage_root / "a.mkv").write_bytes(b"x")
  local_backend.unlink("a.mkv")
  assert not (storage_root / "a.mkv").exists()


def test_unlink_missing_file(local_backend):
  with pytest.raises(ObjectNotFoundError):
    local_backend.unlink("nope.mkv")


def test_unlink_wraps_os_errors(local_backend, storage_root, mocker):
  (storage_root / "a.mkv").write_bytes(b"x")
  mocker.patch("pathlib.Path.unlink", side_effect=PermissionError("denied"))
  with pytest.raises(BackendError, match="denied"):
    local_backend.unlink("a.mkv")


def test_path_exists_false_for_missing(local_backend):
  assert local_backend.path_exists("tv/none.mkv") is False


def test_traversal_rejected_before_touching_filesystem(local_backend, tmp_path, mocker):
  mock_move = mocker.patch("shutil.move")
  mock_mkdir = mocker.patch("pathlib.Path.mkdir")
  source = tmp_path / "upload.tmp"
  source.write_bytes(b"x")

  with pytest.raises(PathTraversalError):
    local_backend.create(source, "../escaped.mkv")

  mock_move.assert_not_called()
  mock_mkdir.assert_not_called()
  assert source.exists()


def test_traversal_rejected_for_unlink(local_backend):
  with pytest.raises(PathTraversalError):
    local_backend.unlink("tv/../../etc/passwd")


def test_path_exists_never_raises_on_traversal(local_backend):
  assert local_backend.path_exists("../outside.mkv") is False


def test_symlink_escaping_root_is_rejected(local_backend, storage_root, tmp_path):
  outside = tmp_path / "outside"
  outside.mkdir()
  (storage_root / "link").symlink_to(outside, target_is_directory=True)
  source = tmp_path / "upload.tmp"
  source.write_bytes(b"x")

  with pytest.raises(PathTraversalError):
    local_backend.create(source, "link/file.mkv")
  assert not (outside / "file.mkv").exists()


def test_path_exists_never_raises_on_null_byte(local_backend):
  assert local_backend.path_exists("tv/Sh\x00ow/a.mkv") is False


def test_path_exists_never_raises_on_os_value_error(local_backend, mocker):
  mocker.patch("pathlib.Path.exists", side_effect=ValueError("embedded null byte"))
  assert local_backend.path_exists("tv/a.mkv") is False
