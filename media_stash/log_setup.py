"""Logging configuration for the service."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "media_stash"

_CONSOLE_FORMAT = "%(levelname)-8s: %(message)s"
_DEBUG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s:%(lineno)d] %(message)s"


def setup_logging(
  level: Union[int, str] = logging.INFO,
  log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
  """Configure the package logger with a console handler and an optional file handler.

  Calling it again replaces the previously installed handlers.

  Args:
    level: Console log level, as a number or a level name like "DEBUG".
    log_file: Optional path; the file receives every record at DEBUG.

  Returns:
    The configured package logger.
  """
  if isinstance(level, str):
    level = logging.getLevelName(level.upper())
    if not isinstance(level, int):
      level = logging.INFO

  log = logging.getLogger(LOGGER_NAME)
  log.setLevel(logging.DEBUG)
  for handler in log.handlers[:]:
    log.removeHandler(handler)
    handler.close()

  console_handler = logging.StreamHandler(sys.stderr)
  console_handler.setLevel(level)
  fmt = _DEBUG_FORMAT if level <= logging.DEBUG else _CONSOLE_FORMAT
  console_handler.setFormatter(logging.Formatter(fmt, datefmt="%H:%M:%S"))
  log.addHandler(console_handler)

  if log_file:
    try:
      log_file_path = Path(log_file).resolve()
      log_file_path.parent.mkdir(parents=True, exist_ok=True)
      file_handler = logging.FileHandler(log_file_path, mode="a", encoding="utf-8")
      file_handler.setLevel(logging.DEBUG)
      file_handler.setFormatter(logging.Formatter(_DEBUG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S%z"))
      log.addHandler(file_handler)
      log.info("--- Log session started: %s ---", datetime.now(timezone.utc).isoformat())
    except OSError as e:
      log.error("Failed to configure file logging to '%s': %s", log_file, e)

  return log
