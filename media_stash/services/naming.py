"""Filename derivation for uploaded episodes and series title normalization.

Nothing in here raises for unrecognized input: a file whose name cannot be
turned into an episode is reported as a skip (``None``) so callers can tell it
apart from a real failure.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

import roman

from media_stash.models.media import ResolvedName

logger = logging.getLogger(__name__)

CONTAINER_EXTENSION = ".mkv"

# Optional season token (digits or I's), optional " -", a separator, then the
# episode number. The lookahead keeps "1920x1080" style tokens from matching.
EPISODE_PATTERN = re.compile(r"(\d+|i+)?(?: -)?(?:[e _x\[]|^)(\d+)(?!x)", re.IGNORECASE | re.ASCII)

# Openings, endings, commentary tracks and OVAs are never episodes.
NON_EPISODE_MARKERS: Tuple[str, ...] = ("NCED", "NCOP", "Commic", "Commentary", "OVA")

SEASON_TITLE_PATTERN = re.compile(r"(.+) Season", re.IGNORECASE)


class SeasonSource(str, Enum):
  NUMERIC = "numeric"
  ROMAN = "roman"
  HINT = "hint"


@dataclass(frozen=True)
class SeasonParse:
  season: int
  source: SeasonSource


def _parse_decimal(token: str) -> Optional[int]:
  if not (token.isascii() and token.isdigit()):
    return None
  try:
    return int(token, 10)
  except ValueError:
    # Longer than the interpreter's int conversion limit.
    return None


def _parse_roman(token: str) -> Optional[int]:
  try:
    return roman.fromRoman(token.upper())
  except roman.InvalidRomanNumeralError:
    return None


_SEASON_PARSERS: Tuple[Tuple[SeasonSource, Callable[[str], Optional[int]]], ...] = (
  (SeasonSource.NUMERIC, _parse_decimal),
  (SeasonSource.ROMAN, _parse_roman),
)


def parse_season_token(token: Optional[str], hint: int) -> SeasonParse:
  """Turn the leading season token of a filename into a season number.

  Tries a base-10 integer, then a roman numeral, then settles on `hint`.
  """
  if not token:
    logger.info("No season token found, defaulting to season %s", hint)
    return SeasonParse(hint, SeasonSource.HINT)

  for source, parser in _SEASON_PARSERS:
    season = parser(token)
    if season is not None:
      return SeasonParse(season, source)

  logger.error("Failed to parse season string '%s', defaulting to %s", token, hint)
  return SeasonParse(hint, SeasonSource.HINT)


def is_non_episode(raw_filename: str) -> bool:
  return any(marker in raw_filename for marker in NON_EPISODE_MARKERS)


def resolve_episode_name(series_name: str, raw_filename: str, season_hint: int = 1) -> Optional[ResolvedName]:
  """Derive the stored filename of an episode from its uploaded filename.

  Args:
    series_name: Canonical series name, used verbatim as the filename prefix.
    raw_filename: Filename as uploaded.
    season_hint: Season to use when the filename carries no usable season token.

  Returns:
    ResolvedName, or None when the file should be skipped (extras such as
    openings/endings, or no episode number found).
  """
  match = EPISODE_PATTERN.search(raw_filename)
  if match is None:
    logger.info("No episode marker in '%s'", raw_filename)
    return None

  season = parse_season_token(match.group(1), season_hint).season
  episode = _parse_decimal(match.group(2))

  if is_non_episode(raw_filename):
    logger.info("Skipping non-episode extra '%s'", raw_filename)
    return None

  logger.debug("Episode marker %r in '%s' -> season %s episode %s", match.group(0), raw_filename, season, episode)
  if not episode:
    logger.error("Unable to determine episode number of '%s'", raw_filename)
    return None

  return ResolvedName(
    filename=f"{series_name} - S{season}E{episode}{CONTAINER_EXTENSION}",
    season=season,
    episode=episode,
  )


def movie_filename(title: str) -> str:
  return f"{title}{CONTAINER_EXTENSION}"


def normalize_series_name(raw_title: str) -> str:
  """Strip a trailing "Season ..." suffix from a card title.

  "Foo Season 2" becomes "Foo"; titles without the suffix come back unchanged.
  """
  match = SEASON_TITLE_PATTERN.search(raw_title)
  if match is None:
    logger.warning("No season suffix in '%s', keeping the title as is (expected for non-season cards)", raw_title)
    return raw_title
  return match.group(1).strip()
