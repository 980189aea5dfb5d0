"""
Commit selection for playback
Owns the cached candidate lists and the playback cursor
"""

import logging
import random
from enum import Enum
from typing import Callable, Optional

from gitlogue.exceptions import EmptyError, ExhaustedError, UnconfiguredError

logger = logging.getLogger(__name__)


class PlaybackOrder(Enum):
  RANDOM = "random"
  ASC = "asc"
  DESC = "desc"


class SelectionMode(Enum):
  """Which candidate list the cursor walks"""

  UNINITIALIZED = "uninitialized"
  WHOLE_HISTORY = "whole_history"
  RANGE = "range"


class CommitSelector:
  """
  Select commit ids for random, ascending, descending and range playback

  The whole-history list is newest-first and populated on first use; a range
  list is oldest-first and replaced by every set_range call. Both lists stay
  cached, but only one mode is active at a time: switching the active mode
  restarts the cursor at zero.
  """

  def __init__(
    self,
    load_history: Callable[[], list[str]],
    parse_range: Callable[[str], list[str]],
    rng: Optional[random.Random] = None,
  ):
    """
    Initialize a selector

    Args:
      load_history: Returns non-merge commit ids reachable from HEAD, newest first
      parse_range: Returns the non-merge commit ids of a range, oldest first
      rng: Random source for random playback
    """
    self._load_history = load_history
    self._parse_range = parse_range
    self._rng = rng or random.Random()

    self._history: Optional[list[str]] = None
    self._range: Optional[list[str]] = None
    self._mode = SelectionMode.UNINITIALIZED
    self._cursor = 0

  @property
  def mode(self) -> SelectionMode:
    return self._mode

  @property
  def cursor(self) -> int:
    return self._cursor

  @property
  def candidates(self) -> list[str]:
    """Copy of the whole-history candidate list (newest first)"""
    return list(self._populate_history())

  @property
  def range_candidates(self) -> Optional[list[str]]:
    return list(self._range) if self._range is not None else None

  def _populate_history(self) -> list[str]:
    if self._history is None:
      candidates = self._load_history()
      if not candidates:
        raise EmptyError("No non-merge commits found in repository")
      self._history = candidates
      logger.info(f"Cached {len(candidates)} non-merge commits")
    return self._history

  def _require_range(self) -> list[str]:
    if self._range is None:
      raise UnconfiguredError("Commit range not set")
    if not self._range:
      raise EmptyError("No commits in range")
    return self._range

  def _activate(self, mode: SelectionMode) -> None:
    if self._mode is not mode:
      logger.debug(f"Switching playback mode {self._mode.value} -> {mode.value}")
      self._mode = mode
      self._cursor = 0

  def _advance(self, candidates: list[str], from_tail: bool, exhausted_message: str) -> str:
    if self._cursor >= len(candidates):
      raise ExhaustedError(exhausted_message)

    index = len(candidates) - 1 - self._cursor if from_tail else self._cursor
    self._cursor += 1
    return candidates[index]

  def reset(self) -> None:
    """Restart sequential playback without dropping cached lists"""
    self._cursor = 0

  # Whole-history playback

  def random(self) -> str:
    candidates = self._populate_history()
    return candidates[self._rng.randrange(len(candidates))]

  def next_ascending(self) -> str:
    """Oldest first: walks the newest-first cache from its tail"""
    candidates = self._populate_history()
    self._activate(SelectionMode.WHOLE_HISTORY)
    return self._advance(candidates, True, "All commits have been played")

  def next_descending(self) -> str:
    candidates = self._populate_history()
    self._activate(SelectionMode.WHOLE_HISTORY)
    return self._advance(candidates, False, "All commits have been played")

  # Range playback

  def set_range(self, expr: str) -> list[str]:
    """Parse and activate a range, restarting the cursor"""
    self._range = self._parse_range(expr)
    self._mode = SelectionMode.RANGE
    self._cursor = 0
    return list(self._range)

  def next_range_ascending(self) -> str:
    """Oldest first: the range list is already oldest-first"""
    commits = self._require_range()
    self._activate(SelectionMode.RANGE)
    return self._advance(commits, False, "All commits in range have been played")

  def next_range_descending(self) -> str:
    commits = self._require_range()
    self._activate(SelectionMode.RANGE)
    return self._advance(commits, True, "All commits in range have been played")

  def random_range(self) -> str:
    commits = self._require_range()
    return commits[self._rng.randrange(len(commits))]

  def next(self, order: PlaybackOrder, use_range: bool = False) -> str:
    """Dispatch to the selection operation for a playback order"""
    if use_range:
      operations = {
        PlaybackOrder.RANDOM: self.random_range,
        PlaybackOrder.ASC: self.next_range_ascending,
        PlaybackOrder.DESC: self.next_range_descending,
      }
    else:
      operations = {
        PlaybackOrder.RANDOM: self.random,
        PlaybackOrder.ASC: self.next_ascending,
        PlaybackOrder.DESC: self.next_descending,
      }
    return operations[order]()
