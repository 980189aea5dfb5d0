"""gitlogue history engine.

Selects commits for replay and turns each one into structured, line-numbered
file changes for the animation layer.
"""

from .diff_types import (
  CommitMetadata,
  DiffHunk,
  FileChange,
  FileStatus,
  LineChange,
  LineChangeType,
)
from .exceptions import (
  ConfigConflictError,
  ConfigError,
  DiffError,
  EmptyError,
  ExhaustedError,
  GitlogueError,
  InvalidRangeError,
  NotFoundError,
  UnconfiguredError,
)
from .exclusion import ExclusionPolicy, IgnorePatternsBuilder, should_exclude_file
from .repository import GitRepository
from .selector import PlaybackOrder

__all__ = [
  "CommitMetadata",
  "DiffHunk",
  "FileChange",
  "FileStatus",
  "LineChange",
  "LineChangeType",
  "GitlogueError",
  "NotFoundError",
  "InvalidRangeError",
  "ExhaustedError",
  "UnconfiguredError",
  "EmptyError",
  "ConfigConflictError",
  "ConfigError",
  "DiffError",
  "ExclusionPolicy",
  "IgnorePatternsBuilder",
  "should_exclude_file",
  "GitRepository",
  "PlaybackOrder",
]
