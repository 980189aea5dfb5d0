"""Structured data types for replayed commits.

A commit is described by CommitMetadata, which owns one FileChange per touched
path. Each FileChange owns the DiffHunks produced by the line diff builder,
and each hunk owns its LineChanges with old/new line numbers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class FileStatus(Enum):
  """How a path changed between the parent tree and the commit tree"""

  ADDED = "A"
  DELETED = "D"
  MODIFIED = "M"
  RENAMED = "R"
  COPIED = "C"

  def as_str(self) -> str:
    return self.value


class LineChangeType(Enum):
  ADDITION = "addition"
  DELETION = "deletion"
  CONTEXT = "context"


@dataclass(frozen=True)
class LineChange:
  """A single line inside a hunk.

  Attributes:
      change_type: Addition, deletion or context
      content: Line text without its trailing newline
      old_line_no: 1-based line number in the old blob (deletion/context)
      new_line_no: 1-based line number in the new blob (addition/context)
  """

  change_type: LineChangeType
  content: str
  old_line_no: Optional[int] = None
  new_line_no: Optional[int] = None

  def to_dict(self):
    return {
      "change_type": self.change_type.value,
      "content": self.content,
      "old_line_no": self.old_line_no,
      "new_line_no": self.new_line_no,
    }


@dataclass(frozen=True)
class DiffHunk:
  """A contiguous region of changed lines.

  Attributes:
      old_start: 1-based first line of the region in the old blob
      old_lines: Number of old-side lines (deletions + context)
      new_start: 1-based first line of the region in the new blob
      new_lines: Number of new-side lines (additions + context)
      lines: Ordered line changes
  """

  old_start: int
  old_lines: int
  new_start: int
  new_lines: int
  lines: tuple[LineChange, ...] = ()

  def to_dict(self):
    return {
      "old_start": self.old_start,
      "old_lines": self.old_lines,
      "new_start": self.new_start,
      "new_lines": self.new_lines,
      "lines": [line.to_dict() for line in self.lines],
    }


@dataclass(frozen=True)
class FileChange:
  """Everything the UI needs to animate one touched path.

  Excluded and binary files never carry hunks.
  """

  path: str
  status: FileStatus
  old_path: Optional[str] = None
  is_binary: bool = False
  is_excluded: bool = False
  exclusion_reason: Optional[str] = None
  old_content: Optional[str] = None
  new_content: Optional[str] = None
  hunks: tuple[DiffHunk, ...] = ()

  def __post_init__(self):
    if (self.is_excluded or self.is_binary) and self.hunks:
      raise ValueError(f"Excluded or binary file cannot carry hunks: {self.path}")

  @property
  def additions(self) -> int:
    return self._count(LineChangeType.ADDITION)

  @property
  def deletions(self) -> int:
    return self._count(LineChangeType.DELETION)

  def _count(self, change_type: LineChangeType) -> int:
    return sum(
      1 for hunk in self.hunks for line in hunk.lines if line.change_type is change_type
    )

  def to_dict(self):
    return {
      "path": self.path,
      "old_path": self.old_path,
      "status": self.status.as_str(),
      "is_binary": self.is_binary,
      "is_excluded": self.is_excluded,
      "exclusion_reason": self.exclusion_reason,
      "additions": self.additions,
      "deletions": self.deletions,
      "hunks": [hunk.to_dict() for hunk in self.hunks],
    }


@dataclass(frozen=True)
class CommitMetadata:
  """Commit metadata with its file changes.

  Attributes:
      hash: Full hex object id of the commit
      author: Author display name
      date: Author timestamp, timezone-aware UTC
      message: Commit message with surrounding whitespace removed
      changes: One FileChange per touched path, in tree-diff order
  """

  hash: str
  author: str
  date: datetime
  message: str
  changes: tuple[FileChange, ...] = field(default_factory=tuple)

  def sorted_file_indices(self) -> list[int]:
    """Indices of `changes` in file tree display order (directory, then filename)."""

    def sort_key(index: int) -> tuple[str, str]:
      directory, _, filename = self.changes[index].path.rpartition("/")
      return directory, filename

    return sorted(range(len(self.changes)), key=sort_key)

  def to_dict(self):
    """Convert to dict for JSON serialization."""
    return {
      "hash": self.hash,
      "author": self.author,
      "date": self.date.isoformat(),
      "message": self.message,
      "changes": [change.to_dict() for change in self.changes],
    }
