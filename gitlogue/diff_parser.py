"""Line-level diffs between two blob texts, using git and unidiff.

The diff is rendered by `git diff --no-index` over two temporary files and
parsed back into DiffHunk/LineChange values with unidiff. Hunks are rendered
without context lines, so every LineChange is either an addition or a
deletion; the parser still accepts context lines for diffs rendered
elsewhere.
"""

import logging
import tempfile
from io import StringIO
from pathlib import Path
from typing import Optional

from git import Git
from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

from gitlogue.diff_types import DiffHunk, LineChange, LineChangeType
from gitlogue.exceptions import ConfigError, DiffError

logger = logging.getLogger(__name__)

DIFF_ALGORITHMS = ("myers", "minimal", "patience", "histogram")
DEFAULT_DIFF_ALGORITHM = "myers"

# Changed lines only; surrounding context is already on screen
CONTEXT_LINES = 0


def _strip_newline(value: str) -> str:
  if value.endswith("\n"):
    value = value[:-1]
  if value.endswith("\r"):
    value = value[:-1]
  return value


def _start_line(start: int, length: int) -> int:
  """Convert a unified-diff start to the first line of the changed region.

  A side with zero lines names the line *before* the gap (`-2,0` inserts after
  line 2, and an empty file is `-0,0`), so the region itself starts one later.
  """
  return start + 1 if length == 0 else start


def _convert_hunk(hunk) -> DiffHunk:
  lines = []
  for line in hunk:
    if line.is_added:
      change = LineChange(
        LineChangeType.ADDITION,
        _strip_newline(line.value),
        new_line_no=line.target_line_no,
      )
    elif line.is_removed:
      change = LineChange(
        LineChangeType.DELETION,
        _strip_newline(line.value),
        old_line_no=line.source_line_no,
      )
    elif line.is_context:
      change = LineChange(
        LineChangeType.CONTEXT,
        _strip_newline(line.value),
        old_line_no=line.source_line_no,
        new_line_no=line.target_line_no,
      )
    else:
      # "\ No newline at end of file"
      continue
    lines.append(change)

  return DiffHunk(
    old_start=_start_line(hunk.source_start, hunk.source_length),
    old_lines=hunk.source_length,
    new_start=_start_line(hunk.target_start, hunk.target_length),
    new_lines=hunk.target_length,
    lines=tuple(lines),
  )


def parse_unified_diff(diff_text: str) -> list[DiffHunk]:
  """Parse unified diff text into hunks.

  Hunks of every file in the text are returned in order. `---`/`+++` file
  markers are not body lines, and a header count without a comma
  (`@@ -3 +3 @@`) means one line.

  Args:
      diff_text: Unified diff including file markers

  Returns:
      Hunks in the order they appear

  Raises:
      DiffError: If the text is not a well-formed unified diff
  """
  try:
    patch_set = PatchSet(StringIO(diff_text))
  except UnidiffParseError as e:
    raise DiffError.from_exception(e, context="Failed to parse unified diff") from e

  return [_convert_hunk(hunk) for patched_file in patch_set for hunk in patched_file]


class LineDiffBuilder:
  """Compute hunks between two texts with a selectable diff algorithm"""

  def __init__(self, algorithm: str = DEFAULT_DIFF_ALGORITHM):
    if algorithm not in DIFF_ALGORITHMS:
      raise ConfigError(
        f"Unsupported diff algorithm: {algorithm}. "
        f"Choose one of: {', '.join(DIFF_ALGORITHMS)}"
      )
    self.algorithm = algorithm

  def render(self, old_text: Optional[str], new_text: Optional[str]) -> str:
    """Render the unified diff between two texts (absent text is empty)"""
    with tempfile.TemporaryDirectory(prefix="gitlogue-") as tmpdir:
      Path(tmpdir, "old").write_text(old_text or "", encoding="utf-8", newline="")
      Path(tmpdir, "new").write_text(new_text or "", encoding="utf-8", newline="")

      # --no-index exits with 1 when the files differ
      status, stdout, stderr = Git(tmpdir).diff(
        "--no-index",
        "--no-color",
        "--no-ext-diff",
        "--no-textconv",
        f"--diff-algorithm={self.algorithm}",
        f"--unified={CONTEXT_LINES}",
        "--",
        "old",
        "new",
        with_exceptions=False,
        with_extended_output=True,
      )

    if status not in (0, 1):
      raise DiffError(f"git diff failed with status {status}: {stderr.strip()}")
    return stdout

  def diff(self, old_text: Optional[str], new_text: Optional[str]) -> list[DiffHunk]:
    """Compute hunks turning `old_text` into `new_text`"""
    if (old_text or "") == (new_text or ""):
      return []

    hunks = parse_unified_diff(self.render(old_text, new_text))
    logger.debug(f"{self.algorithm} diff produced {len(hunks)} hunks")
    return hunks
