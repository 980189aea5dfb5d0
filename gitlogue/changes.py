"""Tree-level change extraction for a single commit.

The commit's tree is compared with its first parent's tree (or the empty tree
for a root commit). Every touched file becomes a FileChange with decoded
contents and line hunks, unless it is binary or excluded.
"""

import logging
from typing import Optional

from git import Commit, Repo
from git.diff import Diff
from git.objects import Tree
from gitdb.util import hex_to_bin

from gitlogue.blob_reader import BlobReader
from gitlogue.diff_parser import LineDiffBuilder
from gitlogue.diff_types import DiffHunk, FileChange, FileStatus, LineChangeType
from gitlogue.exclusion import DEFAULT_POLICY, ExclusionPolicy

logger = logging.getLogger(__name__)

# Git's well-known id for the tree with no entries; every repository can
# resolve it without storing it
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

# Maximum number of changed lines per file to animate
MAX_CHANGE_LINES = 2000

_STATUS_BY_CHANGE_TYPE = {
  "A": FileStatus.ADDED,
  "D": FileStatus.DELETED,
  "M": FileStatus.MODIFIED,
  "T": FileStatus.MODIFIED,
  "R": FileStatus.RENAMED,
  "C": FileStatus.COPIED,
}


def count_changed_lines(hunks: list[DiffHunk]) -> int:
  """Number of additions and deletions across hunks (context not counted)"""
  return sum(
    1
    for hunk in hunks
    for line in hunk.lines
    if line.change_type is not LineChangeType.CONTEXT
  )


class TreeChangeExtractor:
  """Build FileChanges for a commit against its first parent"""

  def __init__(
    self,
    repo: Repo,
    blob_reader: BlobReader,
    diff_builder: LineDiffBuilder,
    policy: ExclusionPolicy = DEFAULT_POLICY,
    max_change_lines: int = MAX_CHANGE_LINES,
    detect_copies: bool = True,
  ):
    self.repo = repo
    self.blob_reader = blob_reader
    self.diff_builder = diff_builder
    self.policy = policy
    self.max_change_lines = max_change_lines
    self.detect_copies = detect_copies

  def _tree_diff(self, commit: Commit) -> list[Diff]:
    if commit.parents:
      base = commit.parents[0]
    else:
      base = Tree(self.repo, hex_to_bin(EMPTY_TREE_SHA))

    # GitPython appends its own trailing -M unless M is passed, and git keeps
    # the last detection flag, so both are passed together
    options = {"M": True, "C": True} if self.detect_copies else {"M": True}
    return list(base.diff(commit, **options))

  def extract(self, commit: Commit) -> list[FileChange]:
    """
    Compute the file changes introduced by `commit`

    Args:
      commit: A non-merge commit (merges are diffed against the first parent)

    Returns:
      One FileChange per touched file, in path order
    """
    changes = [self._file_change(diff) for diff in self._tree_diff(commit)]
    logger.debug(f"Commit {commit.hexsha[:8]} touches {len(changes)} files")
    return changes

  def _file_change(self, diff: Diff) -> FileChange:
    status = _STATUS_BY_CHANGE_TYPE.get(diff.change_type, FileStatus.MODIFIED)

    path = diff.a_path if status is FileStatus.DELETED else diff.b_path
    old_path: Optional[str] = None
    if status in (FileStatus.RENAMED, FileStatus.COPIED):
      old_path = diff.a_path

    old_id = diff.a_blob.hexsha if diff.a_blob and status is not FileStatus.ADDED else None
    new_id = (
      diff.b_blob.hexsha if diff.b_blob and status is not FileStatus.DELETED else None
    )

    old_binary, old_content = self.blob_reader.inspect(old_id) if old_id else (False, None)
    new_binary, new_content = self.blob_reader.inspect(new_id) if new_id else (False, None)
    is_binary = old_binary or new_binary

    exclusion_reason = self.policy.exclusion_reason(path)
    hunks: list[DiffHunk] = []

    if exclusion_reason is None and not is_binary:
      hunks = self.diff_builder.diff(old_content, new_content)
      total_changed_lines = count_changed_lines(hunks)
      if total_changed_lines > self.max_change_lines:
        exclusion_reason = f"too many changes ({total_changed_lines} lines)"
        hunks = []

    if exclusion_reason is not None:
      logger.debug(f"Excluding {path}: {exclusion_reason}")

    return FileChange(
      path=path,
      old_path=old_path,
      status=status,
      is_binary=is_binary,
      is_excluded=exclusion_reason is not None,
      exclusion_reason=exclusion_reason,
      old_content=old_content,
      new_content=new_content,
      hunks=tuple(hunks),
    )
