"""Commit range parsing.

Turns `<lower>..<upper>` expressions into the non-merge commits reachable
from the upper bound but not from the lower bound, oldest first.
"""

import logging
from typing import Iterator, Optional

from git import Commit, Repo
from git.exc import GitCommandError
from gitdb.exc import BadName, BadObject

from gitlogue.exceptions import InvalidRangeError, NotFoundError

logger = logging.getLogger(__name__)

RANGE_SEPARATOR = ".."
SYMMETRIC_DIFFERENCE = "..."


def resolve_commit(repo: Repo, rev: str) -> Commit:
  """Resolve a revision expression to a commit

  Raises:
    NotFoundError: If the revision does not name a commit
  """
  try:
    return repo.commit(rev)
  except (BadName, BadObject, ValueError, GitCommandError) as e:
    raise NotFoundError.from_exception(
      e, context=f"Invalid commit hash or commit not found: {rev}"
    ) from e


def resolve_head(repo: Repo) -> Commit:
  try:
    return repo.head.commit
  except ValueError as e:
    raise NotFoundError.from_exception(
      e, context="Cannot resolve HEAD (empty repository?)"
    ) from e


def walk_commits(repo: Repo, start: Commit) -> Iterator[Commit]:
  """Ancestors of `start` (inclusive), newest first"""
  return repo.iter_commits(start.hexsha)


def is_non_merge(commit: Commit) -> Optional[bool]:
  """True for commits with at most one parent, None if the commit is unreadable"""
  try:
    return len(commit.parents) <= 1
  except (ValueError, BadObject, BadName) as e:
    logger.warning(f"Skipping unreadable commit {commit.hexsha}: {e}")
    return None


def non_merge_history(repo: Repo, start: Commit, exclude: frozenset = frozenset()) -> list[str]:
  """Ids of non-merge commits reachable from `start`, newest first"""
  return [
    commit.hexsha
    for commit in walk_commits(repo, start)
    if commit.hexsha not in exclude and is_non_merge(commit)
  ]


class RangeParser:
  """Parse `A..B`, `..B` and `A..` into oldest-first commit ids"""

  def __init__(self, repo: Repo):
    self.repo = repo

  def parse(self, expr: str) -> list[str]:
    """
    Parse a commit range expression

    An empty lower bound means no lower bound; an empty upper bound means HEAD.

    Args:
      expr: Range expression such as 'HEAD~5..HEAD' or 'abc123..'

    Returns:
      Non-merge commit ids in the range, oldest first

    Raises:
      InvalidRangeError: For '...' or a separator count other than one
      NotFoundError: If an endpoint does not resolve
    """
    if SYMMETRIC_DIFFERENCE in expr:
      raise InvalidRangeError(
        "Symmetric difference operator '...' is not supported. "
        "Use '..' instead (e.g., 'HEAD~5..HEAD')"
      )

    if RANGE_SEPARATOR not in expr:
      raise InvalidRangeError(
        f"Invalid range format: {expr}. Use formats like 'HEAD~5..HEAD' or 'abc123..'"
      )

    parts = expr.split(RANGE_SEPARATOR)
    if len(parts) != 2:
      raise InvalidRangeError(f"Invalid range format: {expr}")

    lower, upper = parts
    start = resolve_commit(self.repo, lower) if lower else None
    end = resolve_commit(self.repo, upper) if upper else resolve_head(self.repo)

    exclude: frozenset = frozenset()
    if start is not None:
      exclude = frozenset(commit.hexsha for commit in walk_commits(self.repo, start))

    commits = non_merge_history(self.repo, end, exclude)
    commits.reverse()

    logger.info(f"Range {expr} contains {len(commits)} commits")
    return commits
