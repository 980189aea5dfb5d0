"""Repository handle for commit replay.

GitRepository opens a repository with GitPython, owns the commit selector and
turns selected commit ids into fully populated CommitMetadata.
"""

import logging
import random
from datetime import UTC, datetime
from pathlib import Path
from typing import Optional

from git import Commit, Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from gitlogue.blob_reader import BlobReader
from gitlogue.changes import TreeChangeExtractor
from gitlogue.config import EngineConfig
from gitlogue.diff_parser import DEFAULT_DIFF_ALGORITHM, DIFF_ALGORITHMS, LineDiffBuilder
from gitlogue.diff_types import CommitMetadata
from gitlogue.exceptions import ExhaustedError, NotFoundError
from gitlogue.exclusion import ExclusionPolicy, IgnorePatternsBuilder
from gitlogue.range_parser import (
  RangeParser,
  non_merge_history,
  resolve_commit,
  resolve_head,
)
from gitlogue.selector import CommitSelector, PlaybackOrder

logger = logging.getLogger(__name__)


def repo_diff_algorithm(repo: Repo) -> str:
  """The repository's diff.algorithm git config, falling back to myers"""
  with repo.config_reader() as reader:
    value = str(reader.get_value("diff", "algorithm", DEFAULT_DIFF_ALGORITHM))

  value = value.strip().lower()
  if value == "default":
    return DEFAULT_DIFF_ALGORITHM
  if value not in DIFF_ALGORITHMS:
    logger.warning(f"Unknown diff.algorithm '{value}', using {DEFAULT_DIFF_ALGORITHM}")
    return DEFAULT_DIFF_ALGORITHM
  return value


class GitRepository:
  """A git repository opened for replay"""

  def __init__(
    self,
    repo: Repo,
    config: Optional[EngineConfig] = None,
    policy: Optional[ExclusionPolicy] = None,
    rng: Optional[random.Random] = None,
  ):
    """
    Wrap an opened GitPython repository

    Args:
      repo: The repository
      config: Engine settings (defaults when omitted)
      policy: Exclusion policy; built from config.ignore_patterns when omitted
      rng: Random source for random playback
    """
    self.repo = repo
    self.config = config or EngineConfig()

    if policy is None:
      policy = IgnorePatternsBuilder().set_patterns(self.config.ignore_patterns).build()
    self.policy = policy

    algorithm = self.config.diff_algorithm or repo_diff_algorithm(repo)
    self.blob_reader = BlobReader(repo, max_blob_size=self.config.max_blob_size)
    self.diff_builder = LineDiffBuilder(algorithm)
    self.extractor = TreeChangeExtractor(
      repo,
      self.blob_reader,
      self.diff_builder,
      policy=policy,
      max_change_lines=self.config.max_change_lines,
    )
    self.range_parser = RangeParser(repo)
    self.selector = CommitSelector(
      load_history=self._load_history,
      parse_range=self.range_parser.parse,
      rng=rng,
    )

  @classmethod
  def open(
    cls,
    path: Path | str = ".",
    config: Optional[EngineConfig] = None,
    policy: Optional[ExclusionPolicy] = None,
    rng: Optional[random.Random] = None,
  ) -> "GitRepository":
    """
    Open the repository containing `path`

    Parent directories are searched for the repository root.

    Raises:
      NotFoundError: If no repository contains the path
    """
    try:
      repo = Repo(path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
      raise NotFoundError.from_exception(
        e, context=f"Not a Git repository: {path} (or any parent directories)"
      ) from e

    logger.info(f"Opened git repository at {repo.working_tree_dir or repo.git_dir}")
    return cls(repo, config=config, policy=policy, rng=rng)

  def _load_history(self) -> list[str]:
    return non_merge_history(self.repo, resolve_head(self.repo))

  def _metadata(self, commit: Commit) -> CommitMetadata:
    # Ensure message is always a string
    raw_message = commit.message
    message = (
      raw_message.decode("utf-8", errors="replace")
      if isinstance(raw_message, bytes)
      else raw_message
    )

    return CommitMetadata(
      hash=commit.hexsha,
      author=commit.author.name or "",
      date=datetime.fromtimestamp(commit.authored_date, tz=UTC),
      message=message.strip(),
      changes=tuple(self.extractor.extract(commit)),
    )

  def get_commit(self, rev: str) -> CommitMetadata:
    """Metadata for a specific revision (single-commit mode)"""
    return self._metadata(resolve_commit(self.repo, rev))

  def random_commit(self) -> CommitMetadata:
    return self.get_commit(self.selector.random())

  def next_asc_commit(self) -> CommitMetadata:
    return self.get_commit(self.selector.next_ascending())

  def next_desc_commit(self) -> CommitMetadata:
    return self.get_commit(self.selector.next_descending())

  def reset_index(self) -> None:
    self.selector.reset()

  def set_commit_range(self, expr: str) -> None:
    self.selector.set_range(expr)

  def next_range_commit_asc(self) -> CommitMetadata:
    return self.get_commit(self.selector.next_range_ascending())

  def next_range_commit_desc(self) -> CommitMetadata:
    return self.get_commit(self.selector.next_range_descending())

  def random_range_commit(self) -> CommitMetadata:
    return self.get_commit(self.selector.random_range())

  def next_commit(
    self,
    order: PlaybackOrder = PlaybackOrder.RANDOM,
    use_range: bool = False,
    loop: bool = False,
  ) -> CommitMetadata:
    """
    Select and load the next commit for a playback order

    Args:
      order: Random, ascending or descending playback
      use_range: Play the range set with set_commit_range instead of all history
      loop: Restart from the beginning once every commit has been played
    """
    try:
      commit_id = self.selector.next(order, use_range=use_range)
    except ExhaustedError:
      if not loop:
        raise
      logger.info("All commits played, restarting playback")
      self.selector.reset()
      commit_id = self.selector.next(order, use_range=use_range)

    return self.get_commit(commit_id)
