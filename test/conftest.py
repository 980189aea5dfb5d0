"""Shared fixtures: throwaway git repositories built with GitPython."""

import tempfile
from pathlib import Path

import git
import pytest

# Fixed epoch so commit order is deterministic (2024-01-01T00:00:00Z)
BASE_TIMESTAMP = 1704067200


class RepoBuilder:
  """Create commits in a temporary repository with increasing timestamps"""

  def __init__(self, path: Path, repo: git.Repo):
    self.path = path
    self.repo = repo
    self._tick = 0

  def commit(self, message: str, files=None, parents=None):
    """Write/delete files and commit.

    Args:
        message: Commit message
        files: Mapping of path -> str | bytes | None (None deletes the file)
        parents: Explicit parent commits (used for merges)
    """
    added = []
    removed = []
    for rel_path, content in (files or {}).items():
      full_path = self.path / rel_path
      if content is None:
        removed.append(rel_path)
        continue
      full_path.parent.mkdir(parents=True, exist_ok=True)
      if isinstance(content, bytes):
        full_path.write_bytes(content)
      else:
        full_path.write_text(content, encoding="utf-8", newline="")
      added.append(rel_path)

    if removed:
      self.repo.index.remove(removed, working_tree=True)
    if added:
      self.repo.index.add(added)

    self._tick += 1
    date = f"{BASE_TIMESTAMP + self._tick * 60} +0000"
    author = git.Actor("Test User", "test@example.com")
    return self.repo.index.commit(
      message,
      parent_commits=parents,
      author=author,
      committer=author,
      author_date=date,
      commit_date=date,
    )


@pytest.fixture
def temp_repo():
  """Create a temporary git repository for testing."""
  with tempfile.TemporaryDirectory() as tmpdir:
    repo_path = Path(tmpdir)
    repo = git.Repo.init(repo_path)

    # Configure git for commits
    with repo.config_writer() as config:
      config.set_value("user", "name", "Test User")
      config.set_value("user", "email", "test@example.com")

    yield repo_path, repo
    repo.close()


@pytest.fixture
def builder(temp_repo):
  repo_path, repo = temp_repo
  return RepoBuilder(repo_path, repo)


@pytest.fixture
def linear_repo(builder):
  """Five commits in a straight line; returns (builder, commits oldest first)."""
  commits = [
    builder.commit("Add readme", {"README.md": "# Project\n"}),
    builder.commit("Add main", {"src/main.py": "print('hello')\n"}),
    builder.commit("Update main", {"src/main.py": "print('hello world')\n"}),
    builder.commit("Add util", {"src/util.py": "def util():\n  return 1\n"}),
    builder.commit("Remove util", {"src/util.py": None}),
  ]
  return builder, commits


@pytest.fixture
def merge_repo(builder):
  """History with one merge commit.

  root -> main1 -> merge
      \\-> side --/
  Returns (builder, dict of named commits).
  """
  root = builder.commit("Root", {"a.txt": "a\n"})
  side = builder.commit("Side", {"b.txt": "b\n"}, parents=[root])
  main1 = builder.commit("Main 1", {"c.txt": "c\n"}, parents=[root])
  merge = builder.commit("Merge side", {}, parents=[main1, side])
  after = builder.commit("After merge", {"d.txt": "d\n"})
  return builder, {
    "root": root,
    "side": side,
    "main1": main1,
    "merge": merge,
    "after": after,
  }
