"""
Exclusion policy for files that should not be animated
Lock files, minified/bundled/source-mapped artifacts, test snapshots and
user-supplied glob patterns are hidden from playback
"""

import fnmatch
import functools
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from gitlogue.exceptions import ConfigConflictError, ConfigError

logger = logging.getLogger(__name__)

# Dependency lock files, matched by file name
EXCLUDED_FILES = frozenset(
  {
    # JavaScript/Node.js
    "yarn.lock",
    "package-lock.json",
    "pnpm-lock.yaml",
    "bun.lock",
    "bun.lockb",
    # Rust
    "Cargo.lock",
    # Ruby
    "Gemfile.lock",
    # Python
    "poetry.lock",
    "Pipfile.lock",
    # PHP
    "composer.lock",
    # Go
    "go.sum",
    # Swift
    "Package.resolved",
    # Dart/Flutter
    "pubspec.lock",
    # .NET/C#
    "packages.lock.json",
    "project.assets.json",
    # Elixir
    "mix.lock",
    # Java/Gradle
    "gradle.lockfile",
    "buildscript-gradle.lockfile",
    # Scala
    "build.sbt.lock",
    # Bazel
    "MODULE.bazel.lock",
  }
)

# Generated artifacts, matched as a file name suffix or a path substring
EXCLUDED_PATTERNS = (
  # Minified files
  ".min.js",
  ".min.css",
  # Bundled files
  ".bundle.js",
  ".bundle.css",
  # Source maps
  ".js.map",
  ".css.map",
  ".d.ts.map",
  # Test snapshots
  ".snap",
  "__snapshots__",
)

LOCK_FILE_REASON = "lock file"
GENERATED_FILE_REASON = "generated file"


def _expand_braces(pattern: str) -> list[str]:
  """Expand `{a,b}` alternation (nested groups allowed) into plain patterns"""
  start = pattern.find("{")
  if start == -1:
    return [pattern]

  depth = 0
  for end in range(start, len(pattern)):
    if pattern[end] == "{":
      depth += 1
    elif pattern[end] == "}":
      depth -= 1
      if depth == 0:
        break
  else:
    raise ConfigError(f"Invalid glob pattern: {pattern}")

  options = []
  current = ""
  depth = 0
  for char in pattern[start + 1 : end]:
    if char == "," and depth == 0:
      options.append(current)
      current = ""
      continue
    if char == "{":
      depth += 1
    elif char == "}":
      depth -= 1
    current += char
  options.append(current)

  prefix, suffix = pattern[:start], pattern[end + 1 :]
  return [
    expanded for option in options for expanded in _expand_braces(prefix + option + suffix)
  ]


def _globstar_variants(pattern: str) -> set[str]:
  """A `**/` component may also match zero directories"""
  variants = {pattern}
  pending = [pattern]
  while pending:
    current = pending.pop()
    candidates = []
    if current.startswith("**/"):
      candidates.append(current[3:])
    index = current.find("/**/")
    while index != -1:
      candidates.append(current[:index] + current[index + 3 :])
      index = current.find("/**/", index + 1)
    for candidate in candidates:
      if candidate not in variants:
        variants.add(candidate)
        pending.append(candidate)
  return variants


@functools.lru_cache(maxsize=None)
def _pattern_variants(pattern: str) -> tuple[str, ...]:
  """fnmatch patterns equivalent to one user glob"""
  return tuple(
    sorted(
      variant
      for expanded in _expand_braces(pattern)
      for variant in _globstar_variants(expanded)
    )
  )


def _matches(path: str, pattern: str) -> bool:
  return any(fnmatch.fnmatchcase(path, variant) for variant in _pattern_variants(pattern))


def _validate_pattern(pattern: str) -> str:
  """Reject patterns fnmatch would silently treat as literals"""
  if not pattern.strip():
    raise ConfigError(f"Invalid glob pattern: {pattern!r}")

  # Unterminated alternation or character class never matches what the user meant
  for variant in _expand_braces(pattern):
    index = 0
    while index < len(variant):
      if variant[index] == "[":
        closing = variant.find("]", index + 2)
        if closing == -1:
          raise ConfigError(f"Invalid glob pattern: {pattern}")
        index = closing
      index += 1
  return pattern


@dataclass(frozen=True)
class ExclusionPolicy:
  """Immutable exclusion policy. Build one with IgnorePatternsBuilder."""

  user_patterns: tuple[str, ...] = ()

  def exclusion_reason(self, path: str) -> Optional[str]:
    """
    Return why `path` is hidden from animation, or None

    Rules are evaluated in order and the first match wins:
    user glob patterns, lock file names, generated artifact patterns.

    Args:
      path: Forward-slash path relative to the repository root
    """
    for pattern in self.user_patterns:
      if _matches(path, pattern):
        return f"matches ignore pattern '{pattern}'"

    filename = path.rsplit("/", 1)[-1]

    if filename in EXCLUDED_FILES:
      return LOCK_FILE_REASON

    for pattern in EXCLUDED_PATTERNS:
      if filename.endswith(pattern) or pattern in path:
        return GENERATED_FILE_REASON

    return None

  def should_exclude(self, path: str) -> bool:
    return self.exclusion_reason(path) is not None


class IgnorePatternsBuilder:
  """
  Collects user ignore patterns exactly once, then builds an ExclusionPolicy

  Setting an empty pattern list is a no-op and does not use up the single
  initialization.
  """

  def __init__(self):
    self._patterns: Optional[tuple[str, ...]] = None

  @property
  def is_initialized(self) -> bool:
    return self._patterns is not None

  def set_patterns(self, patterns: Iterable[str]) -> "IgnorePatternsBuilder":
    """
    Configure user glob patterns

    Args:
      patterns: Glob patterns matched against full forward-slash paths

    Raises:
      ConfigError: If a pattern is malformed
      ConfigConflictError: If patterns were already configured
    """
    patterns = tuple(patterns)
    if not patterns:
      return self

    if self._patterns is not None:
      raise ConfigConflictError("User patterns already initialized")

    self._patterns = tuple(_validate_pattern(p) for p in patterns)
    logger.debug(f"Configured {len(self._patterns)} ignore patterns")
    return self

  def build(self) -> ExclusionPolicy:
    return ExclusionPolicy(user_patterns=self._patterns or ())


DEFAULT_POLICY = ExclusionPolicy()


def should_exclude_file(path: str, policy: Optional[ExclusionPolicy] = None) -> bool:
  """Check if a file should be excluded from diff animation"""
  return (policy or DEFAULT_POLICY).should_exclude(path)
