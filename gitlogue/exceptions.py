"""
Custom exceptions for the gitlogue history engine
"""

from typing import Literal, Optional, cast
from pydantic import BaseModel, Field


# All possible error sources in the engine
ErrorSource = Literal[
  "repository",  # Opening the repository, resolving revisions
  "selector",  # Commit playback (random / sequential)
  "range",  # Commit range parsing
  "exclusion",  # Ignore pattern configuration
  "diff",  # Line diff rendering and parsing
  "config",  # Configuration loading
]


class ErrorResponse(BaseModel):
  """Serializable error description handed to the UI layer"""

  description: str = Field(..., description="Human-readable error message")
  name: str = Field(..., description="Unique error identifier")
  source: ErrorSource = Field(..., description="Where the error originated")
  caused_by: Optional[str] = Field(
    None, description="Original error details if this is a chained error"
  )


class GitlogueError(Exception):
  """
  Base class for all engine errors.
  Every failure reported to callers is a subclass of this, so the UI can
  tell "nothing to select" apart from "exhausted" or "no range configured".
  """

  default_name = "GITLOGUE_ERROR"
  default_source: ErrorSource = "repository"

  def __init__(
    self,
    description: str,
    name: Optional[str] = None,
    source: Optional[ErrorSource] = None,
    caused_by: Optional[str] = None,
  ):
    """
    Initialize an engine error

    Args:
        description: Human-readable error message
        name: Unique error identifier (defaults to the class identifier)
        source: Where the error originated from (defaults per class)
        caused_by: Original error details if this wraps another error
    """
    self.description: str = description
    self.name: str = name or self.default_name
    self.source: ErrorSource = source or self.default_source
    self.caused_by: Optional[str] = caused_by
    super().__init__(description)

  def to_response(self) -> ErrorResponse:
    """Convert to ErrorResponse model"""
    return ErrorResponse(
      description=self.description,
      name=self.name,
      source=cast(ErrorSource, self.source),
      caused_by=self.caused_by,
    )

  @classmethod
  def from_exception(
    cls,
    e: Exception,
    context: Optional[str] = None,
    source: Optional[ErrorSource] = None,
  ) -> "GitlogueError":
    """
    Create an engine error from an existing exception

    Args:
        e: The original exception
        context: Additional context to prepend to the description
        source: Where this error originated

    Returns:
        Error of the calling class with original exception details preserved
    """
    original_msg = str(e)
    description = f"{context}: {original_msg}" if context else original_msg

    return cls(
      description=description,
      source=source,
      caused_by=f"{e.__class__.__name__}: {original_msg}",
    )


class NotFoundError(GitlogueError):
  """Bad revision or hash, missing commit, or no repository at the path"""

  default_name = "NOT_FOUND"
  default_source: ErrorSource = "repository"


class InvalidRangeError(GitlogueError):
  """Malformed or unsupported commit range expression"""

  default_name = "INVALID_RANGE"
  default_source: ErrorSource = "range"


class ExhaustedError(GitlogueError):
  """Sequential playback ran past the end of the active list"""

  default_name = "EXHAUSTED"
  default_source: ErrorSource = "selector"


class UnconfiguredError(GitlogueError):
  """Range operation invoked before a range was set"""

  default_name = "UNCONFIGURED"
  default_source: ErrorSource = "selector"


class EmptyError(GitlogueError):
  """No non-merge commits exist, or a parsed range is empty"""

  default_name = "EMPTY"
  default_source: ErrorSource = "selector"


class ConfigConflictError(GitlogueError):
  """Ignore patterns were initialized twice"""

  default_name = "CONFIG_CONFLICT"
  default_source: ErrorSource = "exclusion"


class ConfigError(GitlogueError):
  """Invalid configuration value or file"""

  default_name = "CONFIG_ERROR"
  default_source: ErrorSource = "config"


class DiffError(GitlogueError):
  """The line diff primitive produced output that could not be parsed"""

  default_name = "DIFF_ERROR"
  default_source: ErrorSource = "diff"
