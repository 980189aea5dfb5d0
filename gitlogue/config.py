"""
Configuration module for the gitlogue history engine
Loads engine limits and diff settings from YAML with environment overrides
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from platformdirs import user_config_dir
from pydantic import BaseModel, field_validator

from gitlogue.blob_reader import MAX_BLOB_SIZE
from gitlogue.changes import MAX_CHANGE_LINES
from gitlogue.diff_parser import DIFF_ALGORITHMS
from gitlogue.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

APP_NAME = "gitlogue"
CONFIG_FILENAME = "config.yaml"

# Environment overrides
ENV_DIFF_ALGORITHM = "GITLOGUE_DIFF_ALGORITHM"
ENV_MAX_CHANGE_LINES = "GITLOGUE_MAX_CHANGE_LINES"
ENV_MAX_BLOB_SIZE = "GITLOGUE_MAX_BLOB_SIZE"


class EngineConfig(BaseModel):
  """Engine settings consumed by the repository handle"""

  max_blob_size: int = MAX_BLOB_SIZE
  max_change_lines: int = MAX_CHANGE_LINES
  diff_algorithm: Optional[str] = None  # None: use the repository's diff.algorithm
  ignore_patterns: list[str] = []

  @field_validator("max_blob_size", "max_change_lines")
  @classmethod
  def validate_positive(cls, v: int) -> int:
    if v <= 0:
      raise ValueError(f"Limit must be positive, got: {v}")
    return v

  @field_validator("diff_algorithm", mode="before")
  @classmethod
  def validate_diff_algorithm(cls, v):
    """Accept algorithm names case-insensitively"""
    if v is None:
      return v
    name = str(v).strip().lower()
    if name not in DIFF_ALGORITHMS:
      raise ValueError(
        f"diff_algorithm must be one of {', '.join(DIFF_ALGORITHMS)}, got: {v}"
      )
    return name


def default_config_path() -> Path:
  return Path(user_config_dir(APP_NAME)) / CONFIG_FILENAME


def _load_yaml(config_path: Path) -> dict:
  try:
    with open(config_path, "r", encoding="utf-8") as f:
      raw = yaml.safe_load(f)
  except yaml.YAMLError as e:
    raise ConfigError.from_exception(
      e, context=f"Failed to parse config: {config_path}"
    ) from e

  if raw is None:
    return {}

  if not isinstance(raw, dict):
    raise ConfigError(f"Config must be a mapping at top level: {config_path}")

  return raw


def _env_overrides() -> dict:
  overrides = {}

  if algorithm := os.getenv(ENV_DIFF_ALGORITHM):
    overrides["diff_algorithm"] = algorithm
  if max_change_lines := os.getenv(ENV_MAX_CHANGE_LINES):
    overrides["max_change_lines"] = max_change_lines
  if max_blob_size := os.getenv(ENV_MAX_BLOB_SIZE):
    overrides["max_blob_size"] = max_blob_size

  return overrides


def load_config(config_path: Path | str | None = None) -> EngineConfig:
  """
  Load engine configuration

  Values come from the YAML file, then environment variables override them.
  Without an explicit path the per-user config file is used when it exists.

  Args:
      config_path: Optional path to a YAML configuration file

  Returns:
      Validated EngineConfig

  Raises:
      FileNotFoundError: If an explicit config file doesn't exist
      ConfigError: If the YAML is malformed or not a mapping
      pydantic.ValidationError: If values don't match the schema
  """
  if config_path is not None:
    config_path = Path(config_path)
    if not config_path.exists():
      raise FileNotFoundError(f"Configuration file not found: {config_path}")
  else:
    config_path = default_config_path()

  raw_config = {}
  if config_path.exists():
    logger.debug(f"Loading configuration from {config_path}")
    raw_config = _load_yaml(config_path)

  return EngineConfig(**{**raw_config, **_env_overrides()})
