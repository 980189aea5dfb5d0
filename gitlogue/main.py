#!/usr/bin/env python3
"""Print one replayed commit as JSON.

Runs the same selection and diff pipeline the screensaver uses and dumps the
resulting CommitMetadata, which is handy for inspecting what would be typed.
"""

import argparse
import json
import logging
import os
import sys

from pydantic import ValidationError

from gitlogue.config import load_config
from gitlogue.exceptions import GitlogueError
from gitlogue.exclusion import IgnorePatternsBuilder
from gitlogue.repository import GitRepository
from gitlogue.selector import PlaybackOrder

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(
    prog="gitlogue-dump",
    description="Print the structured diff of a replayed commit",
  )
  parser.add_argument(
    "-p", "--path", default=".", help="Path to Git repository (defaults to current directory)"
  )
  parser.add_argument("-c", "--commit", help="Replay a specific commit")
  parser.add_argument("-r", "--range", dest="commit_range", help="Commit range, e.g. HEAD~5..HEAD")
  parser.add_argument(
    "--order",
    choices=[order.value for order in PlaybackOrder],
    default=PlaybackOrder.RANDOM.value,
    help="Commit playback order",
  )
  parser.add_argument(
    "--ignore",
    action="append",
    default=[],
    metavar="GLOB",
    help="Glob pattern of files to hide (repeatable)",
  )
  parser.add_argument("--config", help="Path to a YAML config file")
  return parser


def main(argv: list[str] | None = None) -> int:
  """Select a commit and print it as JSON."""
  logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "WARNING"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
  )
  args = build_parser().parse_args(argv)

  try:
    config = load_config(args.config)

    builder = IgnorePatternsBuilder()
    builder.set_patterns([*config.ignore_patterns, *args.ignore])

    repo = GitRepository.open(args.path, config=config, policy=builder.build())

    if args.commit:
      metadata = repo.get_commit(args.commit)
    else:
      if args.commit_range:
        repo.set_commit_range(args.commit_range)
      metadata = repo.next_commit(
        PlaybackOrder(args.order), use_range=bool(args.commit_range)
      )

    print(json.dumps(metadata.to_dict(), indent=2))
    return 0

  except GitlogueError as e:
    logger.error(f"{e.name}: {e.description}")
    print(f"error: {e.description}", file=sys.stderr)
    return 1
  except (FileNotFoundError, ValidationError) as e:
    print(f"error: {e}", file=sys.stderr)
    return 1


if __name__ == "__main__":
  sys.exit(main())
