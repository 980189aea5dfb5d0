"""Blob content access for the tree change extractor.

Blobs that cannot be resolved, are larger than the size ceiling or contain a
NUL byte are reported as "no content" instead of raising: missing content
only disables diffing for one file, never for the whole commit.
"""

import logging
from typing import Optional, Union

from git import Repo
from gitdb.exc import BadName, BadObject
from gitdb.util import to_bin_sha

logger = logging.getLogger(__name__)

# Maximum blob size to read (500 KiB)
MAX_BLOB_SIZE = 500 * 1024

BlobId = Union[str, bytes]


class BlobReader:
  """Resolve blob ids to text, rejecting binary and oversized content"""

  def __init__(self, repo: Repo, max_blob_size: int = MAX_BLOB_SIZE):
    self.repo = repo
    self.max_blob_size = max_blob_size

  def _size(self, blob_id: BlobId) -> Optional[int]:
    try:
      return self.repo.odb.info(to_bin_sha(blob_id)).size
    except (ValueError, BadObject, BadName) as e:
      logger.debug(f"Cannot resolve blob {blob_id!r}: {e}")
      return None

  def _stream(self, blob_id: BlobId) -> Optional[bytes]:
    try:
      return self.repo.odb.stream(to_bin_sha(blob_id)).read()
    except (ValueError, BadObject, BadName) as e:
      logger.debug(f"Cannot read blob {blob_id!r}: {e}")
      return None

  def inspect(self, blob_id: BlobId) -> tuple[bool, Optional[str]]:
    """
    Classify and decode a blob with one header lookup and one read

    Returns:
      (is_binary, text): text is None for unresolvable, oversized or NUL
      content, otherwise UTF-8 with invalid sequences replaced. Unresolvable
      blobs are not considered binary.
    """
    size = self._size(blob_id)
    if size is None:
      return False, None
    if size > self.max_blob_size:
      return True, None

    data = self._stream(blob_id)
    if data is None:
      return False, None
    if b"\x00" in data:
      return True, None
    return False, data.decode("utf-8", errors="replace")

  def is_binary(self, blob_id: BlobId) -> bool:
    """True when the blob exceeds the size ceiling or contains a NUL byte"""
    return self.inspect(blob_id)[0]

  def read(self, blob_id: BlobId) -> Optional[str]:
    return self.inspect(blob_id)[1]
