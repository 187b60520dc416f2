"""File collaborators consumed by the document store.

The document store never touches the filesystem directly. It goes through a
:class:`FileAccess` implementation so editor hosts can plug in their own
workspace abstraction (open buffers, remote filesystems, search index).

Two implementations ship here:

* :class:`LocalFileSystem` reads plain paths / ``file:`` URIs and performs a
  bounded ``glob`` search below a workspace root.
* :class:`InMemoryFileAccess` serves registered buffers (e.g. ``untitled:``
  documents) and delegates everything else to an optional fallback.

Example:
        from xsd_outline.files import LocalFileSystem

        files = LocalFileSystem("/work/schemas", max_results=5)
        hits = files.search_by_filename("**/common.xsd")
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple, Union
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

logger = logging.getLogger(__name__)

SourceText = Union[str, bytes]


class FileAccess(Protocol):
    """Narrow interface to the host's files. Every method may raise ``OSError``."""

    def exists(self, location: str) -> bool: ...

    def read(self, location: str) -> SourceText: ...

    def stat(self, location: str) -> float: ...

    def search_by_filename(self, pattern: str) -> List[str]: ...


def is_file_location(location: Optional[str]) -> bool:
    """Return True for plain paths and ``file:`` URIs.

    Anything carrying another URI scheme (``untitled:``, ``http:`` ...) is
    treated as a non file-backed buffer.
    """
    if not location:
        return False
    scheme = urlparse(location).scheme
    # A single letter scheme is a Windows drive ("C:\\schemas\\a.xsd").
    return scheme in ("", "file") or len(scheme) == 1


def to_path(location: str) -> Path:
    """Convert a plain path or ``file:`` URI into a :class:`Path`."""
    parsed = urlparse(location)
    if parsed.scheme == "file":
        return Path(url2pathname(unquote(parsed.path)))
    return Path(location)


class LocalFileSystem:
    """:class:`FileAccess` over the local filesystem.

    Args:
        workspace_root: Directory searched by :meth:`search_by_filename`.
            Without one, searches return no results.
        max_results: Maximum number of search hits returned.
        timeout: Seconds after which a search stops scanning.
    """

    def __init__(
        self,
        workspace_root: Optional[Union[str, Path]] = None,
        max_results: int = 20,
        timeout: float = 2.0,
    ) -> None:
        self.workspace_root = Path(workspace_root) if workspace_root else None
        self.max_results = max_results
        self.timeout = timeout

    def exists(self, location: str) -> bool:
        if not is_file_location(location):
            return False
        return to_path(location).is_file()

    def read(self, location: str) -> bytes:
        return to_path(location).read_bytes()

    def stat(self, location: str) -> float:
        return to_path(location).stat().st_mtime

    def search_by_filename(self, pattern: str) -> List[str]:
        """Glob ``pattern`` below the workspace root, bounded in count and time."""
        if self.workspace_root is None or not self.workspace_root.is_dir():
            return []
        results: List[str] = []
        deadline = time.monotonic() + self.timeout
        for match in self.workspace_root.glob(pattern):
            if match.is_file():
                results.append(str(match))
            if len(results) >= self.max_results:
                break
            if time.monotonic() > deadline:
                logger.warning(
                    f"Workspace search for {pattern} stopped after {self.timeout}s"
                )
                break
        return sorted(results)


class InMemoryFileAccess:
    """Serve registered in-memory buffers, delegating misses to ``fallback``.

    Buffers are keyed by their location string. Their modification time is a
    counter bumped on every :meth:`put` so cached parses are invalidated.
    """

    def __init__(self, fallback: Optional[FileAccess] = None) -> None:
        self.fallback = fallback
        self._buffers: Dict[str, Tuple[SourceText, float]] = {}
        self._version = 0.0

    def put(self, location: str, text: SourceText) -> None:
        self._version += 1
        self._buffers[location] = (text, self._version)

    def remove(self, location: str) -> None:
        self._buffers.pop(location, None)

    def exists(self, location: str) -> bool:
        if location in self._buffers:
            return True
        return self.fallback.exists(location) if self.fallback else False

    def read(self, location: str) -> SourceText:
        if location in self._buffers:
            return self._buffers[location][0]
        if self.fallback is None:
            raise FileNotFoundError(location)
        return self.fallback.read(location)

    def stat(self, location: str) -> float:
        if location in self._buffers:
            return self._buffers[location][1]
        if self.fallback is None:
            raise FileNotFoundError(location)
        return self.fallback.stat(location)

    def search_by_filename(self, pattern: str) -> List[str]:
        name = pattern.rsplit("/", 1)[-1]
        hits = [loc for loc in self._buffers if loc.rsplit("/", 1)[-1] == name]
        if self.fallback is not None:
            hits.extend(self.fallback.search_by_filename(pattern))
        return hits
