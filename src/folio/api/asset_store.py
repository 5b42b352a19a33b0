"""Filesystem-backed asset store for the static site.

The store is a read-only view of one directory.  Route handlers never touch
``os.path`` directly: they ask the store to resolve a request path, check
that the result stays under the root, and look up the file.

Containment is a plain string comparison against ``root + os.sep`` performed
on the normalized path.  Comparing against ``root`` alone would accept
``/srv/public-evil`` as being inside ``/srv/public``.

Clean URLs
----------
The sitemap advertises ``/about`` for ``about.html`` and ``/blog/`` for
``blog/index.html``.  :meth:`AssetStore.find` accepts those forms too, so
every advertised URL resolves.  Candidates are derived from an already
contained path and re-checked, so they cannot leave the root.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

INDEX_DOCUMENT = "index.html"


@dataclass(frozen=True)
class StoredFile:
    """A file discovered by :meth:`AssetStore.list_files`.

    Attributes:
        key: Path relative to the root, always with ``/`` separators.
        modified: Last modification time (UTC).
    """

    key: str
    modified: datetime


class AssetStore:
    """Read-only access to the files under ``root``.

    Args:
        root: Site directory.  It is resolved to an absolute path once so all
            containment checks share the same prefix.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = os.path.realpath(str(root))

    def resolve(self, request_path: str) -> str:
        """Map a decoded URL path onto an absolute, normalized file path.

        ``/`` is served as the root document.  The result is *not* checked for
        containment; call :meth:`contains` before using it.
        """
        if request_path == "/":
            request_path = "/" + INDEX_DOCUMENT
        return os.path.normpath(os.path.join(self.root, request_path.lstrip("/")))

    def contains(self, candidate: str) -> bool:
        """Return ``True`` when ``candidate`` lies strictly below the root."""
        return candidate.startswith(self.root + os.sep)

    def find(self, candidate: str) -> str | None:
        """Return the file to serve for a contained path, or ``None``.

        Tries, in order: the path itself, ``<path>/index.html`` when the path
        is a directory, and ``<path>.html`` when the path has no extension.
        """
        options = [candidate]
        if os.path.isdir(candidate):
            options.append(os.path.join(candidate, INDEX_DOCUMENT))
        elif not os.path.splitext(candidate)[1]:
            options.append(candidate + ".html")

        for option in options:
            if self.contains(option) and os.path.isfile(option):
                return option
        return None

    def list_files(self, suffix: str = "") -> list[StoredFile]:
        """Recursively list files whose name ends with ``suffix``.

        Files that disappear during the walk, and dangling symlinks, are
        skipped with a warning.

        Returns:
            Stored files sorted by key.

        Raises:
            OSError: The root or a subdirectory could not be read.
        """
        found: list[StoredFile] = []

        def _raise(error: OSError) -> None:
            raise error

        for directory, _, filenames in os.walk(self.root, onerror=_raise):
            for filename in filenames:
                if not filename.endswith(suffix):
                    continue
                path = os.path.join(directory, filename)
                key = os.path.relpath(path, self.root).replace(os.sep, "/")
                try:
                    mtime = os.stat(path).st_mtime
                except FileNotFoundError:
                    logger.warning(f"Skipping {key}: file vanished or is a dangling link")
                    continue
                modified = datetime.fromtimestamp(mtime, tz=timezone.utc)
                found.append(StoredFile(key=key, modified=modified))
        found.sort(key=lambda stored: stored.key)
        return found

