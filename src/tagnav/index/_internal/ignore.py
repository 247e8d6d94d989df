"""Include/exclude path filtering shared by the scanner and the watcher.

Tiered architecture:
- HARDCODED_DIRS: Always excluded, cannot be overridden (VCS, .tagnav)
- DEFAULT_PRUNABLE_DIRS: Not descended into during a workspace walk
- include/exclude globs: Workspace configuration, matched against the
  POSIX path relative to the workspace root
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

from tagnav.core.excludes import (
    DEFAULT_PRUNABLE_DIRS,
    HARDCODED_DIRS,
    PRUNABLE_DIRS,
    is_hardcoded_dir,
)

__all__ = [
    "PRUNABLE_DIRS",
    "HARDCODED_DIRS",
    "DEFAULT_PRUNABLE_DIRS",
    "PathFilter",
    "glob_to_regex",
    "matches_glob",
]


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a path glob into an anchored regex.

    ``**/`` matches zero or more directories, ``**`` anything, ``*`` and
    ``?`` never cross a ``/``. ``[...]`` classes are passed through.
    """
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**/", i):
                out.append("(?:.*/)?")
                i += 3
                continue
            if pattern.startswith("**", i):
                out.append(".*")
                i += 2
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out) + r"\Z")


def matches_glob(rel_path: str, pattern: str) -> bool:
    """Check if a POSIX relative path matches a glob pattern, with ** support."""
    return glob_to_regex(pattern).match(rel_path) is not None


class PathFilter:
    """Decides which files under a workspace root are component sources.

    Usage::

        path_filter = PathFilter(root, include="src/**/*.ts")
        path_filter.should_prune_dir("node_modules")   # True
        path_filter.matches(root / "src/app/foo.component.ts")  # True
    """

    def __init__(
        self,
        root: Path,
        include: str = "src/**/*.ts",
        exclude: str | None = "**/node_modules/**",
    ) -> None:
        self._root = root
        self._include = include
        self._exclude = exclude

    @property
    def root(self) -> Path:
        return self._root

    def should_prune_dir(self, dirname: str) -> bool:
        """Check if a directory should be skipped during traversal.

        Args:
            dirname: Directory name (not path), e.g., "node_modules"
        """
        return is_hardcoded_dir(dirname) or dirname in DEFAULT_PRUNABLE_DIRS

    def relative(self, path: Path) -> str | None:
        """POSIX path relative to the root, or None if outside it."""
        try:
            return path.relative_to(self._root).as_posix()
        except ValueError:
            return None

    def matches_rel(self, rel_path: str) -> bool:
        rel_path = rel_path.replace("\\", "/")
        if any(is_hardcoded_dir(part) for part in rel_path.split("/")[:-1]):
            return False
        if not matches_glob(rel_path, self._include):
            return False
        return not (self._exclude and matches_glob(rel_path, self._exclude))

    def matches(self, path: Path) -> bool:
        """True if ``path`` is inside the root and selected by the globs."""
        rel_path = self.relative(path)
        return rel_path is not None and self.matches_rel(rel_path)
