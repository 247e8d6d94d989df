"""Canonical directory excludes with tiered architecture.

Tier 0 (HARDCODED_DIRS): Never traversed, not user-configurable.
    - VCS internals, TagNav data directories

Tier 1 (DEFAULT_PRUNABLE_DIRS): Dependency and build-output directories of a
    web front-end project. Skipped during enumeration and watching; the
    configured exclusion glob is applied on top of these.

The combined PRUNABLE_DIRS = HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS.
"""

from __future__ import annotations

# =============================================================================
# Tier 0: HARDCODED - Never traverse, not user-configurable
# =============================================================================

HARDCODED_DIRS: frozenset[str] = frozenset(
    (
        # VCS internals
        ".git",
        ".svn",
        ".hg",
        ".bzr",
        # TagNav data
        ".tagnav",
    )
)

# =============================================================================
# Tier 1: DEFAULT_PRUNABLE - dependencies, caches, build outputs
# =============================================================================

DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        # Node.js package managers
        "node_modules",
        ".npm",
        ".yarn",
        ".pnpm-store",
        "bower_components",
        # Front-end build tooling
        ".angular",
        ".nx",
        ".next",
        ".nuxt",
        ".turbo",
        ".cache",
        "dist",
        "coverage",
        "out-tsc",
        # Python tooling that tends to sit next to a front-end tree
        "__pycache__",
        ".venv",
        "venv",
    )
)

PRUNABLE_DIRS: frozenset[str] = HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS


def is_hardcoded_dir(name: str) -> bool:
    """Check if a directory name is in the hardcoded exclusion tier."""
    return name in HARDCODED_DIRS
