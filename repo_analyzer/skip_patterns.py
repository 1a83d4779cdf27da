"""
Skip-pattern filter.

Decides whether a listed entry is excluded from the walk. A matched directory
is never listed or descended into.
"""

from fnmatch import fnmatchcase
from typing import Iterable, Tuple


SKIP_PATTERNS: Tuple[str, ...] = (
    # Version control and dependencies
    "node_modules",
    ".git",
    # Build output
    "dist",
    "build",
    ".next",
    ".nuxt",
    # Tool caches and coverage
    "coverage",
    ".nyc_output",
    ".cache",
    ".parcel-cache",
    # Logs, lockfiles, minified assets and sourcemaps
    "*.log",
    "*.lock",
    "*.min.js",
    "*.min.css",
    "*.map",
)


def should_skip(name: str, patterns: Iterable[str] = SKIP_PATTERNS) -> bool:
    """
    Check whether an entry name matches any skip pattern.

    Patterns containing "*" are case-sensitive wildcards matched against the
    whole name; all others must match the name exactly.

    Args:
        name: Entry name (not the full path)
        patterns: Patterns to test against

    Returns:
        True if the entry should be excluded
    """
    for pattern in patterns:
        if "*" in pattern:
            if fnmatchcase(name, pattern):
                return True
        elif name == pattern:
            return True
    return False
