"""Wildcard pattern matching for route and endpoint path filtering.

Supported shapes, checked in this order:

- ``/api/users``   exact match
- ``api/*``        prefix
- ``*/users``      suffix
- ``*users*``      contains
- ``/api/*/users`` mid-path wildcard

Matching is case-insensitive and does not care whether the pattern carries a
leading slash.
"""

import fnmatch
import re
from typing import NamedTuple

VALID_PATTERN = re.compile(r"^[A-Za-z0-9/_{}\-*.]+$")

MAX_SAMPLE_PATHS = 3


class PatternValidation(NamedTuple):
    valid: bool
    errors: list[str]


def normalize_pattern(pattern: str) -> str:
    """Lower-case a pattern and give it a leading slash unless it starts with '*'."""
    pattern = pattern.strip()
    if not pattern.startswith("*") and not pattern.startswith("/"):
        pattern = "/" + pattern
    return pattern.lower()


def normalize_path(path: str) -> str:
    """Lower-case a path, ensure a leading slash, strip a trailing one (root excluded)."""
    path = path.strip()
    if not path.startswith("/"):
        path = "/" + path
    if path != "/":
        path = path.rstrip("/") or "/"
    return path.lower()


def matches(pattern: str, path: str) -> bool:
    """Check if a path matches a wildcard pattern."""
    pattern = normalize_pattern(pattern)
    path = normalize_path(path)
    wildcards = pattern.count("*")

    if wildcards == 0:
        return normalize_path(pattern) == path

    if wildcards == 1 and pattern.endswith("*"):
        return path.startswith(pattern[:-1])

    if wildcards == 1 and pattern.startswith("*"):
        return path.endswith(pattern[1:])

    if wildcards == 2 and pattern.startswith("*") and pattern.endswith("*") and len(pattern) > 2:
        return pattern[1:-1] in path

    if wildcards == 1:
        head, tail = pattern.split("*")
        return len(path) >= len(head) + len(tail) and path.startswith(head) and path.endswith(tail)

    return fnmatch.fnmatchcase(path, pattern)


def matches_any(patterns, path: str) -> bool:
    """Check if a path matches at least one of the patterns."""
    return any(matches(pattern, path) for pattern in patterns)


def filter_paths(paths, pattern: str) -> list[str]:
    """Keep the paths that match a pattern, preserving order."""
    return [path for path in paths if matches(pattern, path)]


def count_matches(pattern: str, paths) -> int:
    return len(filter_paths(paths, pattern))


def get_suggestions(pattern: str, candidate_paths: list[str]) -> list[str]:
    """Suggest alternatives for a pattern that matches nothing."""
    if count_matches(pattern, candidate_paths) > 0:
        return []

    stripped = pattern.strip()

    suggestions = []
    if not stripped.startswith("/") and not stripped.startswith("*"):
        with_slash = "/" + stripped
        if count_matches(with_slash, candidate_paths) > 0:
            suggestions.append(f"Try adding a leading slash: '{with_slash}'")
    if suggestions:
        return suggestions

    if "*" not in stripped:
        literal = stripped.strip("/")
        prefix_pattern = stripped.rstrip("/") + "/*"
        if count_matches(prefix_pattern, candidate_paths) > 0:
            suggestions.append(f"Try a prefix wildcard: '{prefix_pattern}'")
        contains_pattern = f"*{literal}*"
        if literal and count_matches(contains_pattern, candidate_paths) > 0:
            suggestions.append(f"Try a contains wildcard: '{contains_pattern}'")
    if suggestions:
        return suggestions

    if candidate_paths:
        sample = ", ".join(candidate_paths[:MAX_SAMPLE_PATHS])
        suggestions.append(f"Available paths include: {sample}")
    return suggestions


def validate_patterns(patterns) -> PatternValidation:
    """Check that patterns are well formed."""
    errors = []
    for pattern in patterns:
        if not pattern or not pattern.strip():
            errors.append("Empty pattern provided")
            continue

        pattern = pattern.strip()
        if not VALID_PATTERN.match(pattern):
            errors.append(f"Pattern '{pattern}' contains invalid characters")

        if pattern.endswith("/"):
            errors.append(
                f"Pattern '{pattern}' ends with / which might not match as expected. "
                "Consider removing it or adding *"
            )

    return PatternValidation(valid=not errors, errors=errors)
