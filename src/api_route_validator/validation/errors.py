"""Failures the validation engine reports at its boundary.

Only option validation can fail; comparison and classification never do.
"""


class EngineError(Exception):
    """Base class for rejected validation options."""

    kind = "engine_error"

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [message])


class InvalidPatternError(EngineError):
    """An include or ignore pattern is empty, malformed, or ends in '/'."""

    kind = "invalid_pattern"


class UnsupportedFilterTypeError(EngineError):
    """A filter-type token is not part of the mismatch taxonomy."""

    kind = "unsupported_filter_type"
