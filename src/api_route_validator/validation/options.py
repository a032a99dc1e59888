"""Options controlling a validation run."""

from pydantic import BaseModel, ConfigDict, field_validator

from api_route_validator.validation.errors import InvalidPatternError, UnsupportedFilterTypeError
from api_route_validator.validation.models import MismatchType
from api_route_validator.validation.patterns import validate_patterns

FILTER_TYPES = tuple(t.value for t in MismatchType)


def normalize_filter_type(token: str) -> str | None:
    """Map ``Missing-Documentation`` style tokens onto the taxonomy value."""
    value = token.strip().lower().replace("-", "_")
    return value if value in FILTER_TYPES else None


def _as_tuple(value) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    return tuple(v.value if isinstance(v, MismatchType) else str(v) for v in value)


class ValidationOptions(BaseModel):
    """Filtering knobs; unknown keys are ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    base_path: str | None = None
    include_patterns: tuple[str, ...] = ()
    exclude_middleware: tuple[str, ...] = ()
    ignore_routes: tuple[str, ...] = ()
    filter_types: tuple[MismatchType, ...] = ()

    @field_validator("include_patterns", "exclude_middleware", "ignore_routes", mode="before")
    @classmethod
    def _listify(cls, value) -> tuple[str, ...]:
        return _as_tuple(value)

    @field_validator("filter_types", mode="before")
    @classmethod
    def _normalize_filter_types(cls, value) -> tuple[str, ...]:
        normalized = []
        for token in _as_tuple(value):
            filter_type = normalize_filter_type(token)
            if filter_type is None:
                # parse_options reports unknown tokens before model validation.
                raise ValueError(token)
            if filter_type not in normalized:
                normalized.append(filter_type)
        return tuple(normalized)

    @field_validator("base_path", mode="before")
    @classmethod
    def _blank_base_path(cls, value):
        if value is None or not str(value).strip() or str(value).strip() == "/":
            return None
        return str(value)


def parse_options(raw=None) -> ValidationOptions:
    """Validate a raw options mapping before any comparison work starts."""
    if isinstance(raw, ValidationOptions):
        return raw
    raw = dict(raw or {})

    unsupported = [
        token for token in _as_tuple(raw.get("filter_types")) if normalize_filter_type(token) is None
    ]
    if unsupported:
        raise UnsupportedFilterTypeError(
            f"Unsupported filter type(s): {', '.join(unsupported)}. "
            f"Supported types: {', '.join(FILTER_TYPES)}",
        )

    errors = []
    for key in ("include_patterns", "ignore_routes"):
        errors.extend(validate_patterns(_as_tuple(raw.get(key))).errors)
    if errors:
        raise InvalidPatternError("Invalid patterns: " + "; ".join(errors), errors)

    return ValidationOptions.model_validate(raw)
