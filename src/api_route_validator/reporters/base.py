"""Reporter interface shared by every output format."""

from abc import ABC, abstractmethod

from api_route_validator.validation.models import MismatchType, RouteMismatch, ValidationResult


class Reporter(ABC):
    """Render a ValidationResult; never recompute anything from it."""

    name: str = ""
    aliases: tuple[str, ...] = ()
    file_extension: str = "txt"
    mime_type: str = "text/plain"

    @abstractmethod
    def generate(self, result: ValidationResult, include_suggestions: bool = False) -> str:
        """Render the result as a string."""

    def supports(self, format_name: str) -> bool:
        format_name = format_name.strip().lower()
        return format_name == self.name or format_name in self.aliases


def group_by_type(mismatches) -> dict[MismatchType, list[RouteMismatch]]:
    """Group mismatches by type, keeping first-seen order."""
    groups: dict[MismatchType, list[RouteMismatch]] = {}
    for mismatch in mismatches:
        groups.setdefault(mismatch.type, []).append(mismatch)
    return groups


def format_details(mismatch: RouteMismatch) -> str:
    """One-line ``key: value`` rendering of a mismatch's details."""
    if mismatch.details is None:
        return ""
    parts = []
    for key, value in mismatch.details.model_dump(exclude={"kind"}).items():
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = ", ".join(str(v) for v in value)
        elif not value:
            continue
        parts.append(f"{key}: {value}")
    return "; ".join(parts)
