"""Machine-readable JSON report."""

import json
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version

from api_route_validator.reporters.base import Reporter
from api_route_validator.validation.models import ValidationResult

GENERATOR = "api-route-validator"


def package_version() -> str:
    try:
        return version(GENERATOR)
    except PackageNotFoundError:
        return "unknown"


class JsonReporter(Reporter):
    name = "json"
    file_extension = "json"
    mime_type = "application/json"

    def __init__(self, pretty_print: bool = True, include_metadata: bool = True):
        self.pretty_print = pretty_print
        self.include_metadata = include_metadata

    def generate(self, result: ValidationResult, include_suggestions: bool = False) -> str:
        mismatches = []
        for mismatch in result.mismatches:
            data = mismatch.to_dict()
            if not include_suggestions:
                data.pop("suggestions")
            mismatches.append(data)

        data = {
            "validation": {
                "status": "passed" if result.is_valid else "failed",
                "summary": result.summary(),
            },
            "mismatches": mismatches,
            "warnings": list(result.warnings),
            "statistics": result.statistics.as_dict(),
        }
        if result.is_complete:
            data["entries"] = [entry.to_dict() for entry in result.entries]
        if self.include_metadata:
            data["metadata"] = {
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "generator": GENERATOR,
                "version": package_version(),
            }

        return json.dumps(data, indent=2 if self.pretty_print else None, ensure_ascii=False)
