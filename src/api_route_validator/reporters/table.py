"""Tabular report built with tabulate."""

from tabulate import tabulate

from api_route_validator.reporters.base import Reporter
from api_route_validator.validation.models import ValidationResult


class TableReporter(Reporter):
    """One row per route/endpoint when the complete view is available, else per mismatch."""

    name = "table"
    file_extension = "txt"
    mime_type = "text/plain"

    def __init__(self, tablefmt: str = "simple"):
        self.tablefmt = tablefmt

    def generate(self, result: ValidationResult, include_suggestions: bool = False) -> str:
        if result.is_complete:
            body = self._entries_table(result)
        else:
            body = self._mismatches_table(result, include_suggestions)

        stats = result.statistics
        lines = [
            body,
            "",
            f"Status: {'PASSED' if result.is_valid else 'FAILED'} "
            f"({result.mismatch_count()} mismatches, {len(result.warnings)} warnings)",
            f"Routes covered: {stats.covered_routes}/{stats.total_routes} ({stats.route_coverage_percentage}%)",
            f"Endpoints covered: {stats.covered_endpoints}/{stats.total_endpoints} "
            f"({stats.endpoint_coverage_percentage}%)",
        ]
        for warning in result.warnings:
            lines.append(f"Warning: {warning}")
        return "\n".join(lines) + "\n"

    def _entries_table(self, result: ValidationResult) -> str:
        rows = [
            [
                entry.method,
                entry.path,
                entry.source,
                entry.display_status,
                ", ".join(entry.route_parameters) or "-",
                ", ".join(entry.endpoint_parameters) or "-",
            ]
            for entry in result.entries
        ]
        headers = ["Method", "Path", "Source", "Status", "Route params", "Spec params"]
        return tabulate(rows, headers=headers, tablefmt=self.tablefmt)

    def _mismatches_table(self, result: ValidationResult, include_suggestions: bool) -> str:
        headers = ["Type", "Severity", "Method", "Path", "Message"]
        if include_suggestions:
            headers.append("Suggestions")

        rows = []
        for mismatch in result.mismatches:
            row = [mismatch.type.value, mismatch.severity.value, mismatch.method, mismatch.path, mismatch.message]
            if include_suggestions:
                row.append("\n".join(mismatch.suggestions))
            rows.append(row)
        return tabulate(rows, headers=headers, tablefmt=self.tablefmt)
