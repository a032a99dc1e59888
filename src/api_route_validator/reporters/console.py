"""Plain-text report for terminals and log files."""

from datetime import datetime

import click

from api_route_validator.reporters.base import Reporter, format_details, group_by_type
from api_route_validator.validation.models import RouteMismatch, Severity, ValidationResult

ICONS = {Severity.ERROR: "✗", Severity.WARNING: "⚠", Severity.INFO: "ℹ"}
COLORS = {Severity.ERROR: "red", Severity.WARNING: "yellow", Severity.INFO: "cyan"}


class ConsoleReporter(Reporter):
    name = "console"
    aliases = ("text", "txt")
    file_extension = "txt"
    mime_type = "text/plain"

    def __init__(self, use_colors: bool = False):
        self.use_colors = use_colors

    def _style(self, text: str, **styles) -> str:
        return click.style(text, **styles) if self.use_colors else text

    def generate(self, result: ValidationResult, include_suggestions: bool = False) -> str:
        sections = [self._header(), self._summary(result)]
        if not result.is_valid:
            sections.append(self._mismatches(result, include_suggestions))
        if result.has_warnings():
            sections.append(self._warnings(result))
        sections.append(self._statistics(result))
        return "\n\n".join(s for s in sections if s) + "\n"

    def _header(self) -> str:
        title = "Route Validation Report"
        timestamp = f"Generated: {datetime.now():%Y-%m-%d %H:%M:%S}"
        separator = "=" * max(len(title), len(timestamp))
        return "\n".join([
            self._style(separator, fg="cyan"),
            self._style(title, fg="blue", bold=True),
            timestamp,
            self._style(separator, fg="cyan"),
        ])

    def _summary(self, result: ValidationResult) -> str:
        status = "PASSED" if result.is_valid else "FAILED"
        lines = [
            "VALIDATION SUMMARY",
            "-" * 18,
            f"Status: {self._style(status, fg='green' if result.is_valid else 'red')}",
            f"Total mismatches: {result.mismatch_count()}",
        ]
        if result.has_warnings():
            lines.append(f"Warnings: {len(result.warnings)}")
        return "\n".join(lines)

    def _mismatches(self, result: ValidationResult, include_suggestions: bool) -> str:
        lines = ["MISMATCHES", "-" * 10]
        for mismatch_type, mismatches in group_by_type(result.mismatches).items():
            title = f"{mismatch_type.label} ({len(mismatches)})"
            lines += ["", self._style(title, fg="yellow", bold=True), "-" * len(title)]
            for mismatch in mismatches:
                lines.append(self._mismatch(mismatch, include_suggestions))
        return "\n".join(lines)

    def _mismatch(self, mismatch: RouteMismatch, include_suggestions: bool) -> str:
        icon = self._style(ICONS[mismatch.severity], fg=COLORS[mismatch.severity])
        lines = [f"{icon} {mismatch.message}"]
        if mismatch.path:
            lines.append(f"   Path: {mismatch.path}")
        if mismatch.method:
            lines.append(f"   Method: {mismatch.method}")
        details = format_details(mismatch)
        if details:
            lines.append(f"   Details: {details}")
        if include_suggestions and mismatch.suggestions:
            lines.append("   Suggestions:")
            lines += [f"     • {s}" for s in mismatch.suggestions]
        return "\n".join(lines) + "\n"

    def _warnings(self, result: ValidationResult) -> str:
        lines = ["WARNINGS", "-" * 8]
        lines += [f"{self._style('⚠', fg='yellow')} {w}" for w in result.warnings]
        return "\n".join(lines)

    def _statistics(self, result: ValidationResult) -> str:
        stats = result.statistics
        lines = [
            "STATISTICS",
            "-" * 10,
            f"Routes: {stats.covered_routes}/{stats.total_routes} covered ({stats.route_coverage_percentage}%)",
            f"Endpoints: {stats.covered_endpoints}/{stats.total_endpoints} covered "
            f"({stats.endpoint_coverage_percentage}%)",
            f"Total coverage: {stats.total_coverage_percentage}%",
        ]
        for mismatch_type, count in stats.mismatch_breakdown.items():
            lines.append(f"  {mismatch_type}: {count}")
        return "\n".join(lines)
