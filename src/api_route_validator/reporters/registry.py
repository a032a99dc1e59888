"""Explicit reporter registry, passed to the CLI through the click context."""

from api_route_validator.reporters.base import Reporter
from api_route_validator.reporters.console import ConsoleReporter
from api_route_validator.reporters.html import HtmlReporter
from api_route_validator.reporters.json_report import JsonReporter
from api_route_validator.reporters.table import TableReporter


class UnsupportedFormatError(ValueError):
    """No registered reporter handles the requested format."""


class ReporterRegistry:
    def __init__(self, reporters: list[Reporter] | None = None):
        self._reporters: list[Reporter] = []
        for reporter in reporters or []:
            self.register(reporter)

    def register(self, reporter: Reporter) -> None:
        """Register a reporter; a later one with the same name replaces the earlier."""
        self._reporters = [r for r in self._reporters if r.name != reporter.name]
        self._reporters.append(reporter)

    def get(self, format_name: str) -> Reporter:
        for reporter in self._reporters:
            if reporter.supports(format_name):
                return reporter
        raise UnsupportedFormatError(
            f"Unsupported report format '{format_name}'. Available formats: {', '.join(self.formats())}"
        )

    def supports(self, format_name: str) -> bool:
        return any(r.supports(format_name) for r in self._reporters)

    def formats(self) -> list[str]:
        return [r.name for r in self._reporters]


def default_registry(use_colors: bool = False) -> ReporterRegistry:
    return ReporterRegistry([
        ConsoleReporter(use_colors=use_colors),
        JsonReporter(),
        HtmlReporter(),
        TableReporter(),
    ])
