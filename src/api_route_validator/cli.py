"""CLI entry point for api-route-validator."""

import logging
import sys
from pathlib import Path

import click

from api_route_validator.config import ConfigError, load_config
from api_route_validator.log import setup_logging
from api_route_validator.parser.errors import SpecParseError
from api_route_validator.parser.loader import load_document
from api_route_validator.parser.openapi import extract_endpoints
from api_route_validator.parser.servers import resolve_base_path
from api_route_validator.reporters.registry import ReporterRegistry, UnsupportedFormatError, default_registry
from api_route_validator.routes.collector import AppLoadError, collect_routes, load_app
from api_route_validator.validation.models import ValidationResult
from api_route_validator.validation.validator import validate_routes

logger = logging.getLogger(__name__)

FILTER_TYPE_HELP = (
    "Only report one mismatch type (repeatable): missing-documentation, missing-implementation, "
    "method-mismatch, parameter-mismatch, path-mismatch, validation-error."
)


@click.group(context_settings={"auto_envvar_prefix": "API_ROUTE_VALIDATOR"})
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML file with per-command option defaults.")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v INFO, -vv DEBUG).")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, verbose: int):
    """API Route Validator — compare application routes with an OpenAPI specification."""
    setup_logging(verbose)

    if config_path is not None:
        try:
            ctx.default_map = load_config(config_path)
        except ConfigError as e:
            raise click.ClickException(str(e)) from e

    # Tests and embedders may pass their own registry via main(obj=...).
    if ctx.obj is None:
        ctx.obj = default_registry(use_colors=sys.stdout.isatty())


@main.command("validate-routes")
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--app", required=True, help="Application to inspect, as 'package.module:app'.")
@click.option("--app-dir", default=".", type=click.Path(file_okay=False, path_type=Path), help="Directory added to the import path before loading the app.")
@click.option("--base-path", default=None, help="Server base path to strip from application routes.")
@click.option("--include-pattern", multiple=True, help="Only validate paths matching this pattern (repeatable).")
@click.option("--exclude-middleware", multiple=True, help="Skip routes using this middleware or dependency (repeatable).")
@click.option("--ignore-route", multiple=True, help="Skip routes by name or path pattern (repeatable).")
@click.option("--filter-type", multiple=True, help=FILTER_TYPE_HELP)
@click.option("--report-format", default="console", help="console, json, html or table.")
@click.option("--output-file", default=None, type=click.Path(dir_okay=False, path_type=Path), help="Write the report to a file instead of stdout.")
@click.option("--strict", is_flag=True, help="Exit with status 1 when mismatches are found.")
@click.option("--suggestions", is_flag=True, help="Include remediation suggestions in the report.")
@click.option("--include-framework-routes", is_flag=True, help="Also validate /docs, /redoc and /openapi.json.")
@click.pass_context
def validate_routes_command(
    ctx: click.Context,
    spec_path: Path,
    app: str,
    app_dir: Path,
    base_path: str | None,
    include_pattern: tuple[str, ...],
    exclude_middleware: tuple[str, ...],
    ignore_route: tuple[str, ...],
    filter_type: tuple[str, ...],
    report_format: str,
    output_file: Path | None,
    strict: bool,
    suggestions: bool,
    include_framework_routes: bool,
):
    """Validate application routes against an OpenAPI specification."""
    registry: ReporterRegistry = ctx.obj
    try:
        reporter = registry.get(report_format)
    except UnsupportedFormatError as e:
        raise click.ClickException(str(e)) from e

    try:
        doc = load_document(spec_path)
        endpoints = extract_endpoints(doc, base_dir=spec_path.resolve().parent)
        base_path = resolve_base_path(doc, base_path)
    except SpecParseError as e:
        logger.error("Cannot load specification %s: %s", spec_path, e)
        _emit(reporter.generate(ValidationResult.from_error(e), suggestions), output_file)
        ctx.exit(1)

    app_dir = str(app_dir.resolve())
    if app_dir not in sys.path:
        sys.path.insert(0, app_dir)
    try:
        application = load_app(app)
    except AppLoadError as e:
        raise click.ClickException(str(e)) from e
    routes = collect_routes(application, include_framework_routes=include_framework_routes)

    outcome = validate_routes(
        routes,
        endpoints,
        {
            "base_path": base_path or None,
            "include_patterns": include_pattern,
            "exclude_middleware": exclude_middleware,
            "ignore_routes": ignore_route,
            "filter_types": filter_type,
        },
    )
    result = outcome.to_result()
    _emit(reporter.generate(result, suggestions), output_file)

    if not outcome.ok or (strict and not result.is_valid):
        ctx.exit(1)


def _emit(report: str, output_file: Path | None) -> None:
    if output_file is None:
        click.echo(report, nl=not report.endswith("\n"))
        return
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(report, encoding="utf-8")
    click.echo(f"Report saved to {output_file}")
