import json
from pathlib import Path

from click.testing import CliRunner

from api_route_validator.cli import main
from api_route_validator.reporters.json_report import JsonReporter
from api_route_validator.reporters.registry import ReporterRegistry

FIXTURES = Path(__file__).parent / "fixtures"
SPEC = str(FIXTURES / "petstore.yaml")


def _invoke(*args, **kwargs):
    runner = CliRunner()
    return runner.invoke(
        main,
        ["validate-routes", SPEC, "--app", "sample_app:app", "--app-dir", str(FIXTURES), *args],
        **kwargs,
    )


class TestValidateRoutes:
    def test_console_report(self):
        result = _invoke()
        assert result.exit_code == 0
        assert "Status: FAILED" in result.output
        assert "MISSING DOCUMENTATION (1)" in result.output
        assert "Path: /health" in result.output
        assert "MISSING IMPLEMENTATION (1)" in result.output
        assert "Path: /owners" in result.output

    def test_strict_mode_fails_on_mismatches(self):
        result = _invoke("--strict")
        assert result.exit_code == 1
        assert "Status: FAILED" in result.output

    def test_strict_mode_passes_when_filtered(self):
        result = _invoke("--strict", "--ignore-route", "health", "--include-pattern", "/pets*")
        assert result.exit_code == 0
        assert "Status: PASSED" in result.output

    def test_json_report_to_file(self, tmp_path):
        output_file = tmp_path / "reports" / "routes.json"
        result = _invoke("--report-format", "json", "--output-file", str(output_file), "--suggestions")

        assert result.exit_code == 0
        assert f"Report saved to {output_file}" in result.output
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert data["validation"]["status"] == "failed"
        assert data["statistics"]["total_routes"] == 5
        assert data["statistics"]["covered_routes"] == 4
        assert data["statistics"]["total_endpoints"] == 5
        assert data["statistics"]["route_coverage_percentage"] == 80.0
        assert {m["path"] for m in data["mismatches"]} == {"/health", "/owners"}
        assert all("suggestions" in m for m in data["mismatches"])

    def test_exclude_middleware_and_filter_type(self):
        result = _invoke("--exclude-middleware", "require_admin", "--filter-type", "missing-implementation")
        assert result.exit_code == 0
        assert "MISSING IMPLEMENTATION (2)" in result.output
        assert "MISSING DOCUMENTATION" not in result.output

    def test_table_report(self):
        result = _invoke("--report-format", "table")
        assert result.exit_code == 0
        assert "✓ Match" in result.output
        assert "✗ Missing Impl" in result.output

    def test_html_report(self, tmp_path):
        output_file = tmp_path / "report.html"
        result = _invoke("--report-format", "html", "--output-file", str(output_file))
        assert result.exit_code == 0
        assert "<!DOCTYPE html>" in output_file.read_text(encoding="utf-8")

    def test_invalid_pattern_renders_validation_error(self):
        result = _invoke("--include-pattern", "/api/")
        assert result.exit_code == 1
        assert "VALIDATION ERROR (1)" in result.output
        assert "ends with /" in result.output

    def test_unsupported_filter_type(self):
        result = _invoke("--filter-type", "typo")
        assert result.exit_code == 1
        assert "Unsupported filter type(s): typo" in result.output

    def test_invalid_spec_renders_validation_error(self, tmp_path):
        spec = tmp_path / "notes.yaml"
        spec.write_text("title: not a spec\n")
        runner = CliRunner()
        result = runner.invoke(main, ["validate-routes", str(spec), "--app", "sample_app:app", "--app-dir", str(FIXTURES)])
        assert result.exit_code == 1
        assert "VALIDATION ERROR (1)" in result.output
        assert "neither OpenAPI 3.x nor Swagger 2.0" in result.output

    def test_undeclared_base_path(self):
        result = _invoke("--base-path", "/v3")
        assert result.exit_code == 1
        assert "not found in servers" in result.output

    def test_unknown_report_format(self):
        result = _invoke("--report-format", "xml")
        assert result.exit_code == 1
        assert "Unsupported report format 'xml'" in result.output

    def test_app_load_failure(self):
        runner = CliRunner()
        result = runner.invoke(main, ["validate-routes", SPEC, "--app", "missing_module_xyz:app"])
        assert result.exit_code == 1
        assert "Cannot import module 'missing_module_xyz'" in result.output

    def test_missing_spec_file(self):
        runner = CliRunner()
        result = runner.invoke(main, ["validate-routes", "does-not-exist.yaml", "--app", "sample_app:app"])
        assert result.exit_code == 2

    def test_verbose_logging(self):
        runner = CliRunner()
        result = runner.invoke(
            main, ["-v", "validate-routes", SPEC, "--app", "sample_app:app", "--app-dir", str(FIXTURES)]
        )
        assert result.exit_code == 0
        assert "Collected 5 routes" in result.output


class TestConfiguration:
    def test_config_file_supplies_defaults(self, tmp_path):
        output_file = tmp_path / "report.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "--config", str(FIXTURES / "config.yaml"),
            "validate-routes", SPEC,
            "--app-dir", str(FIXTURES),
            "--output-file", str(output_file),
        ])
        assert result.exit_code == 0
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert data["validation"]["status"] == "passed"
        assert data["statistics"]["total_endpoints"] == 4

    def test_command_line_overrides_config(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "--config", str(FIXTURES / "config.yaml"),
            "validate-routes", SPEC,
            "--app-dir", str(FIXTURES),
            "--report-format", "console",
        ])
        assert result.exit_code == 0
        assert "Status: PASSED" in result.output

    def test_invalid_config_file(self, tmp_path):
        config = tmp_path / "bad.yaml"
        config.write_text("validate-routes: [1, 2]\n")
        runner = CliRunner()
        result = runner.invoke(main, ["--config", str(config), "validate-routes", SPEC, "--app", "sample_app:app"])
        assert result.exit_code == 1
        assert "must be a mapping" in result.output

    def test_environment_variables(self):
        result = _invoke(env={"API_ROUTE_VALIDATOR_VALIDATE_ROUTES_REPORT_FORMAT": "table"})
        assert result.exit_code == 0
        assert "✓ Match" in result.output

    def test_injected_registry(self):
        result = _invoke(obj=ReporterRegistry([JsonReporter(include_metadata=False)]))
        assert result.exit_code == 1
        assert "Unsupported report format 'console'" in result.output
        assert "Available formats: json" in result.output
