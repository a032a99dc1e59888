"""Standalone HTML report rendered with Jinja2."""

from datetime import datetime
from pathlib import Path

import jinja2

from api_route_validator.reporters.base import Reporter, format_details, group_by_type
from api_route_validator.validation.models import ValidationResult

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _create_environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=jinja2.select_autoescape(["html", "xml", "jinja2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["percentage"] = lambda val: f"{val:.1f}%" if isinstance(val, (int, float)) else val
    env.filters["details"] = format_details
    return env


class HtmlReporter(Reporter):
    name = "html"
    aliases = ("htm",)
    file_extension = "html"
    mime_type = "text/html"

    template_name = "report.html.jinja2"

    def __init__(self):
        self.env = _create_environment()

    def generate(self, result: ValidationResult, include_suggestions: bool = False) -> str:
        template = self.env.get_template(self.template_name)
        return template.render(
            result=result,
            statistics=result.statistics,
            groups=group_by_type(result.mismatches),
            include_suggestions=include_suggestions,
            generated_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        )
