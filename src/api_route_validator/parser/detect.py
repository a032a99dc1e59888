"""Detect which flavour of API specification a document is."""

from api_route_validator.parser.errors import SpecParseError

OPENAPI3 = "openapi3"
SWAGGER2 = "swagger2"


def detect_spec_version(doc: dict) -> str:
    """Detect the version family of a loaded specification document.

    Returns: 'openapi3' or 'swagger2'.
    """
    if not isinstance(doc, dict):
        raise SpecParseError("Specification root must be a mapping")

    if "openapi" in doc:
        version = str(doc["openapi"])
        if not version.startswith("3."):
            raise SpecParseError(f"Unsupported OpenAPI version: {version}")
        return OPENAPI3

    if "swagger" in doc:
        version = str(doc["swagger"])
        if not version.startswith("2."):
            raise SpecParseError(f"Unsupported Swagger version: {version}")
        return SWAGGER2

    raise SpecParseError("Document is neither OpenAPI 3.x nor Swagger 2.0 (missing 'openapi'/'swagger' key)")


def is_specification(doc) -> bool:
    """Check whether a loaded document looks like an API specification."""
    try:
        detect_spec_version(doc)
    except SpecParseError:
        return False
    return True
