"""Read specification documents (YAML or JSON) from disk."""

import logging
from pathlib import Path

import yaml

from api_route_validator.parser.errors import SpecParseError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".yaml", ".yml", ".json")


def load_document(file_path: Path) -> dict:
    """Load a YAML or JSON document into a dict.

    JSON is a subset of YAML, so both go through ``yaml.safe_load``.
    """
    if not file_path.exists():
        raise SpecParseError(f"OpenAPI specification file not found: {file_path}")
    if file_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        logger.warning("Unexpected specification extension %r, parsing as YAML", file_path.suffix)

    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise SpecParseError(f"OpenAPI specification file is not readable: {file_path}: {e}") from e

    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SpecParseError(f"Failed to parse OpenAPI specification from {file_path}: {e}") from e

    if not isinstance(doc, dict):
        raise SpecParseError(f"OpenAPI specification {file_path} must contain a mapping at the top level")

    logger.debug("Loaded specification document %s", file_path)
    return doc
