"""OpenAPI / Swagger document parser.

Parses OpenAPI 3.x and Swagger 2.0 documents into EndpointDescriptor models,
resolving ``$ref`` path items and parameters on the way.
"""

import logging
from pathlib import Path

from api_route_validator.parser.base import HTTP_METHODS, EndpointDescriptor, Param
from api_route_validator.parser.detect import detect_spec_version
from api_route_validator.parser.errors import SpecParseError
from api_route_validator.parser.loader import load_document
from api_route_validator.parser.refs import ReferenceResolver

logger = logging.getLogger(__name__)

CONSTRAINT_KEYS = ("minimum", "maximum", "minLength", "maxLength", "pattern", "enum")


def parse_openapi(file_path: Path) -> list[EndpointDescriptor]:
    """Parse an OpenAPI/Swagger file into a list of EndpointDescriptor."""
    doc = load_document(file_path)
    return extract_endpoints(doc, base_dir=file_path.resolve().parent)


def extract_endpoints(doc: dict, base_dir: Path | None = None) -> list[EndpointDescriptor]:
    """Extract every documented operation from a loaded document."""
    version = detect_spec_version(doc)
    resolver = ReferenceResolver(doc, base_dir=base_dir)

    paths = doc.get("paths") or {}
    if not isinstance(paths, dict):
        raise SpecParseError("'paths' must be a mapping")

    endpoints = []
    for path, path_item in paths.items():
        path_item = resolver.resolve(path_item) or {}
        if not isinstance(path_item, dict):
            raise SpecParseError(f"Path item for '{path}' must be a mapping")

        shared_params = path_item.get("parameters") or []

        for method, operation in path_item.items():
            if method.upper() not in HTTP_METHODS:
                continue
            operation = resolver.resolve(operation) or {}

            params = _parse_parameters(
                _merge_parameters(shared_params, operation.get("parameters") or [], resolver),
                resolver,
            )

            try:
                endpoints.append(
                    EndpointDescriptor(
                        path=path,
                        method=method.upper(),
                        operation_id=operation.get("operationId") or "",
                        summary=operation.get("summary") or "",
                        tags=tuple(t for t in operation.get("tags") or [] if isinstance(t, str)),
                        parameters=tuple(params),
                    )
                )
            except ValueError as e:
                raise SpecParseError(f"Invalid operation {method.upper()} {path}: {e}") from e

    logger.info("Extracted %d endpoints from %s document", len(endpoints), version)
    return endpoints


def _merge_parameters(shared: list, own: list, resolver: ReferenceResolver) -> list[dict]:
    """Combine path-level and operation-level parameters; the operation wins on (name, in)."""
    merged: dict[tuple[str, str], dict] = {}
    for raw in [*shared, *own]:
        param = resolver.resolve_all(raw)
        if not isinstance(param, dict) or "name" not in param:
            raise SpecParseError(f"Invalid parameter definition: {raw!r}")
        merged[(param["name"], param.get("in", "query"))] = param
    return list(merged.values())


def _parse_parameters(params: list[dict], resolver: ReferenceResolver) -> list[Param]:
    result = []
    for p in params:
        # Swagger 2.0 keeps type information on the parameter itself.
        schema = resolver.resolve(p.get("schema")) if "schema" in p else p
        schema = schema if isinstance(schema, dict) else {}
        constraints = {}
        for key in CONSTRAINT_KEYS:
            if key in schema:
                constraints[key] = schema[key]

        location = p.get("in", "query")
        result.append(
            Param(
                name=p["name"],
                location=location,
                required=bool(p.get("required", location == "path")),
                param_type=str(schema.get("type", "string")),
                description=p.get("description", ""),
                constraints=constraints,
            )
        )
    return result
