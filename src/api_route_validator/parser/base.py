"""Unified data models for both sides of a route validation run.

The route collector turns framework routes into RouteDescriptor records and
the OpenAPI parser turns documented operations into EndpointDescriptor
records. Both are frozen once constructed.
"""

import re

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

PARAM_TOKEN = re.compile(r"\{([^}]+)\}")


def normalize_route_path(path: str) -> str:
    """Ensure a leading slash and drop a trailing one (root excluded)."""
    path = path.strip()
    if not path.startswith("/"):
        path = "/" + path
    if path != "/":
        path = path.rstrip("/") or "/"
    return path


def parameter_name(token: str) -> str:
    """Strip converter (``id:int``) and optional (``id?``) markers from a token."""
    return token.split(":", 1)[0].rstrip("?").strip()


def extract_path_parameters(path: str) -> list[str]:
    """Return parameter names in the order they appear in a path template."""
    return [parameter_name(token) for token in PARAM_TOKEN.findall(path)]


def method_order(method: str) -> int:
    """Position of a method in the conventional GET, POST, ... ordering."""
    method = method.upper()
    return HTTP_METHODS.index(method) if method in HTTP_METHODS else len(HTTP_METHODS)


def _normalize_methods(methods) -> tuple[str, ...]:
    if isinstance(methods, str):
        methods = [methods]
    normalized = {m.strip().upper() for m in methods}
    if not normalized:
        raise ValueError("Route must have at least one HTTP method")
    invalid = sorted(m for m in normalized if m not in HTTP_METHODS)
    if invalid:
        raise ValueError(f"Invalid HTTP method: {', '.join(invalid)}")
    return tuple(sorted(normalized, key=method_order))


class Param(BaseModel):
    """A single declared API parameter (query, path, header, or cookie)."""

    model_config = ConfigDict(frozen=True)

    name: str
    location: str  # query / path / header / cookie
    required: bool
    param_type: str  # string / integer / boolean / array / object
    description: str = ""
    constraints: dict = {}  # minimum, maximum, pattern, enum, etc.


class RouteDescriptor(BaseModel):
    """A route registered in the running web application."""

    model_config = ConfigDict(frozen=True)

    uri: str
    methods: tuple[str, ...]
    name: str = ""
    action: str = ""
    middleware: tuple[str, ...] = ()
    path_parameters: tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _derive_parameters(cls, data):
        if isinstance(data, dict) and data.get("path_parameters") is None:
            data = {**data, "path_parameters": extract_path_parameters(str(data.get("uri", "")))}
        return data

    @field_validator("uri")
    @classmethod
    def _normalize_uri(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Route URI cannot be empty")
        return normalize_route_path(value)

    @field_validator("methods", mode="before")
    @classmethod
    def _normalize_methods(cls, value) -> tuple[str, ...]:
        return _normalize_methods(value)

    @field_validator("middleware", mode="before")
    @classmethod
    def _normalize_middleware(cls, value) -> tuple[str, ...]:
        if isinstance(value, str):
            value = [value]
        return tuple(sorted({str(m) for m in value}))

    @property
    def comparable_methods(self) -> tuple[str, ...]:
        """Methods that take part in matching; HEAD only counts when alone."""
        methods = tuple(m for m in self.methods if m != "HEAD")
        return methods or self.methods

    @property
    def primary_method(self) -> str:
        return self.comparable_methods[0]

    @property
    def signature(self) -> str:
        return f"{self.primary_method} {self.uri}"

    def has_method(self, method: str) -> bool:
        return method.strip().upper() in self.methods

    def has_middleware(self, middleware: str) -> bool:
        return middleware in self.middleware

    def split_methods(self) -> list["RouteDescriptor"]:
        """One descriptor per non-HEAD method; HEAD stays attached to GET."""
        if len(self.comparable_methods) == 1:
            return [self]
        routes = []
        for method in self.comparable_methods:
            methods = [method, "HEAD"] if method == "GET" and "HEAD" in self.methods else [method]
            routes.append(self.model_copy(update={"methods": tuple(methods)}))
        return routes


class EndpointDescriptor(BaseModel):
    """A single operation declared in the API specification."""

    model_config = ConfigDict(frozen=True)

    path: str  # /api/users/{id}
    method: str  # GET / POST / PUT / DELETE / PATCH
    operation_id: str = ""
    summary: str = ""
    tags: tuple[str, ...] = ()
    parameters: tuple[Param, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _default_operation_id(cls, data):
        if isinstance(data, dict) and not data.get("operation_id"):
            data = {
                **data,
                "operation_id": generate_operation_id(str(data.get("path", "")), str(data.get("method", ""))),
            }
        return data

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Path cannot be empty")
        return normalize_route_path(value)

    @field_validator("method")
    @classmethod
    def _normalize_method(cls, value: str) -> str:
        return _normalize_methods([value])[0]

    @property
    def path_parameters(self) -> list[str]:
        return extract_path_parameters(self.path)

    @property
    def display_name(self) -> str:
        return f"{self.method} {self.path}"


def generate_operation_id(path: str, method: str) -> str:
    """Build an operation id such as ``getUsersId`` from a method and path."""
    clean = PARAM_TOKEN.sub("Id", path)
    operation_id = method.strip().lower()
    for part in clean.strip("/").split("/"):
        if not part:
            continue
        words = re.split(r"[_\-]", part)
        operation_id += "".join(w[:1].upper() + w[1:].lower() for w in words if w)
    return operation_id
