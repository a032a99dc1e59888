"""Server base-path extraction.

Specification paths are relative to the server URL, so ``/users`` under a
server of ``https://api.example.com/api`` is served at ``/api/users``.
"""

import re
from urllib.parse import urlparse

from api_route_validator.parser.detect import SWAGGER2, detect_spec_version
from api_route_validator.parser.errors import BasePathError

SERVER_VARIABLE = re.compile(r"\{([^}]+)\}")


def normalize_base_path(path: str) -> str:
    """Leading slash, no trailing slash; root and empty collapse to ''."""
    path = path.strip()
    if path in ("", "/"):
        return ""
    if not path.startswith("/"):
        path = "/" + path
    return path.rstrip("/")


def extract_base_paths(doc: dict) -> list[str]:
    """Return the distinct base paths declared by the document, in order."""
    if detect_spec_version(doc) == SWAGGER2:
        base_path = normalize_base_path(str(doc.get("basePath", "")))
        return [base_path] if base_path else []

    base_paths: list[str] = []
    for server in doc.get("servers") or []:
        if not isinstance(server, dict) or not isinstance(server.get("url"), str):
            continue
        base_path = _base_path_from_url(_expand_variables(server["url"], server.get("variables") or {}))
        if base_path and base_path not in base_paths:
            base_paths.append(base_path)
    return base_paths


def resolve_base_path(doc: dict, override: str | None = None) -> str:
    """Pick the base path to strip from framework routes.

    An override must be one of the declared base paths (when any are
    declared). Without an override, several candidates are an error rather
    than a guess.
    """
    available = extract_base_paths(doc)

    if override is not None:
        base_path = normalize_base_path(override)
        if available and base_path not in available:
            raise BasePathError(
                f"Specified base path '{base_path}' not found in servers. "
                f"Available paths: {', '.join(available)}"
            )
        return base_path

    if len(available) > 1:
        raise BasePathError(
            f"Multiple server base paths found: {', '.join(available)}. "
            "Please specify which one to use with --base-path."
        )

    return available[0] if available else ""


def _expand_variables(url: str, variables: dict) -> str:
    def substitute(match: re.Match) -> str:
        variable = variables.get(match.group(1)) or {}
        return str(variable.get("default", ""))

    return SERVER_VARIABLE.sub(substitute, url)


def _base_path_from_url(url: str) -> str:
    parsed = urlparse(url)
    # Relative server URLs ("/api") carry no scheme but are valid base paths.
    if parsed.scheme and parsed.scheme not in ("http", "https"):
        return ""
    if not parsed.scheme and not url.startswith("/"):
        return ""
    return normalize_base_path(parsed.path)
