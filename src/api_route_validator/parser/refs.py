"""``$ref`` resolution for OpenAPI documents.

Supports local JSON pointers (``#/components/parameters/Id``) and references
into sibling files (``common.yaml#/components/parameters/Id``), resolved
relative to the file that contains the reference.
"""

import logging
from pathlib import Path
from urllib.parse import unquote

from api_route_validator.parser.errors import UnresolvableReferenceError
from api_route_validator.parser.loader import load_document

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10


def is_reference(node) -> bool:
    return isinstance(node, dict) and isinstance(node.get("$ref"), str)


class ReferenceResolver:
    """Resolves references against a root document and the files it points to."""

    def __init__(self, document: dict, base_dir: Path | None = None):
        self.document = document
        self.base_dir = base_dir
        self._documents: dict[Path, dict] = {}

    def resolve(self, node):
        """Follow a chain of ``$ref`` objects until a concrete node is reached."""
        resolved, _ = self._follow(node, None)
        return resolved

    def resolve_all(self, node, max_depth: int = DEFAULT_MAX_DEPTH):
        """Resolve references recursively.

        References nested deeper than ``max_depth`` are left in place, which
        keeps self-referencing schemas finite.
        """
        return self._resolve_all(node, None, max_depth)

    def _resolve_all(self, node, source: Path | None, depth: int):
        if is_reference(node):
            if depth <= 0:
                return node
            node, source = self._follow(node, source)
            depth -= 1
        if isinstance(node, dict):
            return {key: self._resolve_all(value, source, depth) for key, value in node.items()}
        if isinstance(node, list):
            return [self._resolve_all(item, source, depth) for item in node]
        return node

    def _follow(self, node, source: Path | None):
        seen: list[str] = []
        while is_reference(node):
            ref = node["$ref"]
            key = f"{source or '<root>'}::{ref}"
            if key in seen:
                chain = " -> ".join([*(s.split("::", 1)[1] for s in seen), ref])
                raise UnresolvableReferenceError(f"Circular reference detected: {chain}")
            seen.append(key)
            node, source = self._lookup(ref, source)
        return node, source

    def _lookup(self, ref: str, source: Path | None):
        file_part, _, fragment = ref.partition("#")
        if file_part:
            base = source.parent if source is not None else self.base_dir
            if base is None:
                raise UnresolvableReferenceError(f"Cannot resolve external reference without a base directory: {ref}")
            target_source = (base / unquote(file_part)).resolve()
            document = self._load(target_source)
        else:
            target_source = source
            document = self.document if source is None else self._load(source)
        return self._walk(document, fragment, ref), target_source

    def _walk(self, document, fragment: str, ref: str):
        if fragment in ("", "/"):
            return document
        if not fragment.startswith("/"):
            raise UnresolvableReferenceError(f"Invalid reference format: {ref}")

        node = document
        for token in fragment[1:].split("/"):
            token = unquote(token).replace("~1", "/").replace("~0", "~")
            if isinstance(node, dict) and token in node:
                node = node[token]
            elif isinstance(node, list) and token.isdigit() and int(token) < len(node):
                node = node[int(token)]
            else:
                raise UnresolvableReferenceError(f"Reference not found: {ref}")
        return node

    def _load(self, path: Path) -> dict:
        if path not in self._documents:
            logger.debug("Loading referenced document %s", path)
            self._documents[path] = load_document(path)
        return self._documents[path]
