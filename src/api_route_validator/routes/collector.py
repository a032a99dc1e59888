"""Collect routes from a FastAPI / Starlette application."""

import importlib
import logging

from starlette.routing import Mount, Route, WebSocketRoute

from api_route_validator.parser.base import RouteDescriptor

logger = logging.getLogger(__name__)

FRAMEWORK_PATHS = ("/docs", "/docs/oauth2-redirect", "/redoc", "/openapi.json")


class AppLoadError(Exception):
    """The application target could not be imported or is not an application."""


def load_app(target: str):
    """Import ``package.module:attribute`` (attribute defaults to ``app``)."""
    module_name, _, attribute = target.partition(":")
    if not module_name:
        raise AppLoadError(f"Invalid application target '{target}'. Expected 'module:attribute'")
    attribute = attribute or "app"

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise AppLoadError(f"Cannot import module '{module_name}': {e}") from e

    app = module
    for part in attribute.split("."):
        try:
            app = getattr(app, part)
        except AttributeError as e:
            raise AppLoadError(f"Module '{module_name}' has no attribute '{attribute}'") from e

    # Application factories are called; application instances expose routes.
    if callable(app) and not hasattr(app, "routes"):
        app = app()
    if not hasattr(app, "routes"):
        raise AppLoadError(f"'{target}' is not a FastAPI or Starlette application")

    logger.info("Loaded application %s", target)
    return app


def collect_routes(app, include_framework_routes: bool = False) -> list[RouteDescriptor]:
    """Convert every HTTP route of the app into RouteDescriptors, one per method."""
    app_middleware = tuple(_middleware_names(app))
    framework_paths = set() if include_framework_routes else _framework_paths(app)

    routes = []
    for route, prefix in _walk(app.routes, ""):
        path = prefix + route.path
        if path in framework_paths:
            continue
        methods = set(route.methods or ())
        if not methods:
            logger.debug("Skipping %s: no HTTP methods declared", path)
            continue
        if "GET" in methods:
            methods.add("HEAD")

        descriptor = RouteDescriptor(
            uri=path,
            methods=tuple(methods),
            name=route.name or "",
            action=_qualified_name(route.endpoint),
            middleware=app_middleware + tuple(_dependency_names(route)),
        )
        routes.extend(descriptor.split_methods())

    logger.info("Collected %d routes", len(routes))
    return routes


def _walk(routes, prefix: str):
    for route in routes:
        if isinstance(route, Mount):
            yield from _walk(route.routes, prefix + route.path)
        elif isinstance(route, Route):
            yield route, prefix
        elif hasattr(route, "effective_route_contexts"):
            # Newer FastAPI keeps include_router() entries unflattened; contexts carry the full path.
            for context in route.effective_route_contexts():
                starlette_route = getattr(context, "starlette_route", None)
                if starlette_route is not None:
                    yield from _walk([starlette_route], prefix)
                else:
                    yield context, prefix
        elif isinstance(route, WebSocketRoute):
            logger.debug("Skipping websocket route %s", prefix + route.path)
        else:
            logger.warning("Skipping unsupported route entry %s under '%s'", type(route).__name__, prefix or "/")


def _framework_paths(app) -> set[str]:
    paths = set(FRAMEWORK_PATHS)
    for attribute in ("docs_url", "redoc_url", "openapi_url", "swagger_ui_oauth2_redirect_url"):
        value = getattr(app, attribute, None)
        if value:
            paths.add(value)
    return paths


def _middleware_names(app) -> list[str]:
    names = []
    for middleware in getattr(app, "user_middleware", []):
        cls = getattr(middleware, "cls", None)
        if cls is not None:
            names.append(getattr(cls, "__name__", str(cls)))
    return names


def _dependency_names(route) -> list[str]:
    names = []
    for depends in getattr(route, "dependencies", None) or ():
        dependency = depends.dependency
        if dependency is not None:
            names.append(getattr(dependency, "__name__", type(dependency).__name__))
    return names


def _qualified_name(endpoint) -> str:
    module = getattr(endpoint, "__module__", "")
    name = getattr(endpoint, "__qualname__", type(endpoint).__name__)
    return f"{module}.{name}" if module else name
