"""Route/endpoint comparison.

Matching is decided by fingerprints (method plus structural path); the
similarity scores below only ever feed suggestions.
"""

from collections import defaultdict, deque
from typing import NamedTuple

from api_route_validator.parser.base import PARAM_TOKEN, EndpointDescriptor, RouteDescriptor
from api_route_validator.validation.patterns import normalize_path

PATH_WEIGHT = 0.8
METHOD_WEIGHT = 0.2

PLACEHOLDER = "{}"


class RoutePair(NamedTuple):
    route: RouteDescriptor
    endpoint: EndpointDescriptor


class ScoredEndpoint(NamedTuple):
    endpoint: EndpointDescriptor
    score: float


class ScoredRoute(NamedTuple):
    route: RouteDescriptor
    score: float


class BatchComparison(NamedTuple):
    matches: list[RoutePair]
    unmatched_routes: list[RouteDescriptor]
    unmatched_endpoints: list[EndpointDescriptor]


def _segments(path: str) -> list[str]:
    return [s for s in normalize_path(path).split("/") if s]


def _is_placeholder(segment: str) -> bool:
    return bool(PARAM_TOKEN.fullmatch(segment))


class RouteComparator:
    """Pure comparison helpers; holds no state."""

    # -- keys -----------------------------------------------------------------

    def structural_path(self, path: str) -> str:
        return PARAM_TOKEN.sub(PLACEHOLDER, normalize_path(path))

    def create_fingerprint(self, method: str, path: str) -> str:
        return f"{method.strip().upper()}:{self.structural_path(path)}"

    def route_fingerprint(self, route: RouteDescriptor) -> str:
        return self.create_fingerprint(route.primary_method, route.uri)

    def endpoint_fingerprint(self, endpoint: EndpointDescriptor) -> str:
        return self.create_fingerprint(endpoint.method, endpoint.path)

    def exact_match(self, route: RouteDescriptor, endpoint: EndpointDescriptor) -> bool:
        if self.structural_path(route.uri) != self.structural_path(endpoint.path):
            return False
        return endpoint.method.strip().upper() == route.primary_method

    # -- similarity -----------------------------------------------------------

    def calculate_path_similarity(self, path_a: str, path_b: str) -> float:
        if normalize_path(path_a) == normalize_path(path_b):
            return 1.0

        segments_a = _segments(path_a)
        segments_b = _segments(path_b)
        longest = max(len(segments_a), len(segments_b))
        if longest == 0:
            return 1.0

        score = 0.0
        for a, b in zip(segments_a, segments_b):
            if a == b or (_is_placeholder(a) and _is_placeholder(b)):
                score += 1.0
        return score / longest

    def calculate_method_similarity(self, method_a: str, method_b: str) -> float:
        return 1.0 if method_a.strip().upper() == method_b.strip().upper() else 0.0

    def calculate_similarity(self, route: RouteDescriptor, endpoint: EndpointDescriptor) -> float:
        path_score = self.calculate_path_similarity(route.uri, endpoint.path)
        method_score = max(
            self.calculate_method_similarity(m, endpoint.method) for m in route.comparable_methods
        )
        return PATH_WEIGHT * path_score + METHOD_WEIGHT * method_score

    def have_similar_parameters(self, route: RouteDescriptor, endpoint: EndpointDescriptor) -> bool:
        """Same number of parameters, each at the same segment index."""
        if len(route.path_parameters) != len(endpoint.path_parameters):
            return False
        return self._parameter_positions(route.uri) == self._parameter_positions(endpoint.path)

    def _parameter_positions(self, path: str) -> list[int]:
        return [i for i, segment in enumerate(_segments(path)) if _is_placeholder(segment)]

    def find_similar_endpoints(
        self, route: RouteDescriptor, endpoints, threshold: float = 0.0
    ) -> list[ScoredEndpoint]:
        scored = [ScoredEndpoint(e, self.calculate_similarity(route, e)) for e in endpoints]
        scored = [s for s in scored if s.score >= threshold]
        scored.sort(key=lambda s: (-s.score, s.endpoint.path, s.endpoint.method))
        return scored

    def find_similar_routes(
        self, endpoint: EndpointDescriptor, routes, threshold: float = 0.0
    ) -> list[ScoredRoute]:
        scored = [ScoredRoute(r, self.calculate_similarity(r, endpoint)) for r in routes]
        scored = [s for s in scored if s.score >= threshold]
        scored.sort(key=lambda s: (-s.score, s.route.uri, s.route.primary_method))
        return scored

    def generate_matching_suggestions(self, route: RouteDescriptor, endpoint: EndpointDescriptor) -> list[str]:
        suggestions = []

        if endpoint.method.upper() not in route.comparable_methods:
            suggestions.append(
                f"HTTP method differs: route declares {', '.join(route.comparable_methods)}, "
                f"spec declares {endpoint.method}"
            )

        route_params = list(route.path_parameters)
        endpoint_params = endpoint.path_parameters
        if len(route_params) != len(endpoint_params):
            suggestions.append(
                f"Parameter count differs: route has {len(route_params)}, spec has {len(endpoint_params)}"
            )
        elif route_params != endpoint_params:
            suggestions.append(
                f"Parameter names differ: route uses {', '.join(route_params)}, "
                f"spec uses {', '.join(endpoint_params)}"
            )

        if self.structural_path(route.uri) != self.structural_path(endpoint.path):
            suggestions.append(f"Path structure differs: route '{route.uri}' vs spec '{endpoint.path}'")

        return suggestions

    # -- batch ----------------------------------------------------------------

    def batch_compare(self, routes, endpoints) -> BatchComparison:
        """Partition routes and endpoints by fingerprint in linear time."""
        endpoints = list(endpoints)
        by_fingerprint: dict[str, deque[int]] = defaultdict(deque)
        for index, endpoint in enumerate(endpoints):
            by_fingerprint[self.endpoint_fingerprint(endpoint)].append(index)

        matches = []
        unmatched_routes = []
        matched = set()
        for route in routes:
            candidates = by_fingerprint.get(self.route_fingerprint(route))
            if candidates:
                index = candidates.popleft()
                matched.add(index)
                matches.append(RoutePair(route, endpoints[index]))
            else:
                unmatched_routes.append(route)

        unmatched_endpoints = [e for i, e in enumerate(endpoints) if i not in matched]
        return BatchComparison(matches, unmatched_routes, unmatched_endpoints)
