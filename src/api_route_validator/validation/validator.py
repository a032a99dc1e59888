"""Route validation: reconcile framework routes with documented endpoints.

The run is a pure function of its inputs:

1. filter both collections according to ValidationOptions
2. partition them with RouteComparator.batch_compare
3. classify the leftovers into mismatches
4. apply filter_types, then derive statistics from what remains
"""

import fnmatch
import logging
from collections import Counter, defaultdict
from dataclasses import dataclass

from api_route_validator.parser.base import EndpointDescriptor, RouteDescriptor, method_order
from api_route_validator.validation.comparator import BatchComparison, RouteComparator
from api_route_validator.validation.errors import EngineError
from api_route_validator.validation.models import (
    EntryStatus,
    MismatchType,
    RouteEntry,
    RouteMismatch,
    Statistics,
    ValidationResult,
)
from api_route_validator.validation.options import ValidationOptions, parse_options
from api_route_validator.validation.patterns import get_suggestions, matches, matches_any

logger = logging.getLogger(__name__)

SUGGESTION_THRESHOLD = 0.5


class RouteValidator:
    """Compare routes with endpoints and classify every difference."""

    def __init__(self, comparator: RouteComparator | None = None):
        self.comparator = comparator or RouteComparator()

    def validate(
        self,
        routes: list[RouteDescriptor],
        endpoints: list[EndpointDescriptor],
        options: ValidationOptions | None = None,
    ) -> ValidationResult:
        options = options or ValidationOptions()
        logger.info("Validating %d routes against %d endpoints", len(routes), len(endpoints))

        warnings: list[str] = []
        routes = self._apply_base_path(list(routes), options.base_path, warnings)
        routes = [split for route in routes for split in route.split_methods()]
        endpoints = list(endpoints)

        self._check_include_patterns(routes, endpoints, options.include_patterns, warnings)
        routes = self._filter_routes(routes, options)
        endpoints = self._filter_endpoints(endpoints, options)
        self._check_duplicates(routes, endpoints, warnings)
        logger.debug("After filtering: %d routes, %d endpoints", len(routes), len(endpoints))

        comparison = self.comparator.batch_compare(routes, endpoints)
        mismatches, entries = self._classify(comparison, routes, endpoints)

        complete = not options.filter_types
        if not complete:
            wanted = {t.value for t in options.filter_types}
            mismatches = [m for m in mismatches if m.type.value in wanted]
            entries = [e for e in entries if e.status.value in wanted]

        mismatches.sort(key=RouteMismatch.sort_key)
        entries.sort(key=RouteEntry.sort_key)

        result = ValidationResult(
            is_valid=not mismatches,
            mismatches=tuple(mismatches),
            warnings=tuple(warnings),
            statistics=self._statistics(mismatches, len(routes), len(endpoints)),
            entries=tuple(entries),
            all_routes=tuple(routes) if complete else None,
            all_endpoints=tuple(endpoints) if complete else None,
        )
        logger.info(
            "Validation finished: %s, %d mismatches, %d warnings",
            "valid" if result.is_valid else "invalid",
            result.mismatch_count(),
            len(result.warnings),
        )
        return result

    # -- filtering ------------------------------------------------------------

    def _apply_base_path(self, routes, base_path: str | None, warnings: list[str]) -> list[RouteDescriptor]:
        if not base_path:
            return routes
        base_path = "/" + base_path.strip().strip("/")

        stripped = []
        prefixed = 0
        for route in routes:
            if route.uri == base_path or route.uri.startswith(base_path + "/"):
                prefixed += 1
                route = route.model_copy(update={"uri": route.uri[len(base_path):] or "/"})
            stripped.append(route)

        if routes and not prefixed:
            warnings.append(f"Base path '{base_path}' does not prefix any application route")
        return stripped

    def _check_include_patterns(self, routes, endpoints, patterns, warnings: list[str]) -> None:
        candidates = sorted({r.uri for r in routes} | {e.path for e in endpoints})
        for pattern in patterns:
            suggestions = get_suggestions(pattern, candidates)
            if not suggestions and any(matches(pattern, path) for path in candidates):
                continue
            message = f"Include pattern '{pattern}' did not match any routes or endpoints"
            if suggestions:
                message += ". " + " ".join(suggestions)
            warnings.append(message)

    def _filter_routes(self, routes, options: ValidationOptions) -> list[RouteDescriptor]:
        kept = []
        for route in routes:
            if options.include_patterns and not matches_any(options.include_patterns, route.uri):
                continue
            if any(route.has_middleware(m) for m in options.exclude_middleware):
                logger.debug("Excluding %s by middleware", route.signature)
                continue
            if self._is_ignored(route, options.ignore_routes):
                logger.debug("Ignoring %s", route.signature)
                continue
            kept.append(route)
        return kept

    def _is_ignored(self, route: RouteDescriptor, ignore_routes) -> bool:
        for entry in ignore_routes:
            if route.name and (route.name == entry or fnmatch.fnmatchcase(route.name, entry)):
                return True
            if matches(entry, route.uri):
                return True
        return False

    def _filter_endpoints(self, endpoints, options: ValidationOptions) -> list[EndpointDescriptor]:
        kept = endpoints
        if options.include_patterns:
            kept = [e for e in kept if matches_any(options.include_patterns, e.path)]
        if options.ignore_routes:
            # Names only exist on routes; ignore entries act as path patterns here.
            kept = [e for e in kept if not any(matches(entry, e.path) for entry in options.ignore_routes)]
        return kept

    def _check_duplicates(self, routes, endpoints, warnings: list[str]) -> None:
        route_counts = Counter(self.comparator.route_fingerprint(r) for r in routes)
        endpoint_counts = Counter(self.comparator.endpoint_fingerprint(e) for e in endpoints)
        for fingerprint, count in sorted(route_counts.items()):
            if count > 1:
                warnings.append(f"Duplicate route '{fingerprint}' registered {count} times")
        for fingerprint, count in sorted(endpoint_counts.items()):
            if count > 1:
                warnings.append(f"Duplicate endpoint '{fingerprint}' documented {count} times")

    # -- classification -------------------------------------------------------

    def _classify(self, comparison: BatchComparison, routes, endpoints):
        mismatches: list[RouteMismatch] = []
        entries: list[RouteEntry] = []

        for pair in comparison.matches:
            mismatch = None
            status = EntryStatus.MATCH
            if not self.comparator.have_similar_parameters(pair.route, pair.endpoint):
                mismatch = RouteMismatch.parameter_mismatch(
                    pair.route,
                    pair.endpoint,
                    self.comparator.generate_matching_suggestions(pair.route, pair.endpoint),
                )
                mismatches.append(mismatch)
                status = EntryStatus.PARAMETER_MISMATCH
            entries.append(
                RouteEntry(
                    method=pair.endpoint.method,
                    path=pair.route.uri,
                    status=status,
                    route=pair.route,
                    endpoint=pair.endpoint,
                    mismatch=mismatch,
                )
            )

        for route in comparison.unmatched_routes:
            mismatch = RouteMismatch.missing_documentation(
                route, self._route_suggestions(route, comparison.unmatched_endpoints)
            )
            mismatches.append(mismatch)
            entries.append(
                RouteEntry(
                    method=route.primary_method,
                    path=route.uri,
                    status=EntryStatus.MISSING_DOCUMENTATION,
                    route=route,
                    mismatch=mismatch,
                )
            )

        for endpoint in comparison.unmatched_endpoints:
            mismatch = RouteMismatch.missing_implementation(
                endpoint, self._endpoint_suggestions(endpoint, comparison.unmatched_routes)
            )
            mismatches.append(mismatch)
            entries.append(
                RouteEntry(
                    method=endpoint.method,
                    path=endpoint.path,
                    status=EntryStatus.MISSING_IMPLEMENTATION,
                    endpoint=endpoint,
                    mismatch=mismatch,
                )
            )

        mismatches.extend(self._method_mismatches(routes, endpoints))
        return mismatches, entries

    def _route_suggestions(self, route, candidates) -> list[str]:
        similar = self.comparator.find_similar_endpoints(route, candidates, SUGGESTION_THRESHOLD)
        if not similar:
            return []
        closest = similar[0].endpoint
        return [
            f"Closest documented endpoint: {closest.display_name}",
            *self.comparator.generate_matching_suggestions(route, closest),
        ]

    def _endpoint_suggestions(self, endpoint, candidates) -> list[str]:
        similar = self.comparator.find_similar_routes(endpoint, candidates, SUGGESTION_THRESHOLD)
        if not similar:
            return []
        closest = similar[0].route
        return [
            f"Closest implemented route: {closest.signature}",
            *self.comparator.generate_matching_suggestions(closest, endpoint),
        ]

    def _method_mismatches(self, routes, endpoints) -> list[RouteMismatch]:
        """One warning per structural path whose method sets do not overlap."""
        route_methods: dict[str, set[str]] = defaultdict(set)
        route_paths: dict[str, str] = {}
        for route in routes:
            key = self.comparator.structural_path(route.uri)
            route_methods[key].update(route.comparable_methods)
            route_paths.setdefault(key, route.uri)

        endpoint_methods: dict[str, set[str]] = defaultdict(set)
        for endpoint in endpoints:
            endpoint_methods[self.comparator.structural_path(endpoint.path)].add(endpoint.method)

        mismatches = []
        for key in sorted(route_methods.keys() & endpoint_methods.keys()):
            if route_methods[key] & endpoint_methods[key]:
                continue
            mismatches.append(
                RouteMismatch.method_mismatch(
                    route_paths[key],
                    sorted(route_methods[key], key=method_order),
                    sorted(endpoint_methods[key], key=method_order),
                )
            )
        return mismatches

    # -- statistics -----------------------------------------------------------

    def _statistics(self, mismatches, total_routes: int, total_endpoints: int) -> Statistics:
        breakdown = Counter(m.type.value for m in mismatches)
        covered_routes = max(total_routes - breakdown[MismatchType.MISSING_DOCUMENTATION.value], 0)
        covered_endpoints = max(total_endpoints - breakdown[MismatchType.MISSING_IMPLEMENTATION.value], 0)
        total = total_routes + total_endpoints

        return Statistics(
            total_routes=total_routes,
            covered_routes=covered_routes,
            route_coverage_percentage=_percentage(covered_routes, total_routes, 1),
            total_endpoints=total_endpoints,
            covered_endpoints=covered_endpoints,
            endpoint_coverage_percentage=_percentage(covered_endpoints, total_endpoints, 1),
            total_mismatches=len(mismatches),
            mismatch_breakdown=dict(sorted(breakdown.items())),
            total_coverage_percentage=_percentage(covered_routes + covered_endpoints, total, 2),
        )


def _percentage(part: int, whole: int, digits: int) -> float:
    if whole == 0:
        return 100.0
    return round(part / whole * 100, digits)


# -- checked entry point ---------------------------------------------------------


@dataclass(frozen=True)
class ValidationOutcome:
    """Either a ValidationResult or the EngineError that prevented one."""

    result: ValidationResult | None = None
    error: EngineError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> ValidationResult:
        if self.error is not None:
            raise self.error
        return self.result

    def to_result(self) -> ValidationResult:
        if self.error is not None:
            return ValidationResult.from_error(self.error)
        return self.result


def validate_routes(
    routes: list[RouteDescriptor],
    endpoints: list[EndpointDescriptor],
    options=None,
    validator: RouteValidator | None = None,
) -> ValidationOutcome:
    """Parse options, then validate; option failures come back as an outcome."""
    try:
        parsed = parse_options(options)
    except EngineError as e:
        logger.warning("Rejected validation options: %s", e)
        return ValidationOutcome(error=e)

    validator = validator or RouteValidator()
    return ValidationOutcome(result=validator.validate(routes, endpoints, parsed))
