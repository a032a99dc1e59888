import pytest

from api_route_validator.parser.base import EndpointDescriptor, RouteDescriptor
from api_route_validator.validation.errors import InvalidPatternError, UnsupportedFilterTypeError
from api_route_validator.validation.models import EntryStatus, MismatchType
from api_route_validator.validation.options import ValidationOptions
from api_route_validator.validation.validator import RouteValidator, ValidationOutcome, validate_routes


def _make_route(method: str, uri: str, **kwargs) -> RouteDescriptor:
    methods = method.split(",")
    return RouteDescriptor(uri=uri, methods=methods, **kwargs)


def _make_endpoint(method: str, path: str) -> EndpointDescriptor:
    return EndpointDescriptor(path=path, method=method)


def _validate(routes, endpoints, **options):
    return RouteValidator().validate(routes, endpoints, ValidationOptions(**options))


class TestScenarios:
    def test_unrelated_paths(self):
        result = _validate([_make_route("GET", "/api/users")], [_make_endpoint("GET", "/api/posts")])
        assert result.is_valid is False
        assert result.mismatch_count() == 2
        assert {m.type for m in result.mismatches} == {
            MismatchType.MISSING_DOCUMENTATION,
            MismatchType.MISSING_IMPLEMENTATION,
        }

    def test_same_parameter_names(self):
        result = _validate([_make_route("GET", "/api/users/{id}")], [_make_endpoint("GET", "/api/users/{id}")])
        assert result.is_valid
        assert result.mismatch_count() == 0

    def test_different_parameter_names(self):
        result = _validate(
            [_make_route("PUT", "/api/pospayments/{id}/articles/{articleid}")],
            [_make_endpoint("PUT", "/api/pospayments/{paymentId}/articles/{paymentArticleId}")],
        )
        assert result.is_valid
        assert result.mismatch_count() == 0
        assert result.entries[0].status == EntryStatus.MATCH

    def test_different_parameter_count(self):
        result = _validate(
            [_make_route("GET", "/api/users/{user_id}/posts")],
            [_make_endpoint("GET", "/api/users/{userId}/posts/{postId}")],
        )
        assert result.mismatch_count() == 2
        assert len(result.mismatches_by_type(MismatchType.MISSING_DOCUMENTATION)) == 1
        assert len(result.mismatches_by_type(MismatchType.MISSING_IMPLEMENTATION)) == 1

    def test_partial_coverage(self):
        result = _validate(
            [_make_route("GET", "/api/users"), _make_route("GET", "/api/posts")],
            [_make_endpoint("GET", "/api/users")],
        )
        stats = result.statistics
        assert stats.total_routes == 2
        assert stats.covered_routes == 1
        assert stats.route_coverage_percentage == 50.0
        assert stats.endpoint_coverage_percentage == 100.0
        assert stats.total_coverage_percentage == 66.67

    def test_empty_inputs(self):
        result = _validate([], [])
        assert result.is_valid
        assert result.statistics.total_coverage_percentage == 100.0
        assert result.statistics.route_coverage_percentage == 100.0


class TestClassification:
    def test_disjoint_methods_report_method_mismatch(self):
        result = _validate([_make_route("POST", "/users")], [_make_endpoint("GET", "/users")])
        method_mismatches = result.mismatches_by_type(MismatchType.METHOD_MISMATCH)
        assert len(method_mismatches) == 1
        assert method_mismatches[0].details.route_methods == ("POST",)
        assert method_mismatches[0].details.endpoint_methods == ("GET",)
        assert method_mismatches[0].is_warning()
        assert result.mismatch_count() == 3

    def test_overlapping_methods_do_not_report_method_mismatch(self):
        result = _validate(
            [_make_route("GET", "/users"), _make_route("POST", "/users")],
            [_make_endpoint("GET", "/users")],
        )
        assert result.mismatches_by_type(MismatchType.METHOD_MISMATCH) == []
        assert result.mismatch_count() == 1

    def test_parameter_mismatch_on_declared_parameters(self):
        route = RouteDescriptor(uri="/users/{id}", methods=["GET"], path_parameters=["id", "version"])
        result = _validate([route], [_make_endpoint("GET", "/users/{id}")])
        assert [m.type for m in result.mismatches] == [MismatchType.PARAMETER_MISMATCH]
        assert result.entries[0].status == EntryStatus.PARAMETER_MISMATCH
        assert result.statistics.covered_routes == 1

    def test_multi_method_route_is_split(self):
        route = _make_route("GET,POST,HEAD", "/users")
        result = _validate([route], [_make_endpoint("GET", "/users"), _make_endpoint("POST", "/users")])
        assert result.is_valid
        assert result.statistics.total_routes == 2
        assert len(result.all_routes) == 2

    def test_missing_documentation_suggests_closest_endpoint(self):
        result = _validate(
            [_make_route("GET", "/api/users/{id}")],
            [_make_endpoint("GET", "/api/users/{id}/profile")],
        )
        missing_doc = result.mismatches_by_type("missing_documentation")[0]
        assert missing_doc.suggestions[0] == "Closest documented endpoint: GET /api/users/{id}/profile"
        assert "Add 'GET /api/users/{id}' to your OpenAPI specification" in missing_doc.suggestions

    def test_no_closest_suggestion_for_unrelated_paths(self):
        result = _validate([_make_route("GET", "/health")], [_make_endpoint("POST", "/api/orders")])
        missing_doc = result.mismatches_by_type("missing_documentation")[0]
        assert not missing_doc.suggestions[0].startswith("Closest")

    def test_mismatch_ordering(self):
        result = _validate(
            [_make_route("DELETE", "/b"), _make_route("GET", "/b"), _make_route("POST", "/a")],
            [],
        )
        assert [(m.path, m.method) for m in result.mismatches] == [("/a", "POST"), ("/b", "GET"), ("/b", "DELETE")]

    def test_idempotent(self):
        routes = [_make_route("GET", "/users"), _make_route("POST", "/orders"), _make_route("GET", "/z/{id}")]
        endpoints = [_make_endpoint("GET", "/users"), _make_endpoint("GET", "/orders"), _make_endpoint("PUT", "/a")]
        first = _validate(routes, endpoints)
        second = _validate(routes, endpoints)
        assert first == second

    def test_coverage_identities(self):
        routes = [_make_route("GET", "/a"), _make_route("GET", "/b"), _make_route("GET", "/c")]
        endpoints = [_make_endpoint("GET", "/a"), _make_endpoint("GET", "/d")]
        result = _validate(routes, endpoints)
        stats = result.statistics
        assert stats.covered_routes + len(result.mismatches_by_type("missing_documentation")) == stats.total_routes
        assert (
            stats.covered_endpoints + len(result.mismatches_by_type("missing_implementation"))
            == stats.total_endpoints
        )
        assert stats.mismatch_breakdown == {"missing_documentation": 2, "missing_implementation": 1}

    def test_does_not_mutate_inputs(self):
        routes = [_make_route("GET", "/api/users")]
        endpoints = [_make_endpoint("GET", "/users")]
        _validate(routes, endpoints, base_path="/api")
        assert routes[0].uri == "/api/users"
        assert len(endpoints) == 1


class TestFiltering:
    def test_base_path_is_stripped(self):
        result = _validate([_make_route("GET", "/api/users")], [_make_endpoint("GET", "/users")], base_path="/api")
        assert result.is_valid

    def test_unknown_base_path_warns(self):
        result = _validate([_make_route("GET", "/users")], [_make_endpoint("GET", "/users")], base_path="/v2")
        assert result.is_valid
        assert result.warnings == ("Base path '/v2' does not prefix any application route",)

    def test_include_patterns_apply_to_both_sides(self):
        result = _validate(
            [_make_route("GET", "/api/users"), _make_route("GET", "/internal/debug")],
            [_make_endpoint("GET", "/api/users"), _make_endpoint("GET", "/admin/stats")],
            include_patterns=["/api/*"],
        )
        assert result.is_valid
        assert result.statistics.total_routes == 1
        assert result.statistics.total_endpoints == 1

    def test_unmatched_include_pattern_warns(self):
        result = _validate(
            [_make_route("GET", "/api/users")],
            [_make_endpoint("GET", "/api/users")],
            include_patterns=["/api/*", "users"],
        )
        assert len(result.warnings) == 1
        assert "Include pattern 'users' did not match" in result.warnings[0]
        assert "*users*" in result.warnings[0]

    def test_exclude_middleware(self):
        routes = [
            _make_route("GET", "/users", middleware=["auth"]),
            _make_route("GET", "/health", middleware=["throttle"]),
        ]
        result = _validate(routes, [_make_endpoint("GET", "/health")], exclude_middleware=["auth"])
        assert result.is_valid
        assert result.statistics.total_routes == 1

    def test_ignore_routes_by_name_glob_and_path(self):
        routes = [
            _make_route("GET", "/health", name="health"),
            _make_route("GET", "/debug/vars", name="debug.vars"),
            _make_route("GET", "/metrics", name=""),
            _make_route("GET", "/users", name="users.index"),
        ]
        result = _validate(
            routes,
            [_make_endpoint("GET", "/users")],
            ignore_routes=["health", "debug.*", "/metrics"],
        )
        assert result.is_valid
        assert [r.uri for r in result.all_routes] == ["/users"]

    def test_ignored_paths_drop_endpoints_too(self):
        result = _validate(
            [_make_route("GET", "/health", name="health"), _make_route("GET", "/users")],
            [_make_endpoint("GET", "/health"), _make_endpoint("GET", "/users")],
            ignore_routes=["/health"],
        )
        assert result.is_valid
        assert result.statistics.total_endpoints == 1
        assert result.mismatches_by_type(MismatchType.MISSING_IMPLEMENTATION) == []

    def test_ignore_name_glob_keeps_endpoints(self):
        result = _validate(
            [_make_route("GET", "/debug/vars", name="debug.vars")],
            [_make_endpoint("GET", "/debug/vars")],
            ignore_routes=["debug.*"],
        )
        assert result.statistics.total_routes == 0
        assert result.statistics.total_endpoints == 1
        assert len(result.mismatches_by_type(MismatchType.MISSING_IMPLEMENTATION)) == 1

    def test_duplicate_fingerprints_warn(self):
        routes = [_make_route("GET", "/users/{id}"), _make_route("GET", "/users/{user}")]
        result = _validate(routes, [_make_endpoint("GET", "/users/{id}")])
        assert "Duplicate route 'GET:/users/{}' registered 2 times" in result.warnings
        assert result.mismatch_count() == 1

    def test_filter_types(self):
        result = _validate(
            [_make_route("GET", "/api/users"), _make_route("GET", "/api/posts")],
            [_make_endpoint("GET", "/api/users"), _make_endpoint("GET", "/api/orders")],
            filter_types=["missing_documentation"],
        )
        assert [m.type for m in result.mismatches] == [MismatchType.MISSING_DOCUMENTATION]
        assert result.all_routes is None
        assert result.all_endpoints is None
        assert [e.status for e in result.entries] == [EntryStatus.MISSING_DOCUMENTATION]
        assert result.statistics.total_mismatches == 1
        assert result.statistics.covered_endpoints == 2

    def test_complete_collections_without_filter_types(self):
        result = _validate([_make_route("GET", "/a")], [_make_endpoint("GET", "/a")])
        assert result.is_complete
        assert len(result.entries) == 1


class TestValidateRoutes:
    def test_ok_outcome(self):
        outcome = validate_routes([_make_route("GET", "/a")], [_make_endpoint("GET", "/a")], {"unknown": 1})
        assert outcome.ok
        assert outcome.unwrap().is_valid

    def test_accepts_options_instance(self):
        outcome = validate_routes([], [], ValidationOptions(base_path="/api"))
        assert outcome.ok

    def test_hyphenated_filter_types(self):
        outcome = validate_routes(
            [_make_route("GET", "/a")],
            [_make_endpoint("GET", "/b")],
            {"filter_types": ["Missing-Implementation"]},
        )
        result = outcome.unwrap()
        assert [m.type for m in result.mismatches] == [MismatchType.MISSING_IMPLEMENTATION]

    def test_invalid_pattern_outcome(self):
        outcome = validate_routes([], [], {"include_patterns": ["", "/api/"]})
        assert not outcome.ok
        assert isinstance(outcome.error, InvalidPatternError)
        assert outcome.error.errors[0] == "Empty pattern provided"
        with pytest.raises(InvalidPatternError):
            outcome.unwrap()

    def test_unsupported_filter_type_outcome(self):
        outcome = validate_routes([], [], {"filter_types": ["bogus"]})
        assert isinstance(outcome.error, UnsupportedFilterTypeError)
        result = outcome.to_result()
        assert result.is_valid is False
        assert result.mismatches[0].type == MismatchType.VALIDATION_ERROR
        assert result.mismatches[0].details.error_kind == "unsupported_filter_type"

    def test_outcome_to_result_passes_through(self):
        outcome = ValidationOutcome(result=RouteValidator().validate([], []))
        assert outcome.to_result() is outcome.result
