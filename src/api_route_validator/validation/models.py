"""Records produced by a validation run.

Everything here is a frozen value object; reporters read these records and
never recompute anything from them except presentation.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from api_route_validator.parser.base import EndpointDescriptor, RouteDescriptor, method_order


class MismatchType(str, Enum):
    MISSING_DOCUMENTATION = "missing_documentation"
    MISSING_IMPLEMENTATION = "missing_implementation"
    METHOD_MISMATCH = "method_mismatch"
    PARAMETER_MISMATCH = "parameter_mismatch"
    PATH_MISMATCH = "path_mismatch"
    VALIDATION_ERROR = "validation_error"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").upper()


TYPE_ORDER = {t: i for i, t in enumerate(MismatchType)}


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def level(self) -> int:
        return {"error": 3, "warning": 2, "info": 1}[self.value]


# -- mismatch details (one shape per mismatch type) ---------------------------


class _Details(BaseModel):
    model_config = ConfigDict(frozen=True)


class MissingDocumentationDetails(_Details):
    kind: Literal["missing_documentation"] = "missing_documentation"
    route_name: str = ""
    action: str = ""
    middleware: tuple[str, ...] = ()
    path_parameters: tuple[str, ...] = ()


class MissingImplementationDetails(_Details):
    kind: Literal["missing_implementation"] = "missing_implementation"
    operation_id: str = ""
    tags: tuple[str, ...] = ()
    summary: str = ""
    path_parameters: tuple[str, ...] = ()


class MethodMismatchDetails(_Details):
    kind: Literal["method_mismatch"] = "method_mismatch"
    route_methods: tuple[str, ...] = ()
    endpoint_methods: tuple[str, ...] = ()
    missing_in_routes: tuple[str, ...] = ()
    missing_in_spec: tuple[str, ...] = ()


class ParameterMismatchDetails(_Details):
    kind: Literal["parameter_mismatch"] = "parameter_mismatch"
    route_parameters: tuple[str, ...] = ()
    endpoint_parameters: tuple[str, ...] = ()
    missing_in_routes: tuple[str, ...] = ()
    missing_in_spec: tuple[str, ...] = ()


class ValidationErrorDetails(_Details):
    kind: Literal["validation_error"] = "validation_error"
    error_kind: str = ""


MismatchDetails = Annotated[
    Union[
        MissingDocumentationDetails,
        MissingImplementationDetails,
        MethodMismatchDetails,
        ParameterMismatchDetails,
        ValidationErrorDetails,
    ],
    Field(discriminator="kind"),
]


def _difference(left, right) -> tuple[str, ...]:
    right = set(right)
    return tuple(item for item in left if item not in right)


class RouteMismatch(BaseModel):
    """A classified discrepancy between framework routes and the specification."""

    model_config = ConfigDict(frozen=True)

    type: MismatchType
    message: str
    path: str
    method: str
    details: MismatchDetails | None = None
    suggestions: tuple[str, ...] = ()
    severity: Severity = Severity.ERROR

    @classmethod
    def missing_documentation(cls, route: RouteDescriptor, suggestions=()) -> "RouteMismatch":
        return cls(
            type=MismatchType.MISSING_DOCUMENTATION,
            message=f"Route '{route.signature}' is implemented but not documented in the OpenAPI specification",
            path=route.uri,
            method=route.primary_method,
            details=MissingDocumentationDetails(
                route_name=route.name,
                action=route.action,
                middleware=route.middleware,
                path_parameters=route.path_parameters,
            ),
            suggestions=tuple(suggestions) + (
                f"Add '{route.primary_method} {route.uri}' to your OpenAPI specification",
                "Consider if this route should be excluded from API documentation",
            ),
        )

    @classmethod
    def missing_implementation(cls, endpoint: EndpointDescriptor, suggestions=()) -> "RouteMismatch":
        return cls(
            type=MismatchType.MISSING_IMPLEMENTATION,
            message=f"Endpoint '{endpoint.display_name}' is documented but not implemented by the application",
            path=endpoint.path,
            method=endpoint.method,
            details=MissingImplementationDetails(
                operation_id=endpoint.operation_id,
                tags=endpoint.tags,
                summary=endpoint.summary,
                path_parameters=tuple(endpoint.path_parameters),
            ),
            suggestions=tuple(suggestions) + (
                f"Implement route '{endpoint.display_name}' in your application",
                "Remove this endpoint from the OpenAPI specification if not needed",
            ),
        )

    @classmethod
    def method_mismatch(cls, path: str, route_methods, endpoint_methods, suggestions=()) -> "RouteMismatch":
        """Summarize disjoint method sets on one path.

        ``method`` is a display label joining both sets (e.g. ``GET,POST``);
        no single route or endpoint carries it. The separate sets live in
        ``details``.
        """
        route_methods = tuple(sorted(set(route_methods), key=method_order))
        endpoint_methods = tuple(sorted(set(endpoint_methods), key=method_order))
        return cls(
            type=MismatchType.METHOD_MISMATCH,
            message=f"Path '{path}' has different HTTP methods in application routes vs OpenAPI specification",
            path=path,
            method=",".join(sorted(set(route_methods) | set(endpoint_methods), key=method_order)),
            details=MethodMismatchDetails(
                route_methods=route_methods,
                endpoint_methods=endpoint_methods,
                missing_in_routes=_difference(endpoint_methods, route_methods),
                missing_in_spec=_difference(route_methods, endpoint_methods),
            ),
            suggestions=tuple(suggestions) + (
                "Align HTTP methods between application routes and OpenAPI specification",
                "Consider if different methods are intentionally excluded",
            ),
            severity=Severity.WARNING,
        )

    @classmethod
    def parameter_mismatch(
        cls, route: RouteDescriptor, endpoint: EndpointDescriptor, suggestions=()
    ) -> "RouteMismatch":
        route_params = route.path_parameters
        endpoint_params = tuple(endpoint.path_parameters)
        return cls(
            type=MismatchType.PARAMETER_MISMATCH,
            message=f"Path '{route.uri}' has different parameters in application routes vs OpenAPI specification",
            path=route.uri,
            method=route.primary_method,
            details=ParameterMismatchDetails(
                route_parameters=route_params,
                endpoint_parameters=endpoint_params,
                missing_in_routes=_difference(endpoint_params, route_params),
                missing_in_spec=_difference(route_params, endpoint_params),
            ),
            suggestions=tuple(suggestions) + (
                "Align path parameters between application routes and OpenAPI specification",
            ),
            severity=Severity.WARNING,
        )

    @classmethod
    def validation_error(cls, message: str, error_kind: str = "") -> "RouteMismatch":
        return cls(
            type=MismatchType.VALIDATION_ERROR,
            message=message,
            path="",
            method="",
            details=ValidationErrorDetails(error_kind=error_kind),
        )

    @property
    def severity_level(self) -> int:
        return self.severity.level

    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def is_warning(self) -> bool:
        return self.severity == Severity.WARNING

    def suggestions_text(self) -> str:
        if not self.suggestions:
            return "No suggestions available"
        return "\n".join(f"• {s}" for s in self.suggestions)

    def sort_key(self) -> tuple:
        first_method = self.method.split(",")[0]
        return (self.path, method_order(first_method), self.method, TYPE_ORDER[self.type])

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "message": self.message,
            "path": self.path,
            "method": self.method,
            "severity": self.severity.value,
            "details": self.details.model_dump(mode="json") if self.details else {},
            "suggestions": list(self.suggestions),
        }


class EntryStatus(str, Enum):
    MATCH = "match"
    MISSING_DOCUMENTATION = "missing_documentation"
    MISSING_IMPLEMENTATION = "missing_implementation"
    PARAMETER_MISMATCH = "parameter_mismatch"


DISPLAY_STATUS = {
    EntryStatus.MATCH: "✓ Match",
    EntryStatus.MISSING_DOCUMENTATION: "✗ Missing Doc",
    EntryStatus.MISSING_IMPLEMENTATION: "✗ Missing Impl",
    EntryStatus.PARAMETER_MISMATCH: "⚠ Param Mismatch",
}


class RouteEntry(BaseModel):
    """One row of the complete route/endpoint view."""

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    status: EntryStatus
    route: RouteDescriptor | None = None
    endpoint: EndpointDescriptor | None = None
    mismatch: RouteMismatch | None = None

    @property
    def source(self) -> str:
        if self.route is not None and self.endpoint is not None:
            return "both"
        if self.route is not None:
            return "framework"
        return "specification"

    @property
    def display_status(self) -> str:
        return DISPLAY_STATUS[self.status]

    @property
    def route_parameters(self) -> tuple[str, ...]:
        return self.route.path_parameters if self.route is not None else ()

    @property
    def endpoint_parameters(self) -> tuple[str, ...]:
        return tuple(self.endpoint.path_parameters) if self.endpoint is not None else ()

    def sort_key(self) -> tuple:
        return (self.path, method_order(self.method), self.method)

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "path": self.path,
            "status": self.status.value,
            "source": self.source,
            "route_parameters": list(self.route_parameters),
            "endpoint_parameters": list(self.endpoint_parameters),
            "mismatch": self.mismatch.to_dict() if self.mismatch else None,
        }


class Statistics(BaseModel):
    """Coverage figures derived from the final mismatch list."""

    model_config = ConfigDict(frozen=True)

    total_routes: int = 0
    covered_routes: int = 0
    route_coverage_percentage: float = 100.0
    total_endpoints: int = 0
    covered_endpoints: int = 0
    endpoint_coverage_percentage: float = 100.0
    total_mismatches: int = 0
    mismatch_breakdown: dict[str, int] = {}
    total_coverage_percentage: float = 100.0

    def as_dict(self) -> dict:
        return self.model_dump()


class ValidationResult(BaseModel):
    """The outcome of reconciling routes with specification endpoints."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    mismatches: tuple[RouteMismatch, ...] = ()
    warnings: tuple[str, ...] = ()
    statistics: Statistics = Statistics()
    entries: tuple[RouteEntry, ...] = ()
    all_routes: tuple[RouteDescriptor, ...] | None = None
    all_endpoints: tuple[EndpointDescriptor, ...] | None = None

    @classmethod
    def from_error(cls, error: Exception) -> "ValidationResult":
        """A failed result carrying a single validation_error mismatch."""
        kind = getattr(error, "kind", type(error).__name__)
        mismatch = RouteMismatch.validation_error(str(error), error_kind=kind)
        return cls(
            is_valid=False,
            mismatches=(mismatch,),
            statistics=Statistics(total_mismatches=1, mismatch_breakdown={mismatch.type.value: 1}),
        )

    @property
    def is_complete(self) -> bool:
        """True when the full route and endpoint collections are attached."""
        return self.all_routes is not None and self.all_endpoints is not None

    def mismatch_count(self) -> int:
        return len(self.mismatches)

    def mismatches_by_type(self, mismatch_type: MismatchType | str) -> list[RouteMismatch]:
        mismatch_type = MismatchType(mismatch_type)
        return [m for m in self.mismatches if m.type == mismatch_type]

    def mismatch_types(self) -> list[MismatchType]:
        seen: list[MismatchType] = []
        for mismatch in self.mismatches:
            if mismatch.type not in seen:
                seen.append(mismatch.type)
        return seen

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def summary(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "total_mismatches": self.mismatch_count(),
            "mismatch_types": {t.value: len(self.mismatches_by_type(t)) for t in self.mismatch_types()},
            "warning_count": len(self.warnings),
            "statistics": self.statistics.as_dict(),
        }

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "mismatches": [m.to_dict() for m in self.mismatches],
            "warnings": list(self.warnings),
            "statistics": self.statistics.as_dict(),
            "summary": self.summary(),
        }
