"""
apifaults - Core fault types.

Defines:
- ApiFault (faults raised on purpose by business logic)
- Built-in declared faults (not found, validation, domain rule, api problem)
- InvocationFault (wrapper produced by dynamic dispatch)
- ProblemDelivery (hand-off signal to the transport boundary)
- Resolved (result value of a pipeline run)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .problem import ProblemDescription


# ============================================================================
# Declared API faults
# ============================================================================

class ApiFault(Exception):
    """
    Base class for declared API faults.

    A declared fault is raised intentionally by business logic and carries
    its own structured description of what went wrong:

    Attributes:
        category: Tag naming the business rule that failed (e.g. "NotFound")
        detail: Human-readable explanation, also the exception message
        payload: Free-form structured detail
        problem: Optional pre-built (partial) problem description
        status: Suggested HTTP status code

    Example:
        ```python
        raise ApiFault(
            "Parcel 42 is retired",
            category="ParcelRetired",
            status=409,
            payload={"parcel_id": 42},
        )
        ```
    """

    category: str = "ApiFault"
    status: int = 400

    def __init__(
        self,
        detail: str = "",
        *,
        category: Optional[str] = None,
        payload: Optional[dict[str, Any]] = None,
        problem: Optional[ProblemDescription] = None,
        status: Optional[int] = None,
    ):
        super().__init__(detail)
        self.detail = detail
        if category is not None:
            self.category = category
        if status is not None:
            self.status = status
        self.payload = payload or {}
        self.problem = problem

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(category={self.category!r}, "
            f"status={self.status}, detail={self.detail!r})"
        )


class ResourceNotFoundFault(ApiFault):
    """Requested resource does not exist."""

    category = "NotFound"
    status = 404

    def __init__(self, resource: str = "", identifier: Any = None, **kwargs):
        detail = kwargs.pop("detail", None)
        if detail is None:
            detail = f"{resource or 'Resource'} '{identifier}' was not found." if identifier is not None else ""
        payload = {"resource": resource, "identifier": identifier, **(kwargs.pop("payload", None) or {})}
        super().__init__(detail, payload=payload, **kwargs)
        self.resource = resource
        self.identifier = identifier


class ValidationFault(ApiFault):
    """Request input failed validation."""

    category = "Validation"
    status = 400

    def __init__(self, errors: Optional[dict[str, list[str]]] = None, detail: str = "", **kwargs):
        super().__init__(detail, **kwargs)
        self.errors = errors or {}


class DomainRuleFault(ApiFault):
    """A business rule refused the requested change."""

    category = "Domain"
    status = 400


class ApiProblemFault(ApiFault):
    """Declared fault carrying a complete problem description."""

    category = "ApiProblem"

    def __init__(self, problem: ProblemDescription, **kwargs):
        kwargs.setdefault("status", problem.http_status)
        super().__init__(problem.detail, problem=problem, **kwargs)


# ============================================================================
# Wrapper fault
# ============================================================================

class InvocationFault(Exception):
    """
    Raised by dynamic dispatch when the invoked target fails.

    The original failure is available as ``inner``.
    """

    def __init__(self, inner: Optional[BaseException] = None, message: str = ""):
        super().__init__(message or (f"Invocation failed: {inner!r}" if inner else "Invocation failed"))
        self.inner = inner


# ============================================================================
# Pipeline outcome
# ============================================================================

@dataclass(frozen=True)
class Resolved:
    """Pipeline produced a problem description."""
    problem: ProblemDescription


class ProblemDelivery(Exception):
    """
    Signal raised by ExceptionPipeline.handle to hand a problem description
    to the transport boundary.

    It is a single-use control-flow signal rather than a failure of the
    pipeline: the boundary catches it exactly once and writes ``problem``
    as the response body with ``problem.http_status`` as status code.
    """

    def __init__(self, problem: ProblemDescription):
        super().__init__(str(problem))
        self.problem = problem
