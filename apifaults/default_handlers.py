"""
apifaults - Default classifiers.

Pre-built classifiers registered after any custom classifiers:
1. ApiProblemClassifier: ApiProblemFault -> carried problem description
2. NotFoundClassifier: ResourceNotFoundFault -> 404
3. ValidationClassifier: ValidationFault -> 400 with validation errors
4. DomainRuleClassifier: DomainRuleFault -> 400
5. ApiFaultClassifier: any other ApiFault -> fault status
6. NotImplementedClassifier: NotImplementedError -> 501

Order matters: the chain is first-match-wins, so the generic ApiFault
classifier sits after its subclasses.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .config import PipelineOptions
from .context import RequestContext
from .core import (
    ApiFault,
    ApiProblemFault,
    DomainRuleFault,
    ResourceNotFoundFault,
    ValidationFault,
)
from .handlers import FaultClassifier
from .problem import ProblemDescription, type_uri_for


_UNSET = ProblemDescription()


class DefaultClassifier(FaultClassifier):
    """Base for built-in classifiers; holds the pipeline options."""

    def __init__(self, options: Optional[PipelineOptions] = None):
        self.options = options or PipelineOptions()

    def type_uri(self, category: str) -> str:
        return type_uri_for(category, self.options.problem_type_template)


# ============================================================================
# Declared faults
# ============================================================================

class ApiProblemClassifier(DefaultClassifier):
    """Return the problem description carried by the fault."""

    handled_fault_type = ApiProblemFault

    async def produce(self, fault: ApiProblemFault, ctx: RequestContext) -> ProblemDescription:
        return replace(fault.problem, extensions=dict(fault.problem.extensions))


class NotFoundClassifier(DefaultClassifier):
    handled_fault_type = ResourceNotFoundFault

    async def produce(self, fault: ResourceNotFoundFault, ctx: RequestContext) -> ProblemDescription:
        return ProblemDescription(
            http_status=404,
            title="Resource not found.",
            detail=fault.detail,
            problem_type_uri=self.type_uri(fault.category),
        )


class ValidationClassifier(DefaultClassifier):
    handled_fault_type = ValidationFault

    async def produce(self, fault: ValidationFault, ctx: RequestContext) -> ProblemDescription:
        return ProblemDescription(
            http_status=400,
            title="Validation failed.",
            detail=fault.detail or "One or more input values are invalid.",
            problem_type_uri=self.type_uri(fault.category),
            extensions={"validationErrors": {field: list(messages) for field, messages in fault.errors.items()}},
        )


class DomainRuleClassifier(DefaultClassifier):
    handled_fault_type = DomainRuleFault

    async def produce(self, fault: DomainRuleFault, ctx: RequestContext) -> ProblemDescription:
        return ProblemDescription(
            http_status=fault.status,
            title="Business rule violated.",
            detail=fault.detail,
            problem_type_uri=self.type_uri("DomainRule"),
        )


class ApiFaultClassifier(DefaultClassifier):
    """
    Generic classifier for declared faults without a dedicated classifier.

    Fields set on a partial problem carried by the fault win over the values
    derived from the fault itself. The status always comes from the fault.
    """

    handled_fault_type = ApiFault

    async def produce(self, fault: ApiFault, ctx: RequestContext) -> ProblemDescription:
        problem = ProblemDescription(
            http_status=fault.status,
            title=self.options.default_title,
            detail=fault.detail,
            problem_type_uri=self.type_uri(fault.category),
        )
        partial = fault.problem
        if partial is not None:
            if partial.title != _UNSET.title:
                problem.title = partial.title
            if partial.detail:
                problem.detail = partial.detail
            if partial.problem_type_uri is not None:
                problem.problem_type_uri = partial.problem_type_uri
            problem.extensions.update(partial.extensions)
        if self.options.verbose_detail and fault.payload:
            problem.extensions.setdefault("payload", dict(fault.payload))
        return problem


# ============================================================================
# Runtime faults
# ============================================================================

class NotImplementedClassifier(DefaultClassifier):
    handled_fault_type = NotImplementedError

    async def produce(self, fault: NotImplementedError, ctx: RequestContext) -> ProblemDescription:
        return ProblemDescription(
            http_status=501,
            title="Not implemented.",
            detail=str(fault) if self.options.verbose_detail else "",
            problem_type_uri=self.type_uri("NotImplemented"),
        )


def default_classifiers(options: Optional[PipelineOptions] = None) -> list[FaultClassifier]:
    """Built-in classifiers in registration order."""
    options = options or PipelineOptions()
    return [
        ApiProblemClassifier(options),
        NotFoundClassifier(options),
        ValidationClassifier(options),
        DomainRuleClassifier(options),
        ApiFaultClassifier(options),
        NotImplementedClassifier(options),
    ]
