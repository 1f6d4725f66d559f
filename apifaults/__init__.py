"""
apifaults - Problem details for HTTP APIs.

Turns any fault raised while serving a request into one structured,
machine-readable problem description, and keeps the diagnostics in the logs.

Core exports:
- ProblemDescription: Wire contract of every error response
- ApiFault: Base class of declared API faults
- FaultClassifier: Abstract classifier base
- MapperBinding: Category-keyed mapper for declared faults
- ExceptionPipeline: Fault-to-problem orchestrator
- ProblemDetailsMiddleware: ASGI boundary
"""

__version__ = "0.3.0"

from .problem import (
    DEFAULT_TITLE,
    ProblemDescription,
    category_slug,
    type_uri_for,
)

from .core import (
    ApiFault,
    ApiProblemFault,
    DomainRuleFault,
    InvocationFault,
    ProblemDelivery,
    Resolved,
    ResourceNotFoundFault,
    ValidationFault,
)

from .config import ConfigError, PipelineOptions
from .context import RequestContext

from .handlers import (
    ClassifierChain,
    FaultClassifier,
    FunctionClassifier,
    classifier,
)

from .mappers import (
    DomainFaultMapper,
    MapperBinding,
    MapperChain,
    maps,
)

from .default_handlers import (
    ApiFaultClassifier,
    ApiProblemClassifier,
    DomainRuleClassifier,
    NotFoundClassifier,
    NotImplementedClassifier,
    ValidationClassifier,
    default_classifiers,
)

from .engine import ExceptionPipeline
from .middleware import ProblemDetailsMiddleware

__all__ = [
    # Model
    "DEFAULT_TITLE",
    "ProblemDescription",
    "category_slug",
    "type_uri_for",

    # Faults
    "ApiFault",
    "ApiProblemFault",
    "DomainRuleFault",
    "InvocationFault",
    "ProblemDelivery",
    "Resolved",
    "ResourceNotFoundFault",
    "ValidationFault",

    # Configuration
    "ConfigError",
    "PipelineOptions",
    "RequestContext",

    # Classifiers
    "ClassifierChain",
    "FaultClassifier",
    "FunctionClassifier",
    "classifier",
    "ApiFaultClassifier",
    "ApiProblemClassifier",
    "DomainRuleClassifier",
    "NotFoundClassifier",
    "NotImplementedClassifier",
    "ValidationClassifier",
    "default_classifiers",

    # Mappers
    "DomainFaultMapper",
    "MapperBinding",
    "MapperChain",
    "maps",

    # Runtime
    "ExceptionPipeline",
    "ProblemDetailsMiddleware",
]
