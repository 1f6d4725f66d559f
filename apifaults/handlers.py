"""
apifaults - Fault classifiers.

Defines the classifier abstraction and the ordered classifier chain.

A classifier owns one fault category: it says whether it handles a fault
and produces a ProblemDescription for it. Chains are first-match-wins,
in registration order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Iterable, Optional

from .context import RequestContext
from .problem import ProblemDescription


class FaultClassifier(ABC):
    """
    Abstract base class for fault classifiers.

    Subclasses set ``handled_fault_type`` and implement ``produce``.
    The default ``handles`` is an ``isinstance`` check against
    ``handled_fault_type``; override it for predicate-based ownership.

    Example:
        ```python
        class TimeoutClassifier(FaultClassifier):
            handled_fault_type = TimeoutError

            async def produce(self, fault, ctx):
                return ProblemDescription(http_status=504, title="Upstream timed out.")
        ```
    """

    handled_fault_type: type[BaseException] = Exception

    def handles(self, fault: BaseException) -> bool:
        """Check whether this classifier owns the fault."""
        return isinstance(fault, self.handled_fault_type)

    @abstractmethod
    async def produce(self, fault: BaseException, ctx: RequestContext) -> ProblemDescription:
        """
        Build the problem description for a fault this classifier handles.

        Args:
            fault: Fault accepted by ``handles``
            ctx: Request context

        Returns:
            ProblemDescription (the pipeline stamps the instance URI afterwards)
        """
        pass

    @property
    def label(self) -> str:
        """Name of the handled fault type, used in log labels."""
        return self.handled_fault_type.__name__

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.label})"


Producer = Callable[[BaseException, RequestContext], Awaitable[ProblemDescription]]


class FunctionClassifier(FaultClassifier):
    """Classifier built from a plain coroutine function."""

    def __init__(
        self,
        fault_type: type[BaseException],
        producer: Producer,
        *,
        when: Optional[Callable[[BaseException], bool]] = None,
    ):
        self.handled_fault_type = fault_type
        self.producer = producer
        self.when = when

    def handles(self, fault: BaseException) -> bool:
        if not isinstance(fault, self.handled_fault_type):
            return False
        return self.when is None or bool(self.when(fault))

    async def produce(self, fault: BaseException, ctx: RequestContext) -> ProblemDescription:
        return await self.producer(fault, ctx)

    def __repr__(self) -> str:
        return f"FunctionClassifier({self.label}, {getattr(self.producer, '__name__', self.producer)!r})"


def classifier(
    fault_type: type[BaseException],
    *,
    when: Optional[Callable[[BaseException], bool]] = None,
) -> Callable[[Producer], FunctionClassifier]:
    """
    Decorator turning a coroutine function into a classifier.

    Usage:
        ```python
        @classifier(KeyError)
        async def missing_key(fault, ctx):
            return ProblemDescription(http_status=400, title="Missing key.")

        pipeline = ExceptionPipeline(classifiers=[missing_key])
        ```
    """
    def decorator(fn: Producer) -> FunctionClassifier:
        return FunctionClassifier(fault_type, fn, when=when)
    return decorator


class ClassifierChain:
    """
    Immutable, ordered sequence of classifiers.

    The first classifier whose ``handles`` returns True is selected;
    the rest are never consulted.
    """

    def __init__(self, classifiers: Iterable[FaultClassifier]):
        self.classifiers: tuple[FaultClassifier, ...] = tuple(classifiers)

    def select(self, fault: BaseException) -> Optional[FaultClassifier]:
        for candidate in self.classifiers:
            if candidate.handles(fault):
                return candidate
        return None

    def __iter__(self):
        return iter(self.classifiers)

    def __len__(self) -> int:
        return len(self.classifiers)
