"""
apifaults - Declared fault mappers.

Mappers remap the structured payload of a declared ApiFault into a
ProblemDescription. Each mapper is bound to a category tag.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from .config import PipelineOptions
from .core import ApiFault
from .problem import ProblemDescription


Transform = Callable[
    [ApiFault, Optional[PipelineOptions]],
    Union[ProblemDescription, Awaitable[ProblemDescription]],
]


@dataclass(frozen=True, slots=True)
class MapperBinding:
    """
    Binds a category tag to a transform.

    Attributes:
        category: Category tag of the declared faults this binding owns
        transform: ``(fault, options) -> ProblemDescription``, sync or async
        when: Optional predicate replacing the category comparison
    """
    category: str
    transform: Transform
    when: Optional[Callable[[ApiFault], bool]] = None

    @property
    def name(self) -> str:
        return getattr(self.transform, "__name__", self.category)


class DomainFaultMapper:
    """Runtime mapper: a binding with the pipeline options threaded in."""

    def __init__(self, binding: MapperBinding, options: Optional[PipelineOptions] = None):
        self.binding = binding
        self.options = options

    @property
    def category(self) -> str:
        return self.binding.category

    def handles(self, fault: ApiFault) -> bool:
        if self.binding.when is not None:
            return bool(self.binding.when(fault))
        return fault.category == self.binding.category

    async def map(self, fault: ApiFault) -> ProblemDescription:
        result: Any = self.binding.transform(fault, self.options)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"DomainFaultMapper({self.category!r}, {self.binding.name!r})"


def maps(category: str, *, when: Optional[Callable[[ApiFault], bool]] = None) -> Callable[[Transform], MapperBinding]:
    """
    Decorator turning a transform function into a MapperBinding.

    Usage:
        ```python
        @maps("ParcelRetired")
        def parcel_retired(fault, options):
            return ProblemDescription(http_status=410, title="Parcel retired.")
        ```
    """
    def decorator(fn: Transform) -> MapperBinding:
        return MapperBinding(category, fn, when)
    return decorator


class MapperChain:
    """Immutable set of mappers consulted for declared faults."""

    def __init__(self, mappers: Iterable[DomainFaultMapper]):
        self.mappers: tuple[DomainFaultMapper, ...] = tuple(mappers)

    def matching(self, fault: ApiFault) -> list[DomainFaultMapper]:
        """All mappers claiming the fault, in registration order."""
        return [mapper for mapper in self.mappers if mapper.handles(fault)]

    def duplicate_categories(self) -> list[str]:
        seen: set[str] = set()
        duplicates: list[str] = []
        for mapper in self.mappers:
            if mapper.category in seen and mapper.category not in duplicates:
                duplicates.append(mapper.category)
            seen.add(mapper.category)
        return duplicates

    def __iter__(self):
        return iter(self.mappers)

    def __len__(self) -> int:
        return len(self.mappers)
