"""
apifaults - Problem description model.

Defines:
- ProblemDescription (the wire contract for every error response)
- Problem type URI generation
- Problem number generation
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional


DEFAULT_TITLE = "An unexpected error occurred."
DEFAULT_TYPE_TEMPLATE = "urn:apifaults:problem-type:{slug}"

UNHANDLED_CATEGORY = "unhandled"

_SUFFIXES = ("Exception", "Fault", "Error")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def category_slug(name: str) -> str:
    """
    Turn a fault type or category name into a URI-safe slug.

    ``ResourceNotFoundFault`` -> ``resource-not-found``,
    ``NotFound`` -> ``not-found``.
    """
    for suffix in _SUFFIXES:
        if name.endswith(suffix) and name != suffix:
            name = name[: -len(suffix)]
            break
    slug = _CAMEL_BOUNDARY.sub("-", name)
    slug = re.sub(r"[^A-Za-z0-9]+", "-", slug).strip("-").lower()
    return slug or UNHANDLED_CATEGORY


def type_uri_for(category: str, template: str = DEFAULT_TYPE_TEMPLATE) -> str:
    """Render the problem type URI for a category."""
    return template.format(slug=category_slug(category))


@dataclass(slots=True)
class ProblemDescription:
    """
    Structured problem payload returned to API clients.

    Created fresh for each handled fault and never shared between requests.

    Attributes:
        http_status: HTTP status code of the response
        title: Short human-readable summary
        detail: Longer explanation (may be empty)
        problem_type_uri: Stable URI identifying the problem category; filled
            from the fault category by the pipeline when left as None
        problem_instance_uri: Identifier of this occurrence, used to
            correlate the response with server logs
        extensions: Additional members serialized next to the standard ones
    """

    http_status: int = 500
    title: str = DEFAULT_TITLE
    detail: str = ""
    problem_type_uri: Optional[str] = None
    problem_instance_uri: Optional[str] = None
    extensions: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def new_problem_number() -> str:
        """Generate a fresh, opaque problem number."""
        return uuid.uuid4().hex

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to the wire shape.

        Extensions are emitted first so they can never shadow a standard member.
        """
        body = dict(self.extensions)
        body.update({
            "httpStatus": self.http_status,
            "title": self.title,
            "detail": self.detail,
            "problemTypeUri": self.problem_type_uri,
            "problemInstanceUri": self.problem_instance_uri,
        })
        return body

    def __str__(self) -> str:
        return f"[{self.http_status}] {self.title} ({self.problem_instance_uri})"
