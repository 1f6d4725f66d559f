"""
Demo API - a tiny ASGI application exercising the exception pipeline.

Every route except the home route raises a fault, so the problem
responses of the pipeline can be inspected with curl.
"""

from __future__ import annotations

from typing import Callable, Optional

import orjson

from .config import PipelineOptions
from .core import (
    DomainRuleFault,
    InvocationFault,
    ResourceNotFoundFault,
    ValidationFault,
)
from .engine import ExceptionPipeline
from .middleware import ProblemDetailsMiddleware


def _home() -> dict:
    return {
        "links": [
            {"href": "/example-aggregates/{id}", "rel": "ExampleAggregates", "type": "GET"},
            {"href": "/validation", "rel": "Validation", "type": "POST"},
            {"href": "/domain-rule", "rel": "DomainRule", "type": "POST"},
            {"href": "/invoke", "rel": "Invoke", "type": "GET"},
            {"href": "/not-implemented", "rel": "NotImplemented", "type": "GET"},
            {"href": "/crash", "rel": "Crash", "type": "GET"},
        ]
    }


def _raise_for(path: str):
    if path.startswith("/example-aggregates/"):
        raise ResourceNotFoundFault("ExampleAggregate", path.rsplit("/", 1)[-1])
    if path == "/validation":
        raise ValidationFault({"name": ["Name is required."]})
    if path == "/domain-rule":
        raise DomainRuleFault("Example aggregates can not be renamed twice.")
    if path == "/invoke":
        try:
            raise ResourceNotFoundFault("ExampleAggregate", "dynamic")
        except ResourceNotFoundFault as inner:
            raise InvocationFault(inner) from inner
    if path == "/not-implemented":
        raise NotImplementedError("Coming soon")
    if path == "/crash":
        raise RuntimeError("Something deep inside went wrong")
    raise ResourceNotFoundFault("Route", path)


async def demo_app(scope: dict, receive: Callable, send: Callable):
    """Bare ASGI application behind the problem details middleware."""
    if scope["type"] != "http":
        return

    if scope["path"] != "/":
        _raise_for(scope["path"])

    body = orjson.dumps(_home())
    await send({
        "type": "http.response.start",
        "status": 200,
        "headers": [(b"content-type", b"application/json")],
    })
    await send({"type": "http.response.body", "body": body})


def create_app(options: Optional[PipelineOptions] = None) -> ProblemDetailsMiddleware:
    """Demo application wrapped in the problem details middleware."""
    return ProblemDetailsMiddleware(demo_app, ExceptionPipeline(options=options))
