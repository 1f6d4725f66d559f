"""
Problem details middleware - ASGI boundary for the exception pipeline.

Catches faults escaping the wrapped application, runs them through an
ExceptionPipeline and writes the resulting problem description as a JSON
response. Nothing else (CORS, compression, correlation ids) happens here.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import orjson

from .context import RequestContext
from .core import ProblemDelivery
from .engine import ExceptionPipeline
from .problem import ProblemDescription


REQUEST_ID_HEADER = b"x-request-id"


class ProblemDetailsMiddleware:
    """
    ASGI middleware converting unhandled faults into problem responses.

    For each HTTP request:
    1. Builds a RequestContext (``x-request-id`` is kept for log correlation)
    2. Executes the wrapped application
    3. On failure before the response started, resolves a problem through
       the pipeline and sends it

    Usage:
        app = ProblemDetailsMiddleware(app, pipeline=ExceptionPipeline())
    """

    def __init__(
        self,
        app: Callable,
        pipeline: Optional[ExceptionPipeline] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize middleware.

        Args:
            app: ASGI application callable
            pipeline: Exception pipeline (a default one when None)
            logger: Per-request log sink handed to the pipeline
        """
        self.app = app
        self.pipeline = pipeline or ExceptionPipeline()
        self.logger = logger

    async def __call__(self, scope: dict, receive: Callable, send: Callable):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        ctx = self.build_context(scope)
        response_started = False

        async def send_wrapper(message: dict):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                raise
            problem = await self._problem_for(exc, ctx)
            await self.send_problem(problem, send)

    def build_context(self, scope: dict) -> RequestContext:
        request_id = None
        for name, value in scope.get("headers", []):
            if name.lower() == REQUEST_ID_HEADER:
                request_id = value.decode("latin-1")
                break
        return RequestContext(
            request_id=request_id,
            logger=self.logger,
            options=self.pipeline.options,
            method=scope.get("method"),
            path=scope.get("path"),
        )

    async def _problem_for(self, exc: Exception, ctx: RequestContext) -> ProblemDescription:
        try:
            await self.pipeline.handle(exc, ctx)
        except ProblemDelivery as delivery:
            return delivery.problem
        except Exception as secondary:
            # A classifier or mapper failed; its own fault is reported instead.
            return self.pipeline.unhandled(secondary, ctx)

    async def send_problem(self, problem: ProblemDescription, send: Callable):
        body = orjson.dumps(problem.to_dict(), default=_json_default)
        await send({
            "type": "http.response.start",
            "status": problem.http_status,
            "headers": [
                (b"content-type", self.pipeline.options.content_type.encode("latin-1")),
                (b"content-length", str(len(body)).encode("latin-1")),
            ],
        })
        await send({"type": "http.response.body", "body": body})


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    return str(obj)
