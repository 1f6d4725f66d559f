"""
Request-scoped context handed to the exception pipeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import PipelineOptions
from .problem import ProblemDescription


@dataclass(slots=True)
class RequestContext:
    """
    Per-request collaborator bundle for fault handling.

    Attributes:
        request_id: Identifier assigned by the transport (if any), for log
            correlation only; never echoed to the client
        logger: Log sink for this request; the pipeline logger is used when None
        options: Options used to render the instance URI
        method: HTTP method, for log context only
        path: Request path, for log context only
    """

    request_id: Optional[str] = None
    logger: Optional[logging.Logger] = None
    options: Optional[PipelineOptions] = None
    method: Optional[str] = None
    path: Optional[str] = None
    _instance_uri: Optional[str] = field(default=None, init=False, repr=False)

    def problem_instance_uri(self) -> str:
        """
        Instance URI for the fault handled in this request.

        A fresh problem number, generated on first access and reused
        afterwards so every consumer of the same handling sees one value.
        """
        if self._instance_uri is None:
            options = self.options or PipelineOptions()
            self._instance_uri = options.instance_uri(ProblemDescription.new_problem_number())
        return self._instance_uri

    def log_extra(self) -> dict:
        """Request fields attached to every pipeline log record."""
        return {"request_id": self.request_id, "method": self.method, "path": self.path}
