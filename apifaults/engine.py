"""
apifaults - Exception pipeline.

The ExceptionPipeline turns any fault raised while serving a request into
exactly one ProblemDescription:
1. Unwraps invocation wrapper faults
2. Runs the mapper chain for declared API faults
3. Runs the classifier chain (custom classifiers first, then defaults)
4. Falls back to an unhandled 500 problem
5. Logs the outcome and hands the problem to the transport boundary

Chains are built once in the constructor and only read afterwards, so a
single pipeline may serve any number of concurrent requests.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, NoReturn, Optional

from .config import PipelineOptions
from .context import RequestContext
from .core import ApiFault, InvocationFault, ProblemDelivery, Resolved
from .default_handlers import default_classifiers
from .handlers import ClassifierChain, FaultClassifier
from .mappers import DomainFaultMapper, MapperBinding, MapperChain
from .problem import UNHANDLED_CATEGORY, ProblemDescription, type_uri_for


class ExceptionPipeline:
    """
    Fault-to-problem orchestrator.

    Usage:
        ```python
        pipeline = ExceptionPipeline(
            classifiers=[TimeoutClassifier()],
            mappers=[MapperBinding("ParcelRetired", parcel_retired)],
            options=PipelineOptions.load(),
        )

        try:
            ...
        except Exception as e:
            await pipeline.handle(e, RequestContext(request_id="abc"))
        ```

    ``handle`` always raises ProblemDelivery; ``resolve`` returns the same
    outcome as a Resolved value.
    """

    def __init__(
        self,
        *,
        classifiers: Iterable[FaultClassifier] = (),
        mappers: Iterable[MapperBinding] = (),
        options: Optional[PipelineOptions] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Build the (immutable) classifier and mapper chains.

        Args:
            classifiers: Custom classifiers, tried before the defaults
            mappers: Mapper bindings for declared API faults
            options: Configuration threaded into mappers and default classifiers
            logger: Logger used when the request context carries none
        """
        self.options = options or PipelineOptions()
        self.logger = logger or logging.getLogger("apifaults.pipeline")

        custom = list(classifiers)
        self.classifiers = ClassifierChain(custom + default_classifiers(self.options))
        self.mappers = MapperChain(DomainFaultMapper(binding, self.options) for binding in mappers)

        for entry in custom:
            self.logger.debug(f"Registered custom classifier: {entry!r}")
        for mapper in self.mappers:
            self.logger.debug(f"Registered mapper: {mapper!r}")
        for category in self.mappers.duplicate_categories():
            self.logger.warning(f"Several mappers registered for category '{category}'")

    # ========================================================================
    # Entry points
    # ========================================================================

    async def handle(self, exception: BaseException, ctx: RequestContext) -> NoReturn:
        """
        Resolve the fault and raise ProblemDelivery carrying the result.

        Raises:
            ProblemDelivery: always, unless a classifier or mapper fails;
                such failures propagate unchanged.
        """
        resolved = await self.resolve(exception, ctx)
        raise ProblemDelivery(resolved.problem)

    async def resolve(self, exception: BaseException, ctx: RequestContext) -> Resolved:
        """Resolve a fault into a problem description."""
        fault = self.unwrap(exception)
        logger = ctx.logger or self.logger

        if isinstance(fault, ApiFault):
            problem = await self._map_declared(fault, ctx, logger)
            if problem is not None:
                return Resolved(problem)

        handler = self.classifiers.select(fault)
        if handler is None:
            return Resolved(self.unhandled(fault, ctx))

        produced = await handler.produce(fault, ctx)
        problem = replace(
            produced,
            problem_type_uri=produced.problem_type_uri or self._type_uri(handler.label),
            problem_instance_uri=ctx.problem_instance_uri(),
            extensions=dict(produced.extensions),
        )
        self._log_handled(logger, ctx, fault, problem, handler.label)
        return Resolved(problem)

    # ========================================================================
    # Steps
    # ========================================================================

    @staticmethod
    def unwrap(exception: BaseException) -> BaseException:
        """Replace an invocation wrapper by the fault it carries."""
        if isinstance(exception, InvocationFault) and exception.inner is not None:
            return exception.inner
        return exception

    async def _map_declared(
        self,
        fault: ApiFault,
        ctx: RequestContext,
        logger: logging.Logger,
    ) -> Optional[ProblemDescription]:
        matches = self.mappers.matching(fault)

        if len(matches) > 1:
            logger.warning(
                f"Multiple mappers for {fault.category} found. Skipping specific mapping.",
                extra={"mappers": [repr(mapper) for mapper in matches]},
            )
            return None
        if not matches:
            return None

        produced = await matches[0].map(fault)
        # The mapper may hand back a shared instance; never stamp it.
        problem = replace(
            produced,
            problem_type_uri=produced.problem_type_uri or self._type_uri(fault.category),
            problem_instance_uri=produced.problem_instance_uri or ctx.problem_instance_uri(),
            extensions=dict(produced.extensions),
        )
        self._log_handled(logger, ctx, fault, problem, self._declared_name(fault))
        return problem

    def unhandled(self, fault: BaseException, ctx: RequestContext) -> ProblemDescription:
        """
        Terminal fallback: generic 500 problem with a fresh problem number.

        Never exposes fault details to the client; the fault itself goes to
        the log only.
        """
        problem = ProblemDescription(
            http_status=500,
            title=self.options.default_title,
            detail="",
            problem_type_uri=self._type_uri(UNHANDLED_CATEGORY),
            problem_instance_uri=self.options.instance_uri(ProblemDescription.new_problem_number()),
        )
        logger = ctx.logger or self.logger
        logger.error(
            f"[{problem.problem_instance_uri}] Unhandled exception!",
            exc_info=(type(fault), fault, fault.__traceback__),
            extra={"problem": problem.to_dict(), **ctx.log_extra()},
        )
        return problem

    def _log_handled(
        self,
        logger: logging.Logger,
        ctx: RequestContext,
        fault: BaseException,
        problem: ProblemDescription,
        fault_type_name: str,
    ):
        label = self.options.public_label(fault_type_name)
        logger.info(
            f"[{problem.problem_instance_uri}] {label} handled: {problem.detail}",
            exc_info=(type(fault), fault, fault.__traceback__),
            extra={
                "problem": problem.to_dict(),
                "handled_fault_type": label,
                **ctx.log_extra(),
            },
        )

    def _type_uri(self, category: str) -> str:
        return type_uri_for(category, self.options.problem_type_template)

    def _declared_name(self, fault: ApiFault) -> str:
        """Name looked up in the label table for a mapped fault."""
        name = type(fault).__name__
        return name if name in self.options.labels else fault.category
