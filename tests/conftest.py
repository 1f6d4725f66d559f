"""
Shared test fixtures and helpers for the apifaults test suite.
"""

import logging

import pytest

from apifaults import (
    ExceptionPipeline,
    PipelineOptions,
    ProblemDescription,
    RequestContext,
)
from apifaults.handlers import FaultClassifier


LOGGER_NAME = "apifaults.tests"


# ============================================================================
# Helpers
# ============================================================================

class CountingClassifier(FaultClassifier):
    """Classifier recording how often it was consulted and invoked."""

    def __init__(self, fault_type=Exception, status=418, title="Counted."):
        self.handled_fault_type = fault_type
        self.status = status
        self.title = title
        self.checks = 0
        self.calls = 0

    def handles(self, fault):
        self.checks += 1
        return super().handles(fault)

    async def produce(self, fault, ctx):
        self.calls += 1
        return ProblemDescription(
            http_status=self.status,
            title=self.title,
            detail=str(fault),
            problem_instance_uri="set-by-classifier",
        )


def records_at(caplog, level):
    return [r for r in caplog.records if r.levelno == level and r.name == LOGGER_NAME]


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def logger():
    return logging.getLogger(LOGGER_NAME)


@pytest.fixture
def options():
    return PipelineOptions()


@pytest.fixture
def ctx(logger, options):
    return RequestContext(logger=logger, options=options)


@pytest.fixture
def pipeline(options):
    return ExceptionPipeline(options=options)


@pytest.fixture
def logs(caplog):
    """caplog capturing everything the test logger emits."""
    caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
    caplog.set_level(logging.DEBUG, logger="apifaults")
    return caplog
