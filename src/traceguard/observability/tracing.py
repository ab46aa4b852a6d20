"""Stage span contract: one span per stage, mandatory attributes, exactly one close.

``StageTracer.run_stage`` is the only way pipeline stages are executed. It
opens a span named after the stage, stamps the identity/outcome attributes
every dashboard relies on, runs the stage body and closes the span on every
exit path. Failures raised by the body are classified and returned as part of
a ``StageResult`` instead of propagating, so the caller decides per stage
whether a failure is fatal.
"""

from __future__ import annotations

import dataclasses
import inspect
import time
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

from traceguard import __version__
from traceguard.config.settings import Settings
from traceguard.errors.taxonomy import classify, hints_from_exception
from traceguard.exceptions import MissingStageAttributesError
from traceguard.models.domain import (
    ErrorClassification,
    Stage,
    StageOutcome,
    StageStatus,
)
from traceguard.models.schemas import AskRequest
from traceguard.observability.logger import get_logger
from traceguard.observability.span_attrs import (
    ATTR_DEPLOYMENT_ENV,
    ATTR_ERROR_CODE,
    ATTR_ERROR_MESSAGE,
    ATTR_ERROR_TYPE,
    ATTR_REQUEST_ID,
    ATTR_SERVICE_NAME,
    ATTR_STAGE,
    ATTR_STATUS,
    ATTR_TENANT_ID,
    REQUEST_SPAN,
    REQUEST_STAGE,
    StageAttrs,
    span_name,
)

logger = get_logger("tracing")

T = TypeVar("T")

TRACER_NAME = "traceguard.core"


@dataclass(frozen=True)
class StageResult(Generic[T]):
    outcome: StageOutcome
    value: T | None = None

    @property
    def failed(self) -> bool:
        return self.outcome.status == StageStatus.ERROR

    @property
    def error(self) -> ErrorClassification | None:
        return self.outcome.error


def _set_error_attrs(span: Span, error: ErrorClassification) -> None:
    span.set_attribute(ATTR_ERROR_TYPE, error.type.value)
    span.set_attribute(ATTR_ERROR_CODE, error.code.value)
    span.set_attribute(ATTR_ERROR_MESSAGE, error.message)


class _SpanScope:
    """Shared identity/status bookkeeping for stage and request spans."""

    def __init__(
        self,
        span: Span,
        request: AskRequest,
        stage_name: str,
        service_name: str,
        environment: str,
    ) -> None:
        self.span = span
        self.request = request
        self.stage_name = stage_name
        self.status = StageStatus.OK
        self.error: ErrorClassification | None = None
        self._service_name = service_name
        self._environment = environment
        self._set_mandatory()

    def _set_mandatory(self) -> None:
        self.span.set_attribute(ATTR_REQUEST_ID, self.request.request_id)
        self.span.set_attribute(ATTR_TENANT_ID, self.request.tenant_id)
        self.span.set_attribute(ATTR_STAGE, self.stage_name)
        self.span.set_attribute(ATTR_STATUS, self.status.value)
        self.span.set_attribute(ATTR_SERVICE_NAME, self._service_name)
        self.span.set_attribute(ATTR_DEPLOYMENT_ENV, self._environment)

    def update_status(
        self, status: StageStatus, error: ErrorClassification | None = None
    ) -> None:
        self.status = status
        if error is not None:
            self.error = error
            _set_error_attrs(self.span, error)
        self.span.set_attribute(ATTR_STATUS, status.value)
        if status == StageStatus.ERROR:
            message = self.error.message if self.error else "error"
            self.span.set_status(Status(StatusCode.ERROR, message))

    @property
    def trace_id(self) -> str | None:
        ctx = self.span.get_span_context()
        return format(ctx.trace_id, "032x") if ctx.is_valid else None

    @property
    def span_id(self) -> str | None:
        ctx = self.span.get_span_context()
        return format(ctx.span_id, "016x") if ctx.is_valid else None


class StageScope(_SpanScope):
    """Handle given to a stage body to refine its span while it runs."""

    def __init__(self, span: Span, request: AskRequest, attrs: StageAttrs, **kwargs) -> None:
        super().__init__(span, request, attrs.stage.value, **kwargs)
        self.attrs = attrs
        span.set_attributes(attrs.span_attributes())

    @property
    def stage(self) -> Stage:
        return self.attrs.stage

    def update_attrs(self, **changes) -> None:
        self.attrs = dataclasses.replace(self.attrs, **changes)
        self.span.set_attributes(self.attrs.span_attributes())

    def mark_degraded(self, error: ErrorClassification | None = None) -> None:
        self.update_status(StageStatus.DEGRADED, error)


class RequestScope(_SpanScope):
    """Root ``core.request`` span handle."""

    def finish(self, status: StageStatus, error: ErrorClassification | None) -> None:
        self.update_status(status, error)


StageWork = Callable[[StageScope], Union[T, Awaitable[T]]]


class StageTracer:
    def __init__(
        self,
        service_name: str,
        environment: str,
        validate_attrs: bool = True,
        tracer: trace.Tracer | None = None,
    ) -> None:
        self._service_name = service_name
        self._environment = environment
        self._validate_attrs = validate_attrs
        self._tracer = tracer or trace.get_tracer(TRACER_NAME, __version__)

    @classmethod
    def from_settings(
        cls, settings: Settings, tracer: trace.Tracer | None = None
    ) -> StageTracer:
        return cls(
            service_name=settings.service_name,
            environment=settings.environment,
            validate_attrs=not settings.is_production,
            tracer=tracer,
        )

    @contextmanager
    def request_span(self, request: AskRequest) -> Iterator[RequestScope]:
        with self._tracer.start_as_current_span(REQUEST_SPAN) as span:
            yield RequestScope(
                span,
                request,
                REQUEST_STAGE,
                service_name=self._service_name,
                environment=self._environment,
            )

    async def run_stage(
        self, request: AskRequest, attrs: StageAttrs, work: StageWork
    ) -> StageResult:
        stage = attrs.stage
        if self._validate_attrs:
            missing = attrs.missing()
            if missing:
                logger.error("stage_attrs_missing", stage=stage.value, missing=missing)
                raise MissingStageAttributesError(stage.value, missing)

        start = time.perf_counter()
        span = self._tracer.start_span(span_name(stage))
        value = None
        try:
            with trace.use_span(span, end_on_exit=False):
                scope = StageScope(
                    span,
                    request,
                    attrs,
                    service_name=self._service_name,
                    environment=self._environment,
                )
                try:
                    value = work(scope)
                    if inspect.isawaitable(value):
                        value = await value
                except Exception as exc:
                    value = None
                    span.record_exception(exc)
                    scope.update_status(
                        StageStatus.ERROR, classify(stage, exc, hints_from_exception(exc))
                    )
                    logger.warning(
                        "stage_failed",
                        stage=stage.value,
                        error_type=scope.error.type.value,
                        error_code=scope.error.code.value,
                        error=scope.error.message,
                    )
            latency_ms = (time.perf_counter() - start) * 1000
            span.set_attribute("latency_ms", round(latency_ms, 2))
        finally:
            span.end()

        outcome = StageOutcome(
            stage=stage,
            status=scope.status,
            latency_ms=latency_ms,
            error=scope.error,
        )
        logger.info(
            "stage_completed",
            stage=stage.value,
            status=scope.status.value,
            latency_ms=round(latency_ms, 2),
        )
        return StageResult(outcome=outcome, value=value)
