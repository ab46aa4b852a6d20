"""Pipeline orchestrator: retrieval → tool → generation → evaluation → remediation.

Each stage runs through ``StageTracer.run_stage`` and comes back as a
``StageResult``. What happens to a failed stage is decided by
``STAGE_FAILURE_POLICY``: contained stages fall back to a degraded value and
the pipeline carries on, fatal stages abort the request.
"""

from __future__ import annotations

import time
from enum import Enum

import structlog

from traceguard.config.settings import Settings
from traceguard.errors.status import dominant_error, resolve_status
from traceguard.errors.taxonomy import ErrorHints, classify
from traceguard.evaluation.evaluator import DeterministicEvaluator, EvalWeights
from traceguard.exceptions import PipelineAbortedError, RetrievalError
from traceguard.generation.prompt_templates import build_prompt
from traceguard.models.domain import (
    EvalScores,
    GenerationOutput,
    RemediationReport,
    RetrievalOutput,
    Stage,
    StageOutcome,
    StageStatus,
    ToolOutput,
)
from traceguard.models.schemas import (
    Artifacts,
    AskRequest,
    AskResponse,
    DebugInfo,
    EvalScoresOut,
    RemediationActionOut,
    RemediationReportOut,
    StageSummary,
    Usage,
)
from traceguard.observability import metrics as m
from traceguard.observability.logger import get_logger
from traceguard.observability.metrics import MetricsRegistry
from traceguard.observability.span_attrs import (
    EvaluationAttrs,
    GenerationAttrs,
    RemediationAttrs,
    RetrievalAttrs,
    ToolAttrs,
)
from traceguard.observability.tracing import RequestScope, StageResult, StageScope, StageTracer
from traceguard.pipeline.chaos import apply_chaos
from traceguard.protocols.llm import Generator
from traceguard.protocols.retriever import Retriever
from traceguard.protocols.tool import Tool
from traceguard.remediation.policy import (
    NO_REMEDIATION,
    RemediationThresholds,
    apply_remediation,
    remediate,
)

logger = get_logger("orchestrator")


class FailurePolicy(str, Enum):
    CONTAIN = "contain"
    FATAL = "fatal"


STAGE_FAILURE_POLICY: dict[Stage, FailurePolicy] = {
    Stage.RETRIEVAL: FailurePolicy.CONTAIN,
    Stage.TOOL: FailurePolicy.CONTAIN,
    Stage.GENERATION: FailurePolicy.FATAL,
    Stage.EVALUATION: FailurePolicy.CONTAIN,
    Stage.REMEDIATION: FailurePolicy.CONTAIN,
}

EMPTY_RETRIEVAL = RetrievalOutput(context="", docs=0)

NEUTRAL_SCORES = EvalScores(
    faithfulness=0.5,
    relevance=0.5,
    policy_risk=0.1,
    hallucination=0.3,
    overall=0.5,
    reasons=["Evaluation engine failure"],
)


class AskPipeline:
    def __init__(
        self,
        retriever: Retriever,
        generator: Generator,
        tool: Tool,
        tracer: StageTracer,
        metrics: MetricsRegistry,
        settings: Settings,
        evaluator: DeterministicEvaluator | None = None,
    ) -> None:
        self._retriever = retriever
        self._generator = generator
        self._tool = tool
        self._tracer = tracer
        self._metrics = metrics
        self._settings = settings
        self._evaluator = evaluator or DeterministicEvaluator(EvalWeights.from_settings(settings))
        self._thresholds = RemediationThresholds.from_settings(settings)

    async def execute(self, request: AskRequest) -> AskResponse:
        start = time.perf_counter()
        retriever, tool, generator = apply_chaos(
            request.chaos, self._retriever, self._tool, self._generator
        )
        outcomes: list[StageOutcome] = []

        with structlog.contextvars.bound_contextvars(
            request_id=request.request_id, tenant_id=request.tenant_id
        ), self._tracer.request_span(request) as root:
            # STEP 1: Retrieval
            retrieval = EMPTY_RETRIEVAL
            if self._settings.enable_retrieval:
                result = await self._run_retrieval(request, retriever)
                self._record(outcomes, result, root, request, start)
                retrieval = result.value if not result.failed else EMPTY_RETRIEVAL

            # STEP 2: Tool invocation
            tool_failed = False
            tool_output: ToolOutput | None = None
            if self._settings.enable_tools:
                result = await self._run_tool(request, tool)
                self._record(outcomes, result, root, request, start)
                tool_failed = result.failed
                tool_output = result.value

            # STEP 3: Generation
            result = await self._run_generation(request, generator, retrieval.context)
            self._record(outcomes, result, root, request, start)
            generation: GenerationOutput = result.value

            # STEP 4: Evaluation
            result = await self._run_evaluation(request, retrieval.context, generation.text)
            self._record(outcomes, result, root, request, start)
            scores: EvalScores = result.value if not result.failed else NEUTRAL_SCORES

            # STEP 5: Remediation
            report = NO_REMEDIATION
            remediation_succeeded = True
            if self._settings.enable_remediation:
                result = await self._run_remediation(request, scores, tool_failed)
                self._record(outcomes, result, root, request, start)
                remediation_succeeded = not result.failed
                report = result.value if remediation_succeeded else NO_REMEDIATION

            # STEP 6: Resolve status and assemble the response
            answer = apply_remediation(generation.text, report, request.input_text)
            status = resolve_status(
                outcomes,
                remediation_triggered=report.triggered,
                remediation_succeeded=remediation_succeeded,
                has_usable_response=bool(answer.strip()),
            )
            root_error = dominant_error(outcomes)
            root.finish(status, root_error)
            latency_ms = (time.perf_counter() - start) * 1000

            self._emit_request_metrics(request, status, latency_ms, generation, scores, report)
            logger.info(
                "request_completed",
                status=status.value,
                latency_ms=round(latency_ms, 2),
                remediation=report.primary_action.type.value if report.primary_action else None,
                error_code=root_error.code.value if root_error else None,
            )

            return AskResponse(
                request_id=request.request_id,
                tenant_id=request.tenant_id,
                status=status.value,
                answer=answer,
                usage=Usage(
                    tokens_in=generation.input_tokens,
                    tokens_out=generation.output_tokens,
                    total_tokens=generation.total_tokens,
                    cost_usd=generation.cost_usd,
                ),
                eval=EvalScoresOut(
                    faithfulness=scores.faithfulness,
                    relevance=scores.relevance,
                    policy_risk=scores.policy_risk,
                    hallucination=scores.hallucination,
                    overall=scores.overall,
                    reasons=list(scores.reasons),
                ),
                remediation=RemediationReportOut(
                    triggered=report.triggered,
                    actions=[
                        RemediationActionOut(type=a.type.value, reason=a.reason)
                        for a in report.actions
                    ],
                    final_mode=report.final_mode.value,
                ),
                artifacts=Artifacts(
                    sources=list(retrieval.sources),
                    tool_results=[tool_output.result] if tool_output else [],
                ),
                debug=DebugInfo(
                    trace_id=root.trace_id,
                    span_id=root.span_id,
                    latency_ms=round(latency_ms, 2),
                    stages=[
                        StageSummary(
                            stage=o.stage.value,
                            status=o.status.value,
                            latency_ms=round(o.latency_ms, 2),
                            error_code=o.error.code.value if o.error else None,
                        )
                        for o in outcomes
                    ],
                ),
            )

    async def aclose(self) -> None:
        """Release HTTP clients held by remote collaborators."""
        for collaborator in (self._retriever, self._tool):
            close = getattr(collaborator, "aclose", None)
            if close is not None:
                await close()

    async def _run_retrieval(self, request: AskRequest, retriever: Retriever) -> StageResult:
        top_k = self._settings.top_k
        attrs = RetrievalAttrs(
            provider=retriever.provider,
            top_k=top_k,
            docs_count=0,
            query_length=len(request.input_text),
        )

        async def work(scope: StageScope) -> RetrievalOutput:
            output = await retriever.retrieve(request.input_text, top_k)
            scope.update_attrs(docs_count=output.docs)
            if output.docs == 0:
                scope.mark_degraded(
                    classify(
                        Stage.RETRIEVAL,
                        RetrievalError("Retrieval returned no documents"),
                        ErrorHints(empty_result=True),
                    )
                )
            return output

        return await self._tracer.run_stage(request, attrs, work)

    async def _run_tool(self, request: AskRequest, tool: Tool) -> StageResult:
        attrs = ToolAttrs(name=tool.name, attempt=1, timeout_ms=tool.timeout_ms, result="SUCCESS")

        async def work(scope: StageScope) -> ToolOutput:
            try:
                return await tool.invoke()
            except Exception:
                scope.update_attrs(result="FAILURE")
                raise

        return await self._tracer.run_stage(request, attrs, work)

    async def _run_generation(
        self, request: AskRequest, generator: Generator, context: str
    ) -> StageResult:
        attrs = GenerationAttrs(
            provider=generator.provider,
            model=generator.model,
            tokens_input=0,
            tokens_output=0,
            tokens_total=0,
            cost_usd=0.0,
        )

        async def work(scope: StageScope) -> GenerationOutput:
            output = await generator.generate(build_prompt(request.input_text, context))
            scope.update_attrs(
                tokens_input=output.input_tokens,
                tokens_output=output.output_tokens,
                tokens_total=output.total_tokens,
                cost_usd=output.cost_usd,
            )
            return output

        return await self._tracer.run_stage(request, attrs, work)

    async def _run_evaluation(self, request: AskRequest, context: str, answer: str) -> StageResult:
        # Seeded with the fallback scores so a failed span shows what the pipeline used.
        attrs = EvaluationAttrs(
            faithfulness=NEUTRAL_SCORES.faithfulness,
            relevance=NEUTRAL_SCORES.relevance,
            policy_risk=NEUTRAL_SCORES.policy_risk,
            hallucination=NEUTRAL_SCORES.hallucination,
            overall=NEUTRAL_SCORES.overall,
        )

        def work(scope: StageScope) -> EvalScores:
            scores = self._evaluator.evaluate(request.input_text, context, answer)
            scope.update_attrs(
                faithfulness=scores.faithfulness,
                relevance=scores.relevance,
                policy_risk=scores.policy_risk,
                hallucination=scores.hallucination,
                overall=scores.overall,
            )
            return scores

        return await self._tracer.run_stage(request, attrs, work)

    async def _run_remediation(
        self, request: AskRequest, scores: EvalScores, tool_failed: bool
    ) -> StageResult:
        attrs = RemediationAttrs(triggered=False, action="NONE", reason="")

        def work(scope: StageScope) -> RemediationReport:
            report = remediate(scores, tool_failed, self._thresholds)
            action = report.primary_action
            if action is not None:
                scope.update_attrs(triggered=True, action=action.type.value, reason=action.reason)
                scope.mark_degraded()
            return report

        return await self._tracer.run_stage(request, attrs, work)

    def _record(
        self,
        outcomes: list[StageOutcome],
        result: StageResult,
        root: RequestScope,
        request: AskRequest,
        start: float,
    ) -> None:
        """Append a stage outcome, emit its metrics and enforce the failure policy."""
        outcome = result.outcome
        outcomes.append(outcome)
        self._metrics.observe(
            m.STAGE_LATENCY_MS,
            outcome.latency_ms,
            {"stage": outcome.stage.value, "status": outcome.status.value},
        )
        if outcome.error is not None:
            self._metrics.increment(
                m.STAGE_ERRORS, 1, {"stage": outcome.stage.value, "code": outcome.error.code.value}
            )

        if result.failed and STAGE_FAILURE_POLICY[outcome.stage] is FailurePolicy.FATAL:
            root.finish(StageStatus.ERROR, outcome.error)
            latency_ms = (time.perf_counter() - start) * 1000
            tags = {"tenant": request.tenant_id, "status": StageStatus.ERROR.value}
            self._metrics.increment(m.REQUESTS, 1, tags)
            self._metrics.observe(m.REQUEST_LATENCY_MS, latency_ms, tags)
            logger.error(
                "pipeline_aborted",
                stage=outcome.stage.value,
                error_code=outcome.error.code.value,
                error=outcome.error.message,
            )
            raise PipelineAbortedError(outcome.stage, outcome.error)

    def _emit_request_metrics(
        self,
        request: AskRequest,
        status: StageStatus,
        latency_ms: float,
        generation: GenerationOutput,
        scores: EvalScores,
        report: RemediationReport,
    ) -> None:
        tenant = request.tenant_id
        tags = {"tenant": tenant, "status": status.value}
        self._metrics.increment(m.REQUESTS, 1, tags)
        self._metrics.observe(m.REQUEST_LATENCY_MS, latency_ms, tags)
        self._metrics.increment(
            m.TOKENS, generation.input_tokens, {"tenant": tenant, "direction": "input"}
        )
        self._metrics.increment(
            m.TOKENS, generation.output_tokens, {"tenant": tenant, "direction": "output"}
        )
        self._metrics.increment(m.COST_USD, generation.cost_usd, {"tenant": tenant})
        for dimension in ("faithfulness", "relevance", "policy_risk", "hallucination", "overall"):
            self._metrics.observe(m.EVAL_SCORE, getattr(scores, dimension), {"dimension": dimension})
        if report.primary_action is not None:
            self._metrics.increment(
                m.REMEDIATIONS, 1, {"tenant": tenant, "action": report.primary_action.type.value}
            )
