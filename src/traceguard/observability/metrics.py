"""Process-wide metrics registry backed by prometheus_client.

The pipeline only ever *writes* metrics through ``increment`` and ``observe``;
nothing in the core reads them back. prometheus_client collectors guard their
values with a lock, so concurrent increments are never lost.
"""

from __future__ import annotations

from dataclasses import dataclass

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REQUESTS = "requests"
TOKENS = "tokens"
COST_USD = "cost_usd"
REQUEST_LATENCY_MS = "request_latency_ms"
STAGE_LATENCY_MS = "stage_latency_ms"
STAGE_ERRORS = "stage_errors"
REMEDIATIONS = "remediations"
EVAL_SCORE = "eval_score"

_LATENCY_BUCKETS_MS = (5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000)
_SCORE_BUCKETS = (0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.75, 0.8, 0.9, 1.0)


@dataclass(frozen=True)
class _MetricDef:
    kind: str  # "counter" | "histogram"
    prom_name: str
    description: str
    labels: tuple[str, ...]
    buckets: tuple[float, ...] = ()


METRIC_DEFS: dict[str, _MetricDef] = {
    REQUESTS: _MetricDef(
        "counter", "traceguard_requests", "Requests handled by the orchestrator", ("tenant", "status")
    ),
    TOKENS: _MetricDef(
        "counter", "traceguard_llm_tokens", "Tokens consumed by generation", ("tenant", "direction")
    ),
    COST_USD: _MetricDef(
        "counter", "traceguard_llm_cost_usd", "Estimated generation cost in USD", ("tenant",)
    ),
    REQUEST_LATENCY_MS: _MetricDef(
        "histogram",
        "traceguard_request_latency_ms",
        "End-to-end pipeline latency in ms",
        ("tenant", "status"),
        _LATENCY_BUCKETS_MS,
    ),
    STAGE_LATENCY_MS: _MetricDef(
        "histogram",
        "traceguard_stage_latency_ms",
        "Per-stage latency in ms",
        ("stage", "status"),
        _LATENCY_BUCKETS_MS,
    ),
    STAGE_ERRORS: _MetricDef(
        "counter", "traceguard_stage_errors", "Classified stage failures", ("stage", "code")
    ),
    REMEDIATIONS: _MetricDef(
        "counter", "traceguard_remediations", "Remediation actions applied", ("tenant", "action")
    ),
    EVAL_SCORE: _MetricDef(
        "histogram",
        "traceguard_eval_score",
        "Evaluator scores (0-1)",
        ("dimension",),
        _SCORE_BUCKETS,
    ),
}


class MetricsRegistry:
    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry(auto_describe=True)
        self._collectors: dict[str, Counter | Histogram] = {}
        for name, metric in METRIC_DEFS.items():
            if metric.kind == "counter":
                collector = Counter(
                    metric.prom_name, metric.description, labelnames=metric.labels, registry=self.registry
                )
            else:
                collector = Histogram(
                    metric.prom_name,
                    metric.description,
                    labelnames=metric.labels,
                    buckets=metric.buckets,
                    registry=self.registry,
                )
            self._collectors[name] = collector

    def increment(self, name: str, value: float = 1.0, tags: dict[str, str] | None = None) -> None:
        collector = self._labelled(name, "counter", tags)
        collector.inc(value)

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        collector = self._labelled(name, "histogram", tags)
        collector.observe(value)

    def render(self) -> tuple[str, bytes]:
        """Return (content_type, payload) for a /metrics response."""
        return CONTENT_TYPE_LATEST, generate_latest(self.registry)

    def _labelled(self, name: str, kind: str, tags: dict[str, str] | None):
        metric = METRIC_DEFS.get(name)
        if metric is None or metric.kind != kind:
            raise KeyError(f"Unknown {kind} metric: {name}")
        tags = tags or {}
        unknown = set(tags) - set(metric.labels)
        if unknown:
            raise KeyError(f"Unknown tags for {name}: {sorted(unknown)}")
        values = {label: str(tags.get(label, "")) for label in metric.labels}
        return self._collectors[name].labels(**values)


# Single-process default registry
_default_registry: MetricsRegistry | None = None


def get_metrics() -> MetricsRegistry:
    global _default_registry
    if _default_registry is None:
        _default_registry = MetricsRegistry()
    return _default_registry
