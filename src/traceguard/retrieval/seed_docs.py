"""Demo knowledge base: short documents about observability and answer quality."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SeedDocument:
    id: int
    text: str
    source: str


DEMO_DOCUMENTS: list[SeedDocument] = [
    SeedDocument(
        1,
        "Observability is the ability to understand the internal state of a system "
        "from the telemetry it emits. The three classic signals are traces, metrics and logs.",
        "observability-basics",
    ),
    SeedDocument(
        2,
        "OpenTelemetry is an open-source observability framework that provides APIs, SDKs "
        "and tools to generate, collect and export traces, metrics and logs in a vendor-neutral way.",
        "opentelemetry-basics",
    ),
    SeedDocument(
        3,
        "A trace records the path of a single request through a distributed system. "
        "Each trace is made of spans, and each span represents one unit of work with a start, "
        "an end and a set of attributes.",
        "tracing-spans",
    ),
    SeedDocument(
        4,
        "Span attributes are key-value pairs attached to a span. Consistent attribute names "
        "such as request_id, tenant_id and stage make traces searchable and let dashboards "
        "group requests reliably.",
        "span-attributes",
    ),
    SeedDocument(
        5,
        "A service level objective (SLO) is a target for the share of requests that succeed "
        "within a latency budget. Degraded responses still count as served but are tracked "
        "separately from hard errors.",
        "slo-basics",
    ),
    SeedDocument(
        6,
        "Hallucination in language model answers means content that is not supported by the "
        "retrieved context. Comparing the answer against the context with token overlap is a "
        "cheap, deterministic way to estimate faithfulness.",
        "hallucination-detection",
    ),
    SeedDocument(
        7,
        "Remediation replaces or annotates a low quality answer. Typical actions are a safety "
        "refusal for risky content, a fallback notice when a tool fails and a clarification "
        "request when answer quality is low.",
        "remediation-actions",
    ),
    SeedDocument(
        8,
        "Retrieval-augmented generation retrieves relevant documents for a query and passes "
        "them to the language model as context so the answer can be grounded in known facts.",
        "rag-overview",
    ),
]
