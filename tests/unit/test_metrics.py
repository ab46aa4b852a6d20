"""Tests for the metrics registry."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from traceguard.observability import metrics as m


def test_counter_increment(metrics):
    metrics.increment(m.REQUESTS, 1, {"tenant": "t1", "status": "OK"})
    metrics.increment(m.REQUESTS, 2, {"tenant": "t1", "status": "OK"})
    value = metrics.registry.get_sample_value(
        "traceguard_requests_total", {"tenant": "t1", "status": "OK"}
    )
    assert value == 3.0


def test_histogram_observe(metrics):
    metrics.observe(m.STAGE_LATENCY_MS, 12.5, {"stage": "tool", "status": "OK"})
    labels = {"stage": "tool", "status": "OK"}
    assert metrics.registry.get_sample_value("traceguard_stage_latency_ms_count", labels) == 1.0
    assert metrics.registry.get_sample_value("traceguard_stage_latency_ms_sum", labels) == 12.5


def test_missing_tags_default_to_empty(metrics):
    metrics.increment(m.COST_USD, 0.5)
    assert metrics.registry.get_sample_value("traceguard_llm_cost_usd_total", {"tenant": ""}) == 0.5


def test_unknown_metric_or_tag_rejected(metrics):
    with pytest.raises(KeyError):
        metrics.increment("does_not_exist")
    with pytest.raises(KeyError):
        metrics.observe(m.REQUESTS, 1.0)
    with pytest.raises(KeyError):
        metrics.increment(m.REQUESTS, 1, {"region": "eu"})


def test_concurrent_increments_are_not_lost(metrics):
    def bump(_):
        metrics.increment(m.STAGE_ERRORS, 1, {"stage": "tool", "code": "TOOL_TIMEOUT"})

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(bump, range(500)))

    value = metrics.registry.get_sample_value(
        "traceguard_stage_errors_total", {"stage": "tool", "code": "TOOL_TIMEOUT"}
    )
    assert value == 500.0


def test_render_prometheus_text(metrics):
    metrics.increment(m.REMEDIATIONS, 1, {"tenant": "t1", "action": "SAFE_MODE"})
    content_type, payload = metrics.render()
    assert content_type.startswith("text/plain")
    assert b"traceguard_remediations_total" in payload


def test_default_registry_is_shared():
    assert m.get_metrics() is m.get_metrics()
