"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Service identity
    service_name: str = "traceguard-api"
    environment: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Telemetry
    otel_console_export: bool = False

    # Retrieval
    retrieval_provider: Literal["memory", "qdrant"] = "memory"
    qdrant_url: str = "http://localhost:6333"
    qdrant_collection: str = "traceguard_demo"
    qdrant_scroll_limit: int = 100
    qdrant_timeout_s: float = 10.0
    top_k: int = 3

    # LLM
    llm_provider: Literal["mock", "gemini"] = "mock"
    google_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.2
    gemini_max_tokens: int = 1024

    # Tools
    tool_provider: Literal["static", "http"] = "static"
    tool_name: str = "mock.weather"
    tool_url: str = ""
    tool_timeout_ms: int = 2000

    # Evaluation weights (faithfulness, relevance, safety, accuracy)
    eval_w_faithfulness: float = 0.3
    eval_w_relevance: float = 0.3
    eval_w_policy_risk: float = 0.2
    eval_w_hallucination: float = 0.2

    # Remediation
    remediation_trigger: Literal["overall", "faithfulness"] = "overall"
    quality_threshold: float = 0.75
    faithfulness_threshold: float = 0.8
    policy_risk_threshold: float = 0.7

    # Stage toggles
    enable_retrieval: bool = True
    enable_tools: bool = True
    enable_remediation: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = {"env_file": ".env", "env_prefix": "TRACEGUARD_"}

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("prod", "production")
