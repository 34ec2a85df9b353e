"""Environment-driven configuration for the Nutanix Cluster Operator."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class OperatorConfig:
    """Runtime settings for the operator process."""

    max_concurrent_reconciles: int = 10
    metrics_port: int = 8080
    task_poll_interval: float = 0.1
    k8s_request_timeout: float = 30.0
    k8s_rate_limit_per_second: float = 10.0
    prism_request_timeout: float = 30.0


def _read_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _read_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_config() -> OperatorConfig:
    """Load operator configuration from environment variables.

    Environment Variables:
        MAX_CONCURRENT_RECONCILES: Worker pool size for handlers (default: 10)
        METRICS_PORT: Port for /metrics, /healthz and /readyz (default: 8080)
        TASK_POLL_INTERVAL_SECONDS: Prism task poll interval (default: 0.1)
        K8S_REQUEST_TIMEOUT_SECONDS: Kubernetes API request timeout (default: 30)
        K8S_RATE_LIMIT_PER_SECOND: Kubernetes API call rate (default: 10)
        PRISM_REQUEST_TIMEOUT_SECONDS: Prism Central request timeout (default: 30)

    Raises:
        ValueError: If a variable is set to a non-numeric or non-positive value
    """
    return OperatorConfig(
        max_concurrent_reconciles=_read_int("MAX_CONCURRENT_RECONCILES", 10),
        metrics_port=_read_int("METRICS_PORT", 8080),
        task_poll_interval=_read_float("TASK_POLL_INTERVAL_SECONDS", 0.1),
        k8s_request_timeout=_read_float("K8S_REQUEST_TIMEOUT_SECONDS", 30.0),
        k8s_rate_limit_per_second=_read_float("K8S_RATE_LIMIT_PER_SECOND", 10.0),
        prism_request_timeout=_read_float("PRISM_REQUEST_TIMEOUT_SECONDS", 30.0),
    )
