"""Structured logging configuration for the Nutanix Cluster Operator.

Every resource event is written as one JSON line so that log pipelines can
index NutanixCluster reconciles by name, namespace and uid. Prism Central
credentials never reach the log stream: see sanitize_secrets.
"""

import json
import logging
import sys
from typing import Any

CONTROLLER_NAME = "nutanix-cluster-operator"


def setup_structured_logging(level: int = logging.INFO) -> None:
    """Configure structured JSON logging."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_resource_event(
    logger: logging.Logger,
    controller: str,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured resource event."""
    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": message,
    }
    log_data.update(kwargs)
    logger.log(level, json.dumps(sanitize_secrets(log_data), default=str))


SECRET_FIELDS = frozenset({"username", "password", "credentials", "token", "authorization"})
REDACTED = "***REDACTED***"


def sanitize_secrets(log_data: dict[str, Any]) -> dict[str, Any]:
    """Remove secret fields from log data.

    Redaction applies at any depth, so the decoded ``credentials`` entry of
    a Prism Central Secret (a list of basic_auth entries carrying
    ``data.prismCentral.username`` and ``password``) is masked wherever it
    appears in the extra fields of an event.
    """
    return {key: _sanitize_value(key, value) for key, value in log_data.items()}


def _sanitize_value(key: str, value: Any) -> Any:
    if key.lower() in SECRET_FIELDS:
        return REDACTED
    if isinstance(value, dict):
        return sanitize_secrets(value)
    if isinstance(value, list):
        return [sanitize_secrets(item) if isinstance(item, dict) else item for item in value]
    return value
