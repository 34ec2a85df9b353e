"""Main entry point for the Nutanix Cluster Operator."""

from __future__ import annotations

import logging
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .config import load_config
from .constants import FINALIZER_CLUSTER
from .utils.rate_limit import configure_rate_limit

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    # Set up structured JSON logging
    structured_logging.setup_structured_logging()

    operator_config = load_config()

    # Use annotations so progress bookkeeping never competes with status writes
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()
    settings.persistence.finalizer = FINALIZER_CLUSTER

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = operator_config.k8s_request_timeout
    settings.execution.max_workers = operator_config.max_concurrent_reconciles

    configure_rate_limit(operator_config.k8s_rate_limit_per_second)

    # Start metrics HTTP server with health check endpoints
    health.start_http_server(operator_config.metrics_port)
    logger.info(f"Operator configured: {operator_config}")


def main() -> None:
    """Run the operator against all namespaces."""
    kopf.run(clusterwide=True)


if __name__ == "__main__":
    main()
