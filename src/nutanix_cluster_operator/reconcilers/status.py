"""Projection of a cluster's failure domains onto its status."""

from __future__ import annotations

from typing import Any

from ..models import FailureDomain, NutanixCluster
from ..utils.conditions import (
    set_failure_domains_reconciled_condition,
    set_no_failure_domains_reconciled_condition,
)


def failure_domain_status(failure_domains: list[FailureDomain]) -> dict[str, dict[str, Any]]:
    """Map each declared failure domain name to its status entry."""
    return {fd.name: {"controlPlane": fd.control_plane} for fd in failure_domains}


def reconcile_failure_domains(cluster: NutanixCluster) -> None:
    """Rebuild status.failureDomains and its conditions from the declared domains.

    Mutates ``cluster.status`` only; writing it back is the caller's job.
    Running it again on an unchanged spec leaves the status identical.
    """
    status = cluster.status
    failure_domains = cluster.spec.failure_domains

    if not failure_domains:
        status.failure_domains = {}
        set_no_failure_domains_reconciled_condition(status.conditions, cluster.generation)
        return

    status.failure_domains = failure_domain_status(failure_domains)
    set_failure_domains_reconciled_condition(status.conditions, cluster.generation)
