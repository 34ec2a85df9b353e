"""Utility functions for the Nutanix Cluster Operator."""

from .conditions import (
    is_condition_true,
    remove_condition,
    set_ready_condition,
    update_condition,
)
from .events import emit_event
from .finalizers import (
    add_finalizer,
    cluster_credential_finalizer,
    contains_finalizer,
    remove_finalizer,
)
from .rate_limit import handle_rate_limit_error, rate_limit_k8s

__all__ = [
    "update_condition",
    "remove_condition",
    "is_condition_true",
    "set_ready_condition",
    "emit_event",
    "add_finalizer",
    "remove_finalizer",
    "contains_finalizer",
    "cluster_credential_finalizer",
    "rate_limit_k8s",
    "handle_rate_limit_error",
]
