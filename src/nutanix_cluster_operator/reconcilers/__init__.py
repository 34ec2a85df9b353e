"""Reconciliation logic for NutanixClusters and the objects they share."""

from .cluster import ClusterReconciler, ReconcileResult
from .ownership import (
    DanglingReferenceError,
    SecondaryReference,
    reconcile_credential_ref,
    reconcile_credential_ref_delete,
    reconcile_reference_add,
    reconcile_reference_delete,
    reconcile_trust_bundle_ref,
    reconcile_trust_bundle_ref_delete,
)
from .status import reconcile_failure_domains

__all__ = [
    "ClusterReconciler",
    "ReconcileResult",
    "DanglingReferenceError",
    "SecondaryReference",
    "reconcile_reference_add",
    "reconcile_reference_delete",
    "reconcile_credential_ref",
    "reconcile_credential_ref_delete",
    "reconcile_trust_bundle_ref",
    "reconcile_trust_bundle_ref_delete",
    "reconcile_failure_domains",
]
