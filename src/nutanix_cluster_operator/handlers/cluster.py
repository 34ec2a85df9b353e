"""Handler for NutanixCluster CRD."""

from __future__ import annotations

from typing import Any, Callable

import kopf

from ..builders.cluster import create_cluster_from_body
from ..config import OperatorConfig, load_config
from ..constants import (
    API_GROUP_VERSION,
    CONFLICT_RETRY_DELAY,
    DANGLING_REFERENCE_RETRY_DELAY,
    KIND_NUTANIX_CLUSTER,
)
from ..reconcilers import ClusterReconciler, DanglingReferenceError, ReconcileResult
from ..services.kube.store import ConflictError, ObjectStore
from ..utils.errors import sanitize_exception
from ..utils.events import (
    emit_failure_domains_reconciled,
    emit_reference_finalizer_added,
    emit_reference_finalizer_removed,
)
from .base import BaseHandler
from .shared import get_object_store


class NutanixClusterHandler(BaseHandler):
    """Handler for NutanixCluster resources."""

    def __init__(
        self,
        store_factory: Callable[[], ObjectStore] | None = None,
        operator_config: OperatorConfig | None = None,
    ):
        """Initialize cluster handler.

        Args:
            store_factory: Builds the object store for one invocation
            operator_config: Operator settings, loaded from the environment when omitted
        """
        super().__init__(KIND_NUTANIX_CLUSTER)
        self._config = operator_config
        self._store_factory = store_factory

    @property
    def config(self) -> OperatorConfig:
        if self._config is None:
            self._config = load_config()
        return self._config

    def _new_reconciler(self) -> ClusterReconciler:
        store = self._store_factory() if self._store_factory is not None else get_object_store(self.config)
        return ClusterReconciler(store, self.config)

    def _run(self, body: dict[str, Any], fn: Callable[[], ReconcileResult]) -> ReconcileResult:
        """Run a reconcile step, turning retryable failures into kopf temporary errors."""
        meta = body.get("metadata", {})
        try:
            return self.reconcile_with_metrics(body, fn)
        except ConflictError as e:
            self.log_info(meta, "Object changed concurrently, retrying", reason="Conflict")
            raise kopf.TemporaryError(sanitize_exception(e), delay=CONFLICT_RETRY_DELAY) from e
        except DanglingReferenceError as e:
            self.log_warning(meta, sanitize_exception(e), reason="DanglingReference")
            raise kopf.TemporaryError(sanitize_exception(e), delay=DANGLING_REFERENCE_RETRY_DELAY) from e

    def reconcile(
        self,
        body: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> ReconcileResult:
        """Reconcile NutanixCluster resource."""
        meta = body.get("metadata", {})
        cluster = create_cluster_from_body(body)
        previous_domains = dict((status or {}).get("failureDomains") or {})

        def _reconcile() -> ReconcileResult:
            reconciler = self._new_reconciler()
            try:
                return reconciler.reconcile_normal(cluster)
            finally:
                # Conditions set on failure are persisted too
                self.update_resource_status(patch, status, cluster.status.to_dict(), cluster.status.ready)

        result = self._run(body, _reconcile)

        for ref in result.registered:
            emit_reference_finalizer_added(body, ref.kind, f"{ref.namespace}/{ref.name}")
        if cluster.status.failure_domains and cluster.status.failure_domains != previous_domains:
            emit_failure_domains_reconciled(body, len(cluster.status.failure_domains))

        self.log_info(meta, "Cluster reconciled", event="reconciled", reason="Reconciled", ready=cluster.status.ready)
        return result

    def delete(self, body: dict[str, Any]) -> ReconcileResult:
        """Handle NutanixCluster resource deletion.

        Raising keeps kopf's finalizer on the cluster, so it is only removed
        once every shared object has been released.
        """
        meta = body.get("metadata", {})
        cluster = create_cluster_from_body(body)
        self.log_info(meta, "NutanixCluster is being deleted", event="deletion", reason="Deletion")

        result = self._run(body, lambda: self._new_reconciler().reconcile_delete(cluster))

        for ref in result.released:
            emit_reference_finalizer_removed(body, ref.kind, f"{ref.namespace}/{ref.name}")
        return result


# Global handler instance
_handler = NutanixClusterHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_NUTANIX_CLUSTER)
@kopf.on.update(API_GROUP_VERSION, KIND_NUTANIX_CLUSTER)
@kopf.on.resume(API_GROUP_VERSION, KIND_NUTANIX_CLUSTER)
def handle_nutanix_cluster(
    body: kopf.Body,
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle NutanixCluster resource reconciliation."""
    _handler.reconcile(dict(body), dict(status or {}), patch)


@kopf.on.delete(API_GROUP_VERSION, KIND_NUTANIX_CLUSTER)
def handle_nutanix_cluster_delete(
    body: kopf.Body,
    **kwargs: Any,
) -> None:
    """Handle NutanixCluster resource deletion."""
    _handler.delete(dict(body))
