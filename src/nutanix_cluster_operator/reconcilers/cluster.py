"""Reconciliation of NutanixCluster objects."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from ..config import OperatorConfig
from ..constants import (
    ANNOTATION_PAUSED,
    REASON_CREDENTIAL_REF_SECRET_OWNER_SET_FAILED,
    REASON_PRISM_CENTRAL_CLIENT_INITIALIZATION_FAILED,
    REASON_TRUST_BUNDLE_SECRET_OWNER_SET_FAILED,
)
from ..models import NutanixCluster
from ..services.kube.store import NotFoundError, ObjectStore
from ..services.prism.credentials import CredentialsError, resolve_prism_client_config
from ..services.prism.tasks import wait_for_task_to_succeed
from ..utils.conditions import (
    set_credential_ref_secret_owner_set_condition,
    set_prism_central_client_condition,
    set_ready_condition,
    set_trust_bundle_secret_owner_set_condition,
)
from ..utils.errors import sanitize_exception
from .ownership import (
    SecondaryReference,
    credential_reference,
    reconcile_credential_ref,
    reconcile_credential_ref_delete,
    reconcile_trust_bundle_ref,
    reconcile_trust_bundle_ref_delete,
    trust_bundle_reference,
)
from .status import reconcile_failure_domains

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""

    registered: list[SecondaryReference] = field(default_factory=list)
    released: list[SecondaryReference] = field(default_factory=list)


class ClusterReconciler:
    """Drives a NutanixCluster's shared references and status toward its spec."""

    def __init__(self, store: ObjectStore, operator_config: OperatorConfig | None = None) -> None:
        self.store = store
        self.config = operator_config or OperatorConfig()

    def reconcile_normal(self, cluster: NutanixCluster) -> ReconcileResult:
        """Reconcile a live cluster.

        Mutates ``cluster.status``; the caller persists it. Store errors
        propagate after the corresponding condition has been set to False.
        """
        result = ReconcileResult()

        if cluster.annotations.get(ANNOTATION_PAUSED) is not None:
            logger.info(f"Cluster {cluster.namespace}/{cluster.name} is paused, skipping")
            return result

        conditions = cluster.status.conditions

        try:
            if reconcile_credential_ref(self.store, cluster):
                result.registered.append(credential_reference(cluster))
        except Exception as e:
            set_credential_ref_secret_owner_set_condition(
                conditions, False, sanitize_exception(e),
                reason=REASON_CREDENTIAL_REF_SECRET_OWNER_SET_FAILED,
                observed_generation=cluster.generation,
            )
            raise
        set_credential_ref_secret_owner_set_condition(
            conditions, True, "Credential reference registered", observed_generation=cluster.generation
        )

        try:
            if reconcile_trust_bundle_ref(self.store, cluster):
                result.registered.append(trust_bundle_reference(cluster))
        except Exception as e:
            set_trust_bundle_secret_owner_set_condition(
                conditions, False, sanitize_exception(e),
                reason=REASON_TRUST_BUNDLE_SECRET_OWNER_SET_FAILED,
                observed_generation=cluster.generation,
            )
            raise
        set_trust_bundle_secret_owner_set_condition(
            conditions, True, "Trust bundle reference registered", observed_generation=cluster.generation
        )

        self._reconcile_prism_central_client(cluster)

        if cluster.status.failure_message or cluster.status.failure_reason:
            logger.info(
                f"Cluster {cluster.namespace}/{cluster.name} has a failure set, not reconciling further"
            )
            return result

        reconcile_failure_domains(cluster)

        if cluster.status.ready:
            return result

        cluster.status.ready = True
        set_ready_condition(conditions, True, "Cluster is ready", observed_generation=cluster.generation)
        return result

    def _reconcile_prism_central_client(self, cluster: NutanixCluster) -> None:
        prism_central = cluster.spec.prism_central
        if prism_central is None or prism_central.credential_ref is None:
            return
        try:
            resolve_prism_client_config(self.store, cluster)
        except (CredentialsError, NotFoundError) as e:
            set_prism_central_client_condition(
                cluster.status.conditions, False, sanitize_exception(e),
                reason=REASON_PRISM_CENTRAL_CLIENT_INITIALIZATION_FAILED,
                observed_generation=cluster.generation,
            )
            raise
        set_prism_central_client_condition(
            cluster.status.conditions, True, "Prism Central client configuration resolved",
            observed_generation=cluster.generation,
        )

    def reconcile_delete(self, cluster: NutanixCluster) -> ReconcileResult:
        """Release every shared object the cluster references.

        Errors propagate so the cluster keeps its own finalizer until the
        shared objects are confirmed updated.
        """
        result = ReconcileResult()
        if reconcile_credential_ref_delete(self.store, cluster):
            result.released.append(credential_reference(cluster, strict=False))
        if reconcile_trust_bundle_ref_delete(self.store, cluster):
            result.released.append(trust_bundle_reference(cluster, strict=False))
        return result

    async def wait_for_task(self, cluster: NutanixCluster, task_uuid: str, timeout: float | None) -> None:
        """Wait for a Prism Central task issued on behalf of the cluster.

        Opens a client from the cluster's credentials and trust bundle and
        closes it once the wait ends, whatever the outcome.

        Raises:
            CredentialsError: If the client configuration cannot be resolved
            TaskWaitTimeoutError: If the task is still running after timeout seconds
            TaskFailedError: If the task failed
        """
        client_config = await asyncio.to_thread(resolve_prism_client_config, self.store, cluster)
        async with client_config.create_client(timeout=self.config.prism_request_timeout) as client:
            await wait_for_task_to_succeed(
                client,
                task_uuid,
                timeout=timeout,
                poll_interval=self.config.task_poll_interval,
            )
