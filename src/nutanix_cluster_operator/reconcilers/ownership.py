"""Finalizer bookkeeping on Secrets and ConfigMaps shared between clusters.

Several NutanixClusters may reference the same credentials Secret or
trust bundle ConfigMap. Each cluster adds its own finalizer token to the
shared object while it references it and removes only that token when it
is deleted, so the object stays protected until the last referencing
cluster is gone. The finalizer list is the reference count; no cluster
ever touches another cluster's token, which is what makes concurrent
reconciliation of different clusters safe. Lost races surface as
ConflictError from the store and the caller retries the whole
fetch-mutate-write sequence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .. import metrics
from ..constants import (
    KIND_CONFIG_MAP,
    KIND_SECRET,
    TRUST_BUNDLE_KIND_CONFIG_MAP,
    TRUST_BUNDLE_KIND_STRING,
)
from ..models import NutanixCluster
from ..services.kube.store import NotFoundError, ObjectStore
from ..utils.finalizers import (
    add_finalizer,
    cluster_credential_finalizer,
    remove_deprecated_finalizer,
    remove_finalizer,
)

logger = logging.getLogger(__name__)


class DanglingReferenceError(ValueError):
    """Raised when a cluster references a Secret or ConfigMap that does not exist."""

    def __init__(self, kind: str, namespace: str, name: str) -> None:
        super().__init__(f"referenced {kind} {namespace}/{name} does not exist")
        self.kind = kind
        self.namespace = namespace
        self.name = name


@dataclass(frozen=True)
class SecondaryReference:
    """Key of a shared object referenced by a cluster."""

    kind: str
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind} {self.namespace}/{self.name}"


def credential_reference(cluster: NutanixCluster, strict: bool = True) -> SecondaryReference | None:
    """Resolve the credentials Secret referenced by the cluster.

    Args:
        cluster: Cluster declaring the reference
        strict: Raise on unsupported kinds instead of ignoring them

    Returns:
        The Secret key, or None if no credentials are referenced

    Raises:
        ValueError: If strict and the reference kind is not Secret
    """
    prism_central = cluster.spec.prism_central
    if prism_central is None or prism_central.credential_ref is None:
        return None
    ref = prism_central.credential_ref
    if not ref.name:
        return None
    if ref.kind != KIND_SECRET:
        if strict:
            raise ValueError(f"unsupported credential reference kind {ref.kind!r}")
        return None
    return SecondaryReference(KIND_SECRET, ref.namespace or cluster.namespace, ref.name)


def trust_bundle_reference(cluster: NutanixCluster, strict: bool = True) -> SecondaryReference | None:
    """Resolve the trust bundle ConfigMap referenced by the cluster.

    Inline (String) bundles have no backing object and resolve to None.

    Raises:
        ValueError: If strict and the bundle kind is neither ConfigMap nor String
    """
    prism_central = cluster.spec.prism_central
    if prism_central is None or prism_central.additional_trust_bundle is None:
        return None
    ref = prism_central.additional_trust_bundle
    if ref.kind == TRUST_BUNDLE_KIND_STRING or not ref.name:
        return None
    if ref.kind not in (TRUST_BUNDLE_KIND_CONFIG_MAP, ""):
        if strict:
            raise ValueError(f"unsupported trust bundle kind {ref.kind!r}")
        return None
    return SecondaryReference(KIND_CONFIG_MAP, ref.namespace or cluster.namespace, ref.name)


def owner_reference_for(cluster: NutanixCluster) -> dict[str, Any]:
    """Build the ownerReferences entry recording the cluster."""
    return {
        "apiVersion": cluster.api_version,
        "kind": cluster.kind,
        "name": cluster.name,
        "uid": cluster.uid,
    }


def _api_group(api_version: str) -> str:
    return api_version.split("/", 1)[0] if "/" in api_version else ""


def _owner_references_of_kind(obj: dict[str, Any], cluster: NutanixCluster) -> list[dict[str, Any]]:
    group = _api_group(cluster.api_version)
    return [
        ref
        for ref in obj.get("metadata", {}).get("ownerReferences") or []
        if ref.get("kind") == cluster.kind and _api_group(ref.get("apiVersion", "")) == group
    ]


def is_owned_by(obj: dict[str, Any], cluster: NutanixCluster) -> bool:
    """Check whether the object lists the cluster as an owner."""
    return any(ref.get("name") == cluster.name for ref in _owner_references_of_kind(obj, cluster))


def ensure_owner_reference(obj: dict[str, Any], cluster: NutanixCluster) -> bool:
    """Record the cluster as an owner unless another cluster already is one.

    Owner references are informational only; the finalizers decide when
    the object may go away. Objects outside the cluster's namespace
    never get one; Kubernetes does not allow cross-namespace owners.

    Returns:
        True if the object was modified
    """
    if not cluster.uid:
        return False
    if obj.get("metadata", {}).get("namespace") != cluster.namespace:
        return False
    owners = _owner_references_of_kind(obj, cluster)
    if any(ref.get("name") == cluster.name for ref in owners):
        return False
    if owners:
        logger.debug(f"{obj.get('kind')} {obj.get('metadata', {}).get('name')} already owned by another cluster")
        return False
    metadata = obj.setdefault("metadata", {})
    metadata["ownerReferences"] = list(metadata.get("ownerReferences") or []) + [owner_reference_for(cluster)]
    return True


def reconcile_reference_add(
    store: ObjectStore,
    cluster: NutanixCluster | None,
    ref: SecondaryReference | None,
) -> bool:
    """Register the cluster on a referenced object.

    Adds the cluster's finalizer token, drops the deprecated shared token,
    and records an owner reference when no other cluster holds one. The
    object is written back only if one of those changed it.

    Args:
        store: Object store
        cluster: Cluster holding the reference
        ref: Referenced object, or None when nothing is referenced

    Returns:
        True if the object was updated

    Raises:
        ValueError: If cluster is None
        DanglingReferenceError: If the referenced object does not exist
        StoreError: If fetching or updating the object fails
    """
    if cluster is None:
        raise ValueError("cluster must not be None")
    if ref is None:
        return False

    try:
        obj = store.get(ref.kind, ref.namespace, ref.name)
    except NotFoundError as e:
        raise DanglingReferenceError(ref.kind, ref.namespace, ref.name) from e

    token = cluster_credential_finalizer(cluster.name, cluster.namespace)
    added = add_finalizer(obj, token)
    migrated = remove_deprecated_finalizer(obj)
    owned = ensure_owner_reference(obj, cluster)

    if not (added or migrated or owned):
        return False

    store.update(obj)
    if added:
        metrics.reference_finalizer_operations_total.labels(kind=ref.kind, operation="add").inc()
        logger.info(f"Added finalizer {token} to {ref}")
    if migrated:
        metrics.reference_finalizer_operations_total.labels(kind=ref.kind, operation="migrate").inc()
        logger.info(f"Removed deprecated finalizer from {ref}")
    return True


def reconcile_reference_delete(
    store: ObjectStore,
    cluster: NutanixCluster | None,
    ref: SecondaryReference | None,
) -> bool:
    """Release the cluster's hold on a referenced object.

    Only the cluster's own token (and the deprecated shared token) is
    removed. A missing object counts as already released.

    Returns:
        True if the object was updated

    Raises:
        ValueError: If cluster is None
        StoreError: If fetching (other than not found) or updating fails
    """
    if cluster is None:
        raise ValueError("cluster must not be None")
    if ref is None:
        return False

    try:
        obj = store.get(ref.kind, ref.namespace, ref.name)
    except NotFoundError:
        logger.info(f"{ref} already gone, nothing to release")
        return False

    token = cluster_credential_finalizer(cluster.name, cluster.namespace)
    removed = remove_finalizer(obj, token)
    migrated = remove_deprecated_finalizer(obj)

    if not (removed or migrated):
        return False

    store.update(obj)
    metrics.reference_finalizer_operations_total.labels(kind=ref.kind, operation="remove").inc()
    logger.info(f"Removed finalizer {token} from {ref}")
    return True


def reconcile_credential_ref(store: ObjectStore, cluster: NutanixCluster | None) -> bool:
    """Register the cluster on its credentials Secret."""
    if cluster is None:
        raise ValueError("cluster must not be None")
    return reconcile_reference_add(store, cluster, credential_reference(cluster))


def reconcile_trust_bundle_ref(store: ObjectStore, cluster: NutanixCluster | None) -> bool:
    """Register the cluster on its trust bundle ConfigMap."""
    if cluster is None:
        raise ValueError("cluster must not be None")
    return reconcile_reference_add(store, cluster, trust_bundle_reference(cluster))


def reconcile_credential_ref_delete(store: ObjectStore, cluster: NutanixCluster | None) -> bool:
    """Release the cluster's credentials Secret."""
    if cluster is None:
        raise ValueError("cluster must not be None")
    return reconcile_reference_delete(store, cluster, credential_reference(cluster, strict=False))


def reconcile_trust_bundle_ref_delete(store: ObjectStore, cluster: NutanixCluster | None) -> bool:
    """Release the cluster's trust bundle ConfigMap."""
    if cluster is None:
        raise ValueError("cluster must not be None")
    return reconcile_reference_delete(store, cluster, trust_bundle_reference(cluster, strict=False))
