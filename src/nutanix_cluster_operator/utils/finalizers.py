"""Finalizer helpers for objects shared between NutanixClusters."""

from __future__ import annotations

from typing import Any

from ..constants import API_GROUP, CREDENTIAL_FINALIZER_SUFFIX, DEPRECATED_CREDENTIAL_FINALIZER


def cluster_credential_finalizer(cluster_name: str, cluster_namespace: str) -> str:
    """Return the finalizer a cluster places on the objects it references.

    The token is derived only from the cluster identity, so each cluster
    owns exactly one token per shared object and the set of tokens acts as
    the reference count.
    """
    return f"{cluster_namespace}.{cluster_name}.{API_GROUP}/{CREDENTIAL_FINALIZER_SUFFIX}"


def contains_finalizer(obj: dict[str, Any], finalizer: str) -> bool:
    """Check whether the object's metadata carries the finalizer."""
    return finalizer in (obj.get("metadata", {}).get("finalizers") or [])


def add_finalizer(obj: dict[str, Any], finalizer: str) -> bool:
    """Append the finalizer if missing.

    Returns:
        True if the object was modified
    """
    if contains_finalizer(obj, finalizer):
        return False
    metadata = obj.setdefault("metadata", {})
    metadata["finalizers"] = list(metadata.get("finalizers") or []) + [finalizer]
    return True


def remove_finalizer(obj: dict[str, Any], finalizer: str) -> bool:
    """Remove every occurrence of the finalizer.

    Returns:
        True if the object was modified
    """
    if not contains_finalizer(obj, finalizer):
        return False
    metadata = obj["metadata"]
    metadata["finalizers"] = [f for f in metadata["finalizers"] if f != finalizer]
    return True


def remove_deprecated_finalizer(obj: dict[str, Any]) -> bool:
    """Drop the legacy cluster-agnostic credential finalizer."""
    return remove_finalizer(obj, DEPRECATED_CREDENTIAL_FINALIZER)
