"""Kubernetes-backed object store."""

from .store import ConflictError, KubeObjectStore, NotFoundError, ObjectStore, StoreError

__all__ = ["ObjectStore", "KubeObjectStore", "StoreError", "NotFoundError", "ConflictError"]
