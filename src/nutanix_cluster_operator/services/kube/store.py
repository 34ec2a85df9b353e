"""Object store interface and its Kubernetes implementation."""

from __future__ import annotations

import time
from typing import Any, Callable, Protocol

from kubernetes import client
from kubernetes.client.exceptions import ApiException

from ... import metrics
from ...constants import (
    API_GROUP,
    API_VERSION,
    FIELD_MANAGER,
    KIND_CONFIG_MAP,
    KIND_NUTANIX_CLUSTER,
    KIND_SECRET,
    PLURAL_NUTANIX_CLUSTERS,
)
from ...utils.rate_limit import handle_rate_limit_error, rate_limit_k8s


class StoreError(Exception):
    """Raised when an object store operation fails."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class NotFoundError(StoreError):
    """Raised when the requested object does not exist."""


class ConflictError(StoreError):
    """Raised when a write targets a stale resourceVersion or the object already exists."""


class ObjectStore(Protocol):
    """Protocol for a keyed object store with optimistic concurrency.

    Objects are plain dicts in API server shape (apiVersion, kind, metadata, ...).
    ``update`` must fail with ConflictError when ``metadata.resourceVersion``
    is stale.
    """

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        """Fetch an object, raising NotFoundError if absent."""
        ...

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Create an object and return the stored copy."""
        ...

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace an object and return the stored copy."""
        ...

    def delete(self, kind: str, namespace: str, name: str) -> None:
        """Delete an object, raising NotFoundError if absent."""
        ...

    def list(self, kind: str, namespace: str) -> list[dict[str, Any]]:
        """List objects of a kind in a namespace."""
        ...


def object_key(obj: dict[str, Any]) -> tuple[str, str, str]:
    """Return the (kind, namespace, name) key of an object."""
    meta = obj.get("metadata", {})
    return obj.get("kind", ""), meta.get("namespace", ""), meta.get("name", "")


def translate_api_exception(e: ApiException, kind: str, namespace: str, name: str) -> StoreError:
    """Map a Kubernetes ApiException onto the store error taxonomy."""
    message = f"{kind} {namespace}/{name}: {e.reason or 'API error'}"
    if e.status == 404:
        return NotFoundError(message, status=e.status)
    if e.status == 409:
        return ConflictError(message, status=e.status)
    return StoreError(message, status=e.status)


class KubeObjectStore:
    """ObjectStore backed by the Kubernetes API server.

    Secrets and ConfigMaps go through CoreV1Api, NutanixClusters through
    CustomObjectsApi. Updates use replace so the API server enforces the
    resourceVersion carried by the object.
    """

    def __init__(
        self,
        core_api: client.CoreV1Api,
        custom_api: client.CustomObjectsApi,
        request_timeout: float | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            core_api: CoreV1Api instance
            custom_api: CustomObjectsApi instance
            request_timeout: Per-request timeout in seconds
        """
        self.core_api = core_api
        self.custom_api = custom_api
        self.request_timeout = request_timeout

    def _to_dict(self, obj: Any, kind: str) -> dict[str, Any]:
        if isinstance(obj, dict):
            return obj
        data = self.core_api.api_client.sanitize_for_serialization(obj)
        data.setdefault("apiVersion", "v1")
        data.setdefault("kind", kind)
        return data

    def _call(
        self,
        operation: str,
        kind: str,
        namespace: str,
        name: str,
        fn: Callable[..., Any],
        /,
        **kwargs: Any,
    ) -> Any:
        if self.request_timeout is not None:
            kwargs["_request_timeout"] = self.request_timeout
        start_time = time.time()
        attempt = 0
        try:
            while True:
                try:
                    result = rate_limit_k8s(fn)(**kwargs)
                    metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
                    return result
                except ApiException as e:
                    if handle_rate_limit_error(e, attempt):
                        attempt += 1
                        continue
                    result_label = "not_found" if e.status == 404 else "error"
                    metrics.api_call_total.labels(api_type="k8s", operation=operation, result=result_label).inc()
                    raise translate_api_exception(e, kind, namespace, name) from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        if kind == KIND_SECRET:
            fn = self.core_api.read_namespaced_secret
        elif kind == KIND_CONFIG_MAP:
            fn = self.core_api.read_namespaced_config_map
        elif kind == KIND_NUTANIX_CLUSTER:
            return self._call(
                "get_nutanix_cluster", kind, namespace, name,
                self.custom_api.get_namespaced_custom_object,
                group=API_GROUP, version=API_VERSION, namespace=namespace,
                plural=PLURAL_NUTANIX_CLUSTERS, name=name,
            )
        else:
            raise ValueError(f"unsupported kind {kind!r}")
        obj = self._call(f"get_{kind.lower()}", kind, namespace, name, fn, name=name, namespace=namespace)
        return self._to_dict(obj, kind)

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        kind, namespace, name = object_key(obj)
        if kind == KIND_SECRET:
            fn = self.core_api.create_namespaced_secret
        elif kind == KIND_CONFIG_MAP:
            fn = self.core_api.create_namespaced_config_map
        elif kind == KIND_NUTANIX_CLUSTER:
            return self._call(
                "create_nutanix_cluster", kind, namespace, name,
                self.custom_api.create_namespaced_custom_object,
                group=API_GROUP, version=API_VERSION, namespace=namespace,
                plural=PLURAL_NUTANIX_CLUSTERS, body=obj, field_manager=FIELD_MANAGER,
            )
        else:
            raise ValueError(f"unsupported kind {kind!r}")
        created = self._call(
            f"create_{kind.lower()}", kind, namespace, name, fn,
            namespace=namespace, body=obj, field_manager=FIELD_MANAGER,
        )
        return self._to_dict(created, kind)

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        kind, namespace, name = object_key(obj)
        if kind == KIND_SECRET:
            fn = self.core_api.replace_namespaced_secret
        elif kind == KIND_CONFIG_MAP:
            fn = self.core_api.replace_namespaced_config_map
        elif kind == KIND_NUTANIX_CLUSTER:
            return self._call(
                "update_nutanix_cluster", kind, namespace, name,
                self.custom_api.replace_namespaced_custom_object,
                group=API_GROUP, version=API_VERSION, namespace=namespace,
                plural=PLURAL_NUTANIX_CLUSTERS, name=name, body=obj, field_manager=FIELD_MANAGER,
            )
        else:
            raise ValueError(f"unsupported kind {kind!r}")
        updated = self._call(
            f"update_{kind.lower()}", kind, namespace, name, fn,
            name=name, namespace=namespace, body=obj, field_manager=FIELD_MANAGER,
        )
        return self._to_dict(updated, kind)

    def delete(self, kind: str, namespace: str, name: str) -> None:
        if kind == KIND_SECRET:
            fn = self.core_api.delete_namespaced_secret
        elif kind == KIND_CONFIG_MAP:
            fn = self.core_api.delete_namespaced_config_map
        elif kind == KIND_NUTANIX_CLUSTER:
            self._call(
                "delete_nutanix_cluster", kind, namespace, name,
                self.custom_api.delete_namespaced_custom_object,
                group=API_GROUP, version=API_VERSION, namespace=namespace,
                plural=PLURAL_NUTANIX_CLUSTERS, name=name,
            )
            return
        else:
            raise ValueError(f"unsupported kind {kind!r}")
        self._call(f"delete_{kind.lower()}", kind, namespace, name, fn, name=name, namespace=namespace)

    def list(self, kind: str, namespace: str) -> list[dict[str, Any]]:
        if kind == KIND_SECRET:
            fn = self.core_api.list_namespaced_secret
        elif kind == KIND_CONFIG_MAP:
            fn = self.core_api.list_namespaced_config_map
        elif kind == KIND_NUTANIX_CLUSTER:
            result = self._call(
                "list_nutanix_clusters", kind, namespace, "",
                self.custom_api.list_namespaced_custom_object,
                group=API_GROUP, version=API_VERSION, namespace=namespace,
                plural=PLURAL_NUTANIX_CLUSTERS,
            )
            return list(result.get("items", []))
        else:
            raise ValueError(f"unsupported kind {kind!r}")
        result = self._call(f"list_{kind.lower()}s", kind, namespace, "", fn, namespace=namespace)
        return [self._to_dict(item, kind) for item in result.items]
