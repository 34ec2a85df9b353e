"""Shared fixtures for unit tests."""

from __future__ import annotations

import copy
from collections import Counter
from typing import Any, Callable

import pytest

from nutanix_cluster_operator.constants import KIND_CONFIG_MAP, KIND_SECRET, TRUST_BUNDLE_KIND_CONFIG_MAP
from nutanix_cluster_operator.models import (
    ClusterSpec,
    CredentialReference,
    FailureDomain,
    NutanixCluster,
    PrismCentralEndpoint,
    TrustBundleReference,
)
from nutanix_cluster_operator.services.kube.store import ConflictError, NotFoundError, StoreError, object_key


class FakeObjectStore:
    """In-memory ObjectStore that enforces resourceVersion on update."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.calls: Counter[str] = Counter()
        self.failures: dict[str, Exception] = {}

    def seed(self, obj: dict[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(obj)
        stored.setdefault("metadata", {}).setdefault("resourceVersion", "1")
        self.objects[object_key(stored)] = stored
        return copy.deepcopy(stored)

    def stored(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        return self.objects[(kind, namespace, name)]

    def _maybe_fail(self, operation: str) -> None:
        self.calls[operation] += 1
        if operation in self.failures:
            raise self.failures[operation]

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        self._maybe_fail("get")
        try:
            return copy.deepcopy(self.objects[(kind, namespace, name)])
        except KeyError:
            raise NotFoundError(f"{kind} {namespace}/{name} not found", status=404) from None

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        self._maybe_fail("create")
        if object_key(obj) in self.objects:
            raise StoreError("already exists", status=409)
        return self.seed(obj)

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        self._maybe_fail("update")
        key = object_key(obj)
        current = self.objects.get(key)
        if current is None:
            raise NotFoundError(f"{key} not found", status=404)
        if current["metadata"]["resourceVersion"] != obj.get("metadata", {}).get("resourceVersion"):
            raise ConflictError(f"{key} was modified", status=409)
        stored = copy.deepcopy(obj)
        stored["metadata"]["resourceVersion"] = str(int(current["metadata"]["resourceVersion"]) + 1)
        self.objects[key] = stored
        return copy.deepcopy(stored)

    def delete(self, kind: str, namespace: str, name: str) -> None:
        self._maybe_fail("delete")
        if self.objects.pop((kind, namespace, name), None) is None:
            raise NotFoundError(f"{kind} {namespace}/{name} not found", status=404)

    def list(self, kind: str, namespace: str) -> list[dict[str, Any]]:
        self._maybe_fail("list")
        return [copy.deepcopy(o) for (k, ns, _), o in self.objects.items() if k == kind and ns == namespace]


@pytest.fixture
def store() -> FakeObjectStore:
    return FakeObjectStore()


def make_secret(name: str = "creds", namespace: str = "default", **metadata: Any) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": KIND_SECRET,
        "metadata": {"name": name, "namespace": namespace, **metadata},
        "data": {},
    }


def make_config_map(name: str = "ca", namespace: str = "default", data: dict[str, str] | None = None) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": KIND_CONFIG_MAP,
        "metadata": {"name": name, "namespace": namespace},
        "data": data or {"ca.crt": "-----BEGIN CERTIFICATE-----"},
    }


def make_cluster(
    name: str = "cluster-a",
    namespace: str = "default",
    uid: str = "uid-a",
    credential: str | None = "creds",
    trust_bundle: TrustBundleReference | None = None,
    failure_domains: list[FailureDomain] | None = None,
    address: str = "prism.example.com",
) -> NutanixCluster:
    prism_central = PrismCentralEndpoint(
        address=address,
        credential_ref=CredentialReference(kind=KIND_SECRET, name=credential) if credential else None,
        additional_trust_bundle=trust_bundle,
    )
    return NutanixCluster(
        name=name,
        namespace=namespace,
        uid=uid,
        generation=1,
        spec=ClusterSpec(prism_central=prism_central, failure_domains=failure_domains or []),
    )


def config_map_bundle(name: str = "ca") -> TrustBundleReference:
    return TrustBundleReference(kind=TRUST_BUNDLE_KIND_CONFIG_MAP, name=name)


@pytest.fixture
def cluster_factory() -> Callable[..., NutanixCluster]:
    return make_cluster


@pytest.fixture
def secret_factory() -> Callable[..., dict[str, Any]]:
    return make_secret


@pytest.fixture
def config_map_factory() -> Callable[..., dict[str, Any]]:
    return make_config_map


@pytest.fixture
def config_map_bundle_factory() -> Callable[..., TrustBundleReference]:
    return config_map_bundle
