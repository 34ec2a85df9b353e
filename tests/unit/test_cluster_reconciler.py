"""Tests for the NutanixCluster reconciler."""

from __future__ import annotations

import asyncio
import base64
import json
import threading
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from nutanix_cluster_operator.config import OperatorConfig
from nutanix_cluster_operator.constants import (
    ANNOTATION_PAUSED,
    COND_CREDENTIAL_REF_SECRET_OWNER_SET,
    COND_FAILURE_DOMAINS_RECONCILED,
    COND_PRISM_CENTRAL_CLIENT_INITIALIZED,
    COND_READY,
    COND_TRUST_BUNDLE_SECRET_OWNER_SET,
    KIND_CONFIG_MAP,
    KIND_SECRET,
    REASON_CREDENTIAL_REF_SECRET_OWNER_SET_FAILED,
    REASON_PRISM_CENTRAL_CLIENT_INITIALIZATION_FAILED,
)
from nutanix_cluster_operator.models import FailureDomain
from nutanix_cluster_operator.reconcilers import ClusterReconciler, DanglingReferenceError, SecondaryReference
from nutanix_cluster_operator.services.kube.store import StoreError
from nutanix_cluster_operator.services.prism.credentials import CredentialsError
from nutanix_cluster_operator.utils.conditions import get_condition, is_condition_true
from nutanix_cluster_operator.utils.finalizers import cluster_credential_finalizer

CREDENTIALS = [
    {"type": "basic_auth", "data": {"prismCentral": {"username": "admin", "password": "s3cret"}}}
]


def credentials_secret(secret_factory, payload=None):
    secret = secret_factory()
    raw = json.dumps(CREDENTIALS if payload is None else payload).encode()
    secret["data"] = {"credentials": base64.b64encode(raw).decode()}
    return secret


class TestReconcileNormal:
    """Test cases for ClusterReconciler.reconcile_normal."""

    def test_full_reconcile(self, store, cluster_factory, secret_factory):
        store.seed(credentials_secret(secret_factory))
        cluster = cluster_factory(failure_domains=[FailureDomain(name="fd-1", control_plane=True)])

        result = ClusterReconciler(store).reconcile_normal(cluster)

        assert result.registered == [SecondaryReference(KIND_SECRET, "default", "creds")]
        assert cluster.status.ready is True
        assert cluster.status.failure_domains == {"fd-1": {"controlPlane": True}}
        for condition_type in (
            COND_READY,
            COND_CREDENTIAL_REF_SECRET_OWNER_SET,
            COND_TRUST_BUNDLE_SECRET_OWNER_SET,
            COND_PRISM_CENTRAL_CLIENT_INITIALIZED,
            COND_FAILURE_DOMAINS_RECONCILED,
        ):
            assert is_condition_true(cluster.status.conditions, condition_type), condition_type
        stored = store.stored(KIND_SECRET, "default", "creds")
        assert stored["metadata"]["finalizers"] == [cluster_credential_finalizer("cluster-a", "default")]

    def test_second_pass_is_stable(self, store, cluster_factory, secret_factory):
        store.seed(credentials_secret(secret_factory))
        cluster = cluster_factory()
        reconciler = ClusterReconciler(store)
        reconciler.reconcile_normal(cluster)
        first = cluster.status.to_dict()

        result = reconciler.reconcile_normal(cluster)

        assert result.registered == []
        assert cluster.status.to_dict() == first
        assert store.calls["update"] == 1

    def test_trust_bundle_registered(self, store, cluster_factory, secret_factory, config_map_factory, config_map_bundle_factory):
        store.seed(credentials_secret(secret_factory))
        store.seed(config_map_factory())
        cluster = cluster_factory(trust_bundle=config_map_bundle_factory())

        result = ClusterReconciler(store).reconcile_normal(cluster)

        assert SecondaryReference(KIND_CONFIG_MAP, "default", "ca") in result.registered
        assert store.stored(KIND_CONFIG_MAP, "default", "ca")["metadata"]["finalizers"]

    def test_paused_cluster_is_skipped(self, store, cluster_factory):
        cluster = cluster_factory()
        cluster.annotations[ANNOTATION_PAUSED] = ""

        result = ClusterReconciler(store).reconcile_normal(cluster)

        assert result.registered == []
        assert cluster.status.conditions == []
        assert sum(store.calls.values()) == 0

    def test_dangling_credential_sets_condition(self, store, cluster_factory):
        cluster = cluster_factory()

        with pytest.raises(DanglingReferenceError):
            ClusterReconciler(store).reconcile_normal(cluster)

        condition = get_condition(cluster.status.conditions, COND_CREDENTIAL_REF_SECRET_OWNER_SET)
        assert condition["status"] == "False"
        assert condition["reason"] == REASON_CREDENTIAL_REF_SECRET_OWNER_SET_FAILED
        assert cluster.status.ready is False

    def test_store_error_propagates(self, store, cluster_factory, secret_factory):
        store.seed(credentials_secret(secret_factory))
        store.failures["update"] = StoreError("server unavailable", status=503)

        with pytest.raises(StoreError):
            ClusterReconciler(store).reconcile_normal(cluster_factory())

    def test_malformed_credentials_set_condition(self, store, cluster_factory, secret_factory):
        store.seed(credentials_secret(secret_factory, payload={"not": "a list"}))
        cluster = cluster_factory()

        with pytest.raises(CredentialsError):
            ClusterReconciler(store).reconcile_normal(cluster)

        condition = get_condition(cluster.status.conditions, COND_PRISM_CENTRAL_CLIENT_INITIALIZED)
        assert condition["status"] == "False"
        assert condition["reason"] == REASON_PRISM_CENTRAL_CLIENT_INITIALIZATION_FAILED
        assert is_condition_true(cluster.status.conditions, COND_CREDENTIAL_REF_SECRET_OWNER_SET)

    def test_failure_message_stops_reconcile(self, store, cluster_factory, secret_factory):
        store.seed(credentials_secret(secret_factory))
        cluster = cluster_factory(failure_domains=[FailureDomain(name="fd-1")])
        cluster.status.failure_message = "unrecoverable"

        ClusterReconciler(store).reconcile_normal(cluster)

        assert cluster.status.ready is False
        assert cluster.status.failure_domains == {}

    def test_failure_reason_stops_reconcile(self, store, cluster_factory, secret_factory):
        store.seed(credentials_secret(secret_factory))
        cluster = cluster_factory(failure_domains=[FailureDomain(name="fd-1")])
        cluster.status.failure_reason = "InvalidConfiguration"

        ClusterReconciler(store).reconcile_normal(cluster)

        assert cluster.status.ready is False
        assert cluster.status.failure_domains == {}
        assert get_condition(cluster.status.conditions, COND_FAILURE_DOMAINS_RECONCILED) is None

    def test_already_ready_keeps_ready(self, store, cluster_factory, secret_factory):
        store.seed(credentials_secret(secret_factory))
        cluster = cluster_factory()
        cluster.status.ready = True

        ClusterReconciler(store).reconcile_normal(cluster)

        assert cluster.status.ready is True
        assert get_condition(cluster.status.conditions, COND_READY) is None

    def test_without_credentials(self, store, cluster_factory):
        cluster = cluster_factory(credential=None)

        ClusterReconciler(store).reconcile_normal(cluster)

        assert cluster.status.ready is True
        assert get_condition(cluster.status.conditions, COND_PRISM_CENTRAL_CLIENT_INITIALIZED) is None
        assert sum(store.calls.values()) == 0


class TestReconcileDelete:
    """Test cases for ClusterReconciler.reconcile_delete."""

    def test_releases_references(self, store, cluster_factory, secret_factory, config_map_factory, config_map_bundle_factory):
        store.seed(credentials_secret(secret_factory))
        store.seed(config_map_factory())
        cluster = cluster_factory(trust_bundle=config_map_bundle_factory())
        reconciler = ClusterReconciler(store)
        reconciler.reconcile_normal(cluster)

        result = reconciler.reconcile_delete(cluster)

        assert result.released == [
            SecondaryReference(KIND_SECRET, "default", "creds"),
            SecondaryReference(KIND_CONFIG_MAP, "default", "ca"),
        ]
        assert store.stored(KIND_SECRET, "default", "creds")["metadata"]["finalizers"] == []
        assert store.stored(KIND_CONFIG_MAP, "default", "ca")["metadata"]["finalizers"] == []

    def test_missing_objects(self, store, cluster_factory, config_map_bundle_factory):
        cluster = cluster_factory(trust_bundle=config_map_bundle_factory())

        result = ClusterReconciler(store).reconcile_delete(cluster)

        assert result.released == []

    def test_missing_credential_ref(self, store, cluster_factory):
        result = ClusterReconciler(store).reconcile_delete(cluster_factory(credential=None))

        assert result.released == []
        assert sum(store.calls.values()) == 0

    def test_update_error_propagates(self, store, cluster_factory, secret_factory):
        store.seed(secret_factory(finalizers=[cluster_credential_finalizer("cluster-a", "default")]))
        store.failures["update"] = StoreError("server unavailable", status=503)

        with pytest.raises(StoreError):
            ClusterReconciler(store).reconcile_delete(cluster_factory())


class TestWaitForTask:
    """Test cases for ClusterReconciler.wait_for_task."""

    @patch("nutanix_cluster_operator.reconcilers.cluster.wait_for_task_to_succeed", new_callable=AsyncMock)
    @patch("nutanix_cluster_operator.reconcilers.cluster.resolve_prism_client_config")
    def test_uses_configured_intervals(self, mock_resolve, mock_wait, store, cluster_factory):
        prism_client = MagicMock()
        client_cm = MagicMock()
        client_cm.__aenter__ = AsyncMock(return_value=prism_client)
        client_cm.__aexit__ = AsyncMock(return_value=None)
        mock_resolve.return_value.create_client.return_value = client_cm
        operator_config = OperatorConfig(task_poll_interval=0.5, prism_request_timeout=12.0)

        reconciler = ClusterReconciler(store, operator_config)
        asyncio.run(reconciler.wait_for_task(cluster_factory(), "task-1", timeout=5.0))

        mock_resolve.return_value.create_client.assert_called_once_with(timeout=12.0)
        mock_wait.assert_awaited_once_with(prism_client, "task-1", timeout=5.0, poll_interval=0.5)
        client_cm.__aexit__.assert_awaited_once()

    @patch("nutanix_cluster_operator.reconcilers.cluster.wait_for_task_to_succeed", new_callable=AsyncMock)
    @patch("nutanix_cluster_operator.reconcilers.cluster.resolve_prism_client_config")
    def test_blocking_store_does_not_stall_event_loop(self, mock_resolve, mock_wait, store, cluster_factory):
        released = threading.Event()
        client_cm = MagicMock()
        client_cm.__aenter__ = AsyncMock(return_value=MagicMock())
        client_cm.__aexit__ = AsyncMock(return_value=None)
        client_config = MagicMock()
        client_config.create_client.return_value = client_cm

        def slow_resolve(store, cluster):
            # set by release(), which can only run if the loop is free
            if not released.wait(timeout=2):
                raise AssertionError("event loop was blocked")
            return client_config

        mock_resolve.side_effect = slow_resolve

        async def release():
            await asyncio.sleep(0.01)
            released.set()

        async def run():
            reconciler = ClusterReconciler(store)
            await asyncio.gather(reconciler.wait_for_task(cluster_factory(), "task-1", timeout=5.0), release())

        asyncio.run(run())

        mock_wait.assert_awaited_once()
