"""Tests for the Kubernetes-backed object store."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.exceptions import ApiException

from nutanix_cluster_operator.constants import (
    API_GROUP,
    API_VERSION,
    KIND_CONFIG_MAP,
    KIND_NUTANIX_CLUSTER,
    KIND_SECRET,
    PLURAL_NUTANIX_CLUSTERS,
)
from nutanix_cluster_operator.services.kube.store import (
    ConflictError,
    KubeObjectStore,
    NotFoundError,
    StoreError,
    object_key,
    translate_api_exception,
)


@pytest.fixture(autouse=True)
def no_rate_limit():
    with patch("nutanix_cluster_operator.services.kube.store.rate_limit_k8s", side_effect=lambda fn: fn):
        yield


@pytest.fixture
def apis():
    return MagicMock(), MagicMock()


@pytest.fixture
def kube_store(apis):
    core_api, custom_api = apis
    return KubeObjectStore(core_api, custom_api, request_timeout=5)


class TestTranslateApiException:
    """Test cases for translate_api_exception."""

    def test_not_found(self):
        error = translate_api_exception(ApiException(status=404, reason="Not Found"), KIND_SECRET, "ns", "creds")
        assert isinstance(error, NotFoundError)
        assert error.status == 404
        assert "Secret ns/creds" in str(error)

    def test_conflict(self):
        error = translate_api_exception(ApiException(status=409, reason="Conflict"), KIND_SECRET, "ns", "creds")
        assert isinstance(error, ConflictError)

    def test_other(self):
        error = translate_api_exception(ApiException(status=500, reason="Internal"), KIND_SECRET, "ns", "creds")
        assert type(error) is StoreError
        assert error.status == 500


class TestKubeObjectStore:
    """Test cases for KubeObjectStore."""

    def test_object_key(self):
        obj = {"kind": KIND_SECRET, "metadata": {"namespace": "ns", "name": "creds"}}
        assert object_key(obj) == (KIND_SECRET, "ns", "creds")

    def test_get_secret(self, kube_store, apis):
        core_api, _ = apis
        core_api.read_namespaced_secret.return_value = {"kind": KIND_SECRET, "metadata": {"name": "creds"}}

        result = kube_store.get(KIND_SECRET, "ns", "creds")

        assert result["metadata"]["name"] == "creds"
        core_api.read_namespaced_secret.assert_called_once_with(name="creds", namespace="ns", _request_timeout=5)

    def test_get_serializes_models(self, kube_store, apis):
        core_api, _ = apis
        model = object()
        core_api.read_namespaced_config_map.return_value = model
        core_api.api_client.sanitize_for_serialization.return_value = {"metadata": {"name": "ca"}}

        result = kube_store.get(KIND_CONFIG_MAP, "ns", "ca")

        core_api.api_client.sanitize_for_serialization.assert_called_once_with(model)
        assert result == {"metadata": {"name": "ca"}, "apiVersion": "v1", "kind": KIND_CONFIG_MAP}

    def test_get_nutanix_cluster(self, kube_store, apis):
        _, custom_api = apis
        custom_api.get_namespaced_custom_object.return_value = {"kind": KIND_NUTANIX_CLUSTER}

        kube_store.get(KIND_NUTANIX_CLUSTER, "ns", "cluster-a")

        custom_api.get_namespaced_custom_object.assert_called_once_with(
            group=API_GROUP,
            version=API_VERSION,
            namespace="ns",
            plural=PLURAL_NUTANIX_CLUSTERS,
            name="cluster-a",
            _request_timeout=5,
        )

    def test_get_not_found(self, kube_store, apis):
        core_api, _ = apis
        core_api.read_namespaced_secret.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(NotFoundError):
            kube_store.get(KIND_SECRET, "ns", "creds")

    def test_update_uses_replace(self, kube_store, apis):
        core_api, _ = apis
        secret = {"kind": KIND_SECRET, "metadata": {"name": "creds", "namespace": "ns", "resourceVersion": "7"}}
        core_api.replace_namespaced_secret.return_value = secret

        kube_store.update(secret)

        kwargs = core_api.replace_namespaced_secret.call_args.kwargs
        assert kwargs["name"] == "creds"
        assert kwargs["namespace"] == "ns"
        assert kwargs["body"]["metadata"]["resourceVersion"] == "7"

    def test_update_conflict(self, kube_store, apis):
        core_api, _ = apis
        core_api.replace_namespaced_config_map.side_effect = ApiException(status=409, reason="Conflict")

        with pytest.raises(ConflictError):
            kube_store.update({"kind": KIND_CONFIG_MAP, "metadata": {"name": "ca", "namespace": "ns"}})

    def test_unsupported_kind(self, kube_store):
        with pytest.raises(ValueError):
            kube_store.get("Pod", "ns", "p")
        with pytest.raises(ValueError):
            kube_store.update({"kind": "Pod", "metadata": {"name": "p", "namespace": "ns"}})

    @patch("nutanix_cluster_operator.utils.rate_limit.time.sleep")
    def test_retries_rate_limited_calls(self, mock_sleep, kube_store, apis):
        core_api, _ = apis
        core_api.read_namespaced_secret.side_effect = [
            ApiException(status=429, reason="Too Many Requests"),
            {"kind": KIND_SECRET, "metadata": {"name": "creds"}},
        ]

        result = kube_store.get(KIND_SECRET, "ns", "creds")

        assert result["metadata"]["name"] == "creds"
        assert core_api.read_namespaced_secret.call_count == 2
        mock_sleep.assert_called_once_with(1)

    def test_list_config_maps(self, kube_store, apis):
        core_api, _ = apis
        core_api.list_namespaced_config_map.return_value = MagicMock(items=[{"metadata": {"name": "ca"}}])

        assert kube_store.list(KIND_CONFIG_MAP, "ns") == [{"metadata": {"name": "ca"}}]

    def test_delete_secret(self, kube_store, apis):
        core_api, _ = apis

        kube_store.delete(KIND_SECRET, "ns", "creds")

        core_api.delete_namespaced_secret.assert_called_once_with(name="creds", namespace="ns", _request_timeout=5)
