"""Shared utilities for handlers."""

from __future__ import annotations

from kubernetes import client, config

from ..config import OperatorConfig
from ..services.kube import KubeObjectStore


def load_kube_configuration() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


def get_object_store(operator_config: OperatorConfig) -> KubeObjectStore:
    """Build an object store for one handler invocation.

    Args:
        operator_config: Operator settings

    Returns:
        KubeObjectStore over fresh CoreV1Api and CustomObjectsApi clients
    """
    load_kube_configuration()
    return KubeObjectStore(
        client.CoreV1Api(),
        client.CustomObjectsApi(),
        request_timeout=operator_config.k8s_request_timeout,
    )
