"""Builders turning CRD objects into operator models."""

from .cluster import create_cluster_from_body, create_cluster_spec, create_cluster_status

__all__ = ["create_cluster_from_body", "create_cluster_spec", "create_cluster_status"]
