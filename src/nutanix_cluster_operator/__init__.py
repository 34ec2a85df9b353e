"""Nutanix Cluster Operator: reconciles NutanixCluster resources for Cluster API."""

__version__ = "0.1.0"
