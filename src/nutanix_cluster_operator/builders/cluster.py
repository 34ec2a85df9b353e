"""Builder for NutanixCluster models from CRD objects."""

from __future__ import annotations

import copy
from typing import Any

from ..constants import API_GROUP_VERSION, DEFAULT_PRISM_PORT, KIND_NUTANIX_CLUSTER
from ..models import (
    ClusterSpec,
    ClusterStatus,
    CredentialReference,
    FailureDomain,
    NutanixCluster,
    PrismCentralEndpoint,
    ResourceIdentifier,
    TrustBundleReference,
)


def _identifier_from_spec(spec: dict[str, Any] | None) -> ResourceIdentifier | None:
    if not spec:
        return None
    return ResourceIdentifier(
        type=spec.get("type", ""),
        name=spec.get("name"),
        uuid=spec.get("uuid"),
    )


def create_prism_central_from_spec(spec: dict[str, Any] | None) -> PrismCentralEndpoint | None:
    """Create the Prism Central endpoint model from the prismCentral block."""
    if spec is None:
        return None

    credential_ref = None
    credential_spec = spec.get("credentialRef")
    if credential_spec:
        credential_ref = CredentialReference(
            kind=credential_spec.get("kind", ""),
            name=credential_spec.get("name", ""),
            namespace=credential_spec.get("namespace"),
        )

    trust_bundle = None
    trust_bundle_spec = spec.get("additionalTrustBundle")
    if trust_bundle_spec:
        trust_bundle = TrustBundleReference(
            kind=trust_bundle_spec.get("kind", ""),
            name=trust_bundle_spec.get("name"),
            namespace=trust_bundle_spec.get("namespace"),
            data=trust_bundle_spec.get("data"),
        )

    return PrismCentralEndpoint(
        address=spec.get("address"),
        port=int(spec.get("port") or DEFAULT_PRISM_PORT),
        insecure=bool(spec.get("insecure", False)),
        credential_ref=credential_ref,
        additional_trust_bundle=trust_bundle,
    )


def create_failure_domains_from_spec(specs: list[dict[str, Any]] | None) -> list[FailureDomain]:
    """Create failure domain models, preserving declared order.

    Raises:
        ValueError: If a failure domain has no name or a name is repeated
    """
    failure_domains: list[FailureDomain] = []
    seen: set[str] = set()
    for fd_spec in specs or []:
        name = fd_spec.get("name")
        if not name:
            raise ValueError("failure domain name is required")
        if name in seen:
            raise ValueError(f"duplicate failure domain name {name!r}")
        seen.add(name)
        failure_domains.append(
            FailureDomain(
                name=name,
                cluster=_identifier_from_spec(fd_spec.get("cluster")),
                subnets=[
                    ident
                    for ident in (_identifier_from_spec(s) for s in fd_spec.get("subnets") or [])
                    if ident is not None
                ],
                control_plane=bool(fd_spec.get("controlPlane", False)),
            )
        )
    return failure_domains


def create_cluster_spec(spec: dict[str, Any] | None) -> ClusterSpec:
    """Create a ClusterSpec from the CRD spec."""
    spec = spec or {}
    return ClusterSpec(
        prism_central=create_prism_central_from_spec(spec.get("prismCentral")),
        failure_domains=create_failure_domains_from_spec(spec.get("failureDomains")),
    )


def create_cluster_status(status: dict[str, Any] | None) -> ClusterStatus:
    """Create a ClusterStatus from the CRD status."""
    status = status or {}
    return ClusterStatus(
        ready=bool(status.get("ready", False)),
        failure_message=status.get("failureMessage"),
        failure_reason=status.get("failureReason"),
        failure_domains=copy.deepcopy(status.get("failureDomains") or {}),
        conditions=copy.deepcopy(status.get("conditions") or []),
    )


def create_cluster_from_body(body: dict[str, Any]) -> NutanixCluster:
    """Create a NutanixCluster model from a full CRD object.

    Args:
        body: NutanixCluster object as returned by the API server or kopf

    Returns:
        NutanixCluster model with spec and status parsed
    """
    meta = body.get("metadata", {})
    return NutanixCluster(
        name=meta.get("name", ""),
        namespace=meta.get("namespace", "default"),
        uid=meta.get("uid", ""),
        generation=meta.get("generation"),
        api_version=body.get("apiVersion", API_GROUP_VERSION),
        kind=body.get("kind", KIND_NUTANIX_CLUSTER),
        spec=create_cluster_spec(body.get("spec")),
        status=create_cluster_status(body.get("status")),
        annotations=dict(meta.get("annotations") or {}),
    )
