"""Models for NutanixCluster resources."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from .constants import API_GROUP_VERSION, DEFAULT_PRISM_PORT, KIND_NUTANIX_CLUSTER


@dataclass
class CredentialReference:
    """Reference to the secret holding Prism Central credentials."""

    kind: str
    name: str
    namespace: str | None = None


@dataclass
class TrustBundleReference:
    """Reference to an additional CA bundle for Prism Central."""

    kind: str
    name: str | None = None
    namespace: str | None = None
    data: str | None = None


@dataclass
class PrismCentralEndpoint:
    """Connection details for Prism Central."""

    address: str | None = None
    port: int = DEFAULT_PRISM_PORT
    insecure: bool = False
    credential_ref: CredentialReference | None = None
    additional_trust_bundle: TrustBundleReference | None = None


@dataclass
class ResourceIdentifier:
    """Identifies a Prism resource by name or UUID."""

    type: str
    name: str | None = None
    uuid: str | None = None


@dataclass
class FailureDomain:
    """A named placement target declared on the cluster."""

    name: str
    cluster: ResourceIdentifier | None = None
    subnets: list[ResourceIdentifier] = field(default_factory=list)
    control_plane: bool = False


@dataclass
class ClusterSpec:
    """Desired state of a NutanixCluster."""

    prism_central: PrismCentralEndpoint | None = None
    failure_domains: list[FailureDomain] = field(default_factory=list)


@dataclass
class ClusterStatus:
    """Observed state of a NutanixCluster."""

    ready: bool = False
    failure_message: str | None = None
    failure_reason: str | None = None
    failure_domains: dict[str, dict[str, Any]] = field(default_factory=dict)
    conditions: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Render the status in CRD field naming."""
        status: dict[str, Any] = {
            "ready": self.ready,
            "failureDomains": copy.deepcopy(self.failure_domains),
            "conditions": copy.deepcopy(self.conditions),
        }
        if self.failure_message is not None:
            status["failureMessage"] = self.failure_message
        if self.failure_reason is not None:
            status["failureReason"] = self.failure_reason
        return status


@dataclass
class NutanixCluster:
    """The primary object driven by the reconciler."""

    name: str
    namespace: str
    uid: str = ""
    generation: int | None = None
    api_version: str = API_GROUP_VERSION
    kind: str = KIND_NUTANIX_CLUSTER
    spec: ClusterSpec = field(default_factory=ClusterSpec)
    status: ClusterStatus = field(default_factory=ClusterStatus)
    annotations: dict[str, str] = field(default_factory=dict)
