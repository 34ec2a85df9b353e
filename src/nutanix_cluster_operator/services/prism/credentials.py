"""Resolve Prism Central connection settings from referenced objects."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any

from ...constants import (
    CREDENTIAL_TYPE_BASIC_AUTH,
    CREDENTIALS_SECRET_KEY,
    DEFAULT_PRISM_PORT,
    KIND_CONFIG_MAP,
    KIND_SECRET,
    TRUST_BUNDLE_CONFIG_MAP_KEY,
    TRUST_BUNDLE_KIND_CONFIG_MAP,
    TRUST_BUNDLE_KIND_STRING,
)
from ...models import NutanixCluster
from ..kube.store import ObjectStore
from .client import PrismClient


class CredentialsError(ValueError):
    """Raised when Prism Central credentials cannot be resolved."""


@dataclass
class PrismClientConfig:
    """Everything needed to open a PrismClient."""

    address: str
    username: str
    password: str
    port: int = DEFAULT_PRISM_PORT
    insecure: bool = False
    trust_bundle: str | None = None

    def __repr__(self) -> str:
        return (
            f"PrismClientConfig(address={self.address!r}, port={self.port}, "
            f"insecure={self.insecure}, trust_bundle={'set' if self.trust_bundle else None})"
        )

    def create_client(self, timeout: float = 30.0) -> PrismClient:
        """Open a PrismClient with these settings."""
        return PrismClient(
            address=self.address,
            username=self.username,
            password=self.password,
            port=self.port,
            insecure=self.insecure,
            trust_bundle=self.trust_bundle,
            timeout=timeout,
        )


def _decode_secret_value(secret: dict[str, Any], key: str) -> str | None:
    string_data = secret.get("stringData") or {}
    if key in string_data:
        return string_data[key]
    value = (secret.get("data") or {}).get(key)
    if value is None:
        return None
    try:
        return base64.b64decode(value).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise CredentialsError(f"key {key!r} is not valid base64") from e


def parse_basic_auth_credentials(raw: str) -> tuple[str, str]:
    """Extract the Prism Central username and password from a credentials document.

    The document is a JSON list of ``{"type": ..., "data": ...}`` entries; the
    first ``basic_auth`` entry with a ``prismCentral`` block is used.

    Raises:
        CredentialsError: If the document is malformed or has no usable entry
    """
    try:
        entries = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CredentialsError("credentials are not valid JSON") from e
    if not isinstance(entries, list):
        raise CredentialsError("credentials must be a list")

    for entry in entries:
        if not isinstance(entry, dict) or entry.get("type") != CREDENTIAL_TYPE_BASIC_AUTH:
            continue
        prism_central = (entry.get("data") or {}).get("prismCentral") or {}
        username = prism_central.get("username")
        password = prism_central.get("password")
        if not username or not password:
            raise CredentialsError(f"incomplete {CREDENTIAL_TYPE_BASIC_AUTH} entry for prismCentral")
        return username, password

    raise CredentialsError(f"no {CREDENTIAL_TYPE_BASIC_AUTH} credentials found")


def resolve_trust_bundle(store: ObjectStore, cluster: NutanixCluster) -> str | None:
    """Return the PEM bundle declared by the cluster, if any.

    Raises:
        CredentialsError: If the bundle kind is unknown or the ConfigMap has no ca.crt
        NotFoundError: If the referenced ConfigMap does not exist
    """
    prism_central = cluster.spec.prism_central
    if prism_central is None or prism_central.additional_trust_bundle is None:
        return None

    ref = prism_central.additional_trust_bundle
    if ref.kind == TRUST_BUNDLE_KIND_STRING:
        return ref.data or None
    if ref.kind not in (TRUST_BUNDLE_KIND_CONFIG_MAP, ""):
        raise CredentialsError(f"unsupported trust bundle kind {ref.kind!r}")

    config_map = store.get(KIND_CONFIG_MAP, ref.namespace or cluster.namespace, ref.name or "")
    bundle = (config_map.get("data") or {}).get(TRUST_BUNDLE_CONFIG_MAP_KEY)
    if not bundle:
        raise CredentialsError(f"ConfigMap {ref.name} has no {TRUST_BUNDLE_CONFIG_MAP_KEY} key")
    return bundle


def resolve_prism_client_config(store: ObjectStore, cluster: NutanixCluster) -> PrismClientConfig:
    """Build the Prism Central client settings for a cluster.

    Raises:
        CredentialsError: If the endpoint or credentials are missing or malformed
        NotFoundError: If a referenced Secret or ConfigMap does not exist
    """
    prism_central = cluster.spec.prism_central
    if prism_central is None or not prism_central.address:
        raise CredentialsError("prismCentral.address is required")
    ref = prism_central.credential_ref
    if ref is None:
        raise CredentialsError("prismCentral.credentialRef is required")
    if ref.kind != KIND_SECRET:
        raise CredentialsError(f"unsupported credential kind {ref.kind!r}")

    secret = store.get(KIND_SECRET, ref.namespace or cluster.namespace, ref.name)
    raw = _decode_secret_value(secret, CREDENTIALS_SECRET_KEY)
    if raw is None:
        raise CredentialsError(f"Secret {ref.name} has no {CREDENTIALS_SECRET_KEY} key")
    username, password = parse_basic_auth_credentials(raw)

    return PrismClientConfig(
        address=prism_central.address,
        username=username,
        password=password,
        port=prism_central.port,
        insecure=prism_central.insecure,
        trust_bundle=resolve_trust_bundle(store, cluster),
    )
