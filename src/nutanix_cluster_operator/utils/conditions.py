"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import (
    COND_CREDENTIAL_REF_SECRET_OWNER_SET,
    COND_FAILURE_DOMAINS_RECONCILED,
    COND_NO_FAILURE_DOMAINS_RECONCILED,
    COND_PRISM_CENTRAL_CLIENT_INITIALIZED,
    COND_READY,
    COND_TRUST_BUNDLE_SECRET_OWNER_SET,
)


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        Updated list of conditions
    """
    now = datetime.now(timezone.utc).isoformat()

    existing_idx = None
    for idx, cond in enumerate(conditions):
        if cond.get("type") == condition_type:
            existing_idx = idx
            break

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }

    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    if existing_idx is not None:
        existing = conditions[existing_idx]
        # Only update lastTransitionTime if status changed
        if existing.get("status") == status:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
        conditions[existing_idx] = new_condition
    else:
        conditions.append(new_condition)

    return conditions


def remove_condition(conditions: list[dict[str, Any]], condition_type: str) -> list[dict[str, Any]]:
    """Drop every condition of the given type, in place."""
    conditions[:] = [cond for cond in conditions if cond.get("type") != condition_type]
    return conditions


def get_condition(conditions: list[dict[str, Any]], condition_type: str) -> dict[str, Any] | None:
    """Return the condition of the given type, if present."""
    for cond in conditions:
        if cond.get("type") == condition_type:
            return cond
    return None


def is_condition_true(conditions: list[dict[str, Any]], condition_type: str) -> bool:
    """Check whether the condition of the given type has status "True"."""
    cond = get_condition(conditions, condition_type)
    return cond is not None and cond.get("status") == "True"


def set_ready_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Ready condition."""
    return update_condition(
        conditions,
        COND_READY,
        "True" if status else "False",
        "Ready" if status else "NotReady",
        message,
        observed_generation,
    )


def set_failure_domains_reconciled_condition(
    conditions: list[dict[str, Any]],
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Mark failure domains reconciled and clear NoFailureDomainsReconciled."""
    remove_condition(conditions, COND_NO_FAILURE_DOMAINS_RECONCILED)
    return update_condition(
        conditions,
        COND_FAILURE_DOMAINS_RECONCILED,
        "True",
        COND_FAILURE_DOMAINS_RECONCILED,
        "Failure domains reconciled",
        observed_generation,
    )


def set_no_failure_domains_reconciled_condition(
    conditions: list[dict[str, Any]],
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Mark that no failure domains are declared and clear FailureDomainsReconciled."""
    remove_condition(conditions, COND_FAILURE_DOMAINS_RECONCILED)
    return update_condition(
        conditions,
        COND_NO_FAILURE_DOMAINS_RECONCILED,
        "True",
        COND_NO_FAILURE_DOMAINS_RECONCILED,
        "No failure domains declared",
        observed_generation,
    )


def set_credential_ref_secret_owner_set_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    reason: str | None = None,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the CredentialRefSecretOwnerSet condition."""
    return update_condition(
        conditions,
        COND_CREDENTIAL_REF_SECRET_OWNER_SET,
        "True" if status else "False",
        reason or COND_CREDENTIAL_REF_SECRET_OWNER_SET,
        message,
        observed_generation,
    )


def set_trust_bundle_secret_owner_set_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    reason: str | None = None,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the TrustBundleSecretOwnerSet condition."""
    return update_condition(
        conditions,
        COND_TRUST_BUNDLE_SECRET_OWNER_SET,
        "True" if status else "False",
        reason or COND_TRUST_BUNDLE_SECRET_OWNER_SET,
        message,
        observed_generation,
    )


def set_prism_central_client_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    reason: str | None = None,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the PrismCentralClientInitialized condition."""
    return update_condition(
        conditions,
        COND_PRISM_CENTRAL_CLIENT_INITIALIZED,
        "True" if status else "False",
        reason or COND_PRISM_CENTRAL_CLIENT_INITIALIZED,
        message,
        observed_generation,
    )
