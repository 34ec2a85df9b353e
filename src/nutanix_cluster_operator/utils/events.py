"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_FAILURE_DOMAINS_RECONCILED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_REFERENCE_FINALIZER_ADDED,
    EVENT_REASON_REFERENCE_FINALIZER_REMOVED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Object the event is attached to
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(body: dict[str, Any]) -> None:
    """Emit reconcile started event."""
    emit_event(body, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_reference_finalizer_added(body: dict[str, Any], kind: str, name: str) -> None:
    """Emit event after registering the cluster on a shared object."""
    emit_event(body, EVENT_REASON_REFERENCE_FINALIZER_ADDED, f"Finalizer added to {kind} {name}")


def emit_reference_finalizer_removed(body: dict[str, Any], kind: str, name: str) -> None:
    """Emit event after releasing a shared object."""
    emit_event(body, EVENT_REASON_REFERENCE_FINALIZER_REMOVED, f"Finalizer removed from {kind} {name}")


def emit_failure_domains_reconciled(body: dict[str, Any], count: int) -> None:
    """Emit failure domains reconciled event."""
    emit_event(body, EVENT_REASON_FAILURE_DOMAINS_RECONCILED, f"{count} failure domain(s) reconciled")
