"""Prism Central client, task polling and credential resolution."""

from .client import (
    InvalidCredentialsError,
    PrismClient,
    PrismClientError,
    TaskFailedError,
    get_task_status,
)
from .credentials import CredentialsError, PrismClientConfig, resolve_prism_client_config
from .tasks import DEFAULT_TASK_POLL_INTERVAL, TaskWaitTimeoutError, wait_for_task_to_succeed

__all__ = [
    "PrismClient",
    "PrismClientError",
    "InvalidCredentialsError",
    "TaskFailedError",
    "TaskWaitTimeoutError",
    "get_task_status",
    "wait_for_task_to_succeed",
    "DEFAULT_TASK_POLL_INTERVAL",
    "CredentialsError",
    "PrismClientConfig",
    "resolve_prism_client_config",
]
