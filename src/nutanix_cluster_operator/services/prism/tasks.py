"""Waiting for Prism Central tasks to finish."""

from __future__ import annotations

import asyncio
import logging
import time

from ... import metrics
from ...constants import TASK_STATUS_SUCCEEDED
from .client import PrismClient, TaskFailedError, get_task_status

logger = logging.getLogger(__name__)

DEFAULT_TASK_POLL_INTERVAL = 0.1


class TaskWaitTimeoutError(Exception):
    """Raised when the wait deadline passes before the task finished.

    The task may still be running; this is not a task failure.
    """

    def __init__(self, task_uuid: str, timeout: float | None) -> None:
        super().__init__(f"timed out waiting for task {task_uuid} after {timeout}s")
        self.task_uuid = task_uuid
        self.timeout = timeout


async def _poll_until_succeeded(client: PrismClient, task_uuid: str, poll_interval: float) -> None:
    while True:
        status = await get_task_status(client, task_uuid)
        if status == TASK_STATUS_SUCCEEDED:
            return
        await asyncio.sleep(poll_interval)


async def wait_for_task_to_succeed(
    client: PrismClient,
    task_uuid: str,
    *,
    timeout: float | None = None,
    poll_interval: float = DEFAULT_TASK_POLL_INTERVAL,
) -> None:
    """Block until a task succeeds, fails, or the timeout elapses.

    The first poll happens immediately. When the timeout elapses the
    in-flight request is cancelled together with the poll loop.

    A ``timeout`` of None waits until the caller cancels the coroutine, in
    which case ``asyncio.CancelledError`` propagates unchanged. Callers
    should always bound the wait, either here or with their own deadline.

    Args:
        client: Connected Prism Central client
        task_uuid: Task identifier
        timeout: Seconds to wait before giving up
        poll_interval: Seconds between polls

    Raises:
        TaskWaitTimeoutError: If the timeout elapsed while the task was still running
        TaskFailedError: If the task failed
        InvalidCredentialsError: If Prism Central rejects the credentials
        PrismClientError: On other transport or HTTP failures
    """
    start_time = time.monotonic()
    try:
        await asyncio.wait_for(_poll_until_succeeded(client, task_uuid, poll_interval), timeout=timeout)
    except asyncio.TimeoutError as e:
        metrics.task_wait_total.labels(result="timeout").inc()
        logger.warning(f"Gave up waiting for task {task_uuid} after {timeout}s")
        raise TaskWaitTimeoutError(task_uuid, timeout) from e
    except TaskFailedError as e:
        metrics.task_wait_total.labels(result="failed").inc()
        logger.error(f"Task {task_uuid} finished with status {e.status}: {e}")
        raise
    except Exception:
        metrics.task_wait_total.labels(result="error").inc()
        raise
    finally:
        metrics.task_wait_duration_seconds.observe(time.monotonic() - start_time)

    metrics.task_wait_total.labels(result="succeeded").inc()
    logger.info(f"Task {task_uuid} succeeded")
