"""Prism Central v3 REST client and task status lookup."""

from __future__ import annotations

import logging
import ssl
import time
from typing import Any

import httpx

from ... import metrics
from ...constants import DEFAULT_PRISM_PORT, PRISM_API_PATH, TASK_STATUS_SUCCEEDED

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "invalid Nutanix credentials"


class PrismClientError(Exception):
    """Base exception for Prism Central client errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidCredentialsError(PrismClientError):
    """Raised when Prism Central rejects the configured credentials."""

    def __init__(self) -> None:
        super().__init__(INVALID_CREDENTIALS_MESSAGE, status_code=401)


class TaskFailedError(PrismClientError):
    """Raised when a task reports a terminal failure.

    The literal task status (e.g. FAILED or INVALID_UUID) is kept on
    ``status`` so callers can branch on it.
    """

    def __init__(self, status: str, error_detail: str, progress_message: str) -> None:
        super().__init__(f"error_detail: {error_detail}, progress_message: {progress_message}")
        self.status = status
        self.error_detail = error_detail
        self.progress_message = progress_message


class PrismClient:
    """Async client for the Prism Central v3 API."""

    def __init__(
        self,
        address: str,
        username: str,
        password: str,
        port: int = DEFAULT_PRISM_PORT,
        insecure: bool = False,
        trust_bundle: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            address: Prism Central host name or IP
            username: Basic auth user
            password: Basic auth password
            port: Prism Central port
            insecure: Skip TLS verification
            trust_bundle: Additional PEM encoded CA certificates
            timeout: Request timeout in seconds
            transport: Optional httpx transport, mainly for tests
        """
        self.base_url = f"https://{address}:{port}{PRISM_API_PATH}"

        verify: bool | ssl.SSLContext
        if insecure:
            verify = False
        elif trust_bundle:
            verify = ssl.create_default_context()
            verify.load_verify_locations(cadata=trust_bundle)
        else:
            verify = True

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=(username, password),
            timeout=httpx.Timeout(timeout),
            verify=verify,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> PrismClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def get_task(self, task_uuid: str) -> dict[str, Any]:
        """Fetch a task resource.

        Raises:
            InvalidCredentialsError: On HTTP 401
            PrismClientError: On any other transport or HTTP failure
        """
        start_time = time.time()
        try:
            try:
                response = await self._client.get(f"/tasks/{task_uuid}")
            except httpx.HTTPError as e:
                metrics.api_call_total.labels(api_type="prism", operation="get_task", result="error").inc()
                raise PrismClientError(f"failed to query task {task_uuid}: {type(e).__name__}") from e

            if response.status_code == httpx.codes.UNAUTHORIZED:
                metrics.api_call_total.labels(api_type="prism", operation="get_task", result="unauthorized").inc()
                raise InvalidCredentialsError()
            if response.is_error:
                metrics.api_call_total.labels(api_type="prism", operation="get_task", result="error").inc()
                raise PrismClientError(
                    f"failed to query task {task_uuid}: HTTP {response.status_code}",
                    status_code=response.status_code,
                )

            try:
                task = response.json()
            except ValueError as e:
                metrics.api_call_total.labels(api_type="prism", operation="get_task", result="error").inc()
                raise PrismClientError(f"invalid response for task {task_uuid}") from e
            metrics.api_call_total.labels(api_type="prism", operation="get_task", result="success").inc()
            return task
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="prism", operation="get_task").observe(duration)


async def get_task_status(client: PrismClient, task_uuid: str) -> str:
    """Return the current status of a Prism Central task.

    Args:
        client: Connected Prism Central client
        task_uuid: Task identifier

    Returns:
        The status string; "SUCCEEDED" or a non-terminal status

    Raises:
        ValueError: If task_uuid is empty
        InvalidCredentialsError: If Prism Central rejects the credentials
        TaskFailedError: If the task reports an error detail or progress message
        PrismClientError: On other transport or HTTP failures
    """
    if not task_uuid:
        raise ValueError("task UUID must not be empty")

    task = await client.get_task(task_uuid)
    status = task.get("status") or ""
    metrics.task_polls_total.labels(status=status or "unknown").inc()

    if status == TASK_STATUS_SUCCEEDED:
        return status

    error_detail = task.get("error_detail") or ""
    progress_message = task.get("progress_message") or ""
    if error_detail or progress_message:
        raise TaskFailedError(status, error_detail, progress_message)

    logger.debug(f"Task {task_uuid} is {status or 'without status'}")
    return status
