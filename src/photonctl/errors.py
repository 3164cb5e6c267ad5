from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from photonctl.models.tasks import ApiErrorDetail, Task


class PhotonError(Exception):
    """Base error type for the photonctl SDK."""


class ConfigError(PhotonError):
    """Raised when configuration cannot be loaded or validated."""


class RequestError(PhotonError):
    """Raised when an HTTP request fails after retries."""


@dataclass(slots=True)
class APIError(RequestError):
    """Represents a non-success control plane API response."""

    status_code: int
    message: str
    body: str | None = None
    code: str | None = None

    def __str__(self) -> str:
        prefix = f"HTTP {self.status_code}"
        if self.code:
            prefix = f"{prefix} {self.code}"
        if self.body:
            return f"{prefix}: {self.message} ({self.body})"
        return f"{prefix}: {self.message}"


class WaitError(PhotonError):
    """Base error for task and readiness waits."""


class TaskError(WaitError):
    """Raised when a task finishes in the ERROR state."""

    def __init__(self, task: Task) -> None:
        self.task = task
        self.api_errors: list[ApiErrorDetail] = task.api_errors()
        message = f"task {task.id} failed: {task.operation or 'operation'} entered ERROR state"
        if self.api_errors:
            details = ", ".join(str(item) for item in self.api_errors)
            message = f"{message}\nAPI Errors: {details}"
        super().__init__(message)


class EntityError(WaitError):
    """Raised when a polled entity enters the ERROR state."""

    def __init__(self, kind: str, entity_id: str) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} entered ERROR state")


class FetchRetriesExhaustedError(WaitError):
    """Raised when too many consecutive fetches fail during a readiness wait."""

    def __init__(self, kind: str, entity_id: str, attempts: int) -> None:
        self.kind = kind
        self.entity_id = entity_id
        self.attempts = attempts
        super().__init__(f"giving up on {kind} {entity_id} after {attempts} consecutive failed fetches")


class WaitTimeoutError(WaitError):
    """Raised when a wait exceeds its wall-clock deadline."""

    def __init__(self, description: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"timed out after {timeout:g}s while waiting for {description}")
