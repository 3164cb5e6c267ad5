from photonctl.client import AsyncPhotonClient, connect
from photonctl.config.models import PhotonConfig, RetryConfig, WaitConfig
from photonctl.errors import (
    APIError,
    ConfigError,
    EntityError,
    FetchRetriesExhaustedError,
    PhotonError,
    RequestError,
    TaskError,
    WaitError,
    WaitTimeoutError,
)
from photonctl.waiters import ReadinessWaiter, TaskWaiter, wait_for_entity_ready, wait_for_task_completion

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "APIError",
    "AsyncPhotonClient",
    "ConfigError",
    "EntityError",
    "FetchRetriesExhaustedError",
    "PhotonConfig",
    "PhotonError",
    "ReadinessWaiter",
    "RequestError",
    "RetryConfig",
    "TaskError",
    "TaskWaiter",
    "WaitConfig",
    "WaitError",
    "WaitTimeoutError",
    "connect",
    "wait_for_entity_ready",
    "wait_for_task_completion",
]
