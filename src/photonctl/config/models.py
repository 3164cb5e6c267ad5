from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr, field_validator

from photonctl.constants import (
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ENTITY_POLL_INTERVAL_SECONDS,
    ENTITY_RETRY_BUDGET,
    ENTITY_TIMEOUT_SECONDS,
    TASK_POLL_INTERVAL_SECONDS,
    TASK_TIMEOUT_SECONDS,
)


class RetryConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_attempts: int = 4
    base_delay: float = 0.2
    max_delay: float = 2.5
    jitter: float = 0.2
    retry_statuses: list[int] = Field(default_factory=lambda: [429, 500, 502, 503, 504])


class WaitConfig(BaseModel):
    """Polling cadence and limits for task and readiness waits."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    task_poll_interval: float = Field(
        default=TASK_POLL_INTERVAL_SECONDS,
        gt=0,
        validation_alias=AliasChoices("task_poll_interval", "taskPollInterval"),
    )
    # 0 disables the task deadline.
    task_timeout_seconds: float = Field(
        default=TASK_TIMEOUT_SECONDS,
        ge=0,
        validation_alias=AliasChoices("task_timeout_seconds", "taskTimeoutSeconds"),
    )
    entity_poll_interval: float = Field(
        default=ENTITY_POLL_INTERVAL_SECONDS,
        gt=0,
        validation_alias=AliasChoices("entity_poll_interval", "entityPollInterval"),
    )
    entity_timeout_seconds: float = Field(
        default=ENTITY_TIMEOUT_SECONDS,
        gt=0,
        validation_alias=AliasChoices("entity_timeout_seconds", "entityTimeoutSeconds"),
    )
    entity_retry_budget: int = Field(
        default=ENTITY_RETRY_BUDGET,
        ge=0,
        validation_alias=AliasChoices("entity_retry_budget", "entityRetryBudget"),
    )

    @property
    def task_timeout(self) -> float | None:
        return self.task_timeout_seconds or None


class NamedRef(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "Name"))
    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "ID"))


class PhotonConfig(BaseModel):
    """Root configuration model, compatible with the legacy camelCase file layout."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    cloud_target: str | None = Field(
        default=None,
        validation_alias=AliasChoices("cloud_target", "cloudTarget", "CloudTarget", "target"),
    )
    token: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("token", "Token", "access_token", "accessToken"),
    )
    ignore_certificate: bool = Field(
        default=False,
        validation_alias=AliasChoices("ignore_certificate", "ignoreCertificate", "IgnoreCertificate"),
    )
    tenant: NamedRef | None = Field(default=None, validation_alias=AliasChoices("tenant", "Tenant"))
    project: NamedRef | None = Field(default=None, validation_alias=AliasChoices("project", "Project"))
    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT_SECONDS,
        gt=0,
        validation_alias=AliasChoices("request_timeout_seconds", "requestTimeoutSeconds"),
    )

    retry: RetryConfig = Field(default_factory=RetryConfig)
    waits: WaitConfig = Field(default_factory=WaitConfig)

    @field_validator("cloud_target")
    @classmethod
    def strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip().rstrip("/")
        return stripped or None


class ResolvedConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    source: str
    path: Path | None = None
    data: PhotonConfig


ConfigInput = PhotonConfig | dict[str, Any]
