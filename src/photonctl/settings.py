from __future__ import annotations

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class RuntimeSettings(BaseSettings):
    """Environment-driven runtime overrides for client resolution."""

    model_config = SettingsConfigDict(
        env_prefix="PHOTON_",
        extra="ignore",
        populate_by_name=True,
        case_sensitive=False,
    )

    target: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PHOTON_TARGET", "PHOTON_CLOUD_TARGET"),
    )
    token: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("PHOTON_TOKEN", "PHOTON_ACCESS_TOKEN"),
    )
    ignore_certificate: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("PHOTON_IGNORE_CERTIFICATE", "PHOTON_INSECURE"),
    )
    request_timeout_seconds: float | None = Field(
        default=None,
        validation_alias=AliasChoices("PHOTON_REQUEST_TIMEOUT_SECONDS", "PHOTON_REQUEST_TIMEOUT"),
    )
    tenant: str | None = Field(default=None, validation_alias=AliasChoices("PHOTON_TENANT"))
    project: str | None = Field(default=None, validation_alias=AliasChoices("PHOTON_PROJECT"))
