from __future__ import annotations

import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from photonctl.config.models import ConfigInput, PhotonConfig, ResolvedConfig
from photonctl.constants import DEFAULT_CONFIG_FILE
from photonctl.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENVS = ("PHOTON_CONFIG", "PHOTON_CONFIG_FILE")


def default_config_path() -> Path:
    return Path(DEFAULT_CONFIG_FILE).expanduser()


def _decode_raw(raw: str, *, suffix: str) -> dict[str, Any]:
    if suffix in {".yaml", ".yml"}:
        parsed = yaml.safe_load(raw) or {}
    elif suffix == ".json":
        parsed = json.loads(raw)
    elif suffix == ".toml":
        parsed = tomllib.loads(raw)
    else:
        # TOML rejects YAML, so it goes first; the legacy ~/.photon-config is YAML.
        for decode in (tomllib.loads, yaml.safe_load, json.loads):
            try:
                parsed = decode(raw) or {}
                break
            except (ValueError, yaml.YAMLError):
                continue
        else:
            raise ConfigError("failed to auto-detect config format (expected yaml/json/toml)")

    if not isinstance(parsed, dict):
        raise ConfigError("config must decode to an object/map")
    return parsed


def parse_config_file(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")
    return _decode_raw(raw, suffix=path.suffix.lower())


def _load_from_path(path: Path, *, source: str) -> ResolvedConfig:
    try:
        payload = parse_config_file(path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to parse config file '{path}': {exc}") from exc

    try:
        data = PhotonConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"invalid config structure for '{path}': {exc}") from exc

    logger.debug("loaded config from %s (%s)", path, source)
    return ResolvedConfig(source=source, path=path.resolve(), data=data)


def load_config(
    config: ConfigInput | str | Path | None = None,
    *,
    config_path: str | Path | None = None,
) -> ResolvedConfig:
    """Load and validate CLI configuration.

    Precedence: runtime object/dict, explicit path, ``PHOTON_CONFIG`` env,
    then ``~/.photon-config``. A missing file yields empty defaults.
    """

    if isinstance(config, (str, Path)) and config_path is None:
        config_path = config
        config = None

    if config is not None:
        if isinstance(config, PhotonConfig):
            return ResolvedConfig(source="runtime-model", data=config)
        try:
            return ResolvedConfig(source="runtime-dict", data=PhotonConfig.model_validate(config))
        except ValidationError as exc:
            raise ConfigError(f"invalid runtime config: {exc}") from exc

    if config_path is not None:
        path = Path(config_path).expanduser().resolve()
        if not path.exists():
            return ResolvedConfig(source="explicit-path-missing", path=path, data=PhotonConfig())
        return _load_from_path(path, source="explicit-path")

    for env_name in CONFIG_PATH_ENVS:
        env_path = os.getenv(env_name)
        if not env_path:
            continue
        path = Path(env_path).expanduser().resolve()
        if not path.exists():
            return ResolvedConfig(source=f"env:{env_name}:missing", path=path, data=PhotonConfig())
        return _load_from_path(path, source=f"env:{env_name}")

    default = default_config_path()
    if default.exists():
        return _load_from_path(default, source="default-path")

    return ResolvedConfig(source="default-empty", path=default.resolve(), data=PhotonConfig())
