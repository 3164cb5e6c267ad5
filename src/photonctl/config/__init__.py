from photonctl.config.loader import (
    CONFIG_PATH_ENVS,
    default_config_path,
    load_config,
    parse_config_file,
)
from photonctl.config.models import (
    ConfigInput,
    NamedRef,
    PhotonConfig,
    ResolvedConfig,
    RetryConfig,
    WaitConfig,
)

__all__ = [
    "CONFIG_PATH_ENVS",
    "ConfigInput",
    "NamedRef",
    "PhotonConfig",
    "ResolvedConfig",
    "RetryConfig",
    "WaitConfig",
    "default_config_path",
    "load_config",
    "parse_config_file",
]
