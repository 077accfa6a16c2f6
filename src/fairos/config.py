"""Client configuration from YAML, environment and explicit overrides.

Example fairos.yaml:

    fairos:
      base_url: ${FAIROS_URL:-http://localhost:9090/v1}
      cookie_name: fairOS-dfs
      timeout_seconds: 60
      max_idle_per_host: 20
      idle_timeout_seconds: 6000
      verify_ssl: true

Environment variables ARE supported using ${VAR_NAME} and
${VAR_NAME:-default} syntax in YAML files. Precedence, lowest first:
defaults, YAML, FAIROS_* environment variables, overrides argument.
"""

import logging
import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from fairos_core.http.transport import (
    DEFAULT_BASE_URL,
    DEFAULT_COOKIE_NAME,
    DEFAULT_TIMEOUT_SECONDS,
    IDLE_TIMEOUT_SECONDS,
    MAX_IDLE_PER_HOST,
)

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "FAIROS_CONFIG"

# Environment variable -> (field, converter)
ENV_OVERRIDES: Dict[str, tuple[str, Any]] = {
    "FAIROS_BASE_URL": ("base_url", str),
    "FAIROS_COOKIE_NAME": ("cookie_name", str),
    "FAIROS_TIMEOUT_SECONDS": ("timeout_seconds", float),
}


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ClientConfig:
    """Settings for one FairOSClient.

    Attributes:
        base_url: Service root including the API version (e.g. http://host:9090/v1)
        cookie_name: Name of the session cookie
        timeout_seconds: Total timeout per request
        max_idle_per_host: Connection pool limit per host
        idle_timeout_seconds: Keep-alive timeout for idle pooled connections
        verify_ssl: Verify TLS certificates for https base URLs
    """

    base_url: str = DEFAULT_BASE_URL
    cookie_name: str = DEFAULT_COOKIE_NAME
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_idle_per_host: int = MAX_IDLE_PER_HOST
    idle_timeout_seconds: int = IDLE_TIMEOUT_SECONDS
    verify_ssl: bool = True

    def validate(self) -> None:
        """Raise ValueError describing every invalid setting."""
        errors = []
        if not self.base_url.startswith(("http://", "https://")):
            errors.append(f"base_url must start with http:// or https://, got: {self.base_url!r}")
        if not self.cookie_name:
            errors.append("cookie_name must not be empty")
        if self.timeout_seconds <= 0:
            errors.append(f"timeout_seconds must be > 0, got: {self.timeout_seconds}")
        if self.max_idle_per_host <= 0:
            errors.append(f"max_idle_per_host must be > 0, got: {self.max_idle_per_host}")
        if self.idle_timeout_seconds <= 0:
            errors.append(f"idle_timeout_seconds must be > 0, got: {self.idle_timeout_seconds}")
        if errors:
            raise ValueError("Invalid FairOS client configuration:\n  - " + "\n  - ".join(errors))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning("Ignoring unknown config keys", extra={"keys": sorted(unknown)})
        values = {k: v for k, v in data.items() if k in known}
        config = cls(**values)
        config.timeout_seconds = float(config.timeout_seconds)
        config.max_idle_per_host = int(config.max_idle_per_host)
        config.idle_timeout_seconds = int(config.idle_timeout_seconds)
        config.verify_ssl = _parse_bool(config.verify_ssl)
        return config


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ClientConfig:
    """Load client configuration.

    Reads the YAML file at config_path (or $FAIROS_CONFIG when not given;
    defaults only when neither is set). Settings may sit at the top level
    or under a `fairos:` section.

    Raises:
        FileNotFoundError: An explicit config path does not exist
        ValueError: Validation failed
    """
    if config_path is None and os.getenv(CONFIG_PATH_ENV):
        config_path = os.environ[CONFIG_PATH_ENV]

    data: Dict[str, Any] = {}
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        logger.info(f"Loading configuration from file: {config_path}")
        yaml_data = _expand_env_vars(load_yaml(config_path))
        if "fairos" in yaml_data:
            data = dict(yaml_data["fairos"] or {})
        else:
            data = dict(yaml_data)

    for env_var, (key, converter) in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            data[key] = converter(value)

    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        data.update(overrides)

    config = ClientConfig.from_dict(data)
    config.validate()
    logger.debug(
        "Configuration loaded",
        extra={"base_url": config.base_url, "timeout_seconds": config.timeout_seconds},
    )
    return config


__all__ = [
    "CONFIG_PATH_ENV",
    "ClientConfig",
    "load_config",
]
