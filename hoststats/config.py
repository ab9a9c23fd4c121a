"""
Configuration constants and loader for hoststats.

The configuration document is JSON (files ending in .json, read with
json.load) or YAML (anything else, read with yaml.safe_load). Keys are
matched case-insensitively so that the historical layout keeps working:

    {
        "Outpath": "hoststats.csv",
        "VCenters": [
            {"Hostname": "vc01.example.com", "Username": "ro", "Password": "..."}
        ]
    }

The equivalent YAML layout:

    output_path: hoststats.csv
    workers: 4
    endpoints:
      - hostname: vc01.example.com
        username: ro
        password_env: VC01_PASSWORD
"""

import enum
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from hoststats.errors import ConfigError, ErrorCode


def check_env(setting, default_value=None):
    """
    Return the value of an environment variable, converting 'true'/'false'
    to booleans. Falls back to default_value when the variable is unset.
    """
    value = os.environ.get(setting, default_value)
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return value


HOSTSTATS_DEBUG = check_env("HOSTSTATS_DEBUG", False)

DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_VSPHERE_PORT = 443
LOGGER_NAME = "HostStats"


class EXIT_CODE(enum.IntEnum):
    SUCCESS = 0
    PARTIAL_FAILURE = 1
    CONFIG_ERROR = 2
    SINK_ERROR = 3
    INTERRUPTED = 4
    ERROR = 5


@dataclass
class EndpointDefinition:
    """One vCenter/ESXi endpoint to collect from."""
    hostname: str
    username: str = ""
    password: str = field(default="", repr=False)
    port: int = DEFAULT_VSPHERE_PORT
    insecure: bool = True

    @property
    def identity(self) -> str:
        if self.port == DEFAULT_VSPHERE_PORT:
            return self.hostname
        return f"{self.hostname}:{self.port}"


@dataclass
class Configuration:
    """Top-level hoststats configuration."""
    output_path: str
    endpoints: List[EndpointDefinition] = field(default_factory=list)
    workers: Optional[int] = None


_OUTPUT_KEYS = ("outpath", "output_path", "output")
_ENDPOINT_LIST_KEYS = ("vcenters", "endpoints")
_HOSTNAME_KEYS = ("hostname", "host")
_USERNAME_KEYS = ("username", "user")
_PASSWORD_KEYS = ("password", "secret")


def _lower_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {str(k).lower(): v for k, v in data.items()}


def _first(data: Dict[str, Any], keys, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _parse_bool(value: Any, parameter: str, path: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "1", "false", "no", "0"):
        return value.strip().lower() in ("true", "yes", "1")
    raise ConfigError(
        f"Invalid boolean value: {value!r}",
        path=path,
        parameter=parameter,
        code=ErrorCode.CONFIG_INVALID_VALUE
    )


def _parse_positive_int(value: Any, parameter: str, path: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = 0
    if isinstance(value, bool) or number < 1:
        raise ConfigError(
            f"Expected a positive integer, got {value!r}",
            path=path,
            parameter=parameter,
            code=ErrorCode.CONFIG_INVALID_VALUE
        )
    return number


def parse_endpoint(raw: Any, position: int, path: str = None) -> EndpointDefinition:
    """Build an EndpointDefinition from one entry of the endpoint list.

    The secret is read from the environment variable named by
    ``password_env`` when present, otherwise from ``password``/``secret``.
    """
    parameter = f"endpoints[{position}]"
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Endpoint entry {position} must be a mapping",
            path=path,
            parameter=parameter,
            code=ErrorCode.CONFIG_INVALID_VALUE
        )

    data = _lower_keys(raw)
    hostname = str(_first(data, _HOSTNAME_KEYS, "")).strip()
    if not hostname:
        raise ConfigError(
            f"Endpoint entry {position} has no hostname",
            path=path,
            parameter=f"{parameter}.hostname",
            code=ErrorCode.CONFIG_MISSING_REQUIRED
        )

    password = str(_first(data, _PASSWORD_KEYS, ""))
    password_env = data.get("password_env")
    if password_env:
        password = os.environ.get(str(password_env), password)

    endpoint = EndpointDefinition(
        hostname=hostname,
        username=str(_first(data, _USERNAME_KEYS, "")),
        password=password,
    )
    if "port" in data:
        endpoint.port = _parse_positive_int(data["port"], f"{parameter}.port", path)
    if "insecure" in data:
        endpoint.insecure = _parse_bool(data["insecure"], f"{parameter}.insecure", path)
    return endpoint


def parse_config(data: Any, path: str = None) -> Configuration:
    """Validate a decoded configuration document.

    Raises:
        ConfigError: If the document is not a mapping, has no output path,
            or holds an invalid endpoint list.
    """
    if not isinstance(data, dict):
        raise ConfigError(
            "Configuration document must be a mapping",
            path=path,
            code=ErrorCode.CONFIG_PARSE_ERROR
        )

    data = _lower_keys(data)
    output_path = _first(data, _OUTPUT_KEYS)
    if not output_path:
        raise ConfigError(
            "No output path configured",
            path=path,
            parameter="outpath",
            code=ErrorCode.CONFIG_MISSING_REQUIRED
        )

    raw_endpoints = _first(data, _ENDPOINT_LIST_KEYS, [])
    if not isinstance(raw_endpoints, list):
        raise ConfigError(
            "Endpoint list must be a sequence",
            path=path,
            parameter="vcenters",
            code=ErrorCode.CONFIG_INVALID_VALUE
        )

    config = Configuration(
        output_path=str(output_path),
        endpoints=[parse_endpoint(raw, i, path) for i, raw in enumerate(raw_endpoints)],
    )
    if data.get("workers") is not None:
        config.workers = _parse_positive_int(data["workers"], "workers", path)
    return config


def load_config(path: str) -> Configuration:
    """Load and validate the configuration file.

    Args:
        path: Path to a YAML or JSON configuration file.

    Returns:
        Parsed Configuration instance.

    Raises:
        ConfigError: If the file is missing, unreadable or malformed.
    """
    p = Path(path)
    if not p.is_file():
        raise ConfigError(
            f"Configuration file not found: {path}",
            path=str(path),
            code=ErrorCode.CONFIG_FILE_NOT_FOUND
        )

    try:
        with open(p, encoding="utf-8") as f:
            if p.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
        raise ConfigError(
            f"Could not decode configuration file: {e}",
            path=str(path),
            code=ErrorCode.CONFIG_PARSE_ERROR
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Could not open configuration file: {e}",
            path=str(path),
            code=ErrorCode.CONFIG_FILE_NOT_FOUND
        ) from e

    return parse_config(data, path=str(path))
