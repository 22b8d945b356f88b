"""Server configuration loader.

Loads optional settings from a YAML file. Every setting has a built-in
default, so the server also runs without a configuration file.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from mcp_echo_server.protocol.lifecycle import DEFAULT_SERVER_NAME, DEFAULT_SERVER_VERSION
from mcp_echo_server.protocol.transport import DEFAULT_MAX_MESSAGE_SIZE


class ConfigLoadError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def expand_env_vars(value: str) -> str:
    """Expand environment variables in a string.

    Supports ${VAR_NAME} syntax. Unknown variables are left unchanged.

    Args:
        value: String potentially containing environment variable references.

    Returns:
        String with known environment variables expanded.
    """
    pattern = re.compile(r"\$\{([^}]+)\}")

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value
        if var_name == "HOME":
            return os.path.expanduser("~")
        return match.group(0)

    return pattern.sub(replacer, value)


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration."""

    version: str = "1.0"

    # Server identity reported by initialize
    server_name: str = DEFAULT_SERVER_NAME
    server_version: str = DEFAULT_SERVER_VERSION

    # Transport settings
    max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE

    # Audit settings (empty path disables the audit trail)
    audit_log_file: str = ""

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> ServerConfig:
        """Create a ServerConfig from a configuration dictionary.

        Args:
            config: Dictionary parsed from YAML configuration.

        Returns:
            ServerConfig with defaults for missing settings.

        Raises:
            ConfigLoadError: If a setting has the wrong type or range.
        """
        server = config.get("server") or {}
        transport = config.get("transport") or {}
        audit = config.get("audit") or {}

        max_message_size = transport.get("max_message_size", DEFAULT_MAX_MESSAGE_SIZE)
        if (
            not isinstance(max_message_size, int)
            or isinstance(max_message_size, bool)
            or max_message_size <= 0
        ):
            raise ConfigLoadError(
                f"transport.max_message_size must be a positive integer, got {max_message_size!r}"
            )

        return cls(
            version=str(config.get("version", "1.0")),
            server_name=str(server.get("name", DEFAULT_SERVER_NAME)),
            server_version=str(server.get("version", DEFAULT_SERVER_VERSION)),
            max_message_size=max_message_size,
            audit_log_file=expand_env_vars(str(audit.get("log_file") or "")),
        )

    @property
    def server_info(self) -> dict[str, str]:
        """Server identity in MCP serverInfo format."""
        return {"name": self.server_name, "version": self.server_version}

    @property
    def audit_log_path(self) -> Path | None:
        """Audit log path, or None when auditing is disabled."""
        return Path(self.audit_log_file) if self.audit_log_file else None


def load_config(path: Path) -> ServerConfig:
    """Load server configuration from a YAML file.

    Args:
        path: Path to the configuration YAML file.

    Returns:
        ServerConfig instance.

    Raises:
        ConfigLoadError: If the file cannot be found, parsed, or validated.
    """
    if not path.exists():
        raise ConfigLoadError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse config YAML: {e}") from e

    if not isinstance(config, dict):
        raise ConfigLoadError("Config must be a YAML mapping")

    if "version" not in config:
        raise ConfigLoadError("Config must include 'version' field")

    for section in ("server", "transport", "audit"):
        if config.get(section) is not None and not isinstance(config[section], dict):
            raise ConfigLoadError(f"Config section '{section}' must be a mapping")

    return ServerConfig.from_dict(config)
