"""
Configuration Management Module

This module provides a centralized way to load and access configuration settings
from the config.yaml file. It uses the Singleton pattern to ensure only one
configuration instance exists throughout the application.

Two environment variables take precedence over the file:
    AUTH_CONFIG_PATH: Path to an alternative config file.
    AUTH_ENV: Overrides the top-level "environment" value.

Usage:
    from core.config import get_config
    config = get_config()
    token_config = config["token"]
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional


# Store the singleton instance (module-level variable)
_config_instance: Optional[Dict[str, Any]] = None

CONFIG_PATH_ENV = "AUTH_CONFIG_PATH"
ENVIRONMENT_ENV = "AUTH_ENV"


def get_project_root() -> Path:
    """
    Find the project root directory.

    The project root is identified by the presence of config.yaml file.
    This function walks up the directory tree from this file's location
    until it finds config.yaml.

    Returns:
        Path: The absolute path to the project root directory.

    Raises:
        FileNotFoundError: If config.yaml cannot be found in any parent directory.
    """
    current_dir = Path(__file__).resolve().parent

    while current_dir != current_dir.parent:
        config_path = current_dir / "config.yaml"
        if config_path.exists():
            return current_dir
        current_dir = current_dir.parent

    raise FileNotFoundError(
        "Could not find config.yaml in any parent directory. "
        "Make sure you're running from within the project directory."
    )


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Optional path to the config file. If not provided,
                     AUTH_CONFIG_PATH is consulted, then the default
                     config.yaml in the project root.

    Returns:
        Dict containing all configuration values.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the config file contains invalid YAML.
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_PATH_ENV)

    if config_path is None:
        config_path = get_project_root() / "config.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    env_override = os.environ.get(ENVIRONMENT_ENV)
    if env_override:
        config["environment"] = env_override

    return config


def get_config(reload: bool = False) -> Dict[str, Any]:
    """
    Get the configuration singleton.

    Args:
        reload: If True, forces reloading the configuration from disk.
                Useful for testing or if the config file has changed.

    Returns:
        Dict containing all configuration values.

    Example:
        config = get_config()
        threshold = config["face_matching"]["threshold"]
    """
    global _config_instance

    if _config_instance is None or reload:
        _config_instance = load_config()

    return _config_instance


def get_section(section_name: str) -> Dict[str, Any]:
    """
    Get a specific section from the configuration.

    Args:
        section_name: Name of the configuration section
                      (e.g., "password", "token", "storage")

    Returns:
        Dict containing the section's configuration values.

    Raises:
        KeyError: If the section doesn't exist in the configuration.
    """
    config = get_config()

    if section_name not in config:
        raise KeyError(
            f"Configuration section '{section_name}' not found. "
            f"Available sections: {list(config.keys())}"
        )

    return config[section_name]


def get_environment() -> str:
    """Return the deployment environment name ("development" if unset)."""
    return str(get_config().get("environment", "development")).lower()


def is_production() -> bool:
    return get_environment() == "production"


# Convenience functions for commonly used configuration sections
def get_password_config() -> Dict[str, Any]:
    """Get password hashing configuration."""
    return get_section("password")


def get_token_config() -> Dict[str, Any]:
    """Get bearer token configuration."""
    return get_section("token")


def get_matching_config() -> Dict[str, Any]:
    """Get face embedding matching configuration."""
    return get_section("face_matching")


def get_storage_config() -> Dict[str, Any]:
    """Get storage configuration."""
    return get_section("storage")


def get_api_config() -> Dict[str, Any]:
    """Get API configuration."""
    return get_section("api")


def get_logging_config() -> Dict[str, Any]:
    """Get logging configuration, empty if the section is absent."""
    return get_config().get("logging", {}) or {}


def get_server_config() -> Dict[str, Any]:
    """
    Get server configuration for the API.

    Returns:
        Dict with host and port for the API server.
    """
    api_config = get_api_config()
    base_url = api_config.get("base_url", "http://localhost:8000")

    # Format: http://host:port
    host = "0.0.0.0"
    port = 8000

    try:
        url_part = base_url.split("//")[-1]
        if ":" in url_part:
            host_part, port_str = url_part.rsplit(":", 1)
            port = int(port_str.rstrip("/"))
            if host_part != "localhost":
                host = host_part
    except (ValueError, IndexError):
        pass

    return {"host": host, "port": port}
