"""Configuration management for the attack SDK."""

import json
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from filelock import FileLock
from pydantic import BaseModel


class Credentials(BaseModel):
    """Contents of the user credentials file."""
    api_key: str = ""
    base_url: str = ""


class Configuration:
    """Manages SDK settings, stored credentials and environment overrides."""

    def __init__(self, settings_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables.

        Args:
            settings_path: YAML settings file; defaults to the packaged config.yaml.
        """
        self.load_env()  # Load .env for API keys
        self._config = self._load_yaml_config(settings_path)
        self._credentials: Credentials | None = None

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self, settings_path: str | None) -> dict[str, Any]:
        """Load settings from YAML file."""
        config_path = settings_path or os.path.join(
            os.path.dirname(__file__), "config.yaml"
        )
        with open(config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    @staticmethod
    def credentials_path() -> Path:
        """Return the path of the credentials file.

        FOURCORE_CONFIG_PATH overrides the default ~/.fourcore/config.json.
        """
        override = os.getenv("FOURCORE_CONFIG_PATH")
        if override:
            return Path(override)
        return Path.home() / ".fourcore" / "config.json"

    def load_credentials(self) -> Credentials:
        """Load stored credentials.

        Returns:
            Stored credentials, or empty defaults when the file is missing
            or empty.

        Raises:
            ValueError: If the file cannot be read or is not valid JSON.
        """
        path = self.credentials_path()
        if not path.exists():
            return Credentials()

        try:
            data = path.read_text()
        except OSError as e:
            raise ValueError(f"failed to read config file '{path}': {e}") from e

        if not data.strip():
            return Credentials()

        try:
            return Credentials.model_validate(json.loads(data))
        except ValueError as e:
            raise ValueError(
                f"failed to parse config file '{path}': {e}. Content: {data}"
            ) from e

    def save_credentials(self, credentials: Credentials) -> Path:
        """Save credentials, readable and writable by the current user only.

        Returns:
            Path of the written file.
        """
        path = self.credentials_path()
        path.parent.mkdir(mode=0o750, parents=True, exist_ok=True)

        with FileLock(f"{path}.lock", timeout=10.0):
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w") as file:
                file.write(json.dumps(credentials.model_dump(), indent=2))
            os.chmod(path, 0o600)

        self._credentials = credentials
        return path

    @property
    def credentials(self) -> Credentials:
        """Stored credentials, loaded once."""
        if self._credentials is None:
            self._credentials = self.load_credentials()
        return self._credentials

    @property
    def api_key(self) -> str:
        """Get the API key.

        FOURCORE_API_KEY takes precedence over the credentials file.

        Raises:
            ValueError: If no API key is configured.
        """
        api_key = os.getenv("FOURCORE_API_KEY") or self.credentials.api_key
        if not api_key:
            raise ValueError(
                "API key not found: set FOURCORE_API_KEY or run the config "
                f"command to store one in {self.credentials_path()}"
            )
        return api_key

    @property
    def base_url(self) -> str:
        """Get the API base URL.

        FOURCORE_BASE_URL takes precedence over the credentials file, which in
        turn takes precedence over client.default_base_url.
        """
        return (
            os.getenv("FOURCORE_BASE_URL")
            or self.credentials.base_url
            or self.get_client_config()["default_base_url"]
        )

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full settings dictionary."""
        return self._config

    def get_client_config(self) -> dict[str, Any]:
        """Get HTTP client configuration.

        Returns:
            Client configuration dictionary with validated values.

        Raises:
            ValueError: If required client parameters are missing or invalid.
        """
        client_config = self._config.get("client", {})

        required_keys = [
            "default_base_url", "timeout", "requests_per_minute",
            "max_admission_wait",
        ]
        for key in required_keys:
            if key not in client_config:
                raise ValueError(
                    f"client.{key} must be explicitly configured in config.yaml"
                )

        if client_config["timeout"] <= 0:
            raise ValueError("client.timeout must be positive")
        if client_config["requests_per_minute"] < 1:
            raise ValueError("client.requests_per_minute must be at least 1")
        if client_config["max_admission_wait"] < 0:
            raise ValueError("client.max_admission_wait must not be negative")

        return client_config

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML."""
        return self._config.get("logging", {"level": "INFO"})
