"""
Persisted key-value configuration for prakasa-env.

The store is an explicitly constructed object, passed by reference to
whatever needs it (the ExecutionContext, the CLI). Values are kept as
strings and written to a YAML mapping.

Every read and write holds a reentrant lock: ``load`` calls ``save`` when
the file does not exist yet, and both call the getters and setters.

Usage:
    store = ConfigStore("/path/to/config.yaml", logger=logger)
    store.load()
    distro = store.get_value(KEY_WSL_LINUX_DISTRO)
    store.set_value(KEY_PROXY_URL, "http://proxy:3128")
    store.flush()
"""

import logging
import os
import threading
from typing import Dict, Optional

import yaml

from prakasa_env.config import (
    BUILTIN_CONFIG_DEFAULTS,
    DEFAULT_CONFIG_PATH,
    VALID_CONFIG_KEYS,
)
from prakasa_env.error_messages import format_error
from prakasa_env.errors import ConfigurationError, ErrorCode

CONFIG_FILE_HEADER = (
    "# prakasa-env configuration file\n"
    "# Generated automatically, edit with 'prakasa-env config set <key> <value>'\n"
)


class ConfigStore:
    """
    Configuration store backed by a YAML file.

    Attributes:
        path: Location of the configuration file.
    """

    def __init__(self, path: Optional[str] = None, logger: Optional[logging.Logger] = None):
        self._lock = threading.RLock()
        self._path = path or DEFAULT_CONFIG_PATH
        self._values: Dict[str, str] = {}
        self.logger = logger or logging.getLogger(__name__)
        self._init_defaults()

    @property
    def path(self) -> str:
        with self._lock:
            return self._path

    def _init_defaults(self) -> None:
        with self._lock:
            for key, value in BUILTIN_CONFIG_DEFAULTS.items():
                self._values[key] = value

    def load(self, path: Optional[str] = None) -> "ConfigStore":
        """
        Reset to defaults and read the configuration file.

        A missing file is created with the default values. Built-in keys that
        are blank in the file are restored to their defaults.

        Raises:
            ConfigurationError: If the file is not valid YAML or not a mapping.
        """
        with self._lock:
            if path:
                self._path = path
            self._values.clear()
            self._init_defaults()

            if not os.path.isfile(self._path):
                self.logger.info(f"Config file not found, creating default config: {self._path}")
                self.save()
                return self

            try:
                with open(self._path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    format_error('CONFIG_PARSE_ERROR', path=self._path, error=e),
                    path=self._path,
                    code=ErrorCode.CONFIG_PARSE_ERROR,
                ) from e

            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise ConfigurationError(
                    format_error('CONFIG_NOT_MAPPING', path=self._path),
                    path=self._path,
                    actual=type(data).__name__,
                    code=ErrorCode.CONFIG_PARSE_ERROR,
                )

            for key, value in data.items():
                self.set_value(str(key), "" if value is None else str(value))

            for key, default in BUILTIN_CONFIG_DEFAULTS.items():
                if not self.get_value(key):
                    self.set_value(key, default)
                    self.logger.debug(f"Protected builtin config key '{key}' restored to default value")

            self.logger.debug(f"Config loaded successfully from {self._path}")
            return self

    def save(self, path: Optional[str] = None) -> None:
        """
        Write all values to the configuration file, sorted by key.

        Raises:
            ConfigurationError: If the file cannot be written.
        """
        with self._lock:
            if path:
                self._path = path
            directory = os.path.dirname(os.path.abspath(self._path))
            try:
                os.makedirs(directory, exist_ok=True)
                with open(self._path, 'w', encoding='utf-8') as f:
                    f.write(CONFIG_FILE_HEADER)
                    yaml.safe_dump(self.all_values(), f, default_flow_style=False, sort_keys=True)
            except OSError as e:
                raise ConfigurationError(
                    f"Failed to write config file: {e}",
                    path=self._path,
                    code=ErrorCode.CONFIG_WRITE_FAILED,
                ) from e
            self.logger.debug(f"Config saved successfully to {self._path}")

    def flush(self) -> None:
        """Persist the current values. Called once on shutdown."""
        self.save()

    def get_value(self, key: str, default: str = "") -> str:
        with self._lock:
            return self._values.get(key, default)

    def set_value(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def unset_value(self, key: str) -> None:
        """Remove a key. Built-in keys fall back to their default instead."""
        with self._lock:
            if key in BUILTIN_CONFIG_DEFAULTS:
                self._values[key] = BUILTIN_CONFIG_DEFAULTS[key]
            else:
                self._values.pop(key, None)

    def has_value(self, key: str) -> bool:
        with self._lock:
            return key in self._values

    @staticmethod
    def is_valid_key(key: str) -> bool:
        return key in VALID_CONFIG_KEYS

    def require_valid_key(self, key: str) -> None:
        """
        Raises:
            ConfigurationError: If ``key`` is not a supported configuration key.
        """
        if not self.is_valid_key(key):
            raise ConfigurationError(
                format_error('CONFIG_UNKNOWN_KEY', key=key, keys=", ".join(VALID_CONFIG_KEYS)),
                key=key,
                code=ErrorCode.CONFIG_UNKNOWN_KEY,
            )

    def reset_to_defaults(self) -> None:
        with self._lock:
            self._values.clear()
            self._init_defaults()
            self.logger.info("Configuration reset to default values")

    def all_values(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._values)
