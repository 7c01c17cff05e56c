"""Loading and caching of the routing configuration snapshot."""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pydantic

from hookrelay.core.exceptions import ConfigurationError
from hookrelay.core.logging import get_logger
from hookrelay.core.models import RoutingConfig

logger = get_logger(__name__)


def parse_routing_config(raw: str | bytes) -> RoutingConfig:
    """Validate a JSON document into a RoutingConfig.

    Raises:
        ConfigurationError: If the document is not JSON or fails validation.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Invalid JSON in routing configuration: {e}") from e

    try:
        return RoutingConfig.model_validate(data)
    except pydantic.ValidationError as e:
        raise ConfigurationError(
            "Invalid routing configuration",
            detail=str(e),
        ) from e


def load_routing_config(path: Path) -> RoutingConfig:
    """Read and validate the routing configuration file."""
    if not path.is_file():
        raise ConfigurationError(f"Routing configuration not found at {path}")

    config = parse_routing_config(path.read_bytes())
    logger.info(
        "routing_config_loaded",
        path=str(path),
        repositories=len(config.repositories),
    )
    return config


class RoutingConfigStore:
    """Lazily loaded, process-wide routing configuration.

    The snapshot is read on first use and replaced wholesale by ``reload()``;
    readers always see either the old or the new snapshot, never a mix.
    """

    def __init__(self, path: Path | None = None, config: RoutingConfig | None = None) -> None:
        if path is None and config is None:
            raise ValueError("RoutingConfigStore needs a path or a preloaded config")
        self._path = path
        self._config = config
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: RoutingConfig) -> RoutingConfigStore:
        return cls(config=config)

    def get(self) -> RoutingConfig:
        config = self._config
        if config is not None:
            return config

        with self._lock:
            if self._config is None:
                self._config = self._load()
            return self._config

    def reload(self) -> RoutingConfig:
        """Re-read the file and swap in the new snapshot.

        On failure the previous snapshot stays in place.
        """
        fresh = self._load()
        with self._lock:
            self._config = fresh
        logger.info("routing_config_reloaded", repositories=len(fresh.repositories))
        return fresh

    def _load(self) -> RoutingConfig:
        if self._path is None:
            if self._config is None:
                raise ConfigurationError("No routing configuration available")
            return self._config
        return load_routing_config(self._path)
