from __future__ import annotations

import json
import logging
import os
from typing import Union

from .core.config import GeometryConfig
from .core.errors import ConfigError

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def load_config(path: PathLike) -> GeometryConfig:
    """Read a geometry configuration from a JSON file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            cfg = json.load(f)
    except OSError as e:
        raise ConfigError(f"Failed to load configuration: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Configuration is not valid JSON: {e}") from e
    config = GeometryConfig.from_dict(cfg)
    logger.info(f"Configuration loaded from {path}")
    return config


def save_config(config: GeometryConfig, path: PathLike) -> None:
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(config.to_dict(), f, indent=2)
    except OSError as e:
        raise ConfigError(f"Failed to save configuration: {e}") from e
    logger.info(f"Configuration saved to {path}")
