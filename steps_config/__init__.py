"""
steps_config -- single public entrypoint for application configuration.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains settings.
    YAML loading and parsing live in ``steps_config.loader``.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``ValueError`` -- unknown keys or invalid values in the file.

Audit relevance:
    Every call logs a ``STEPS_CONFIG_TRACE`` record carrying the checksum of
    the parsed file, tying persisted records to the configuration in force.
"""

from __future__ import annotations

import logging
from pathlib import Path

from steps_config.loader import load_config
from steps_config.schema import (
    AppConfig,
    DatabaseConfig,
    DocSignConfig,
    DraftsConfig,
    FieldSize,
    ProcurementConfig,
    RequestsConfig,
)

_logger = logging.getLogger("steps_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | None = None) -> AppConfig:
    """Load the active configuration (the shipped default set when no path is given)."""
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = load_config(path)
    _logger.info(
        "STEPS_CONFIG_TRACE",
        extra={
            "config_path": str(path),
            "checksum": config.checksum,
        },
    )
    return config


__all__ = [
    "get_active_config",
    "AppConfig",
    "DatabaseConfig",
    "DocSignConfig",
    "DraftsConfig",
    "FieldSize",
    "ProcurementConfig",
    "RequestsConfig",
]
