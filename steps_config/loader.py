"""
Configuration Loader (``steps_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the typed
``steps_config.schema`` dataclasses.  Callers outside this package use
``steps_config.get_active_config()`` instead.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown section keys or non-positive sizes  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from steps_config.schema import (
    AppConfig,
    DatabaseConfig,
    DocSignConfig,
    DraftsConfig,
    FieldSize,
    ProcurementConfig,
    RequestsConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 over the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _section(data: dict[str, Any], name: str, cls: type) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    allowed = set(cls.__dataclass_fields__)
    unknown = set(section) - allowed
    if unknown:
        raise ValueError(f"Unknown keys in config section '{name}': {sorted(unknown)}")
    return dict(section)


def parse_field_size(value: Any) -> FieldSize:
    """Parse ``{width, height}`` into a FieldSize."""
    size = FieldSize(width=int(value["width"]), height=int(value["height"]))
    if size.width <= 0 or size.height <= 0:
        raise ValueError(f"Field size must be positive, got {value!r}")
    return size


def parse_docsign(data: dict[str, Any]) -> DocSignConfig:
    section = _section(data, "docsign", DocSignConfig)
    if "palette" in section:
        section["palette"] = tuple(section["palette"])
        if not section["palette"]:
            raise ValueError("docsign.palette must not be empty")
    if "allowed_content_types" in section:
        section["allowed_content_types"] = tuple(section["allowed_content_types"])
    if "default_field_size" in section:
        section["default_field_size"] = parse_field_size(section["default_field_size"])
    if "field_sizes" in section:
        section["field_sizes"] = {
            name: parse_field_size(size)
            for name, size in (section["field_sizes"] or {}).items()
        }
    return DocSignConfig(**section)


def parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse a raw YAML dict into an AppConfig."""
    requests = RequestsConfig(**_section(data, "requests", RequestsConfig))
    procurement = ProcurementConfig(**_section(data, "procurement", ProcurementConfig))
    if requests.id_width <= 0 or procurement.po_number_width <= 0:
        raise ValueError("Number widths must be positive")
    return AppConfig(
        database=DatabaseConfig(**_section(data, "database", DatabaseConfig)),
        requests=requests,
        procurement=procurement,
        docsign=parse_docsign(data),
        drafts=DraftsConfig(**_section(data, "drafts", DraftsConfig)),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> AppConfig:
    """Load and parse a YAML configuration file."""
    return parse_config(load_yaml_file(path))
