"""
Configuration schema (``steps_config.schema``).

Frozen dataclasses parsed from the YAML configuration set.  Every field has
a default matching ``sets/default.yaml`` so a partial file is valid.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = "sqlite://"
    echo: bool = False


@dataclass(frozen=True)
class RequestsConfig:
    """Request numbering and defaults."""
    id_width: int = 6
    material_prefix: str = "MR"
    advance_prefix: str = "ADV"
    retirement_prefix: str = "RET"
    default_currency: str = "NGN"


@dataclass(frozen=True)
class ProcurementConfig:
    """Purchase order numbering and line defaults."""
    po_prefix: str = "PO"
    po_number_width: int = 6
    default_unit: str = "pcs"


@dataclass(frozen=True)
class FieldSize:
    width: int
    height: int


@dataclass(frozen=True)
class DocSignConfig:
    """Signature composer settings."""
    palette: tuple[str, ...] = ("blue", "purple", "green", "orange", "teal")
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_content_types: tuple[str, ...] = ("application/pdf",)
    default_field_size: FieldSize = FieldSize(180, 50)
    field_sizes: dict[str, FieldSize] = field(default_factory=dict)


@dataclass(frozen=True)
class DraftsConfig:
    directory: str = ".steps_drafts"


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object returned by ``get_active_config()``."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    requests: RequestsConfig = field(default_factory=RequestsConfig)
    procurement: ProcurementConfig = field(default_factory=ProcurementConfig)
    docsign: DocSignConfig = field(default_factory=DocSignConfig)
    drafts: DraftsConfig = field(default_factory=DraftsConfig)
    checksum: str = ""
