"""
Plant configuration schema.

Frozen dataclasses parsed from YAML by ``plant_config.loader``.  Each
section validates itself in ``__post_init__`` and raises ``ValueError`` on
values that would make the plant's calculations meaningless.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = "sqlite:///plant_ops.db"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 5

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("database.url is required")
        if self.pool_size < 1:
            raise ValueError("database.pool_size must be at least 1")


@dataclass(frozen=True)
class StorageConfig:
    root_path: str = "./storage"
    public_base_url: str = "file://storage"
    qa_evidence_bucket: str = "qa-test-evidence"
    templates_bucket: str = "templates"


@dataclass(frozen=True)
class ProductionConfig:
    target_overrun: Decimal = Decimal("100")
    tolerance_percent: Decimal = Decimal("5")
    default_mix_density: Decimal = Decimal("1.1")

    def __post_init__(self) -> None:
        if self.tolerance_percent < 0:
            raise ValueError("production.tolerance_percent cannot be negative")
        if self.default_mix_density <= 0:
            raise ValueError("production.default_mix_density must be positive")


@dataclass(frozen=True)
class PayrollConfig:
    daily_regular_hours: Decimal = Decimal("8")
    overtime_multiplier: Decimal = Decimal("1.5")
    week_starts_on: str = "sunday"

    def __post_init__(self) -> None:
        if self.daily_regular_hours <= 0:
            raise ValueError("payroll.daily_regular_hours must be positive")
        if self.overtime_multiplier < 1:
            raise ValueError("payroll.overtime_multiplier must be at least 1")
        if self.week_starts_on != "sunday":
            raise ValueError("payroll.week_starts_on only supports 'sunday'")


@dataclass(frozen=True)
class LabelsConfig:
    dpi: int = 96
    max_copies: int = 100
    default_barcode_format: str = "CODE128"

    def __post_init__(self) -> None:
        if self.dpi <= 0:
            raise ValueError("labels.dpi must be positive")
        if not 1 <= self.max_copies <= 100:
            raise ValueError("labels.max_copies must be between 1 and 100")


@dataclass(frozen=True)
class PackagingConfig:
    default_indicator_digit: str = "1"
    custom_pallet_length_in: Decimal = Decimal("48")
    custom_pallet_width_in: Decimal = Decimal("40")

    def __post_init__(self) -> None:
        if len(self.default_indicator_digit) != 1 or not self.default_indicator_digit.isdigit():
            raise ValueError("packaging.default_indicator_digit must be one digit 0-9")


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlantConfig:
    """Complete plant configuration."""

    plant_name: str = "Main Plant"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    production: ProductionConfig = field(default_factory=ProductionConfig)
    payroll: PayrollConfig = field(default_factory=PayrollConfig)
    labels: LabelsConfig = field(default_factory=LabelsConfig)
    packaging: PackagingConfig = field(default_factory=PackagingConfig)
    checksum: str = ""
