"""Configuration management for coop-lending."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path

from coop_lending.exceptions import ConfigurationError


@dataclass
class StorageConfig:
    """Key-value storage configuration.

    Key names follow the layout of the persisted state: one key per
    collection, plus UI scratch keys and a per-record draft slot.
    """

    path: Path | None = None  # None keeps everything in memory
    customers_key: str = "koperasi_customers_db"
    marketing_targets_key: str = "koperasi_marketing_targets"
    ui_tab_key: str = "koperasi_ui_tab"
    ui_editing_id_key: str = "koperasi_ui_editing_id"
    draft_key_prefix: str = "koperasi_draft_"
    draft_debounce_seconds: float = 0.5

    def draft_key(self, record_id: str | None) -> str:
        """Get the draft slot key for a record (``new`` for unsaved records)."""
        return f"{self.draft_key_prefix}{record_id or 'new'}"


@dataclass
class FeePolicy:
    """Advisory fee defaults suggested when the principal changes."""

    admin_rate: Decimal = Decimal("0.075")
    provision_rate: Decimal = Decimal("0.025")
    marketing_rate: Decimal = Decimal("0.05")
    risk_reserve_rate: Decimal = Decimal("0.11")
    principal_savings: Decimal = Decimal("20000")
    mandatory_savings: Decimal = Decimal("100000")


@dataclass
class RiskPolicy:
    """Advisory thresholds and placeholder settlement suggestions."""

    high_dbr_threshold: Decimal = Decimal("98")
    pka_settlement_ratio: Decimal = Decimal("0.5")
    plain_settlement_ratio: Decimal = Decimal("1")


@dataclass
class ExportConfig:
    """Spreadsheet export configuration."""

    output_dir: Path = field(default_factory=lambda: Path("output"))
    column_width: int = 20


@dataclass
class ExtractionConfig:
    """Free-text extraction collaborator configuration."""

    api_key: str | None = None
    model_name: str = "gemini-2.0-flash"


@dataclass
class LendingConfig:
    """Main configuration for coop-lending."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    fees: FeePolicy = field(default_factory=FeePolicy)
    risk: RiskPolicy = field(default_factory=RiskPolicy)
    export: ExportConfig = field(default_factory=ExportConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "LendingConfig":
        """Create config from environment variables."""
        import os

        storage_path = os.getenv("COOP_STORAGE_PATH")
        storage = StorageConfig(
            path=Path(storage_path) if storage_path else None,
            draft_debounce_seconds=_float_env("COOP_DRAFT_DEBOUNCE", "0.5"),
        )

        fees = FeePolicy(
            admin_rate=_decimal_env("COOP_ADMIN_FEE_RATE", "0.075"),
            provision_rate=_decimal_env("COOP_PROVISION_FEE_RATE", "0.025"),
            marketing_rate=_decimal_env("COOP_MARKETING_FEE_RATE", "0.05"),
            risk_reserve_rate=_decimal_env("COOP_RISK_RESERVE_RATE", "0.11"),
            principal_savings=_decimal_env("COOP_PRINCIPAL_SAVINGS", "20000"),
            mandatory_savings=_decimal_env("COOP_MANDATORY_SAVINGS", "100000"),
        )

        risk = RiskPolicy(
            high_dbr_threshold=_decimal_env("COOP_HIGH_DBR_THRESHOLD", "98"),
        )

        export = ExportConfig(
            output_dir=Path(os.getenv("COOP_EXPORT_DIR", "output")),
        )

        extraction = ExtractionConfig(
            api_key=os.getenv("GEMINI_API_KEY"),
            model_name=os.getenv("COOP_EXTRACTION_MODEL", "gemini-2.0-flash"),
        )

        return cls(
            storage=storage,
            fees=fees,
            risk=risk,
            export=export,
            extraction=extraction,
            seed=int(os.getenv("SEED")) if os.getenv("SEED") else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )


def _decimal_env(name: str, default: str) -> Decimal:
    import os

    raw = os.getenv(name, default)
    try:
        return Decimal(raw)
    except InvalidOperation as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _float_env(name: str, default: str) -> float:
    import os

    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
