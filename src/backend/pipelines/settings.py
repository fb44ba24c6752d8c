from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv

from common.nexus_engine.config import NexusEngineConfig
from common.nexus_engine.models import AccountingBasis
from common.nexus_engine.periods import RangePreset
from common.nexus_engine.rule_table import ConfigurationError


load_dotenv()


@dataclass(frozen=True)
class NexusSettings:
    accounting_basis: AccountingBasis
    range_preset: RangePreset
    rules_path: Path | None
    fixtures_root: Path | None
    engine: NexusEngineConfig


def get_nexus_settings() -> NexusSettings:
    """
    Load report settings from environment variables and validate them up front.

    Reads:
      NEXUS_ACCOUNTING_BASIS, NEXUS_RANGE_PRESET, NEXUS_RULES_PATH,
      NEXUS_FIXTURES_ROOT, NEXUS_MEDIUM_PROXIMITY_RATIO

    Every invalid value is collected and raised together as a ConfigurationError.
    """
    problems: list[str] = []

    basis_raw = _env("NEXUS_ACCOUNTING_BASIS", "Accrual")
    basis = _parse_basis(basis_raw)
    if basis is None:
        problems.append(f"NEXUS_ACCOUNTING_BASIS must be 'Accrual' or 'Cash' (got '{basis_raw}')")

    preset_raw = _env("NEXUS_RANGE_PRESET", RangePreset.LAST_12_MONTHS.value)
    preset = _parse_preset(preset_raw)
    if preset is None:
        allowed = ", ".join(p.value for p in RangePreset)
        problems.append(f"NEXUS_RANGE_PRESET must be one of {allowed} (got '{preset_raw}')")

    rules_path = _optional_path("NEXUS_RULES_PATH")
    if rules_path is not None and not rules_path.is_file():
        problems.append(f"NEXUS_RULES_PATH does not point to a file: {rules_path}")

    fixtures_root = _optional_path("NEXUS_FIXTURES_ROOT")
    if fixtures_root is not None and not fixtures_root.is_dir():
        problems.append(f"NEXUS_FIXTURES_ROOT does not point to a directory: {fixtures_root}")

    ratio_raw = _env("NEXUS_MEDIUM_PROXIMITY_RATIO", "0.8")
    ratio = _parse_ratio(ratio_raw)
    if ratio is None:
        problems.append(f"NEXUS_MEDIUM_PROXIMITY_RATIO must be a number in (0, 1] (got '{ratio_raw}')")

    if problems:
        raise ConfigurationError("Invalid nexus report settings", problems)

    return NexusSettings(
        accounting_basis=basis,
        range_preset=preset,
        rules_path=rules_path,
        fixtures_root=fixtures_root,
        engine=NexusEngineConfig(medium_proximity_ratio=ratio),
    )


def _env(name: str, default: str) -> str:
    return os.getenv(name, "").strip() or default


def _optional_path(name: str) -> Path | None:
    value = os.getenv(name, "").strip()
    return Path(value) if value else None


def _parse_basis(value: str) -> AccountingBasis | None:
    for basis in AccountingBasis:
        if basis.value.lower() == value.lower():
            return basis
    return None


def _parse_preset(value: str) -> RangePreset | None:
    for preset in RangePreset:
        if preset.value.lower() == value.lower():
            return preset
    return None


def _parse_ratio(value: str) -> Decimal | None:
    try:
        ratio = Decimal(value)
    except InvalidOperation:
        return None
    if not ratio.is_finite() or ratio <= 0 or ratio > 1:
        return None
    return ratio
