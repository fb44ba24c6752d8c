from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from adapters.qbo.pipeline import build_qbo_transactions
from common.nexus_engine.models import Transaction
from common.nexus_engine.periods import ReportWindow


@dataclass(frozen=True)
class NexusInputs:
    client_id: str
    window: ReportWindow
    transactions: tuple[Transaction, ...] = ()


class DataSource(Protocol):
    def build_nexus_inputs(self, *, client_id: str, window: ReportWindow) -> NexusInputs:
        """Return normalized transactions dated inside `window` for the client."""
        ...


def get_data_source(name: str, *, fixtures_root: Path | None = None) -> DataSource:
    """Resolve a data source implementation by name (fixtures)."""
    source = (name or "").strip().lower()
    if source in ("fixtures", ""):
        return FixturesDataSource(fixtures_root=fixtures_root)
    raise ValueError(f"Unknown data source '{name}' (expected 'fixtures').")


class FixturesDataSource:
    """Reads saved QBO payloads from `<root>/<client_id>/{invoices,sales_receipts}.json`."""

    INVOICES_FILE = "invoices.json"
    SALES_RECEIPTS_FILE = "sales_receipts.json"

    def __init__(self, *, fixtures_root: Path | None = None) -> None:
        self._fixtures_root = fixtures_root or _default_fixtures_root()

    def build_nexus_inputs(self, *, client_id: str, window: ReportWindow) -> NexusInputs:
        client_dir = self._fixtures_root / client_id
        if not client_dir.is_dir():
            raise ValueError(f"No fixtures for client_id '{client_id}' under {self._fixtures_root}.")

        transactions = build_qbo_transactions(
            invoices_payload=_load_optional_json(client_dir / self.INVOICES_FILE),
            sales_receipts_payload=_load_optional_json(client_dir / self.SALES_RECEIPTS_FILE),
        )
        in_window = tuple(t for t in transactions if window.contains(t.txn_date))
        return NexusInputs(client_id=client_id, window=window, transactions=in_window)


def _load_optional_json(path: Path) -> Any | None:
    if not path.exists():
        return None
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)


def _default_fixtures_root() -> Path:
    return Path(__file__).resolve().parents[1] / "tests" / "pipelines" / "fixtures"
