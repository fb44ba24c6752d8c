from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from .config import NexusEngineConfig
from .models import (
    AccountingBasis,
    AggregationResult,
    JurisdictionSummary,
    SourceKind,
    Transaction,
)
from .rule_table import normalize_code

logger = structlog.get_logger(__name__)


def counts_under_basis(txn: Transaction, basis: AccountingBasis) -> bool:
    if basis == AccountingBasis.ACCRUAL:
        return True
    # Cash basis: receipts are cash in hand; invoices count only once fully paid.
    if txn.source_kind == SourceKind.CASH_RECEIPT:
        return True
    return txn.outstanding_balance == 0


def resolve_jurisdiction(txn: Transaction, *, unresolved: str) -> str:
    """Shipping destination first, then billing address, then the unresolved bucket."""
    ship = normalize_code(txn.ship_jurisdiction)
    if ship:
        return ship
    bill = normalize_code(txn.bill_jurisdiction)
    if bill:
        return bill
    return unresolved


def aggregate(
    transactions: Iterable[Transaction],
    basis: AccountingBasis | str,
    *,
    config: Optional[NexusEngineConfig] = None,
) -> AggregationResult:
    """
    Reduce transactions into one summary row per resolved jurisdiction.

    Rows are ordered by total sales (descending), then jurisdiction code.
    Zero and negative amounts never contribute to a row.
    """
    cfg = config or NexusEngineConfig()
    basis = AccountingBasis(basis)

    included: list[Transaction] = []
    order_counts: dict[str, int] = {}
    sales: dict[str, Decimal] = {}

    for txn in transactions:
        if not counts_under_basis(txn, basis):
            continue
        if txn.total_amount <= 0:
            continue

        code = resolve_jurisdiction(txn, unresolved=cfg.unresolved_jurisdiction)
        order_counts[code] = order_counts.get(code, 0) + 1
        sales[code] = sales.get(code, Decimal("0")) + txn.total_amount
        included.append(txn)

    summaries = [
        JurisdictionSummary(
            jurisdiction=code,
            order_count=count,
            total_sales=sales[code],
            average_order=sales[code] / count if count else Decimal("0"),
        )
        for code, count in order_counts.items()
    ]
    summaries.sort(key=lambda s: s.jurisdiction)
    summaries.sort(key=lambda s: s.total_sales, reverse=True)

    logger.debug(
        "nexus.aggregate.completed",
        basis=basis.value,
        included=len(included),
        jurisdictions=len(summaries),
    )
    return AggregationResult(basis=basis, summaries=summaries, included_transactions=included)
