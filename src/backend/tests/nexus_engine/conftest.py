import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from datetime import date
from decimal import Decimal
from itertools import count

import pytest

from common.nexus_engine.models import JurisdictionRule, JurisdictionSummary, SourceKind, Transaction
from common.nexus_engine.rule_table import RuleTable


@pytest.fixture
def txn_date() -> date:
    return date(2025, 6, 30)


@pytest.fixture
def make_transaction(txn_date):
    ids = count(1)

    def _make(
        amount,
        *,
        ship=None,
        bill=None,
        balance="0",
        kind: SourceKind = SourceKind.INVOICE,
        doc_id: str | None = None,
    ) -> Transaction:
        return Transaction(
            document_id=doc_id or f"DOC-{next(ids)}",
            txn_date=txn_date,
            total_amount=Decimal(str(amount)),
            outstanding_balance=Decimal(str(balance)),
            ship_jurisdiction=ship,
            bill_jurisdiction=bill,
            source_kind=kind,
        )

    return _make


@pytest.fixture
def make_summary():
    def _make(jurisdiction: str, *, sales, orders: int) -> JurisdictionSummary:
        total = Decimal(str(sales))
        return JurisdictionSummary(
            jurisdiction=jurisdiction,
            order_count=orders,
            total_sales=total,
            average_order=total / orders if orders else Decimal("0"),
        )

    return _make


@pytest.fixture
def rule_table() -> RuleTable:
    return RuleTable(
        [
            JurisdictionRule(code="CO", sales_threshold=Decimal("100000")),
            JurisdictionRule(code="AZ", sales_threshold=Decimal("100000"), transaction_threshold=200),
            JurisdictionRule(code="NY", sales_threshold=Decimal("500000"), transaction_threshold=100),
            JurisdictionRule(code="OR", no_registration_required=True, notes="No sales tax at the state level."),
        ]
    )
