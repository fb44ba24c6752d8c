from __future__ import annotations

from typing import Any

from common.nexus_engine.models import Transaction

from .sales import transactions_from_invoices_payload, transactions_from_sales_receipts_payload


def build_qbo_transactions(
    *,
    invoices_payload: Any | None = None,
    sales_receipts_payload: Any | None = None,
) -> list[Transaction]:
    """
    Convenience helper that assembles canonical transactions from raw QBO payloads.

    This is an adapter-layer helper (no network calls). Invoices come first, then
    sales receipts, each in payload order.
    """
    transactions: list[Transaction] = []
    if invoices_payload is not None:
        transactions += transactions_from_invoices_payload(invoices_payload)
    if sales_receipts_payload is not None:
        transactions += transactions_from_sales_receipts_payload(sales_receipts_payload)
    return transactions
