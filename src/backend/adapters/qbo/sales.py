from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from common.nexus_engine.models import SourceKind, Transaction


class QBOSalesAdapterError(ValueError):
    pass


def _parse_iso_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def _parse_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        s = value.strip().replace(",", "")
        if not s:
            return None
        try:
            return Decimal(s)
        except InvalidOperation:
            return None
    return None


def _extract_items(payload: Any, key: str) -> list[dict[str, Any]]:
    """
    Pull entity records out of the common QBO response shapes:
    - {"QueryResponse": {"Invoice": [ ... ]}}   (query endpoint)
    - {"Invoice": [ ... ]} / {"Invoice": { ... }}
    - [ { ... }, { ... } ]                      (raw list)
    """
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if not isinstance(payload, dict):
        raise QBOSalesAdapterError(f"{key} payload must be a JSON object or list.")
    container = payload.get("QueryResponse") if isinstance(payload.get("QueryResponse"), dict) else payload
    items = container.get(key)
    if isinstance(items, list):
        return [item for item in items if isinstance(item, dict)]
    if isinstance(items, dict):
        return [items]
    return []


def _subdivision_code(address: Any) -> str | None:
    if not isinstance(address, dict):
        return None
    code = str(address.get("CountrySubDivisionCode") or "").strip()
    return code or None


def _transaction_from_record(record: dict[str, Any], *, source_kind: SourceKind) -> Transaction | None:
    doc_id = record.get("Id")
    if not isinstance(doc_id, str) or not doc_id.strip():
        return None
    txn_date = _parse_iso_date(record.get("TxnDate"))
    if txn_date is None:
        return None

    total = _parse_decimal(record.get("TotalAmt"))
    if total is None:
        raise QBOSalesAdapterError(f"{source_kind.value} {doc_id}: TotalAmt missing or not numeric.")

    if source_kind == SourceKind.CASH_RECEIPT:
        balance = Decimal("0")
    else:
        balance = _parse_decimal(record.get("Balance"))
        if balance is None:
            raise QBOSalesAdapterError(f"{source_kind.value} {doc_id}: Balance missing or not numeric.")

    return Transaction(
        document_id=doc_id.strip(),
        txn_date=txn_date,
        total_amount=total,
        outstanding_balance=balance,
        ship_jurisdiction=_subdivision_code(record.get("ShipAddr")),
        bill_jurisdiction=_subdivision_code(record.get("BillAddr")),
        source_kind=source_kind,
    )


def _transactions_from_payload(payload: Any, *, key: str, source_kind: SourceKind) -> list[Transaction]:
    out: list[Transaction] = []
    for record in _extract_items(payload, key):
        txn = _transaction_from_record(record, source_kind=source_kind)
        if txn is not None:
            out.append(txn)
    return out


def transactions_from_invoices_payload(payload: Any) -> list[Transaction]:
    """Convert a QBO Invoice payload into Transactions (records without Id/TxnDate are skipped)."""
    return _transactions_from_payload(payload, key="Invoice", source_kind=SourceKind.INVOICE)


def transactions_from_sales_receipts_payload(payload: Any) -> list[Transaction]:
    """Convert a QBO SalesReceipt payload into Transactions; receipts are always fully paid."""
    return _transactions_from_payload(payload, key="SalesReceipt", source_kind=SourceKind.CASH_RECEIPT)
