from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AccountingBasis(str, Enum):
    ACCRUAL = "Accrual"
    CASH = "Cash"


class SourceKind(str, Enum):
    INVOICE = "Invoice"
    CASH_RECEIPT = "CashReceipt"


class NexusSeverity(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    NO_TAX_OBLIGATION = "NO_TAX_OBLIGATION"
    RULE_MISSING = "RULE_MISSING"


class JurisdictionRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    sales_threshold: Optional[Decimal] = None
    transaction_threshold: Optional[int] = None
    no_registration_required: bool = False
    notes: str = ""
    source: str = ""


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    document_id: str
    txn_date: date
    total_amount: Decimal
    outstanding_balance: Decimal = Decimal("0")
    ship_jurisdiction: Optional[str] = None
    bill_jurisdiction: Optional[str] = None
    source_kind: SourceKind = SourceKind.INVOICE


class JurisdictionSummary(BaseModel):
    jurisdiction: str
    order_count: int = Field(default=0, ge=0)
    total_sales: Decimal = Decimal("0")
    average_order: Decimal = Decimal("0")


class AggregationResult(BaseModel):
    basis: AccountingBasis
    summaries: List[JurisdictionSummary] = Field(default_factory=list)
    # Transactions that were counted, in input order; consumed by exports, not by evaluation.
    included_transactions: List[Transaction] = Field(default_factory=list)


class RiskAssessment(BaseModel):
    jurisdiction: str
    order_count: int
    total_sales: Decimal
    average_order: Decimal

    matched_rule: Optional[JurisdictionRule] = None
    severity: NexusSeverity
    over_sales_threshold: bool = False
    over_transaction_threshold: bool = False
    proximity: Optional[Decimal] = None
    threshold_description: str = "n/a"

    @property
    def is_over_any_threshold(self) -> bool:
        return self.over_sales_threshold or self.over_transaction_threshold


class NexusRiskReport(BaseModel):
    rows: List[RiskAssessment] = Field(default_factory=list)

    total_sales: Decimal = Decimal("0")
    total_orders: int = 0
    jurisdictions_over_any_threshold: int = 0
    jurisdictions_over_sales_threshold: int = 0
    totals_by_severity: Dict[NexusSeverity, int] = Field(default_factory=dict)

    def row_for(self, jurisdiction: str) -> Optional[RiskAssessment]:
        for row in self.rows:
            if row.jurisdiction == jurisdiction:
                return row
        return None
