from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from .config import NexusEngineConfig
from .models import (
    JurisdictionRule,
    JurisdictionSummary,
    NexusRiskReport,
    NexusSeverity,
    RiskAssessment,
)
from .rule_table import RuleTable, default_rule_table, describe_threshold

logger = structlog.get_logger(__name__)


def threshold_ratio(actual: Decimal | int, threshold: Decimal | int | None) -> Decimal:
    if threshold is None:
        return Decimal("0")
    return Decimal(actual) / Decimal(threshold)


def classify(
    summary: JurisdictionSummary,
    rule: Optional[JurisdictionRule],
    *,
    config: NexusEngineConfig,
) -> RiskAssessment:
    base = {
        "jurisdiction": summary.jurisdiction,
        "order_count": summary.order_count,
        "total_sales": summary.total_sales,
        "average_order": summary.average_order,
        "threshold_description": describe_threshold(rule),
    }

    if rule is None:
        return RiskAssessment(**base, severity=NexusSeverity.RULE_MISSING)

    if rule.no_registration_required:
        # Terminal: no statewide tax means no exposure at any volume.
        return RiskAssessment(**base, matched_rule=rule, severity=NexusSeverity.NO_TAX_OBLIGATION)

    over_sales = rule.sales_threshold is not None and summary.total_sales >= rule.sales_threshold
    over_transactions = (
        rule.transaction_threshold is not None and summary.order_count >= rule.transaction_threshold
    )
    proximity = max(
        threshold_ratio(summary.total_sales, rule.sales_threshold),
        threshold_ratio(summary.order_count, rule.transaction_threshold),
    )

    if over_sales or over_transactions:
        severity = NexusSeverity.HIGH
    elif proximity >= config.medium_proximity_ratio:
        severity = NexusSeverity.MEDIUM
    else:
        severity = NexusSeverity.LOW

    return RiskAssessment(
        **base,
        matched_rule=rule,
        severity=severity,
        over_sales_threshold=over_sales,
        over_transaction_threshold=over_transactions,
        proximity=proximity,
    )


def evaluate(
    summaries: Iterable[JurisdictionSummary],
    *,
    rule_table: Optional[RuleTable] = None,
    config: Optional[NexusEngineConfig] = None,
) -> NexusRiskReport:
    """
    Join jurisdiction summaries against the rule table and classify each row.

    Report-level counters are derived from the classified rows. A row that fails to
    classify is reported as RULE_MISSING rather than aborting the report.
    """
    table = rule_table if rule_table is not None else default_rule_table()
    cfg = config or NexusEngineConfig()

    rows: list[RiskAssessment] = []
    for summary in summaries:
        try:
            row = classify(summary, table.lookup(summary.jurisdiction), config=cfg)
        except (ArithmeticError, TypeError, ValueError) as exc:
            logger.warning(
                "nexus.evaluate.row_degraded",
                jurisdiction=summary.jurisdiction,
                error=str(exc),
            )
            row = RiskAssessment(
                jurisdiction=summary.jurisdiction,
                order_count=summary.order_count,
                total_sales=summary.total_sales,
                average_order=summary.average_order,
                severity=NexusSeverity.RULE_MISSING,
            )
        rows.append(row)

    totals_by_severity: dict[NexusSeverity, int] = {}
    for row in rows:
        totals_by_severity[row.severity] = totals_by_severity.get(row.severity, 0) + 1

    return NexusRiskReport(
        rows=rows,
        total_sales=sum((r.total_sales for r in rows), Decimal("0")),
        total_orders=sum(r.order_count for r in rows),
        jurisdictions_over_any_threshold=sum(1 for r in rows if r.is_over_any_threshold),
        jurisdictions_over_sales_threshold=sum(1 for r in rows if r.over_sales_threshold),
        totals_by_severity=totals_by_severity,
    )
