from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import List, Optional

import structlog
from pydantic import BaseModel, Field

from common.nexus_engine.aggregator import aggregate
from common.nexus_engine.config import NexusEngineConfig
from common.nexus_engine.evaluator import evaluate
from common.nexus_engine.models import AccountingBasis, NexusRiskReport, Transaction
from common.nexus_engine.rule_table import RuleTable

from .data_source import NexusInputs

logger = structlog.get_logger(__name__)


class NexusRunReport(BaseModel):
    run_id: str
    generated_at: datetime
    client_id: str
    basis: AccountingBasis
    window_start: date
    window_end: date

    report: NexusRiskReport
    included_transactions: List[Transaction] = Field(default_factory=list)


def run_nexus_review(
    inputs: NexusInputs,
    *,
    basis: AccountingBasis | str = AccountingBasis.ACCRUAL,
    rule_table: Optional[RuleTable] = None,
    config: Optional[NexusEngineConfig] = None,
) -> NexusRunReport:
    aggregation = aggregate(inputs.transactions, basis, config=config)
    report = evaluate(aggregation.summaries, rule_table=rule_table, config=config)

    logger.info(
        "nexus.review.completed",
        client_id=inputs.client_id,
        basis=aggregation.basis.value,
        jurisdictions=len(report.rows),
        over_any_threshold=report.jurisdictions_over_any_threshold,
    )
    return NexusRunReport(
        run_id=str(uuid.uuid4()),
        generated_at=datetime.now(timezone.utc),
        client_id=inputs.client_id,
        basis=aggregation.basis,
        window_start=inputs.window.start,
        window_end=inputs.window.end,
        report=report,
        included_transactions=aggregation.included_transactions,
    )
