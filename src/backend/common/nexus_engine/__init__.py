"""Source-agnostic economic nexus engine.

This package intentionally contains only domain logic:
- Inputs are normalized sales transactions + a jurisdiction rule table.
- No QBO, OAuth, or network calls live here.
"""

from .aggregator import aggregate
from .config import NexusEngineConfig, UNRESOLVED_JURISDICTION
from .evaluator import evaluate
from .models import (
    AccountingBasis,
    AggregationResult,
    JurisdictionRule,
    JurisdictionSummary,
    NexusRiskReport,
    NexusSeverity,
    RiskAssessment,
    SourceKind,
    Transaction,
)
from .periods import RangePreset, ReportWindow, resolve_report_window
from .rule_table import (
    ConfigurationError,
    RuleTable,
    default_rule_table,
    describe_threshold,
    load_rule_table,
)
