"""Economic nexus thresholds per US state, DC and Puerto Rico.

Values follow the Sales Tax Institute Economic Nexus State Guide. Several
states have repealed their transaction-count threshold; those rules carry
only a sales threshold. States without a statewide sales tax are marked
`no_registration_required`.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from .models import JurisdictionRule

RULE_SOURCE = "Sales Tax Institute - Economic Nexus State Guide"

_NO_STATE_SALES_TAX = "No sales tax at the state level."


def _rule(
    code: str,
    sales: Optional[int],
    transactions: Optional[int],
    *,
    no_state_sales_tax: bool = False,
    notes: str = "",
) -> JurisdictionRule:
    return JurisdictionRule(
        code=code,
        sales_threshold=Decimal(sales) if sales is not None else None,
        transaction_threshold=transactions,
        no_registration_required=no_state_sales_tax,
        notes=notes,
        source=RULE_SOURCE,
    )


ECONOMIC_NEXUS_RULES: tuple[JurisdictionRule, ...] = (
    _rule("AL", 250000, None, notes="More than $250,000 in the previous 12-month period."),
    _rule(
        "AK",
        None,
        None,
        no_state_sales_tax=True,
        notes="No statewide sales tax. Local jurisdictions may have their own economic nexus rules.",
    ),
    _rule("AZ", 100000, 200),
    _rule("AR", 100000, 200),
    _rule(
        "CA",
        500000,
        None,
        notes="Sales of tangible personal property into CA in the current or prior calendar year.",
    ),
    _rule("CO", 100000, None),
    _rule(
        "CT",
        100000,
        200,
        notes="Threshold is $100,000 in sales AND 200 or more retail transactions.",
    ),
    _rule("DC", 100000, 200),
    _rule("DE", None, None, no_state_sales_tax=True, notes=_NO_STATE_SALES_TAX),
    _rule("FL", 100000, None),
    _rule("GA", 100000, 200),
    _rule("HI", 100000, None),
    _rule("ID", 100000, 200),
    _rule("IL", 100000, 200),
    _rule("IN", 100000, 200),
    _rule("IA", 100000, None),
    _rule("KS", 100000, None),
    _rule("KY", 100000, 200),
    _rule("LA", 100000, None),
    _rule("ME", 100000, 200),
    _rule("MD", 100000, 200),
    _rule("MA", 100000, None),
    _rule("MI", 100000, 200),
    _rule("MN", 100000, 200),
    _rule("MS", 250000, None),
    _rule("MO", 100000, None),
    _rule("MT", None, None, no_state_sales_tax=True, notes=_NO_STATE_SALES_TAX),
    _rule("NE", 100000, 200),
    _rule("NV", 100000, 200),
    _rule("NH", None, None, no_state_sales_tax=True, notes=_NO_STATE_SALES_TAX),
    _rule("NJ", 100000, 200),
    _rule("NM", 100000, None),
    _rule(
        "NY",
        500000,
        100,
        notes="More than $500,000 in sales of tangible personal property AND more than 100 sales.",
    ),
    _rule("NC", 100000, None, notes="Transaction threshold removed effective July 1, 2024."),
    _rule("ND", 100000, None, notes="Transaction threshold removed effective December 31, 2018."),
    _rule("OH", 100000, 200),
    _rule("OK", 100000, None),
    _rule("OR", None, None, no_state_sales_tax=True, notes=_NO_STATE_SALES_TAX),
    _rule("PA", 100000, None),
    _rule("RI", 100000, 200),
    _rule("SC", 100000, None),
    _rule("SD", 100000, None, notes="Transaction threshold removed effective July 1, 2023."),
    _rule("TN", 100000, None),
    _rule("TX", 500000, None),
    _rule("UT", 100000, None, notes="Transaction threshold removed effective July 1, 2025."),
    _rule("VT", 100000, 200),
    _rule("VA", 100000, 200),
    _rule(
        "WA",
        100000,
        None,
        notes="Uses a $100,000 gross income threshold. Transaction threshold removed.",
    ),
    _rule("WV", 100000, 200),
    _rule("WI", 100000, None, notes="Transaction threshold removed effective February 20, 2021."),
    _rule("WY", 100000, None, notes="Transaction threshold removed effective July 1, 2024."),
    _rule("PR", 100000, 200, notes="Puerto Rico - seller's accounting/fiscal year."),
)
