from __future__ import annotations

import argparse
import json
from typing import Any, List

import yaml
from pydantic import BaseModel

from .logs import configure_logging
from .rule_table import RuleTable, default_rule_table, describe_threshold, load_rule_table


class RuleCatalogEntry(BaseModel):
    code: str
    sales_threshold: str | None = None
    transaction_threshold: int | None = None
    no_registration_required: bool = False
    threshold_description: str
    notes: str = ""
    source: str = ""


def build_catalog(table: RuleTable | None = None) -> List[RuleCatalogEntry]:
    table = table if table is not None else default_rule_table()
    entries: List[RuleCatalogEntry] = []
    for rule in table:
        entries.append(
            RuleCatalogEntry(
                code=rule.code,
                sales_threshold=str(rule.sales_threshold) if rule.sales_threshold is not None else None,
                transaction_threshold=rule.transaction_threshold,
                no_registration_required=rule.no_registration_required,
                threshold_description=describe_threshold(rule),
                notes=rule.notes,
                source=rule.source,
            )
        )
    entries.sort(key=lambda e: e.code)
    return entries


def _dump_json(catalog: list[dict[str, Any]]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True)


def _dump_yaml(catalog: list[dict[str, Any]]) -> str:
    return yaml.safe_dump(catalog, sort_keys=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Print the jurisdiction rule table as a catalog.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    parser.add_argument(
        "--rules",
        default=None,
        help="Optional YAML/JSON rule file to validate and print instead of the built-in table.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log engine activity to stderr.")
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose)

    table = load_rule_table(args.rules) if args.rules else default_rule_table()
    catalog = [e.model_dump() for e in build_catalog(table)]
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()
