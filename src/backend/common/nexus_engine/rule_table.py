from __future__ import annotations

import json
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional

import structlog
import yaml
from pydantic import ValidationError

from .economic_nexus_rules import ECONOMIC_NEXUS_RULES
from .models import JurisdictionRule

logger = structlog.get_logger(__name__)


class ConfigurationError(ValueError):
    def __init__(self, message: str, problems: Iterable[str] = ()):
        self.problems = list(problems)
        if self.problems:
            message = f"{message}: " + "; ".join(self.problems)
        super().__init__(message)


def normalize_code(code: Optional[str]) -> str:
    if not code:
        return ""
    return str(code).strip().upper()


def rule_problems(rule: JurisdictionRule) -> list[str]:
    """Return invariant violations for a single rule (empty when valid)."""
    problems: list[str] = []
    code = normalize_code(rule.code) or "<empty>"
    has_threshold = rule.sales_threshold is not None or rule.transaction_threshold is not None

    if not normalize_code(rule.code):
        problems.append("rule code is empty")
    if rule.no_registration_required and has_threshold:
        problems.append(f"{code}: no_registration_required rules cannot carry thresholds")
    if not rule.no_registration_required and not has_threshold:
        problems.append(f"{code}: rule needs a sales or transaction threshold")
    if rule.sales_threshold is not None and rule.sales_threshold <= 0:
        problems.append(f"{code}: sales_threshold must be positive")
    if rule.transaction_threshold is not None and rule.transaction_threshold <= 0:
        problems.append(f"{code}: transaction_threshold must be positive")
    return problems


class RuleTable:
    """Read-only lookup of jurisdiction code -> threshold rule.

    Built once and shared; rules are frozen models and the backing mapping is a
    read-only proxy, so callers cannot alter the table through what they get back.
    """

    def __init__(self, rules: Iterable[JurisdictionRule]):
        by_code: dict[str, JurisdictionRule] = {}
        problems: list[str] = []
        for rule in rules:
            problems.extend(rule_problems(rule))
            code = normalize_code(rule.code)
            if not code:
                continue
            if code in by_code:
                problems.append(f"{code}: duplicate rule code")
                continue
            if rule.code != code:
                rule = rule.model_copy(update={"code": code})
            by_code[code] = rule

        if problems:
            raise ConfigurationError("Invalid jurisdiction rule table", problems)

        self._rules: Mapping[str, JurisdictionRule] = MappingProxyType(dict(sorted(by_code.items())))

    def lookup(self, code: Optional[str]) -> Optional[JurisdictionRule]:
        return self._rules.get(normalize_code(code))

    def codes(self) -> list[str]:
        return list(self._rules.keys())

    @property
    def rules(self) -> Mapping[str, JurisdictionRule]:
        return self._rules

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and normalize_code(code) in self._rules

    def __iter__(self) -> Iterator[JurisdictionRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)


@lru_cache(maxsize=1)
def default_rule_table() -> RuleTable:
    return RuleTable(ECONOMIC_NEXUS_RULES)


def describe_threshold(rule: Optional[JurisdictionRule]) -> str:
    """Human-readable threshold, e.g. "$100,000 or 200 orders", "$500,000", "No state sales tax"."""
    if rule is None:
        return "n/a"
    if rule.no_registration_required:
        return "No state sales tax"

    parts: list[str] = []
    if rule.sales_threshold is not None:
        whole_dollars = rule.sales_threshold.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        parts.append(f"${whole_dollars:,}")
    if rule.transaction_threshold is not None:
        parts.append(f"{rule.transaction_threshold} orders")
    if not parts:
        return "n/a"
    return " or ".join(parts)


def rule_table_to_records(table: RuleTable) -> list[dict[str, Any]]:
    return [rule.model_dump(mode="json") for rule in table]


def load_rule_table(path: Path | str) -> RuleTable:
    """
    Load a rule table from a YAML or JSON file.

    Accepted shapes:
    - a list of rule records
    - {"rules": [ ... ]}
    - {"AZ": {...}, "CA": {...}}  (code taken from the key when the record omits it)
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Rule table file not found: {path}")

    raw_text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            raw = yaml.safe_load(raw_text)
        elif path.suffix.lower() == ".json":
            raw = json.loads(raw_text)
        else:
            raise ConfigurationError(f"Unsupported rule table format '{path.suffix}' (expected .yaml, .yml or .json)")
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Rule table file {path} could not be parsed: {exc}") from exc

    records = _records_from_payload(raw)
    if not records:
        raise ConfigurationError(f"Rule table file {path} defines no rules")
    rules: list[JurisdictionRule] = []
    problems: list[str] = []
    for idx, record in enumerate(records):
        try:
            rules.append(JurisdictionRule.model_validate(record))
        except ValidationError as exc:
            label = record.get("code") if isinstance(record, dict) else None
            problems.append(f"record {label or idx}: {exc.error_count()} validation error(s)")
    if problems:
        raise ConfigurationError(f"Invalid rule records in {path}", problems)

    table = RuleTable(rules)
    logger.info("nexus.rule_table.loaded", path=str(path), rule_count=len(table))
    return table


def _records_from_payload(raw: Any) -> list[Any]:
    if isinstance(raw, dict) and isinstance(raw.get("rules"), list):
        return list(raw["rules"])
    if isinstance(raw, list):
        return list(raw)
    if isinstance(raw, dict):
        records = []
        for code, record in raw.items():
            if not isinstance(record, dict):
                raise ConfigurationError(f"Rule record for '{code}' must be a mapping.")
            records.append({"code": code, **record})
        return records
    raise ConfigurationError("Rule table payload must be a list or mapping of rule records.")
