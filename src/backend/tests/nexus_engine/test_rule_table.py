import json
from decimal import Decimal

import pytest
import yaml
from pydantic import ValidationError

from common.nexus_engine.models import JurisdictionRule
from common.nexus_engine.rule_table import (
    ConfigurationError,
    RuleTable,
    default_rule_table,
    describe_threshold,
    load_rule_table,
    rule_table_to_records,
)


def test_default_table_covers_states_dc_and_puerto_rico():
    table = default_rule_table()
    assert len(table) == 52
    assert "DC" in table
    assert "PR" in table
    assert table.codes() == sorted(table.codes())


def test_default_table_is_built_once():
    assert default_rule_table() is default_rule_table()


def test_lookup_is_case_insensitive_and_unknown_returns_none():
    table = default_rule_table()
    assert table.lookup("ca").sales_threshold == Decimal("500000")
    assert table.lookup(" NY ").transaction_threshold == 100
    assert table.lookup("ZZ") is None
    assert table.lookup("") is None
    assert table.lookup(None) is None


def test_no_sales_tax_states_have_no_thresholds():
    table = default_rule_table()
    for code in ("AK", "DE", "MT", "NH", "OR"):
        rule = table.lookup(code)
        assert rule.no_registration_required is True
        assert rule.sales_threshold is None
        assert rule.transaction_threshold is None


def test_returned_rules_cannot_be_mutated():
    table = default_rule_table()
    rule = table.lookup("AZ")
    with pytest.raises(ValidationError):
        rule.sales_threshold = Decimal("1")
    with pytest.raises(TypeError):
        table.rules["AZ"] = rule  # type: ignore[index]
    assert table.lookup("AZ").sales_threshold == Decimal("100000")


def test_describe_threshold_variants():
    table = default_rule_table()
    assert describe_threshold(table.lookup("AZ")) == "$100,000 or 200 orders"
    assert describe_threshold(table.lookup("CA")) == "$500,000"
    assert describe_threshold(table.lookup("OR")) == "No state sales tax"
    assert describe_threshold(None) == "n/a"
    # Not a valid table entry, but the description must still degrade gracefully.
    assert describe_threshold(JurisdictionRule(code="XX")) == "n/a"


def test_describe_threshold_transaction_only():
    rule = JurisdictionRule(code="XX", transaction_threshold=150)
    assert describe_threshold(rule) == "150 orders"


@pytest.mark.parametrize(
    "rule, expected_fragment",
    [
        (
            JurisdictionRule(code="AK", sales_threshold=Decimal("100000"), no_registration_required=True),
            "cannot carry thresholds",
        ),
        (JurisdictionRule(code="XX"), "needs a sales or transaction threshold"),
        (JurisdictionRule(code="XX", sales_threshold=Decimal("0")), "sales_threshold must be positive"),
        (JurisdictionRule(code="XX", transaction_threshold=-5), "transaction_threshold must be positive"),
        (JurisdictionRule(code="  ", sales_threshold=Decimal("1")), "rule code is empty"),
    ],
)
def test_invalid_rules_fail_fast(rule, expected_fragment):
    with pytest.raises(ConfigurationError) as excinfo:
        RuleTable([rule])
    assert any(expected_fragment in p for p in excinfo.value.problems)


def test_duplicate_codes_are_rejected_case_insensitively():
    with pytest.raises(ConfigurationError) as excinfo:
        RuleTable(
            [
                JurisdictionRule(code="AZ", sales_threshold=Decimal("100000")),
                JurisdictionRule(code="az", sales_threshold=Decimal("200000")),
            ]
        )
    assert excinfo.value.problems == ["AZ: duplicate rule code"]


def test_all_problems_are_reported_together():
    with pytest.raises(ConfigurationError) as excinfo:
        RuleTable([JurisdictionRule(code="AA"), JurisdictionRule(code="BB")])
    assert len(excinfo.value.problems) == 2
    assert "AA" in str(excinfo.value)
    assert "BB" in str(excinfo.value)


def test_codes_are_normalized_on_construction():
    table = RuleTable([JurisdictionRule(code=" co ", sales_threshold=Decimal("100000"))])
    assert table.codes() == ["CO"]
    assert table.lookup("CO").code == "CO"


def test_load_rule_table_from_yaml_list(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(
        yaml.safe_dump(
            [
                {"code": "CO", "sales_threshold": "100000"},
                {"code": "OR", "no_registration_required": True},
            ]
        )
    )
    table = load_rule_table(path)
    assert table.codes() == ["CO", "OR"]
    assert table.lookup("CO").sales_threshold == Decimal("100000")


def test_load_rule_table_from_json_mapping(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"AZ": {"sales_threshold": 100000, "transaction_threshold": 200}}))
    table = load_rule_table(path)
    assert describe_threshold(table.lookup("AZ")) == "$100,000 or 200 orders"


def test_default_table_records_reload_identically(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump({"rules": rule_table_to_records(default_rule_table())}))
    reloaded = load_rule_table(path)
    assert list(reloaded) == list(default_rule_table())


def test_load_rule_table_rejects_invalid_rules(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump([{"code": "XX"}]))
    with pytest.raises(ConfigurationError):
        load_rule_table(path)


def test_load_rule_table_rejects_unparseable_records(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps([{"code": "XX", "transaction_threshold": "lots"}]))
    with pytest.raises(ConfigurationError) as excinfo:
        load_rule_table(path)
    assert "record XX" in str(excinfo.value)


def test_load_rule_table_missing_or_unsupported_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_rule_table(tmp_path / "missing.yaml")
    other = tmp_path / "rules.txt"
    other.write_text("CO=100000")
    with pytest.raises(ConfigurationError):
        load_rule_table(other)


def test_describe_threshold_rounds_half_cents_up():
    assert describe_threshold(JurisdictionRule(code="XX", sales_threshold=Decimal("100000.5"))) == "$100,001"
    assert describe_threshold(JurisdictionRule(code="XX", sales_threshold=Decimal("100000.49"))) == "$100,000"
    assert describe_threshold(JurisdictionRule(code="XX", sales_threshold=Decimal("250000.5"))) == "$250,001"


def test_empty_rule_table_has_no_rules():
    table = RuleTable([])
    assert len(table) == 0
    assert table.lookup("TX") is None


@pytest.mark.parametrize("payload", [[], {"rules": []}, {}])
def test_load_rule_table_rejects_file_without_rules(tmp_path, payload):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(payload))
    with pytest.raises(ConfigurationError, match="defines no rules"):
        load_rule_table(path)
