from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


def run_nexus_review_from_fixtures(
    *,
    client_id: str,
    as_of: date,
    basis: str | None = None,
    range_preset: str | None = None,
    fixtures_root: Path | None = None,
    rules_path: Path | None = None,
):
    _ensure_backend_on_path()
    from common.nexus_engine.periods import resolve_report_window
    from common.nexus_engine.rule_table import default_rule_table, load_rule_table
    from pipelines.data_source import get_data_source
    from pipelines.nexus_review import run_nexus_review
    from pipelines.settings import get_nexus_settings

    settings = get_nexus_settings()
    window = resolve_report_window(range_preset or settings.range_preset, today=as_of)
    rules_file = rules_path or settings.rules_path
    rule_table = load_rule_table(rules_file) if rules_file else default_rule_table()

    source = get_data_source("fixtures", fixtures_root=fixtures_root or settings.fixtures_root)
    inputs = source.build_nexus_inputs(client_id=client_id, window=window)
    return run_nexus_review(
        inputs,
        basis=basis or settings.accounting_basis,
        rule_table=rule_table,
        config=settings.engine,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Run an economic nexus review against saved QBO invoice/sales receipt payloads."
    )
    parser.add_argument("--client", required=True, help="Client id (fixtures subdirectory name).")
    parser.add_argument(
        "--basis",
        choices=("Accrual", "Cash"),
        default=None,
        help="Accounting basis (defaults to NEXUS_ACCOUNTING_BASIS or Accrual).",
    )
    parser.add_argument(
        "--range",
        dest="range_preset",
        choices=("last12", "ytd", "lastYear"),
        default=None,
        help="Lookback window preset (defaults to NEXUS_RANGE_PRESET or last12).",
    )
    parser.add_argument(
        "--as-of",
        default=None,
        help="Report date (YYYY-MM-DD); windows end on or before this date. Defaults to today.",
    )
    parser.add_argument("--fixtures-root", default=None, help="Directory holding <client>/invoices.json etc.")
    parser.add_argument("--rules", default=None, help="YAML/JSON rule table replacing the built-in thresholds.")
    parser.add_argument("--out", default=None, help="Write the JSON report here instead of stdout.")
    parser.add_argument("--verbose", action="store_true", help="Log pipeline activity to stderr.")
    args = parser.parse_args(argv)

    _ensure_backend_on_path()
    from common.nexus_engine.logs import configure_logging
    from common.nexus_engine.rule_table import ConfigurationError

    configure_logging(verbose=args.verbose)

    as_of = date.fromisoformat(args.as_of) if args.as_of else date.today()
    try:
        run = run_nexus_review_from_fixtures(
            client_id=args.client,
            as_of=as_of,
            basis=args.basis,
            range_preset=args.range_preset,
            fixtures_root=Path(args.fixtures_root).resolve() if args.fixtures_root else None,
            rules_path=Path(args.rules).resolve() if args.rules else None,
        )
    except ConfigurationError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    payload = json.dumps(run.model_dump(mode="json"), indent=2)
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(payload)
        print(f"Wrote {out_path}")
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
