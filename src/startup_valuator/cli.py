"""CLI entry point for valuations and scores."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from startup_valuator.data_sources import MockIndustryBenchmarkSource
from startup_valuator.engine import StartupEngine
from startup_valuator.exceptions import PersistenceError, ValidationError
from startup_valuator.store import SQLiteStore


def _load_payload(request_file: Path) -> dict[str, Any]:
    try:
        payload = json.loads(request_file.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValidationError(f"Request file not found: {request_file}") from exc
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Request file is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Request file must contain a JSON object.")
    return payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Startup Valuator CLI - values a startup and scores its health."
    )
    parser.add_argument(
        "--request-file",
        required=True,
        help="Path to JSON request payload.",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty-print JSON output.",
    )
    parser.add_argument(
        "--db",
        default=None,
        help="SQLite database path; results are only persisted when given.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging verbosity (default: WARNING).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    store: SQLiteStore | None = None
    try:
        if args.db:
            store = SQLiteStore(Path(args.db))
        engine = StartupEngine(
            score_store=store,
            valuation_store=store,
            benchmark_store=store,
            industry_source=MockIndustryBenchmarkSource(),
        )
        payload = _load_payload(Path(args.request_file))
        result = engine.evaluate_from_dict(payload, persist=store is not None)
        if args.pretty:
            print(json.dumps(result.to_dict(), indent=2))
        else:
            print(json.dumps(result.to_dict()))
        return 0
    except (ValidationError, PersistenceError) as exc:
        print(json.dumps({"error": str(exc)}))
        return 1
    finally:
        if store is not None:
            store.close()


if __name__ == "__main__":
    raise SystemExit(main())
