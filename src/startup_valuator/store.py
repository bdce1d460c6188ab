"""SQLite persistence for scores, valuation write-backs and benchmarks.

Scores are upserted per company; the nine metric details go into their own
table as a JSON blob because a coarse score store may only hold the category
numbers.  Any sqlite failure surfaces as :class:`PersistenceError`.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from startup_valuator.config import DEFAULT_DB_PATH
from startup_valuator.exceptions import PersistenceError
from startup_valuator.models import ScoreData, ValuationUpdate


class SQLiteStore:
    """Thin wrapper around a SQLite database implementing the store protocols."""

    def __init__(self, db_path: Path | str = DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot open database {self._db_path}: {exc}") from exc
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    # ── scores ──

    def save_score(self, score: ScoreData) -> None:
        now = datetime.now(timezone.utc).replace(microsecond=0).isoformat()
        details = {name: d.to_dict() for name, d in score.details.items()}
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO startup_scores (company_id, total_score, finance_score, team_score,
                                            growth_score, market_score, product_score,
                                            calculation_date)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(company_id) DO UPDATE SET
                    total_score = excluded.total_score,
                    finance_score = excluded.finance_score,
                    team_score = excluded.team_score,
                    growth_score = excluded.growth_score,
                    market_score = excluded.market_score,
                    product_score = excluded.product_score,
                    calculation_date = excluded.calculation_date
                """,
                (
                    score.company_id,
                    score.total_score,
                    score.finance_score,
                    score.team_score,
                    score.growth_score,
                    score.market_score,
                    score.product_score,
                    now,
                ),
            )
            conn.execute(
                """
                INSERT INTO score_details (company_id, payload) VALUES (?, ?)
                ON CONFLICT(company_id) DO UPDATE SET payload = excluded.payload
                """,
                (score.company_id, json.dumps(details)),
            )

    def get_score(self, company_id: str) -> dict[str, Any] | None:
        """Return the stored score with its detail blob, or None."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM startup_scores WHERE company_id = ?", (company_id,)
            ).fetchone()
            if row is None:
                return None
            detail_row = conn.execute(
                "SELECT payload FROM score_details WHERE company_id = ?", (company_id,)
            ).fetchone()
        result = dict(row)
        result["details"] = json.loads(detail_row["payload"]) if detail_row else {}
        return result

    # ── valuations ──

    def save_valuation_update(self, update: ValuationUpdate) -> None:
        now = datetime.now(timezone.utc).replace(microsecond=0).isoformat()
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO valuations (valuation_id, selected_valuation, pre_money_valuation,
                                        investment, post_money_valuation, updated_at_utc)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(valuation_id) DO UPDATE SET
                    selected_valuation = excluded.selected_valuation,
                    pre_money_valuation = excluded.pre_money_valuation,
                    investment = excluded.investment,
                    post_money_valuation = excluded.post_money_valuation,
                    updated_at_utc = excluded.updated_at_utc
                """,
                (
                    update.valuation_id,
                    update.selected_valuation,
                    update.pre_money_valuation,
                    update.investment,
                    update.post_money_valuation,
                    now,
                ),
            )

    def get_valuation_update(self, valuation_id: str) -> dict[str, Any] | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM valuations WHERE valuation_id = ?", (valuation_id,)
            ).fetchone()
        return dict(row) if row is not None else None

    # ── benchmarks ──

    def get_benchmarks(self) -> dict[str, float]:
        with self._transaction() as conn:
            rows = conn.execute("SELECT metric, value FROM user_benchmarks").fetchall()
        return {row["metric"]: row["value"] for row in rows}

    def save_benchmarks(self, values: Mapping[str, float]) -> None:
        """Replace the stored user benchmarks with ``values``."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM user_benchmarks")
            conn.executemany(
                "INSERT INTO user_benchmarks (metric, value) VALUES (?, ?)",
                [(metric, float(value)) for metric, value in values.items()],
            )

    def reset_benchmarks(self) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM user_benchmarks")

    def close(self) -> None:
        self._conn.close()

    # ── private ──

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as exc:
                raise PersistenceError(f"Database operation failed: {exc}") from exc

    def _ensure_schema(self) -> None:
        with self._transaction() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS startup_scores (
                    company_id       TEXT PRIMARY KEY,
                    total_score      INTEGER NOT NULL,
                    finance_score    INTEGER NOT NULL,
                    team_score       INTEGER NOT NULL,
                    growth_score     INTEGER NOT NULL,
                    market_score     INTEGER NOT NULL,
                    product_score    INTEGER NOT NULL,
                    calculation_date TEXT NOT NULL
                );
                CREATE TABLE IF NOT EXISTS score_details (
                    company_id TEXT PRIMARY KEY,
                    payload    TEXT NOT NULL
                );
                CREATE TABLE IF NOT EXISTS valuations (
                    valuation_id         TEXT PRIMARY KEY,
                    selected_valuation   REAL NOT NULL,
                    pre_money_valuation  REAL NOT NULL,
                    investment           REAL NOT NULL,
                    post_money_valuation REAL NOT NULL,
                    updated_at_utc       TEXT NOT NULL
                );
                CREATE TABLE IF NOT EXISTS user_benchmarks (
                    metric TEXT PRIMARY KEY,
                    value  REAL NOT NULL
                );
                """
            )
