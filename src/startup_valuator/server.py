"""FastAPI server -- JSON API over the engine with SQLite persistence.

Routes
------
GET    /health                 -> liveness probe
POST   /valuation              -> run the five methods, persist the write-back
POST   /score                  -> resolve inputs, score, persist
POST   /evaluate               -> valuation and score in one request
GET    /scores/{company_id}    -> stored score with metric details
GET    /benchmarks             -> resolved benchmark table (?industry=...)
PUT    /benchmarks             -> replace user benchmark overrides
DELETE /benchmarks             -> reset benchmarks to defaults
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import time
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from startup_valuator import __version__
from startup_valuator.benchmarks import DEFAULT_BENCHMARKS
from startup_valuator.config import DEFAULT_DB_PATH
from startup_valuator.data_sources import MockIndustryBenchmarkSource
from startup_valuator.engine import StartupEngine
from startup_valuator.exceptions import PersistenceError, ValidationError
from startup_valuator.store import SQLiteStore

logger = logging.getLogger("startup_valuator.server")

store = SQLiteStore(DEFAULT_DB_PATH)

app = FastAPI(
    title="Startup Valuator",
    description="Startup valuation and health scoring engine.",
    version=__version__,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def build_engine() -> StartupEngine:
    """Engine bound to the current module-level store."""
    return StartupEngine(
        score_store=store,
        valuation_store=store,
        benchmark_store=store,
        industry_source=MockIndustryBenchmarkSource(),
    )


async def _read_json(request: Request) -> dict[str, Any]:
    """Read and parse the JSON body, raising ValueError on failure."""
    body = await request.body()
    result = json.loads(body)
    if not isinstance(result, dict):
        raise ValueError("body must be a JSON object")
    return result


async def _run(request: Request, action: str) -> JSONResponse:
    try:
        payload = await _read_json(request)
    except ValueError as exc:
        logger.warning("bad_json error=%s", exc)
        return JSONResponse({"error": f"Invalid JSON: {exc}"}, status_code=400)

    payload["action"] = action
    start = time.monotonic()
    try:
        run = build_engine().evaluate_from_dict(payload)
    except ValidationError as exc:
        logger.warning("validation_error error=%s", exc)
        return JSONResponse({"error": str(exc)}, status_code=400)
    except Exception as exc:  # pragma: no cover
        logger.exception("unhandled_error error=%s", exc)
        return JSONResponse({"error": str(exc)}, status_code=500)

    logger.info("request_ok action=%s elapsed_ms=%.1f", action, (time.monotonic() - start) * 1000)
    return JSONResponse(run.to_dict(), status_code=200)


# ---------------------------------------------------------------------------
# Calculation routes
# ---------------------------------------------------------------------------


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/valuation")
async def post_valuation(request: Request) -> JSONResponse:
    return await _run(request, "valuation")


@app.post("/score")
async def post_score(request: Request) -> JSONResponse:
    return await _run(request, "score")


@app.post("/evaluate")
async def post_evaluate(request: Request) -> JSONResponse:
    return await _run(request, "all")


@app.get("/scores/{company_id}")
def get_score(company_id: str) -> JSONResponse:
    try:
        score = store.get_score(company_id)
    except PersistenceError as exc:
        logger.error("score_read_failed company=%s error=%s", company_id, exc)
        return JSONResponse({"error": str(exc)}, status_code=500)
    if score is None:
        return JSONResponse({"error": "Score not found"}, status_code=404)
    return JSONResponse(score, status_code=200)


# ---------------------------------------------------------------------------
# Benchmark routes
# ---------------------------------------------------------------------------


@app.get("/benchmarks")
def get_benchmarks(industry: str | None = None) -> JSONResponse:
    table = build_engine().resolve_benchmarks(industry)
    return JSONResponse({"values": table.to_dict(), "sources": dict(table.sources)})


@app.put("/benchmarks")
async def put_benchmarks(request: Request) -> JSONResponse:
    try:
        payload = await _read_json(request)
    except ValueError as exc:
        logger.warning("bad_json error=%s", exc)
        return JSONResponse({"error": f"Invalid JSON: {exc}"}, status_code=400)

    unknown = sorted(set(payload) - set(DEFAULT_BENCHMARKS))
    if unknown:
        return JSONResponse({"error": f"Unknown benchmark '{unknown[0]}'."}, status_code=400)
    for metric, value in payload.items():
        if (
            isinstance(value, bool)
            or not isinstance(value, (int, float))
            or not math.isfinite(value)
            or value <= 0
        ):
            return JSONResponse(
                {"error": f"Benchmark '{metric}' must be a positive number."}, status_code=400
            )
    try:
        store.save_benchmarks(payload)
    except PersistenceError as exc:
        logger.error("benchmark_save_failed error=%s", exc)
        return JSONResponse({"error": str(exc)}, status_code=500)
    table = build_engine().resolve_benchmarks()
    return JSONResponse({"values": table.to_dict(), "sources": dict(table.sources)})


@app.delete("/benchmarks")
def reset_benchmarks() -> JSONResponse:
    try:
        store.reset_benchmarks()
    except PersistenceError as exc:
        logger.error("benchmark_reset_failed error=%s", exc)
        return JSONResponse({"error": str(exc)}, status_code=500)
    return JSONResponse({"values": dict(DEFAULT_BENCHMARKS)})


# ---------------------------------------------------------------------------
# CLI entry-point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Startup Valuator FastAPI service.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", default=8080, type=int)
    parser.add_argument("--db", default=DEFAULT_DB_PATH, help="SQLite database path.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging verbosity (default: INFO).",
    )
    return parser


def main() -> int:
    import uvicorn

    args = build_parser().parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    # Re-initialise the module-level store with the user-chosen DB path.
    global store  # noqa: PLW0603
    store.close()
    store = SQLiteStore(Path(args.db))

    logger.info("starting FastAPI server on http://%s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    store.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
