"""Integration tests for the HTTP API (server.py)."""

from __future__ import annotations

import json
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from startup_valuator.server import app

EXAMPLES = Path(__file__).resolve().parents[1] / "examples"


def _example(name: str) -> dict:
    return json.loads((EXAMPLES / name).read_text())


class ServerIntegrationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)

    # ── Health ──

    def test_health_endpoint(self) -> None:
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "ok")

    # ── Calculations ──

    def test_post_valuation(self) -> None:
        resp = self.client.post("/valuation", json=_example("valuation_request.json"))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertNotIn("score", data)
        vr = data["valuation"]["valuation_result"]
        self.assertEqual(vr["stage"], "growth")
        self.assertAlmostEqual(vr["method_values"]["dcf_multiple"], 960_000.0, places=2)
        self.assertIn("request_id", data["valuation"]["audit_metadata"])

    def test_post_score_persists(self) -> None:
        resp = self.client.post("/score", json=_example("score_request.json"))
        self.assertEqual(resp.status_code, 200)
        total = resp.json()["score"]["score_result"]["total_score"]

        stored = self.client.get("/scores/acme-1")
        self.assertEqual(stored.status_code, 200)
        self.assertEqual(stored.json()["total_score"], total)
        self.assertIn("revenue", stored.json()["details"])

    def test_post_evaluate_runs_both(self) -> None:
        resp = self.client.post("/evaluate", json=_example("full_request.json"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(set(resp.json()), {"valuation", "score"})

    def test_route_overrides_payload_action(self) -> None:
        payload = _example("full_request.json")
        payload["action"] = "score"
        resp = self.client.post("/valuation", json=payload)
        self.assertEqual(set(resp.json()), {"valuation"})

    # ── Errors ──

    def test_invalid_json_returns_400(self) -> None:
        resp = self.client.post(
            "/score", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Invalid JSON", resp.json()["error"])

    def test_non_object_body_returns_400(self) -> None:
        resp = self.client.post("/score", json=[1, 2, 3])
        self.assertEqual(resp.status_code, 400)

    def test_missing_company_returns_400(self) -> None:
        resp = self.client.post("/valuation", json={"valuation": {"id": "v"}})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("company", resp.json()["error"])

    def test_unknown_score_returns_404(self) -> None:
        resp = self.client.get("/scores/nobody")
        self.assertEqual(resp.status_code, 404)

    # ── Benchmarks ──

    def test_get_default_benchmarks(self) -> None:
        resp = self.client.get("/benchmarks")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["values"]["avg_revenue"], 350_000.0)
        self.assertEqual(data["sources"]["avg_revenue"], "default")

    def test_get_industry_benchmarks(self) -> None:
        data = self.client.get("/benchmarks", params={"industry": "software"}).json()
        self.assertEqual(data["values"]["avg_revenue"], 500_000.0)
        self.assertEqual(data["sources"]["avg_revenue"], "industry")

    def test_put_then_reset_benchmarks(self) -> None:
        resp = self.client.put("/benchmarks", json={"avg_revenue": 3234})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["values"]["avg_revenue"], 3234.0)
        self.assertEqual(resp.json()["sources"]["avg_revenue"], "user")

        score = self.client.post("/score", json=_example("score_request.json")).json()
        self.assertEqual(score["score"]["score_result"]["details"]["revenue"]["score"], 100.0)

        resp = self.client.delete("/benchmarks")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["values"]["avg_revenue"], 350_000.0)
        self.assertEqual(self.client.get("/benchmarks").json()["sources"]["avg_revenue"], "default")

    def test_put_rejects_unknown_metric(self) -> None:
        resp = self.client.put("/benchmarks", json={"avg_burn": 10})
        self.assertEqual(resp.status_code, 400)

    def test_put_rejects_non_finite(self) -> None:
        for literal in (b"NaN", b"Infinity", b"-Infinity"):
            with self.subTest(literal=literal):
                resp = self.client.put(
                    "/benchmarks",
                    content=b'{"avg_revenue": ' + literal + b"}",
                    headers={"Content-Type": "application/json"},
                )
                self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.client.get("/benchmarks").json()["sources"]["avg_revenue"], "default")

    def test_malformed_settings_returns_400(self) -> None:
        payload = _example("valuation_request.json")
        payload["settings"] = {"dcf": 5}
        resp = self.client.post("/valuation", json=payload)
        self.assertEqual(resp.status_code, 400)
        self.assertIn("dcf", resp.json()["error"])

    def test_put_rejects_non_positive(self) -> None:
        for value in (0, -5, "lots", True):
            with self.subTest(value=value):
                resp = self.client.put("/benchmarks", json={"avg_revenue": value})
                self.assertEqual(resp.status_code, 400)


if __name__ == "__main__":
    unittest.main()
