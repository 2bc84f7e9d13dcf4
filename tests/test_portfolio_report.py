"""Smoke tests for the command-line report."""

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from portfolio_report import REPORT_CHOICES, run

SNAPSHOT = {
    "positions": [
        {"id": "p1", "symbol": "BTC", "name": "Bitcoin", "amount": 1, "assetClass": "crypto", "chain": "eth"},
        {"id": "p2", "symbol": "USDC", "name": "USDC", "amount": 10000, "assetClass": "crypto", "protocol": "Hyperliquid"},
        {"id": "p3", "symbol": "ETH", "name": "ETH Short (Hyperliquid)", "amount": 2, "isDebt": True,
         "assetClass": "crypto", "protocol": "Hyperliquid"},
        {"id": "p4", "symbol": "SPY", "name": "SPDR S&P 500", "amount": 10, "assetClass": "equity"},
        {"id": "p5", "symbol": "CASH_EUR_1", "name": "Revolut (EUR)", "amount": 1000, "assetClass": "cash"},
    ],
    "prices": {
        "bitcoin": {"price": 50000, "change24h": 500, "changePercent24h": 1.0},
        "ethereum": {"price": 3000},
        "spy": {"price": 500},
    },
    "fxRates": {"EUR": 1.1},
}


class PortfolioReportCliTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "snapshot.json")
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(SNAPSHOT, f)

    def tearDown(self):
        self.tmpdir.cleanup()

    def run_cli(self, *args):
        out = io.StringIO()
        with redirect_stdout(out):
            code = run([self.path, *args])
        return code, out.getvalue()

    def test_json_output(self):
        code, output = self.run_cli("--json")
        self.assertEqual(code, 0)
        data = json.loads(output)
        # 50000 + 10000 + 5000 + 1100; the ETH short is notional
        self.assertAlmostEqual(data["summary"]["totalValue"], 66100)
        self.assertEqual(data["exposure"]["perpsBreakdown"]["shorts"], 6000)
        self.assertTrue(data["perps"]["hasPerps"])

    def test_every_section_renders(self):
        for report in REPORT_CHOICES:
            with self.subTest(report=report):
                code, output = self.run_cli("--report", report, "--hide-dust")
                self.assertEqual(code, 0)
                self.assertTrue(output)

    def test_missing_snapshot(self):
        out = io.StringIO()
        with redirect_stdout(out):
            code = run([os.path.join(self.tmpdir.name, "missing.json")])
        self.assertEqual(code, 1)

    def test_rejects_non_positive_leverage(self):
        code, _ = self.run_cli("--leverage", "0")
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
