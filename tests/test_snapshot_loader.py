"""Tests for reading portfolio snapshots from JSON."""

import json
import os
import tempfile
import unittest

from models.portfolio import AssetClass, resolve_asset_class
from utils.snapshot_loader import SnapshotError, load_snapshot, parse_snapshot

SNAPSHOT = {
    "positions": [
        {"id": "p1", "symbol": "BTC", "name": "Bitcoin", "amount": 1, "assetClass": "crypto", "accountId": "wallet-1"},
        {"id": "p2", "symbol": "USDC", "name": "USD Coin", "amount": 5000, "isDebt": True, "protocol": "Morpho"},
        {"id": "p3", "name": "No symbol", "amount": 3},
        {"id": "p4", "symbol": "ETH", "name": "Ethereum", "amount": -2},
    ],
    "prices": {"bitcoin": {"price": 50000, "change24h": 500, "changePercent24h": 1.0}},
    "customPrices": {"PEPE": {"price": 0.00001, "note": "OTC"}},
    "fxRates": {"eur": 1.08, "chf": 0, "gbp": "bad"},
    "accounts": [
        {"id": "wallet-1", "name": "Main", "connection": {"dataSource": "debank"}},
        {"name": "Missing id"},
    ],
}


class ParseSnapshotTests(unittest.TestCase):
    def setUp(self):
        self.snapshot = parse_snapshot(SNAPSHOT)

    def test_positions(self):
        symbols = [position.symbol for position in self.snapshot.positions]
        self.assertEqual(symbols, ["BTC", "USDC", "ETH"])
        self.assertEqual(self.snapshot.positions[0].account_id, "wallet-1")
        self.assertTrue(self.snapshot.positions[1].is_debt)

    def test_negative_amount_becomes_debt(self):
        eth = self.snapshot.positions[2]
        self.assertEqual(eth.amount, 2)
        self.assertTrue(eth.is_debt)

    def test_prices(self):
        price = self.snapshot.prices["bitcoin"]
        self.assertEqual(price.price, 50000)
        self.assertEqual(price.change_24h, 500)
        self.assertEqual(price.change_percent_24h, 1.0)

    def test_custom_prices_keyed_lower(self):
        self.assertIn("pepe", self.snapshot.custom_prices)
        self.assertEqual(self.snapshot.custom_prices["pepe"].note, "OTC")

    def test_fx_rates_keep_positive_rates_only(self):
        self.assertEqual(self.snapshot.fx_rates, {"EUR": 1.08})

    def test_accounts_without_id_are_skipped(self):
        self.assertEqual(len(self.snapshot.accounts), 1)
        self.assertTrue(self.snapshot.accounts[0].is_wallet)

    def test_empty_object(self):
        snapshot = parse_snapshot({})
        self.assertEqual(snapshot.positions, [])
        self.assertEqual(snapshot.prices, {})

    def test_non_object_raises(self):
        with self.assertRaises(SnapshotError):
            parse_snapshot([1, 2, 3])


class LoadSnapshotTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def write(self, name, text):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_load(self):
        path = self.write("snapshot.json", json.dumps(SNAPSHOT))
        snapshot = load_snapshot(path)
        self.assertEqual(len(snapshot.positions), 3)
        self.assertEqual(resolve_asset_class(snapshot.positions[0]), AssetClass.CRYPTO)

    def test_missing_file(self):
        with self.assertRaises(SnapshotError):
            load_snapshot(os.path.join(self.tmpdir.name, "missing.json"))

    def test_invalid_json(self):
        path = self.write("broken.json", "{not json")
        with self.assertRaises(SnapshotError):
            load_snapshot(path)


if __name__ == "__main__":
    unittest.main()
