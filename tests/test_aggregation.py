"""Tests for net worth, dust filtering, symbol aggregation and exposure data."""

import unittest

from core.aggregation import (
    aggregate_positions_by_symbol,
    calculate_exposure_data,
    calculate_net_worth,
    filter_dust_positions,
)
from config.constants import DUST_THRESHOLD
from tests.fixtures import make_asset_with_price


def perp_long(value, symbol="BTC", **overrides):
    return make_asset_with_price(
        symbol=symbol, name=f"{symbol} Long (Hyperliquid)", protocol="Hyperliquid", value=value, **overrides
    )


def perp_short(value, symbol="ETH", **overrides):
    return make_asset_with_price(
        symbol=symbol,
        name=f"{symbol} Short (Hyperliquid)",
        protocol="Hyperliquid",
        value=-value,
        is_debt=True,
        **overrides,
    )


def margin(value, symbol="USDC"):
    return make_asset_with_price(symbol=symbol, name=symbol, protocol="Hyperliquid", value=value)


class NetWorthTests(unittest.TestCase):
    def test_sums_signed_values(self):
        assets = [
            make_asset_with_price(value=50000),
            make_asset_with_price(symbol="ETH", value=-5000, is_debt=True),
        ]
        self.assertEqual(calculate_net_worth(assets), 45000)

    def test_excludes_perp_notional_but_keeps_margin(self):
        assets = [margin(10000), make_asset_with_price(value=100000, is_perp_notional=True)]
        self.assertEqual(calculate_net_worth(assets), 10000)

    def test_empty_and_all_notional(self):
        self.assertEqual(calculate_net_worth([]), 0)
        self.assertEqual(calculate_net_worth([make_asset_with_price(is_perp_notional=True)]), 0)


class DustFilterTests(unittest.TestCase):
    def setUp(self):
        self.assets = [
            make_asset_with_price(value=50000),
            make_asset_with_price(symbol="DUST", value=12.5),
            make_asset_with_price(symbol="USDC", value=-5000, is_debt=True),
            make_asset_with_price(symbol="DAI", value=-3, is_debt=True),
        ]

    def test_disabled_returns_everything(self):
        self.assertEqual(len(filter_dust_positions(self.assets, False)), 4)

    def test_default_threshold(self):
        self.assertEqual(DUST_THRESHOLD, 100)
        kept = filter_dust_positions(self.assets, True)
        self.assertEqual([asset.symbol for asset in kept], ["BTC", "USDC"])

    def test_custom_threshold(self):
        kept = filter_dust_positions(self.assets, True, threshold=10)
        self.assertEqual(len(kept), 3)

    def test_accepts_plain_dicts(self):
        kept = filter_dust_positions([{"value": 500}, {"value": 5}], True)
        self.assertEqual(kept, [{"value": 500}])


class AggregateBySymbolTests(unittest.TestCase):
    def test_merges_same_symbol(self):
        result = aggregate_positions_by_symbol(
            [
                make_asset_with_price(symbol="ETH", value=3000, amount=1),
                make_asset_with_price(symbol="eth", value=6000, amount=2),
            ]
        )
        self.assertEqual(len(result), 1)
        self.assertEqual(result[0].value, 9000)
        self.assertEqual(result[0].amount, 3)

    def test_nets_debt(self):
        result = aggregate_positions_by_symbol(
            [
                make_asset_with_price(symbol="ETH", value=6000, amount=2),
                make_asset_with_price(symbol="ETH", value=-3000, amount=1, is_debt=True),
            ]
        )
        self.assertEqual(result[0].value, 3000)
        self.assertEqual(result[0].amount, 1)
        self.assertFalse(result[0].is_debt)

    def test_net_debt_is_marked(self):
        result = aggregate_positions_by_symbol(
            [
                make_asset_with_price(symbol="ETH", value=3000, amount=1),
                make_asset_with_price(symbol="ETH", value=-6000, amount=2, is_debt=True),
            ]
        )
        self.assertEqual(result[0].value, -3000)
        self.assertEqual(result[0].amount, 1)
        self.assertTrue(result[0].is_debt)

    def test_perp_notional_kept_apart_with_zero_allocation(self):
        result = aggregate_positions_by_symbol(
            [
                make_asset_with_price(value=50000),
                make_asset_with_price(value=100000, amount=2, is_perp_notional=True),
            ]
        )
        self.assertEqual(len(result), 2)
        perp = next(asset for asset in result if asset.is_perp_notional)
        self.assertEqual(perp.allocation, 0)

    def test_asset_classes_kept_apart(self):
        result = aggregate_positions_by_symbol(
            [
                make_asset_with_price(value=50000),
                make_asset_with_price(value=25000, amount=0.5, asset_class="other"),
            ]
        )
        self.assertEqual(len(result), 2)

    def test_allocation_and_order(self):
        result = aggregate_positions_by_symbol(
            [
                make_asset_with_price(symbol="SOL", value=1000, amount=10),
                make_asset_with_price(symbol="BTC", value=49000),
                make_asset_with_price(symbol="ETH", value=-3000, is_debt=True),
            ]
        )
        self.assertEqual([asset.symbol for asset in result], ["BTC", "SOL", "ETH"])
        self.assertAlmostEqual(result[0].allocation, 98)
        self.assertAlmostEqual(result[2].allocation, -6)

    def test_single_and_empty(self):
        self.assertEqual(aggregate_positions_by_symbol([]), [])
        self.assertEqual(aggregate_positions_by_symbol([make_asset_with_price()])[0].allocation, 100)

    def test_inputs_are_not_mutated(self):
        first = make_asset_with_price(symbol="ETH", value=3000, amount=1)
        aggregate_positions_by_symbol([first, make_asset_with_price(symbol="ETH", value=3000, amount=1)])
        self.assertEqual(first.value, 3000)
        self.assertEqual(first.amount, 1)


class ExposureMetricsTests(unittest.TestCase):
    def test_long_short_and_gross(self):
        data = calculate_exposure_data(
            [
                make_asset_with_price(value=50000),
                make_asset_with_price(symbol="ETH", value=-3000, is_debt=True),
            ]
        )
        metrics = data.exposure_metrics
        self.assertEqual(metrics.long_exposure, 50000)
        self.assertEqual(metrics.short_exposure, 3000)
        self.assertEqual(metrics.gross_exposure, 53000)
        self.assertEqual(metrics.net_exposure, 47000)

    def test_leverage_with_perps(self):
        data = calculate_exposure_data([make_asset_with_price(value=50000), perp_long(100000), margin(10000)])
        self.assertEqual(data.total_value, 60000)
        self.assertAlmostEqual(data.exposure_metrics.leverage, 2.5)

    def test_leverage_zero_without_net_worth(self):
        data = calculate_exposure_data(
            [
                make_asset_with_price(value=10000),
                make_asset_with_price(value=-10000, is_debt=True),
            ]
        )
        self.assertEqual(data.exposure_metrics.leverage, 0)

    def test_cash_percentage_counts_stablecoins(self):
        data = calculate_exposure_data(
            [make_asset_with_price(value=70000), make_asset_with_price(symbol="USDC", value=30000)]
        )
        self.assertAlmostEqual(data.exposure_metrics.cash_percentage, 30)

    def test_bank_cash_is_cash_not_long_exposure(self):
        bank = make_asset_with_price(
            symbol="CASH_USD_revolut", name="Revolut (USD)", asset_class="cash", chain=None, value=10000
        )
        data = calculate_exposure_data([bank, make_asset_with_price(value=10000)])
        self.assertAlmostEqual(data.exposure_metrics.cash_percentage, 50)
        self.assertEqual(data.exposure_metrics.long_exposure, 10000)

        data = calculate_exposure_data([bank])
        self.assertEqual(data.exposure_metrics.long_exposure, 0)
        self.assertEqual(data.exposure_metrics.leverage, 0)
        self.assertEqual(data.exposure_metrics.cash_percentage, 100)

    def test_fiat_loan_is_debt_not_short_exposure(self):
        loan = make_asset_with_price(
            symbol="CASH_EUR_loan", name="Bank (EUR)", asset_class="cash", chain=None, value=-5000, is_debt=True
        )
        data = calculate_exposure_data([make_asset_with_price(value=50000), loan])
        metrics = data.exposure_metrics
        self.assertEqual(metrics.short_exposure, 0)
        self.assertEqual(metrics.cash_percentage, 0)
        self.assertEqual(data.total_debts, 5000)
        self.assertAlmostEqual(metrics.debt_ratio, 10)

    def test_debt_ratio(self):
        data = calculate_exposure_data(
            [
                make_asset_with_price(value=90000),
                make_asset_with_price(symbol="ETH", value=-10000, is_debt=True),
            ]
        )
        self.assertAlmostEqual(data.exposure_metrics.debt_ratio, 11.11, places=2)

    def test_borrowed_stablecoin_is_not_short_exposure(self):
        data = calculate_exposure_data(
            [
                make_asset_with_price(value=50000),
                make_asset_with_price(symbol="USDC", value=-10000, is_debt=True, protocol="Morpho"),
            ]
        )
        self.assertEqual(data.exposure_metrics.short_exposure, 0)
        self.assertEqual(data.total_debts, 10000)
        self.assertAlmostEqual(data.exposure_metrics.debt_ratio, 20)

    def test_flagged_notional_without_trade_name(self):
        data = calculate_exposure_data(
            [
                margin(10000),
                make_asset_with_price(value=40000, protocol="Hyperliquid", is_perp_notional=True),
                make_asset_with_price(symbol="ETH", value=-5000, is_debt=True, is_perp_notional=True),
            ]
        )
        self.assertEqual(data.perps_breakdown.longs, 40000)
        self.assertEqual(data.perps_breakdown.shorts, 5000)
        self.assertEqual(data.total_value, 10000)


class ConcentrationTests(unittest.TestCase):
    def test_single_asset(self):
        metrics = calculate_exposure_data([make_asset_with_price(value=100000)]).concentration_metrics
        self.assertEqual(metrics.herfindahl_index, 10000)
        self.assertEqual(metrics.top1_percentage, 100)

    def test_two_equal_assets(self):
        metrics = calculate_exposure_data(
            [make_asset_with_price(value=50000), make_asset_with_price(symbol="ETH", value=50000)]
        ).concentration_metrics
        self.assertAlmostEqual(metrics.herfindahl_index, 5000)

    def test_counts_and_top_n(self):
        metrics = calculate_exposure_data(
            [
                make_asset_with_price(value=30000),
                make_asset_with_price(value=20000),
                make_asset_with_price(symbol="ETH", value=30000),
                make_asset_with_price(symbol="SOL", value=20000),
            ]
        ).concentration_metrics
        self.assertEqual(metrics.position_count, 4)
        self.assertEqual(metrics.asset_count, 3)
        self.assertAlmostEqual(metrics.top1_percentage, 50)
        self.assertAlmostEqual(metrics.top5_percentage, 100)
        self.assertAlmostEqual(metrics.top10_percentage, 100)

    def test_ignores_debts_and_notional(self):
        metrics = calculate_exposure_data(
            [
                make_asset_with_price(value=10000),
                make_asset_with_price(symbol="ETH", value=-5000, is_debt=True),
                perp_long(90000, symbol="SOL"),
            ]
        ).concentration_metrics
        self.assertEqual(metrics.asset_count, 1)
        self.assertEqual(metrics.top1_percentage, 100)


class PerpsMetricsTests(unittest.TestCase):
    def test_collateral_and_notional(self):
        data = calculate_exposure_data([margin(10000), perp_long(50000), perp_short(20000)])
        perps = data.perps_metrics
        self.assertEqual(perps.collateral, 10000)
        self.assertEqual(perps.long_notional, 50000)
        self.assertEqual(perps.short_notional, 20000)
        self.assertEqual(perps.net_notional, 30000)
        self.assertEqual(perps.gross_notional, 70000)

    def test_utilization(self):
        data = calculate_exposure_data([margin(20000), perp_long(50000)])
        self.assertAlmostEqual(data.perps_metrics.estimated_margin_used, 10000)
        self.assertAlmostEqual(data.perps_metrics.utilization_rate, 50)

    def test_leverage_assumption_is_overridable(self):
        data = calculate_exposure_data([margin(20000), perp_long(50000)], assumed_avg_leverage=10)
        self.assertAlmostEqual(data.perps_metrics.utilization_rate, 25)

    def test_no_collateral_means_zero_utilization(self):
        data = calculate_exposure_data([perp_long(50000)])
        self.assertEqual(data.perps_metrics.utilization_rate, 0)

    def test_perps_breakdown_total_is_margin(self):
        data = calculate_exposure_data([margin(10000), perp_long(50000)])
        self.assertEqual(data.perps_breakdown.margin, 10000)
        self.assertEqual(data.perps_breakdown.longs, 50000)
        self.assertEqual(data.perps_breakdown.total, 10000)

    def test_spot_vs_derivatives(self):
        data = calculate_exposure_data(
            [make_asset_with_price(value=50000), perp_long(100000), perp_short(30000)]
        )
        split = data.spot_derivatives
        self.assertEqual(split.spot_long, 50000)
        self.assertEqual(split.spot_net, 50000)
        self.assertEqual(split.derivatives_long, 100000)
        self.assertEqual(split.derivatives_short, 30000)
        self.assertEqual(split.derivatives_net, 70000)


class CategoryTreeTests(unittest.TestCase):
    def test_totals_and_tree(self):
        data = calculate_exposure_data(
            [
                make_asset_with_price(value=50000),
                make_asset_with_price(symbol="USDC", value=-5000, is_debt=True),
                make_asset_with_price(symbol="AAPL", asset_class="equity", value=10000),
                perp_long(100000),
            ]
        )
        self.assertEqual(data.gross_assets, 60000)
        self.assertEqual(data.total_debts, 5000)
        self.assertEqual(data.total_value, 55000)

        crypto, equities = data.categories
        self.assertEqual(crypto.category, "crypto")
        self.assertEqual(crypto.value, 45000)
        self.assertEqual(crypto.gross, 50000)
        self.assertEqual(crypto.debt, 5000)
        self.assertAlmostEqual(crypto.percentage, 50000 / 60000 * 100)
        self.assertEqual({sub.category for sub in crypto.sub_categories}, {"btc", "stablecoins"})
        self.assertEqual(equities.label, "Equities")
        self.assertEqual(equities.sub_categories[0].label, "Stocks")

    def test_empty(self):
        data = calculate_exposure_data([])
        self.assertEqual(data.total_value, 0)
        self.assertEqual(data.gross_assets, 0)
        self.assertEqual(data.total_debts, 0)
        self.assertEqual(data.categories, [])
        self.assertEqual(data.exposure_metrics.cash_percentage, 0)
        self.assertEqual(data.exposure_metrics.debt_ratio, 0)


if __name__ == "__main__":
    unittest.main()
