# -*- coding: utf-8 -*-
"""
Display Functions Module
------------------------
Terminal rendering of engine results: summary, positions, exposure,
breakdowns and the perp exchange page.
"""

from typing import List, Optional

from tabulate import tabulate

from config.constants import DUST_THRESHOLD
from core.aggregation import filter_dust_positions
from core.category_service import CategoryService
from core.exposure_classifier import classify_asset_exposure
from models.portfolio import AssetWithPrice
from models.results import (
    BreakdownItem,
    CashBreakdownResult,
    CryptoMetrics,
    EquitiesBreakdownResult,
    ExposureData,
    PerpPageData,
    PortfolioReport,
    PortfolioSummary,
)
from utils.display_theme import theme
from utils.helpers import (
    format_amount,
    format_currency,
    format_currency_compact,
    format_percentage,
    format_share,
    print_header,
    print_key_value,
    print_subheader,
    share_bar,
)


def display_portfolio_summary(summary: PortfolioSummary):
    """Headline totals, 24h change and the value split by asset class."""
    print_header("Portfolio Summary")

    print_key_value("Net Worth", format_currency(summary.total_value))
    print_key_value("Gross Assets", format_currency(summary.gross_assets))
    print_key_value("Total Debts", format_currency(-summary.total_debts if summary.total_debts else 0.0))
    print_key_value(
        "24h Change",
        f"{format_currency(summary.change_24h)} ({format_percentage(summary.change_percent_24h)})",
    )
    print_key_value("Positions", f"{summary.position_count} ({summary.asset_count} assets)")

    if not summary.assets_by_type:
        print(f"\n{theme.SUBTLE}No positive holdings to break down.{theme.RESET}")
        return

    table_data = [
        [item.type.capitalize(), format_currency(item.value), share_bar(item.percentage), format_share(item.percentage)]
        for item in summary.assets_by_type
    ]
    headers = ["Asset Class", "Value", "Distribution", "Share"]
    print(f"\n{tabulate(table_data, headers=headers, tablefmt='grid')}")

    if summary.top_assets:
        print_subheader("Top Positions")
        rows = [
            [asset.symbol, asset.name, format_currency(asset.value), format_share(asset.allocation)]
            for asset in summary.top_assets
        ]
        print(tabulate(rows, headers=["Symbol", "Name", "Value", "Allocation"], tablefmt="grid"))


def display_positions(
    assets: List[AssetWithPrice],
    category_service: Optional[CategoryService] = None,
    hide_dust: bool = False,
    dust_threshold: float = DUST_THRESHOLD,
):
    """Every valued position with its exposure classification."""
    print_header("Positions")

    category_service = category_service or CategoryService()
    visible = filter_dust_positions(assets, hide_dust, dust_threshold)
    if not visible:
        print(f"{theme.SUBTLE}No positions to display.{theme.RESET}")
        return

    table_data = []
    for asset in visible:
        classification = classify_asset_exposure(asset, category_service).classification
        price = format_currency(asset.current_price, theme.PRIMARY)
        if asset.has_custom_price:
            price += f" {theme.WARNING}*{theme.RESET}"
        table_data.append(
            [
                f"{theme.ACCENT}{asset.symbol}{theme.RESET}",
                asset.name,
                format_amount(asset.amount),
                price,
                format_currency(asset.value),
                format_percentage(asset.change_percent_24h),
                format_share(asset.allocation),
                theme.exposure_tag(classification.value),
            ]
        )

    headers = ["Symbol", "Name", "Amount", "Price", "Value", "24h", "Alloc", "Exposure"]
    print(tabulate(table_data, headers=headers, tablefmt="grid", numalign="right", stralign="left"))

    hidden = len(assets) - len(visible)
    if hidden:
        print(f"{theme.SUBTLE}{hidden} position(s) under {format_currency(dust_threshold, theme.SUBTLE)} hidden.{theme.RESET}")
    if any(asset.has_custom_price for asset in visible):
        print(f"{theme.WARNING}*{theme.RESET} custom price")


def display_exposure(exposure: ExposureData):
    """Exposure metrics, category tree, concentration and perps."""
    print_header("Exposure Analysis")

    metrics = exposure.exposure_metrics
    print_key_value("Net Worth", format_currency(metrics.net_worth))
    print_key_value("Long Exposure", format_currency(metrics.long_exposure))
    print_key_value("Short Exposure", format_currency(-metrics.short_exposure if metrics.short_exposure else 0.0))
    print_key_value("Gross Exposure", format_currency(metrics.gross_exposure, theme.PRIMARY))
    print_key_value("Net Exposure", format_currency(metrics.net_exposure))
    leverage_color = theme.WARNING if metrics.leverage > 2 else theme.SUCCESS
    print_key_value("Leverage", f"{leverage_color}{metrics.leverage:.2f}x{theme.RESET}")
    print_key_value("Cash", format_share(metrics.cash_percentage))
    print_key_value("Debt Ratio", format_share(metrics.debt_ratio))

    if exposure.categories:
        print_subheader("Categories")
        rows = []
        for category in exposure.categories:
            rows.append(
                [
                    f"{theme.PRIMARY}{category.label}{theme.RESET}",
                    format_currency(category.value),
                    format_currency(category.gross, theme.SUBTLE),
                    format_currency(-category.debt if category.debt else 0.0, theme.SUBTLE),
                    format_share(category.percentage),
                ]
            )
            for sub in category.sub_categories:
                rows.append(
                    [
                        f"  └ {sub.label}",
                        format_currency(sub.value),
                        format_currency(sub.gross, theme.SUBTLE),
                        format_currency(-sub.debt if sub.debt else 0.0, theme.SUBTLE),
                        format_share(sub.percentage),
                    ]
                )
        print(tabulate(rows, headers=["Category", "Net", "Gross", "Debt", "Of Gross"], tablefmt="grid"))

    concentration = exposure.concentration_metrics
    print_subheader("Concentration")
    print_key_value("HHI", f"{concentration.herfindahl_index:,.0f}")
    print_key_value("Top 1 / 5 / 10", " / ".join(
        format_share(value).strip()
        for value in (
            concentration.top1_percentage,
            concentration.top5_percentage,
            concentration.top10_percentage,
        )
    ))
    print_key_value("Positions", f"{concentration.position_count} ({concentration.asset_count} assets)")

    split = exposure.spot_derivatives
    print_subheader("Spot vs Derivatives")
    rows = [
        ["Spot", format_currency(split.spot_long), format_currency(split.spot_short), format_currency(split.spot_net)],
        [
            "Derivatives",
            format_currency(split.derivatives_long),
            format_currency(split.derivatives_short),
            format_currency(split.derivatives_net),
        ],
    ]
    print(tabulate(rows, headers=["", "Long", "Short", "Net"], tablefmt="grid"))

    perps = exposure.perps_metrics
    if perps.collateral or perps.gross_notional:
        print_subheader("Perps")
        print_key_value("Collateral", format_currency(perps.collateral))
        print_key_value("Long / Short", f"{format_currency(perps.long_notional)} / {format_currency(perps.short_notional)}")
        print_key_value("Gross Notional", format_currency(perps.gross_notional, theme.PRIMARY))
        print_key_value("Est. Margin Used", format_currency(perps.estimated_margin_used, theme.PRIMARY))
        utilization_color = theme.ERROR if perps.utilization_rate > 80 else theme.SUCCESS
        print_key_value("Utilization", f"{utilization_color}{perps.utilization_rate:.1f}%{theme.RESET}")


def display_breakdown(title: str, items: List[BreakdownItem], label_header: str = "Bucket", show_details: bool = True):
    """Generic bucket table (allocation, risk, custody, chains)."""
    print_header(title)

    if not items:
        print(f"{theme.SUBTLE}Nothing to break down.{theme.RESET}")
        return

    table_data = []
    for item in items:
        table_data.append(
            [
                f"{theme.PRIMARY}{item.label}{theme.RESET}",
                format_currency(item.value),
                share_bar(item.percentage),
                format_share(item.percentage),
                item.count,
            ]
        )
        if show_details:
            for child in item.breakdown[:5]:
                table_data.append([f"  └ {child.label}", format_currency(child.value, theme.SUBTLE), "", format_share(child.percentage), child.count])

    headers = [label_header, "Value", "Distribution", "Share", "Positions"]
    print(tabulate(table_data, headers=headers, tablefmt="grid"))

    largest = items[0]
    print(f"\nLargest: {largest.label} ({largest.percentage:.1f}%)")


def display_crypto_metrics(metrics: CryptoMetrics):
    print_header("Crypto Metrics")
    rows = [
        ["Stablecoin Ratio", format_share(metrics.stablecoin_ratio), share_bar(metrics.stablecoin_ratio)],
        ["BTC Dominance", format_share(metrics.btc_dominance), share_bar(metrics.btc_dominance)],
        ["ETH Dominance", format_share(metrics.eth_dominance), share_bar(metrics.eth_dominance)],
        ["DeFi Exposure", format_share(metrics.defi_exposure), share_bar(metrics.defi_exposure)],
    ]
    print(tabulate(rows, headers=["Metric", "Share", ""], tablefmt="grid"))


def display_cash_breakdown(cash: CashBreakdownResult):
    """Fiat vs stablecoins, by currency and by institution."""
    print_header("Cash & Stablecoins")

    print_key_value("Fiat", f"{format_currency(cash.fiat.value)} ({cash.fiat.count} positions)")
    print_key_value("Stablecoins", f"{format_currency(cash.stablecoins.value)} ({cash.stablecoins.count} positions)")
    print_key_value("Total", format_currency(cash.total))

    if cash.chart_data:
        rows = [
            [item.label, format_currency(item.value), share_bar(item.percentage), format_share(item.percentage)]
            for item in cash.chart_data
        ]
        print(f"\n{tabulate(rows, headers=['Currency', 'Value', 'Distribution', 'Share'], tablefmt='grid')}")

    if cash.institution_breakdown:
        print_subheader("Institutions")
        rows = [
            [item.name, item.currency, format_currency(item.value), item.count]
            for item in cash.institution_breakdown
        ]
        print(tabulate(rows, headers=["Institution", "Currency", "Value", "Positions"], tablefmt="grid"))


def display_equities_breakdown(equities: EquitiesBreakdownResult):
    print_header("Equities")

    if equities.total <= 0:
        print(f"{theme.SUBTLE}No equity holdings.{theme.RESET}")
        return

    print_key_value("Stocks", f"{format_currency(equities.stocks.value)} ({equities.stocks.count} positions)")
    print_key_value("ETFs", f"{format_currency(equities.etfs.value)} ({equities.etfs.count} positions)")
    print_key_value("Total", format_currency(equities.total))

    rows = []
    for item in equities.chart_data:
        rows.append([f"{theme.PRIMARY}{item.label}{theme.RESET}", format_currency(item.value), format_share(item.percentage)])
        for child in item.breakdown:
            rows.append([f"  └ {child.label}", format_currency(child.value, theme.SUBTLE), format_share(child.percentage)])
    print(f"\n{tabulate(rows, headers=['Type', 'Value', 'Share'], tablefmt='grid')}")


def display_perp_page(perps: PerpPageData):
    """Per-exchange account value and open trades on perp DEXs."""
    print_header("Perp DEX Positions")

    if not perps.has_perps:
        print(f"{theme.SUBTLE}No positions on perp exchanges.{theme.RESET}")
        return

    rows = [
        [
            f"{theme.ACCENT}{stats.exchange}{theme.RESET}",
            format_currency(stats.margin),
            format_currency(stats.spot),
            format_currency(stats.account_value, theme.PRIMARY),
            format_currency(stats.longs),
            format_currency(-stats.shorts if stats.shorts else 0.0),
            format_currency(stats.net_exposure),
            stats.position_count,
        ]
        for stats in perps.exchange_stats
    ]
    headers = ["Exchange", "Margin", "Spot", "Account", "Longs", "Shorts", "Net", "Positions"]
    print(tabulate(rows, headers=headers, tablefmt="grid"))

    if perps.trading_positions:
        print_subheader("Open Trades")
        rows = []
        for asset in perps.trading_positions:
            direction = (
                f"{theme.ERROR}Short{theme.RESET}" if asset.value < 0 else f"{theme.SUCCESS}Long{theme.RESET}"
            )
            rows.append([asset.symbol, asset.name, direction, format_amount(asset.amount), format_currency_compact(asset.value)])
        print(tabulate(rows, headers=["Symbol", "Name", "Side", "Size", "Notional"], tablefmt="grid"))


def display_full_report(
    report: PortfolioReport,
    category_service: Optional[CategoryService] = None,
    hide_dust: bool = False,
    dust_threshold: float = DUST_THRESHOLD,
):
    """Every section of the report, in reading order."""
    display_portfolio_summary(report.summary)
    display_positions(report.assets, category_service, hide_dust, dust_threshold)
    display_exposure(report.exposure)
    display_breakdown("Asset Allocation", report.allocation, "Class")
    display_breakdown("Risk Profile", report.risk_profile, "Risk")
    display_breakdown("Custody", report.custody, "Custody", show_details=False)
    display_breakdown("Chains & Venues", report.chains, "Chain", show_details=False)
    display_crypto_metrics(report.crypto_metrics)
    display_cash_breakdown(report.cash)
    display_equities_breakdown(report.equities)
    display_perp_page(report.perps)
