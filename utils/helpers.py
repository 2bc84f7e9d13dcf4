# -*- coding: utf-8 -*-
"""
Utility functions for the Portfolio Exposure Engine
"""
import math
from typing import Any, Optional

# Import the simple theme system
from utils.display_theme import theme


def print_header(text: str, width: int = 70):
    """Prints a formatted, professional header."""
    print(f"\n{theme.PRIMARY}{'━' * width}{theme.RESET}")
    print(
        f"{theme.PRIMARY}┃{theme.RESET} {theme.ACCENT}{text.center(width-4)}{theme.RESET} {theme.PRIMARY}┃{theme.RESET}"
    )
    print(f"{theme.PRIMARY}{'━' * width}{theme.RESET}\n")


def print_subheader(text: str):
    """Prints a formatted subheader."""
    print(f"\n{theme.ACCENT}{text}{theme.RESET}")
    print(f"{theme.SUBTLE}{'─' * len(text)}{theme.RESET}")


def print_success(text: str):
    """Prints a success message."""
    print(f"{theme.SUCCESS}{theme.CHECKMARK} {text}{theme.RESET}")


def print_error(text: str):
    """Prints an error message."""
    print(f"{theme.ERROR}{theme.CROSS} Error: {text}{theme.RESET}")


def print_warning(text: str):
    """Prints a warning message."""
    print(f"{theme.WARNING}{theme.WARNING_SYMBOL} Warning: {text}{theme.RESET}")


def print_info(text: str):
    """Prints an informational message."""
    print(f"{theme.INFO}{theme.INFO_SYMBOL} {text}{theme.RESET}")


def print_key_value(key: str, value: str, key_width: int = 22):
    """Prints a key-value pair with consistent formatting."""
    formatted_key = f"{theme.PRIMARY}{key}:".ljust(
        key_width + len(theme.PRIMARY) + len(theme.RESET)
    )
    formatted_value = f"{theme.ACCENT}{value}{theme.RESET}"
    print(f"{formatted_key}{theme.RESET} {formatted_value}")


def format_large_number(value: float, precision: int = 2) -> str:
    """Formats large numbers with appropriate suffixes (K, M, B)."""
    if abs(value) >= 1_000_000_000:
        return f"{value / 1_000_000_000:.{precision}f}B"
    elif abs(value) >= 1_000_000:
        return f"{value / 1_000_000:.{precision}f}M"
    elif abs(value) >= 1_000:
        return f"{value / 1_000:.{precision}f}K"
    else:
        return f"{value:.{precision}f}"


def safe_float_convert(value: Any, default: float = 0.0) -> float:
    """Safely converts a value to float, returning default if conversion fails."""
    try:
        result = float(value)
    except (ValueError, TypeError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divides, returning default instead of NaN/Infinity for a zero or invalid denominator."""
    if not denominator or not math.isfinite(denominator):
        return default
    result = numerator / denominator
    return result if math.isfinite(result) else default


def safe_percentage(part: float, total: float) -> float:
    """Share of total as a percentage; 0 when total is not positive."""
    if total <= 0:
        return 0.0
    return safe_divide(part, total) * 100


def format_currency(value: Optional[float], color: str = "") -> str:
    """Formats a float as USD currency, handling None and coloring debts."""
    if value is None:
        return f"{theme.ERROR}N/A{theme.RESET}"

    if not color:
        color = theme.value_color(value)
    sign = "-" if value < 0 else ""
    return f"{color}{sign}${abs(value):,.2f}{theme.RESET}"


def format_currency_compact(value: Optional[float]) -> str:
    """Formats currency in compact form (K, M, B)."""
    if value is None:
        return f"{theme.ERROR}N/A{theme.RESET}"

    formatted_number = format_large_number(abs(value))
    sign = "-" if value < 0 else ""
    return f"{theme.value_color(value)}{sign}${formatted_number}{theme.RESET}"


def format_percentage(value: Optional[float], color: str = "") -> str:
    """Formats a float as a percentage, handling None, optionally adding color."""
    if value is None:
        return f"{theme.ERROR}N/A{theme.RESET}"

    if value > 0:
        return f"{color or theme.SUCCESS}+{value:.2f}%{theme.RESET}"
    elif value < 0:
        return f"{color or theme.ERROR}{value:.2f}%{theme.RESET}"
    else:
        return f"{color or theme.WARNING}{value:.2f}%{theme.RESET}"


def format_share(value: float) -> str:
    """Formats an unsigned share of a total (allocation, dominance)."""
    return f"{value:5.1f}%"


def format_amount(value: float) -> str:
    """Formats a token/share amount with precision that fits its size."""
    if value == 0:
        return "0"
    if abs(value) >= 1000:
        return f"{value:,.2f}"
    if abs(value) >= 1:
        return f"{value:,.4f}".rstrip("0").rstrip(".")
    return f"{value:.8f}".rstrip("0").rstrip(".")


def share_bar(percentage: float, bar_width: int = 20) -> str:
    """Text progress bar for a 0-100 share."""
    clamped = max(0.0, min(100.0, percentage))
    filled_width = int(clamped * bar_width / 100)
    return "█" * filled_width + "░" * (bar_width - filled_width)
