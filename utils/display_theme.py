# -*- coding: utf-8 -*-
"""
Simple Display Theme System
"""

from colorama import Fore, Style


class SimpleTheme:
    """Basic theme with consistent colors, plus the palette used for exposure tags."""

    def __init__(self):
        # Primary colors
        self.PRIMARY = Fore.WHITE + Style.BRIGHT
        self.ACCENT = Fore.CYAN + Style.BRIGHT
        self.SUCCESS = Fore.GREEN + Style.BRIGHT
        self.ERROR = Fore.RED + Style.BRIGHT
        self.WARNING = Fore.YELLOW + Style.BRIGHT
        self.INFO = Fore.BLUE + Style.BRIGHT
        self.SUBTLE = Style.DIM
        self.RESET = Style.RESET_ALL

        # Simple symbols
        self.CHECKMARK = "✓"
        self.CROSS = "✗"
        self.WARNING_SYMBOL = "⚠"
        self.INFO_SYMBOL = "ℹ"

        # Exposure classification -> color
        self.EXPOSURE_COLORS = {
            "perp-long": Fore.GREEN,
            "perp-short": Fore.RED,
            "perp-margin": Fore.BLUE,
            "perp-spot": Fore.CYAN,
            "spot-long": Fore.GREEN + Style.BRIGHT,
            "spot-short": Fore.RED + Style.BRIGHT,
            "cash": Fore.WHITE,
            "borrowed-cash": Fore.MAGENTA,
        }

    def value_color(self, value: float) -> str:
        """Green for assets, red for liabilities, yellow for zero."""
        if value > 0:
            return self.SUCCESS
        if value < 0:
            return self.ERROR
        return self.WARNING

    def exposure_tag(self, classification: str) -> str:
        """Colored exposure classification label."""
        color = self.EXPOSURE_COLORS.get(classification, self.SUBTLE)
        return f"{color}{classification}{self.RESET}"


# Global theme instance
theme = SimpleTheme()
