"""Mini README: Utility helpers for GiroPositivo.

Currently exports the money and duration formatting helpers used by the
command line.
"""

from .formatting import format_duration, format_money, parse_money_input

__all__ = ["format_duration", "format_money", "parse_money_input"]
