"""Currency conversion with per-unit rounding granularity."""

from __future__ import annotations

import math
from enum import Enum

from .errors import InvalidConfiguration, require


class DisplayUnit(Enum):
    """Units an amount can be displayed and stored in."""

    PRIMARY = ("RMB", "¥", 0)
    SECONDARY = ("USD", "$", 1)

    def __init__(self, code: str, symbol: str, decimals: int) -> None:
        self.code = code
        self.symbol = symbol
        self.decimals = decimals

    @property
    def granularity(self) -> float:
        return 10.0 ** -self.decimals

    @property
    def other(self) -> "DisplayUnit":
        if self is DisplayUnit.PRIMARY:
            return DisplayUnit.SECONDARY
        return DisplayUnit.PRIMARY

    @classmethod
    def from_code(cls, code: str) -> "DisplayUnit":
        lookup = code.strip().upper()
        for unit in cls:
            if unit.code == lookup or unit.name == lookup:
                return unit
        raise ValueError(f"Unknown display unit: {code!r}")


def round_to_unit(amount: float, unit: DisplayUnit) -> float:
    """Round half up to the unit's granularity.

    Rounding an already-rounded value returns it unchanged.
    """
    scale = 10**unit.decimals
    return math.floor(amount * scale + 0.5) / scale


def exchange(
    amount: float, from_unit: DisplayUnit, to_unit: DisplayUnit, rate: float
) -> float:
    """Convert without rounding. `rate` is primary units per secondary unit."""
    require(rate > 0, "exchange rate must be greater than zero", InvalidConfiguration)
    if from_unit is to_unit:
        return amount
    if from_unit is DisplayUnit.PRIMARY:
        return amount / rate
    return amount * rate


def convert(
    amount: float, from_unit: DisplayUnit, to_unit: DisplayUnit, rate: float
) -> float:
    """Convert and round exactly once in the target unit."""
    if from_unit is to_unit:
        return amount
    return round_to_unit(exchange(amount, from_unit, to_unit, rate), to_unit)


def axis_ceiling(daily_rate: float, unit: DisplayUnit, rate: float) -> float:
    """Chart y-axis maximum: the daily rate in `unit`, rounded up."""
    scale = 10**unit.decimals
    value = exchange(daily_rate, DisplayUnit.PRIMARY, unit, rate)
    return math.ceil(round(value * scale, 9)) / scale
