"""Exception hierarchy for the earnings engine."""

from __future__ import annotations


class WageTickerError(Exception):
    """Base class for every error raised by wage_ticker."""


class InvalidTimeFormat(WageTickerError, ValueError):
    """A daily time was not a valid 24-hour "HH:MM" value."""


class InvalidInterval(WageTickerError, ValueError):
    """The work interval ends at or before its start."""


class InvalidConfiguration(WageTickerError, ValueError):
    """A session cannot start with the supplied rate or interval."""


class SampleContractError(WageTickerError, AssertionError):
    """The sample window was driven out of protocol."""


class OutOfOrderSample(SampleContractError):
    """An append did not move to a strictly newer bucket."""


class EmptyWindow(SampleContractError):
    """An in-place update was attempted on an empty window."""


def require(
    condition: bool, message: str, exc: type[WageTickerError] = WageTickerError
) -> None:
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
