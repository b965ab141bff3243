"""Perfdata limits derived from plugin thresholds."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Range:
    """A plugin threshold range.

    ``inside`` is True for ranges written with a leading ``@``, which alert
    when the value falls inside the range.
    """

    start: float = 0.0
    end: float = 0.0
    start_infinity: bool = False
    end_infinity: bool = False
    inside: bool = False


def get_perfdata_limit(
    threshold: Range | None, base: int, percent: bool = False
) -> int | None:
    """Return the perfdata limit for ``threshold`` scaled by ``base``.

    Returns None when the threshold has no single limit to report.
    """
    if threshold is None or threshold.inside or threshold.start_infinity:
        return None
    bound = threshold.start if threshold.end_infinity else threshold.end
    limit = int(base * bound)
    if percent:
        limit = int(limit / 100.0)
    return limit