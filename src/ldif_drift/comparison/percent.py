"""Percentage helpers shared by the threshold checks and the differ."""


def percent_diff(baseline: float, new: float) -> float:
    """
    Relative change from baseline to new, in percent.

    A zero baseline with a non-zero new value counts as a 100% change.

    Example:
        >>> percent_diff(10, 11)
        10.0
        >>> percent_diff(0, 0)
        0.0
        >>> percent_diff(0, 7)
        100.0
    """
    if baseline == 0:
        return 0.0 if new == 0 else 100.0
    return (new - baseline) / baseline * 100.0


def format_percent(value: float) -> str:
    """Signed, one decimal: "+100.0", "-25.0", "+0.0"."""
    return f"{value:+.1f}"
