"""Human readable durations."""


def _unit(count: int, name: str) -> str:
    return f"{count} {name}" if count == 1 else f"{count} {name}s"


def time_format(seconds: int) -> str:
    """Format a number of seconds as days, hours, minutes and seconds."""
    if seconds < 0:
        raise ValueError("seconds must not be negative")
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    days, hours = divmod(hours, 24)
    parts = [
        f"{_unit(count, name)}, "
        for count, name in ((days, "day"), (hours, "hour"), (minutes, "minute"))
        if count > 0
    ]
    if secs > 0:
        parts.append(_unit(secs, "second"))
    return "".join(parts)