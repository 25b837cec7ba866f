"""Elapsed-time labels in ``HH:MM:SS.cc`` form."""

import re

ZERO_LABEL = "00:00:00.00"

_LABEL_RE = re.compile(r"^(\d{2,}):([0-5]\d):([0-5]\d)\.(\d{2})$")


def format_elapsed(ms: int) -> str:
    """Format a duration in milliseconds as ``HH:MM:SS.cc``.

    Hours are zero-padded to two digits and never wrap. Negative durations
    are clamped to zero.
    """
    ms = max(0, int(ms))
    total_seconds = ms // 1000
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    centiseconds = (ms % 1000) // 10
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{centiseconds:02d}"


def parse_elapsed(label: str) -> int:
    """Inverse of :func:`format_elapsed`, in milliseconds (centisecond precision)."""
    match = _LABEL_RE.match(label)
    if not match:
        raise ValueError(f"not an elapsed-time label: {label!r}")
    hours, minutes, seconds, centiseconds = (int(g) for g in match.groups())
    return ((hours * 3600 + minutes * 60 + seconds) * 1000) + centiseconds * 10
