from __future__ import annotations


def parse_timestamp(minutes: str, seconds: str, fraction: str | None) -> int:
    """
    Convert the captured parts of a `mm:ss.xx` tag to milliseconds.

    The fraction is normalized as a string, not scaled:
    "5" -> 500ms, "12" -> 120ms, "123" -> 123ms, "1234" -> 123ms.
    """
    ms = int(fraction.ljust(3, "0")[:3]) if fraction else 0
    return (int(minutes) * 60 + int(seconds)) * 1000 + ms


def split_ms(ms: int) -> tuple[int, int, int, int]:
    # (hours, minutes, seconds, millis)
    ms = max(ms, 0)
    h, rem = divmod(ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms2 = divmod(rem, 1_000)
    return h, m, s, ms2


def total_minutes(ms: int) -> int:
    return max(ms, 0) // 60_000
