# =============================================================================
# Time format
#
#   - parse_duration  => "H:MM:SS.fff" / "M:SS.fff" / "75.5" -> seconds
#   - format_duration => seconds -> "H:MM:SS.dd" / "M:SS.dd" / "SS.dd"
#   - format_percent  => 25.8333 -> "25.8%"
#
# Dependencies:
#   - numpy as np
# =============================================================================

import math
import numbers
import re

import numpy as np

_HMS_RE = re.compile(r"^(\d+):([0-5]\d):([0-5]\d)(?:\.(\d+))?$")
_MS_RE = re.compile(r"^(\d+):([0-5]\d)(?:\.(\d+))?$")
_DECIMAL_RE = re.compile(r"^-?\d+(?:\.\d+)?$")


def _fraction(digits):
    return float("0." + digits) if digits else 0.0


def parse_duration(value):
    """
    Purpose: Convert a metric or cut into a float, reading duration strings as seconds.

    Numbers pass through unchanged (a raw 130 is 130 seconds, not 1:30).
    Strings are tried as H:MM:SS[.fff], then M:SS[.fff], then a plain decimal,
    then float() coercion. Anything unreadable or non-finite yields np.nan;
    this function never raises.
    """
    if isinstance(value, bool):
        return np.nan
    if isinstance(value, numbers.Real):
        return float(value)
    if not isinstance(value, str):
        return np.nan

    s = value.strip()

    m = _HMS_RE.match(s)
    if m:
        hours, minutes, seconds = int(m.group(1)), int(m.group(2)), int(m.group(3))
        return hours * 3600 + minutes * 60 + seconds + _fraction(m.group(4))

    m = _MS_RE.match(s)
    if m:
        minutes, seconds = int(m.group(1)), int(m.group(2))
        return minutes * 60 + seconds + _fraction(m.group(3))

    if _DECIMAL_RE.match(s):
        return float(s)

    try:
        n = float(s)
    except ValueError:
        return np.nan
    return n if np.isfinite(n) else np.nan


def format_duration(value):
    """
    Purpose: Render seconds as H:MM:SS.dd, M:SS.dd or SS.dd (hundredths, rounded half-up).
    """
    if not np.isfinite(value):
        return str(value)
    hundredths = int(math.floor(abs(value) * 100 + 0.5))
    sign = "-" if value < 0 and hundredths else ""
    whole, frac = divmod(hundredths, 100)
    hours, rem = divmod(whole, 3600)
    minutes, seconds = divmod(rem, 60)

    if hours > 0:
        return f"{sign}{hours}:{minutes:02d}:{seconds:02d}.{frac:02d}"
    if minutes > 0:
        return f"{sign}{minutes}:{seconds:02d}.{frac:02d}"
    return f"{sign}{seconds:02d}.{frac:02d}"


def format_percent(percent):
    if not np.isfinite(percent):
        return str(percent)
    return f"{percent:.1f}%"
