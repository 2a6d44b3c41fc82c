"""fademerge.common — shared utilities.

Contains: path variable resolution, rounding and time formatting helpers
shared by the fade schedule, the filter graph and the coordinator.
"""

import math
import re


# ── Path utilities ─────────────────────────────────────────────────

def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Replace ${name} variables in a string using the paths dict."""
    def _replace(match):
        key = match.group(1)
        if key not in paths:
            raise ValueError(f"Unknown path variable: ${{{key}}}")
        return str(paths[key])
    return re.sub(r"\$\{(\w+)\}", _replace, text)


# ── Numeric utilities ──────────────────────────────────────────────

def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Python's built-in round() is banker's rounding (round(22.5) == 22),
    which would shift frame counts and progress percentages by one.
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def format_seconds(value: float) -> str:
    """Format a time in seconds for ffmpeg filter options.

    Up to six decimals with trailing zeros stripped: 9.5 -> "9.5",
    7/30 -> "0.233333", 0.0 -> "0".
    """
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text
