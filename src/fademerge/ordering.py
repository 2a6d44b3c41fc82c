"""Ordering policy — numeric-prefix sort for a freshly ingested batch.

Clips are ordered by the integer formed from the leading run of decimal
digits in their display name ("3.mp4" -> 3, "12_intro.mp4" -> 12). Names
with no leading digits sort after every prefixed name. The sort is stable,
so equal prefixes and un-prefixed names keep their original relative order.

Only applied to a new ingestion batch. Once the user reorders a playlist by
hand, that order is authoritative and this policy is not re-run.
"""

import math
import re

_LEADING_DIGITS = re.compile(r"^([0-9]+)")


def extract_number(name: str) -> float:
    """Return the leading decimal number of a name, or math.inf if none."""
    match = _LEADING_DIGITS.match(name)
    return int(match.group(1)) if match else math.inf


def order_clips(clips) -> list:
    """Return clips sorted by the numeric prefix of their display name.

    Works on anything with a ``name`` attribute. Pure: the input sequence
    is left untouched.
    """
    return sorted(clips, key=lambda clip: extract_number(clip.name))
