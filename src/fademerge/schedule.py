"""Fade schedule — per-clip fade-in/fade-out windows at every boundary.

A boundary between clip i and clip i+1 is a fade to black: clip i fades out
over its last ``out_frames`` frames, clip i+1 fades in over its first
``in_frames`` frames. The requested total fade is quantised to whole frames
at the assumed frame rate and split unevenly in favour of the fade-out:

    frames     = round(total_fade_seconds * frame_rate)   # halves away from 0
    out_frames = ceil(frames / 2)
    in_frames  = floor(frames / 2)

so the two halves always add back up to ``frames`` even when it is odd
(1.5s at 30fps -> 45 frames -> 23 out + 22 in).

Windows are clip-local times. The first clip never fades in, the last never
fades out, and a single clip gets no windows at all.

Short clips are clamped instead of producing negative or inverted
intervals: a window never exceeds the clip's duration, and if the fade-in
and fade-out together would not fit, both shrink proportionally until they
just meet. A zero-length window is dropped (a zero fade is a hard cut).
"""

import logging
from dataclasses import dataclass

from .common import round_half_away

logger = logging.getLogger(__name__)

FADE_IN = "in"
FADE_OUT = "out"


@dataclass(frozen=True)
class FadeWindow:
    """A fade interval on one clip's local timeline, in seconds."""

    kind: str
    start: float
    duration: float

    @property
    def end(self) -> float:
        return self.start + self.duration


@dataclass(frozen=True)
class ClipSchedule:
    """The optional fade-in/fade-out pair for one clip."""

    fade_in: FadeWindow | None = None
    fade_out: FadeWindow | None = None

    @property
    def windows(self) -> list[FadeWindow]:
        """Present windows, fade-in first."""
        return [w for w in (self.fade_in, self.fade_out) if w is not None]


def fade_split(total_fade_seconds: float, frame_rate: int) -> tuple[int, int]:
    """Quantise a total fade to frames and split it into (out, in) halves.

    Raises:
        ValueError: Negative fade or non-positive frame rate.
    """
    _validate(total_fade_seconds, frame_rate)
    frames = round_half_away(total_fade_seconds * frame_rate)
    out_frames = (frames + 1) // 2
    in_frames = frames // 2
    return out_frames, in_frames


def schedule_fades(
    clips,
    total_fade_seconds: float,
    frame_rate: int,
) -> list[ClipSchedule]:
    """Compute the fade windows for every clip, in playlist order.

    Args:
        clips: Ordered clips (anything with ``name`` and ``duration``).
        total_fade_seconds: Total fade per boundary (out half + in half).
        frame_rate: Assumed constant frame rate of the inputs.

    Returns:
        One ClipSchedule per clip.

    Raises:
        ValueError: Negative fade or non-positive frame rate.
    """
    out_frames, in_frames = fade_split(total_fade_seconds, frame_rate)
    out_seconds = out_frames / frame_rate
    in_seconds = in_frames / frame_rate

    n = len(clips)
    schedules = []
    for i, clip in enumerate(clips):
        wanted_in = in_seconds if i > 0 else 0.0
        wanted_out = out_seconds if i < n - 1 else 0.0
        fade_in_d, fade_out_d = _clamp(clip, wanted_in, wanted_out)

        fade_in = None
        if fade_in_d > 0:
            fade_in = FadeWindow(FADE_IN, 0.0, fade_in_d)

        fade_out = None
        if fade_out_d > 0:
            fade_out = FadeWindow(FADE_OUT, clip.duration - fade_out_d, fade_out_d)

        schedules.append(ClipSchedule(fade_in=fade_in, fade_out=fade_out))
    return schedules


def _clamp(clip, fade_in_d: float, fade_out_d: float) -> tuple[float, float]:
    """Fit the requested fade durations inside the clip without overlap."""
    duration = clip.duration
    wanted = fade_in_d + fade_out_d
    if wanted <= duration:
        return fade_in_d, fade_out_d

    # Scale both halves by the same factor so they meet exactly.
    scale = duration / wanted if wanted > 0 else 0.0
    clamped_in = fade_in_d * scale
    clamped_out = duration - clamped_in if fade_out_d > 0 else 0.0
    logger.warning(
        "Clip '%s' (%.3fs) is shorter than its fades (%.3fs); "
        "clamped to in=%.3fs out=%.3fs",
        clip.name, duration, wanted, clamped_in, clamped_out,
    )
    return clamped_in, clamped_out


def _validate(total_fade_seconds: float, frame_rate: int) -> None:
    if total_fade_seconds < 0:
        raise ValueError(f"Fade duration must be >= 0, got {total_fade_seconds!r}")
    if not isinstance(frame_rate, int) or isinstance(frame_rate, bool) or frame_rate <= 0:
        raise ValueError(f"Frame rate must be a positive integer, got {frame_rate!r}")
