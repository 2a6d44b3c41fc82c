"""Assembly planner — clips + fade settings -> AssemblyPlan.

Combines the fade schedule and the filter graph builder into the single
value the coordinator executes. Fades eat into existing footage, so the
expected output duration is simply the sum of the clip durations.
"""

from dataclasses import dataclass

from .errors import InsufficientClips
from .filtergraph import FilterGraph, build_filter_graph
from .schedule import FadeWindow, schedule_fades

MIN_CLIPS = 2


@dataclass(frozen=True)
class PlannedClip:
    index: int
    clip: object
    fade_in: FadeWindow | None
    fade_out: FadeWindow | None

    @property
    def windows(self) -> list[FadeWindow]:
        return [w for w in (self.fade_in, self.fade_out) if w is not None]


@dataclass(frozen=True)
class AssemblyPlan:
    entries: tuple[PlannedClip, ...]
    graph: FilterGraph
    total_duration: float
    fade_seconds: float
    frame_rate: int

    @property
    def clips(self) -> list:
        return [e.clip for e in self.entries]

    def describe(self) -> str:
        """Human-readable table of the plan, one line per clip."""
        lines = [
            f"{len(self.entries)} clips, fade {self.fade_seconds}s "
            f"@ {self.frame_rate}fps, total {self.total_duration:.2f}s",
        ]
        for e in self.entries:
            fades = []
            if e.fade_in:
                fades.append(f"in 0-{e.fade_in.end:.3f}s")
            if e.fade_out:
                fades.append(f"out {e.fade_out.start:.3f}-{e.fade_out.end:.3f}s")
            lines.append(
                f"  [{e.index}] {e.clip.duration:7.2f}s  {e.clip.name}"
                f"  ({', '.join(fades) or 'no fades'})"
            )
        return "\n".join(lines)


def plan_assembly(clips, fade_seconds: float, frame_rate: int) -> AssemblyPlan:
    """Plan a fade assembly of the clips, in the order given.

    Raises:
        InsufficientClips: Fewer than two clips.
        ValueError: Negative fade or non-positive frame rate.
    """
    clips = list(clips)
    if len(clips) < MIN_CLIPS:
        raise InsufficientClips(len(clips))

    schedules = schedule_fades(clips, fade_seconds, frame_rate)
    entries = tuple(
        PlannedClip(i, clip, s.fade_in, s.fade_out)
        for i, (clip, s) in enumerate(zip(clips, schedules))
    )
    return AssemblyPlan(
        entries=entries,
        graph=build_filter_graph(entries),
        total_duration=sum(clip.duration for clip in clips),
        fade_seconds=fade_seconds,
        frame_rate=frame_rate,
    )
