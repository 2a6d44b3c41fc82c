"""Clip and Playlist — the ordered list of source videos.

A Clip is immutable once ingested: its name, duration and byte source never
change. The Playlist owns the order. Only ``ingest`` applies the numeric
ordering policy; ``move``/``reorder`` are manual edits and the resulting
order is kept as-is until the next ingestion batch replaces the list.
"""

import uuid
from dataclasses import dataclass, field
from pathlib import Path

from .ordering import order_clips


def new_clip_id() -> str:
    """Opaque per-session clip identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Clip:
    """One source video.

    Attributes:
        name: Display name, used only for ordering.
        duration: Length in seconds, probed before planning.
        source: Path to the raw media bytes.
        id: Opaque identifier, unique within a playlist.
    """

    name: str
    duration: float
    source: Path
    id: str = field(default_factory=new_clip_id)

    def __post_init__(self):
        if self.duration < 0:
            raise ValueError(
                f"Clip '{self.name}': duration must be >= 0, got {self.duration!r}"
            )
        object.__setattr__(self, "source", Path(self.source))

    @property
    def extension(self) -> str:
        """Container extension of the source file (".mp4" if it has none)."""
        return self.source.suffix.lower() or ".mp4"


class Playlist:
    """Mutable, ordered sequence of clips with unique ids."""

    def __init__(self, clips=()):
        self._clips: list[Clip] = []
        self._replace(list(clips))

    # ── Ingestion ─────────────────────────────────────────────────

    def ingest(self, clips) -> None:
        """Replace the whole list with a new batch, ordered by name prefix."""
        self._replace(order_clips(clips))

    def _replace(self, clips: list[Clip]) -> None:
        _check_unique_ids(clips)
        self._clips = clips

    # ── Manual edits ──────────────────────────────────────────────

    def remove(self, clip_id: str) -> Clip:
        """Remove a clip by id and return it.

        Raises:
            KeyError: No clip with that id.
        """
        index = self.index_of(clip_id)
        return self._clips.pop(index)

    def move(self, from_index: int, to_index: int) -> None:
        """Drag-reorder: take the clip at from_index, insert it at to_index."""
        n = len(self._clips)
        if not 0 <= from_index < n:
            raise IndexError(f"from_index {from_index} out of range (0..{n - 1})")
        if not 0 <= to_index < n:
            raise IndexError(f"to_index {to_index} out of range (0..{n - 1})")
        clip = self._clips.pop(from_index)
        self._clips.insert(to_index, clip)

    def reorder(self, clip_ids: list[str]) -> None:
        """Set an explicit manual order. Must name every clip exactly once."""
        by_id = {clip.id: clip for clip in self._clips}
        if sorted(clip_ids) != sorted(by_id):
            raise ValueError("reorder() must list every clip id exactly once")
        self._clips = [by_id[cid] for cid in clip_ids]

    # ── Queries ───────────────────────────────────────────────────

    def index_of(self, clip_id: str) -> int:
        for i, clip in enumerate(self._clips):
            if clip.id == clip_id:
                return i
        raise KeyError(clip_id)

    def snapshot(self) -> tuple[Clip, ...]:
        """Immutable copy of the current order, for one assembly run."""
        return tuple(self._clips)

    @property
    def total_duration(self) -> float:
        return sum(clip.duration for clip in self._clips)

    def __len__(self):
        return len(self._clips)

    def __iter__(self):
        return iter(list(self._clips))

    def __getitem__(self, index):
        return self._clips[index]

    def __repr__(self):
        names = ", ".join(clip.name for clip in self._clips)
        return f"Playlist([{names}])"


def _check_unique_ids(clips: list[Clip]) -> None:
    seen = set()
    for clip in clips:
        if clip.id in seen:
            raise ValueError(f"Duplicate clip id: '{clip.id}'")
        seen.add(clip.id)
