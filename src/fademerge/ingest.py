"""Clip ingestion — probe durations and build an ordered batch of Clips.

Durations and thumbnails come from moviepy (which decodes through the same
imageio-ffmpeg binary the engine uses). Files that are not videos by
extension are skipped, as a drop zone would ignore them.
"""

from pathlib import Path

import numpy as np
from moviepy import VideoFileClip
from PIL import Image

from .ordering import order_clips
from .playlist import Clip

VIDEO_EXTENSIONS = {".mp4", ".mov", ".m4v", ".mkv", ".webm", ".avi"}

THUMBNAIL_SIZE = (120, 68)
THUMBNAIL_AT = 0.5


def is_video_file(path: str | Path) -> bool:
    return Path(path).suffix.lower() in VIDEO_EXTENSIONS


def probe_duration(path: str | Path) -> float:
    """Duration of a video file in seconds."""
    with VideoFileClip(str(path)) as clip:
        return float(clip.duration)


def make_clip(path: str | Path) -> Clip:
    """Build a Clip for one file, named after the file."""
    path = Path(path)
    return Clip(name=path.name, duration=probe_duration(path), source=path)


def ingest_files(paths) -> list[Clip]:
    """Probe every video in ``paths`` and return Clips in numeric-prefix order.

    Raises:
        FileNotFoundError: A listed path does not exist.
    """
    clips = []
    for p in paths:
        p = Path(p)
        if not p.exists():
            raise FileNotFoundError(f"Clip not found: {p}")
        if not is_video_file(p):
            continue
        clips.append(make_clip(p))
    return order_clips(clips)


def render_thumbnail(
    path: str | Path,
    output: str | Path,
    at: float = THUMBNAIL_AT,
    size: tuple[int, int] = THUMBNAIL_SIZE,
) -> Path:
    """Save a small PNG preview frame of a clip.

    The frame is taken ``at`` seconds in (clamped to the clip) and
    resized to ``size`` without keeping the aspect ratio, like a fixed-size
    list thumbnail.
    """
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    with VideoFileClip(str(path), audio=False) as clip:
        t = min(at, max(clip.duration - 1.0 / clip.fps, 0.0))
        frame = np.asarray(clip.get_frame(t), dtype=np.uint8)
    Image.fromarray(frame).resize(size).save(output)
    return output
