"""CLI for probing — list clips in merge order with durations.

Usage:
    fademerge probe clips/*.mp4
    fademerge probe clips/*.mp4 --thumbnails thumbs/
"""

import argparse
from pathlib import Path

from .ingest import ingest_files, render_thumbnail


def _parse_args(args=None):
    parser = argparse.ArgumentParser(
        description="List video clips in merge order with their durations.",
    )
    parser.add_argument(
        "clips", nargs="+",
        help="Clip files to probe",
    )
    parser.add_argument(
        "--thumbnails", default=None,
        help="Directory to write a PNG thumbnail per clip",
    )
    return parser.parse_args(args)


def main(args=None):
    parsed = _parse_args(args)

    clips = ingest_files(parsed.clips)
    total = 0.0
    for i, clip in enumerate(clips):
        print(f"  {i + 1:>3}  {clip.duration:7.1f}s  {clip.name}")
        total += clip.duration
        if parsed.thumbnails:
            thumb = Path(parsed.thumbnails) / f"{Path(clip.name).stem}.png"
            render_thumbnail(clip.source, thumb)

    print(f"\n{len(clips)} clips / {total:.1f}s total")
    if parsed.thumbnails:
        print(f"Thumbnails: {parsed.thumbnails}")


if __name__ == "__main__":
    main()
