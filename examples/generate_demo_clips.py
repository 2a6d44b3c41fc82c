#!/usr/bin/env python3
"""Generate synthetic numbered clips for the fademerge demo manifest.

Creates 5 clips with varying durations in examples/demo-clips/, named with
number prefixes out of alphabetical order ("10-gold" sorts after "2-blue")
plus one un-numbered clip that sorts last. Each clip is a solid color with
a tone, so fades to black and audio joins are easy to spot.

Usage:
    python examples/generate_demo_clips.py
    # Then merge:
    fademerge merge --manifest examples/demo-merge.yaml --output merged.mp4
"""

import subprocess
from pathlib import Path

import imageio_ffmpeg

_FFMPEG = imageio_ffmpeg.get_ffmpeg_exe()

OUTPUT_DIR = Path(__file__).resolve().parent / "demo-clips"
SIZE = "320x240"
FPS = 30

# (file stem, lavfi color, tone Hz, duration seconds)
CLIPS = [
    ("1-red",    "0xB43C3C", 440, 2.0),
    ("2-blue",   "0x3C3CB4", 523, 3.0),
    ("3-green",  "0x3CA03C", 659, 2.5),
    ("10-gold",  "0xD2B43C", 784, 1.5),
    ("outro",    "0x646E82", 330, 2.0),
]


def _write_clip(out: Path, color: str, tone: int, duration: float) -> None:
    subprocess.run(
        [
            _FFMPEG, "-y",
            "-f", "lavfi", "-i", f"color=c={color}:s={SIZE}:d={duration}:r={FPS}",
            "-f", "lavfi", "-i", f"sine=frequency={tone}:sample_rate=44100:duration={duration}",
            "-c:v", "libx264", "-crf", "23", "-pix_fmt", "yuv420p",
            "-c:a", "aac", "-b:a", "96k",
            "-shortest",
            str(out),
        ],
        check=True,
        capture_output=True,
    )


def main():
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    for name, color, tone, duration in CLIPS:
        out = OUTPUT_DIR / f"{name}.mp4"
        if out.exists():
            print(f"  skip {name} (exists)")
            continue
        _write_clip(out, color, tone, duration)
        print(f"  wrote {name} ({duration}s)")

    print(f"\nDone. {len(CLIPS)} clips in {OUTPUT_DIR}")


if __name__ == "__main__":
    main()
