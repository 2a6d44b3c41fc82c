"""Shared test fixtures for fademerge tests."""

import subprocess

import pytest
import imageio_ffmpeg

_FFMPEG = imageio_ffmpeg.get_ffmpeg_exe()


def _synth_clip(path, duration, color="blue", fps=10):
    """Write a solid-color clip (160x120) with a silent mono audio track."""
    subprocess.run(
        [
            _FFMPEG, "-y",
            "-f", "lavfi", "-i", f"color=c={color}:s=160x120:d={duration}:r={fps}",
            "-f", "lavfi", "-i", "anullsrc=r=44100:cl=mono",
            "-shortest",
            "-c:v", "libx264", "-crf", "28", "-pix_fmt", "yuv420p",
            "-c:a", "aac", "-b:a", "32k",
            str(path),
        ],
        check=True,
        capture_output=True,
    )
    return path


@pytest.fixture
def make_video(tmp_path):
    """Factory: make_video("1.mp4", duration=2, color="red") -> Path."""
    def _make(name, duration=2.0, color="blue"):
        return _synth_clip(tmp_path / name, duration, color=color)
    return _make


@pytest.fixture
def numbered_videos(make_video):
    """Three short clips named out of order: 3.mp4, 1.mp4, 2.mp4."""
    return [
        make_video("3.mp4", duration=2.0, color="blue"),
        make_video("1.mp4", duration=2.0, color="red"),
        make_video("2.mp4", duration=1.0, color="green"),
    ]
