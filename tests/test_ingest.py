"""Tests for clip ingestion: probing, ordering, thumbnails."""

import pytest
from PIL import Image

from fademerge.ingest import (
    ingest_files,
    is_video_file,
    make_clip,
    probe_duration,
    render_thumbnail,
)


class TestIsVideoFile:
    def test_video_extensions(self):
        assert is_video_file("a.mp4")
        assert is_video_file("a.MOV")

    def test_other_extensions(self):
        assert not is_video_file("notes.txt")
        assert not is_video_file("cover.png")


class TestProbe:
    def test_probe_duration(self, make_video):
        path = make_video("1.mp4", duration=2.0)
        assert probe_duration(path) == pytest.approx(2.0, abs=0.2)

    def test_make_clip_uses_file_name(self, make_video):
        path = make_video("7_sunset.mp4", duration=1.0)
        clip = make_clip(path)
        assert clip.name == "7_sunset.mp4"
        assert clip.source == path
        assert clip.duration == pytest.approx(1.0, abs=0.2)


class TestIngestFiles:
    def test_orders_by_number_prefix(self, numbered_videos):
        clips = ingest_files(numbered_videos)
        assert [c.name for c in clips] == ["1.mp4", "2.mp4", "3.mp4"]

    def test_ids_unique(self, numbered_videos):
        clips = ingest_files(numbered_videos)
        assert len({c.id for c in clips}) == 3

    def test_skips_non_video_files(self, make_video, tmp_path):
        video = make_video("1.mp4", duration=1.0)
        notes = tmp_path / "notes.txt"
        notes.write_text("hi")
        clips = ingest_files([notes, video])
        assert [c.name for c in clips] == ["1.mp4"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="not found"):
            ingest_files([tmp_path / "gone.mp4"])


class TestRenderThumbnail:
    def test_writes_fixed_size_png(self, make_video, tmp_path):
        path = make_video("1.mp4", duration=1.0, color="red")
        out = render_thumbnail(path, tmp_path / "thumbs" / "1.png")
        with Image.open(out) as img:
            assert img.size == (120, 68)
            r, g, b = img.convert("RGB").getpixel((60, 34))
            assert r > 150 and g < 100 and b < 100
