"""Tests for the merge and probe CLIs."""

import pytest
import yaml


class TestMergeCli:
    def test_dry_run_prints_plan_and_graph(self, numbered_videos, capsys):
        from fademerge.merge_cli import main

        main([*map(str, numbered_videos), "--fade", "1.0", "--fps", "10", "--dry-run"])
        out = capsys.readouterr().out
        assert "3 clips" in out
        assert "concat=n=3:v=1:a=1[outv][outa]" in out
        # Sorted by prefix: 1.mp4 first even though given second.
        assert out.index("1.mp4") < out.index("2.mp4") < out.index("3.mp4")

    def test_no_sort_keeps_given_order(self, numbered_videos, capsys):
        from fademerge.merge_cli import main

        main([*map(str, numbered_videos), "--no-sort", "--dry-run"])
        out = capsys.readouterr().out
        assert out.index("3.mp4") < out.index("1.mp4")

    def test_single_clip_fails(self, make_video, capsys):
        from fademerge.merge_cli import main

        path = make_video("1.mp4", duration=1.0)
        with pytest.raises(SystemExit) as exc_info:
            main([str(path), "--dry-run"])
        assert exc_info.value.code == 1
        assert "at least 2 clips" in capsys.readouterr().err

    def test_negative_fade_rejected(self, numbered_videos):
        from fademerge.merge_cli import main

        with pytest.raises(SystemExit):
            main([*map(str, numbered_videos), "--fade", "-1"])

    def test_missing_clip_raises(self, tmp_path):
        from fademerge.merge_cli import main

        with pytest.raises(FileNotFoundError, match="Missing 1 clip"):
            main([str(tmp_path / "gone.mp4"), "--dry-run"])

    def test_validate_manifest(self, numbered_videos, tmp_path, capsys):
        from fademerge.merge_cli import main

        manifest = tmp_path / "merge.yaml"
        manifest.write_text(yaml.dump({
            "video": {"fps": 10, "fade": 0.6},
            "paths": {"clips": str(tmp_path)},
            "clips": ["${clips}/1.mp4", "${clips}/2.mp4"],
        }))
        main(["--manifest", str(manifest), "--validate"])
        assert "valid: 2 clips" in capsys.readouterr().out

    def test_merge_writes_output(self, numbered_videos, tmp_path):
        from fademerge.merge_cli import main

        out = tmp_path / "merged.mp4"
        main([*map(str, numbered_videos), "--fade", "0.6", "--fps", "10",
              "--output", str(out)])
        assert out.exists()
        assert out.stat().st_size > 100

    def test_failed_merge_reports_error_once(self, numbered_videos, tmp_path, capsys):
        from fademerge.merge_cli import main

        manifest = tmp_path / "merge.yaml"
        manifest.write_text(yaml.dump({
            "video": {"fps": 10, "fade": 0.6},
            "encoding": {"video_codec": "no_such_codec"},
            "clips": [str(p) for p in numbered_videos],
        }))
        with pytest.raises(SystemExit) as exc_info:
            main(["--manifest", str(manifest), "--output", str(tmp_path / "out.mp4")])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "Error:" not in captured.out
        assert captured.err.count("Error: ffmpeg exited with code") == 1


class TestProbeCli:
    def test_lists_in_merge_order(self, numbered_videos, capsys):
        from fademerge.probe_cli import main

        main([str(p) for p in numbered_videos])
        out = capsys.readouterr().out
        assert out.index("1.mp4") < out.index("2.mp4") < out.index("3.mp4")
        assert "3 clips" in out

    def test_writes_thumbnails(self, numbered_videos, tmp_path):
        from fademerge.probe_cli import main

        thumbs = tmp_path / "thumbs"
        main([*map(str, numbered_videos), "--thumbnails", str(thumbs)])
        assert sorted(p.name for p in thumbs.iterdir()) == ["1.png", "2.png", "3.png"]
