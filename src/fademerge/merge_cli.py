"""CLI for merging — join clips into one MP4 with fade-to-black boundaries.

Clips are given on the command line or in a YAML merge manifest. By default
a batch is ordered by the number at the start of each file name
("1.mp4", "2_intro.mp4", "10.mp4", then names without a number);
``--no-sort`` keeps the order given.

Usage:
    fademerge merge 1.mp4 2.mp4 3.mp4 --output merged.mp4
    fademerge merge clips/*.mp4 --fade 1.0 --fps 25 --output merged.mp4
    fademerge merge --manifest merge.yaml --output merged.mp4
    fademerge merge clips/*.mp4 --dry-run     # print plan + filter graph
"""

import argparse
import logging
import sys
from pathlib import Path

from .coordinator import MERGED_FILENAME, AssemblyCoordinator, EncodingParams
from .engine import FFmpegEngine
from .errors import AssemblyError
from .ingest import ingest_files, is_video_file, make_clip
from .merge_manifest import (
    DEFAULT_FADE,
    DEFAULT_FPS,
    load_merge_manifest,
    validate_merge_paths,
)
from .plan import plan_assembly
from .playlist import Playlist


def _parse_args(args=None):
    parser = argparse.ArgumentParser(
        description="Merge video clips into one MP4 with fade-to-black transitions.",
    )
    parser.add_argument(
        "clips", nargs="*",
        help="Clip files to merge (optional if --manifest lists them)",
    )
    parser.add_argument(
        "--manifest", default=None,
        help="Path to YAML merge manifest",
    )
    parser.add_argument(
        "--output", default=None,
        help=f"Output mp4 path (default: {MERGED_FILENAME})",
    )
    parser.add_argument(
        "--fade", type=float, default=None,
        help=f"Total fade per boundary in seconds (default: {DEFAULT_FADE})",
    )
    parser.add_argument(
        "--fps", type=int, default=None,
        help=f"Assumed frame rate of the clips (default: {DEFAULT_FPS})",
    )
    parser.add_argument(
        "--no-sort", action="store_true",
        help="Keep the given order instead of sorting by number prefix",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Print the fade plan and filter graph, don't run ffmpeg",
    )
    parser.add_argument(
        "--validate", action="store_true",
        help="Validate manifest only — check paths, don't probe or render",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Debug logging (ffmpeg command, state transitions)",
    )
    return parser, parser.parse_args(args)


def _resolve_settings(parsed) -> dict:
    """Merge manifest settings with CLI overrides (CLI wins)."""
    if parsed.manifest:
        config = load_merge_manifest(parsed.manifest)
    else:
        config = {
            "video": {"fps": DEFAULT_FPS, "fade": DEFAULT_FADE, "sort": True},
            "encoding": EncodingParams(),
            "clips": [],
        }

    # CLI clips replace the manifest's list.
    if parsed.clips:
        config["clips"] = [{"path": p} for p in parsed.clips]
    if parsed.fade is not None:
        if parsed.fade < 0:
            raise ValueError(f"--fade must be >= 0, got {parsed.fade}")
        config["video"]["fade"] = parsed.fade
    if parsed.fps is not None:
        if parsed.fps <= 0:
            raise ValueError(f"--fps must be > 0, got {parsed.fps}")
        config["video"]["fps"] = parsed.fps
    if parsed.no_sort:
        config["video"]["sort"] = False
    return config


def _load_playlist(config: dict) -> Playlist:
    paths = [c["path"] for c in config["clips"]]
    playlist = Playlist()
    if config["video"]["sort"]:
        playlist.ingest(ingest_files(paths))
    else:
        playlist = Playlist(make_clip(p) for p in paths if is_video_file(p))
    return playlist


def _print_progress():
    last = {"message": None}

    def progress(percent, message):
        # Failures are reported once, by main().
        if message.startswith("Error:"):
            return
        if message != last["message"]:
            print(f"  {message}")
            last["message"] = message

    return progress


def merge(
    config: dict,
    output_path: str,
    dry_run: bool = False,
) -> None:
    """Probe clips, plan the fades, and run ffmpeg to write ``output_path``.

    Raises:
        AssemblyError: The assembly run failed.
    """
    video = config["video"]
    playlist = _load_playlist(config)

    print(f"Probed {len(playlist)} clips:")
    for i, clip in enumerate(playlist):
        print(f"  [{i}] {clip.duration:.1f}s  {clip.source}")

    if dry_run:
        plan = plan_assembly(playlist, video["fade"], video["fps"])
        print()
        print(plan.describe())
        print("\nFilter graph:")
        print(plan.graph.to_filter_complex())
        return

    print(f"\nMerging {len(playlist)} clips "
          f"(fade {video['fade']}s @ {video['fps']}fps)...")
    print(f"Expected duration: ~{playlist.total_duration:.1f}s")

    with FFmpegEngine() as engine:
        coordinator = AssemblyCoordinator(engine, encoding=config["encoding"])
        merged = coordinator.run(
            playlist, video["fade"], video["fps"], progress=_print_progress(),
        )

    out = merged.save(output_path)
    print(f"\nDone: {out} ({len(merged.data) / 1_000_000:.1f} MB)")


def main(args=None):
    parser, parsed = _parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not parsed.clips and not parsed.manifest:
        parser.error("Give clip files or --manifest")

    try:
        config = _resolve_settings(parsed)
    except ValueError as e:
        parser.error(str(e))

    validate_merge_paths(config)

    if parsed.validate:
        print(f"Merge manifest valid: {len(config['clips'])} clips")
        for i, c in enumerate(config["clips"]):
            print(f"  {i}: {c['path']}")
        print("All paths verified.")
        return

    output = parsed.output or str(Path.cwd() / MERGED_FILENAME)
    try:
        merge(config, output, dry_run=parsed.dry_run)
    except AssemblyError as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
