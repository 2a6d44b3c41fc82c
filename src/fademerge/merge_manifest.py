"""Merge manifest loader — which clips to merge, with what fade.

Merge manifest schema:
  video:
    fps: 30          # assumed constant frame rate of the inputs
    fade: 1.5        # total fade per boundary (out half + in half), seconds
    sort: true       # order clips by numeric name prefix (default true)
  encoding:          # optional, overrides the H.264/AAC defaults
    preset: fast
    crf: 23
    audio_bitrate: 128k
  paths:
    raw: "/path/to/clips"
  clips:
    - path: "${raw}/1.mp4"
    - path: "${raw}/2.mp4"
"""

from pathlib import Path

import yaml

from .common import resolve_path_vars
from .coordinator import EncodingParams

DEFAULT_FPS = 30
DEFAULT_FADE = 1.5

ENCODING_FIELDS = {"video_codec", "preset", "crf", "audio_codec", "audio_bitrate"}


def load_merge_manifest(manifest_path: str | Path) -> dict:
    """Load, validate, and normalize a merge manifest.

    Processing pipeline:
      1. Parse YAML.
      2. Validate video settings (fps, fade, sort), applying defaults.
      3. Validate encoding overrides.
      4. Resolve ${path} variables in clip paths.

    Args:
        manifest_path: Path to the YAML merge manifest.

    Returns:
        Normalized config dict: video, encoding (EncodingParams), clips.

    Raises:
        ValueError: Missing/invalid fields.
    """
    with open(manifest_path) as f:
        raw = yaml.safe_load(f) or {}

    video = raw.get("video") or {}

    fps = video.get("fps", DEFAULT_FPS)
    if not isinstance(fps, int) or isinstance(fps, bool) or fps <= 0:
        raise ValueError(f"Merge manifest: video.fps must be a positive integer, got {fps!r}")

    fade = video.get("fade", DEFAULT_FADE)
    if not isinstance(fade, (int, float)) or isinstance(fade, bool) or fade < 0:
        raise ValueError(f"Merge manifest: video.fade must be >= 0, got {fade!r}")

    sort = video.get("sort", True)
    if not isinstance(sort, bool):
        raise ValueError(f"Merge manifest: video.sort must be true or false, got {sort!r}")

    config = {
        "video": {"fps": fps, "fade": float(fade), "sort": sort},
        "encoding": _load_encoding(raw.get("encoding") or {}),
    }

    # Path variables for ${name} substitution.
    paths = raw.get("paths") or {}

    clips = []
    for i, entry in enumerate(raw.get("clips") or []):
        if isinstance(entry, str):
            entry = {"path": entry}
        elif not isinstance(entry, dict):
            raise ValueError(
                f"Merge clip {i}: expected a path or a mapping with 'path', got {entry!r}"
            )
        if "path" not in entry:
            raise ValueError(f"Merge clip {i}: missing required field 'path'")
        clips.append({"path": resolve_path_vars(str(entry["path"]), paths)})

    config["clips"] = clips
    return config


def _load_encoding(encoding: dict) -> EncodingParams:
    unknown = set(encoding) - ENCODING_FIELDS
    if unknown:
        raise ValueError(
            f"Merge manifest: unknown encoding field(s) {sorted(unknown)}. "
            f"Valid: {sorted(ENCODING_FIELDS)}"
        )
    crf = encoding.get("crf", EncodingParams.crf)
    if not isinstance(crf, int) or isinstance(crf, bool) or not 0 <= crf <= 51:
        raise ValueError(f"Merge manifest: encoding.crf must be 0-51, got {crf!r}")
    values = {k: str(v) for k, v in encoding.items() if k != "crf"}
    return EncodingParams(crf=crf, **values)


def validate_merge_paths(config: dict) -> None:
    """Check that all clip paths exist on disk.

    Raises:
        FileNotFoundError: Lists all missing files.
    """
    missing = []
    for clip in config["clips"]:
        if not Path(clip["path"]).exists():
            missing.append(clip["path"])

    if missing:
        msg = f"Missing {len(missing)} clip file(s):\n"
        for p in missing:
            msg += f"  - {p}\n"
        raise FileNotFoundError(msg)
