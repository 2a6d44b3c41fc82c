"""Transcoding engine — a local ffmpeg working in a private scratch directory.

The coordinator treats the engine as a black box with a small file
namespace: inputs are written into it by name, ffmpeg runs against those
names, and the output is read back and deleted. Here the namespace is a
temporary directory owned by the engine and removed on ``close()``.

The ffmpeg binary comes from imageio-ffmpeg (bundled with the wheel), the
same way the rest of the moviepy stack finds it.

Progress: ffmpeg is run with ``-progress pipe:1``, which prints key=value
blocks on stdout. ``out_time_us`` (and the misnamed ``out_time_ms``, also
microseconds) carry the elapsed *output* time and are forwarded as seconds.
"""

import logging
import os
import shutil
import subprocess
import sys
import tempfile
import threading
from collections import deque
from pathlib import Path

import imageio_ffmpeg

from .errors import EngineUnavailable

logger = logging.getLogger(__name__)

_PROGRESS_KEYS = ("out_time_us=", "out_time_ms=")
_TAIL_LINES = 40
# WebAssembly builds of CPython ship without a working subprocess module.
_NO_SUBPROCESS_PLATFORMS = ("emscripten", "wasi")


class FFmpegEngine:
    """Owned handle to one ffmpeg "instance" and its file namespace.

    Not reentrant: one ``exec`` at a time. Use as a context manager so the
    scratch directory is always removed.
    """

    def __init__(self, ffmpeg_exe: str | None = None, work_root: str | None = None):
        self._ffmpeg_exe = ffmpeg_exe
        self._work_root = work_root
        self._work_dir: Path | None = None
        self._load_lock = threading.Lock()
        self.output_tail: list[str] = []

    # ── Lifecycle ─────────────────────────────────────────────────

    @property
    def loaded(self) -> bool:
        return self._work_dir is not None

    @property
    def work_dir(self) -> Path:
        if self._work_dir is None:
            raise RuntimeError("Engine is not loaded; call load() first")
        return self._work_dir

    def load(self) -> None:
        """Check the host, resolve ffmpeg and create the namespace. Idempotent.

        Raises:
            EngineUnavailable: Missing capability or ffmpeg binary.
        """
        with self._load_lock:
            if self._work_dir is not None:
                return
            self._check_platform()
            exe = self._resolve_ffmpeg()
            self._verify_ffmpeg(exe)
            self._ffmpeg_exe = exe
            self._work_dir = Path(tempfile.mkdtemp(prefix="fademerge-", dir=self._work_root))
            logger.debug("Engine loaded: %s (namespace %s)", exe, self._work_dir)

    def close(self) -> None:
        """Remove the namespace and everything left in it."""
        with self._load_lock:
            if self._work_dir is not None:
                shutil.rmtree(self._work_dir, ignore_errors=True)
                self._work_dir = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _check_platform(self) -> None:
        # Checked before anything is resolved or spawned.
        root = self._work_root or tempfile.gettempdir()
        if not os.path.isdir(root) or not os.access(root, os.W_OK | os.X_OK):
            raise EngineUnavailable(
                f"Temporary directory '{root}' is not writable. "
                "Set TMPDIR to a writable directory and try again."
            )
        if sys.platform in _NO_SUBPROCESS_PLATFORMS:
            raise EngineUnavailable(
                f"Platform '{sys.platform}' cannot spawn subprocesses; "
                "run fademerge on a desktop or server OS."
            )

    def _resolve_ffmpeg(self) -> str:
        if self._ffmpeg_exe:
            return self._ffmpeg_exe
        try:
            return imageio_ffmpeg.get_ffmpeg_exe()
        except RuntimeError as e:
            raise EngineUnavailable(
                f"ffmpeg not found ({e}). Install imageio-ffmpeg with its "
                "bundled binary, or set IMAGEIO_FFMPEG_EXE to an ffmpeg path."
            ) from e

    def _verify_ffmpeg(self, exe: str) -> None:
        try:
            subprocess.run(
                [exe, "-hide_banner", "-version"],
                check=True, capture_output=True,
            )
        except (OSError, subprocess.CalledProcessError) as e:
            raise EngineUnavailable(
                f"ffmpeg at '{exe}' could not be started: {e}"
            ) from e

    # ── Namespace ─────────────────────────────────────────────────

    def _path(self, name: str) -> Path:
        if not name or Path(name).name != name:
            raise ValueError(f"Engine file names must be plain names, got {name!r}")
        return self.work_dir / name

    def write_file(self, name: str, source) -> None:
        """Stream bytes into the namespace. ``source`` is a path or bytes."""
        dest = self._path(name)
        if isinstance(source, (bytes, bytearray, memoryview)):
            dest.write_bytes(bytes(source))
            return
        with open(source, "rb") as src, open(dest, "wb") as dst:
            shutil.copyfileobj(src, dst, length=1024 * 1024)

    def read_file(self, name: str) -> bytes:
        return self._path(name).read_bytes()

    def delete_file(self, name: str) -> None:
        self._path(name).unlink()

    def list_files(self) -> list[str]:
        return sorted(p.name for p in self.work_dir.iterdir())

    # ── Execution ─────────────────────────────────────────────────

    def exec(self, args: list[str], on_progress=None) -> int:
        """Run ffmpeg with ``args`` inside the namespace, return its exit code.

        Args:
            args: ffmpeg arguments (without the executable). The last one
                is the output name.
            on_progress: Called with elapsed output seconds for every tick.
        """
        cmd = [
            self._ffmpeg_exe, "-hide_banner", "-nostdin", "-y",
            "-progress", "pipe:1", "-nostats",
            *args,
        ]
        logger.debug("ffmpeg command: %s", " ".join(cmd))

        tail = deque(maxlen=_TAIL_LINES)
        with subprocess.Popen(
            cmd,
            cwd=self.work_dir,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            bufsize=1,
        ) as proc:
            try:
                for line in proc.stdout:
                    line = line.strip()
                    if not line:
                        continue
                    seconds = _parse_progress(line)
                    if seconds is not None:
                        if on_progress is not None:
                            on_progress(seconds)
                    elif "=" not in line or " " in line:
                        tail.append(line)
            except BaseException:
                # A raising callback or an interrupt must not orphan ffmpeg.
                proc.kill()
                raise
            code = proc.wait()

        self.output_tail = list(tail)
        if code != 0:
            logger.error("ffmpeg exited with code %d:\n%s", code, "\n".join(tail))
        elif tail:
            logger.debug("ffmpeg output (tail):\n%s", "\n".join(tail))
        return code


def _parse_progress(line: str) -> float | None:
    """Elapsed output seconds from one ``-progress`` line, or None."""
    for key in _PROGRESS_KEYS:
        if line.startswith(key):
            try:
                return int(line[len(key):]) / 1_000_000
            except ValueError:
                # "N/A" before the first frame is encoded.
                return None
    return None
