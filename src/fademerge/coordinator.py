"""Execution coordinator — one assembly run from playlist to merged MP4.

State machine per run:

    IDLE -> LOADING_ENGINE -> WRITING_INPUTS -> TRANSCODING
         -> READING_OUTPUT -> CLEANING_UP -> DONE

with FAILED reachable from every non-terminal state. Phases are strictly
sequential: each engine operation finishes before the next phase starts.

The coordinator owns its engine and runs one assembly at a time; a second
``run`` while one is in flight raises CoordinatorBusy. The playlist is
snapshotted when the run starts, so the caller may keep editing it.

Progress goes to a per-run ``progress(percent, message)`` callback. During
transcoding each engine tick (elapsed output seconds) becomes
``min(99, max(0, round(elapsed / total * 100)))``; 100 is only reported
once the output has been read back successfully.

Any failure after the clip-count precondition triggers best-effort cleanup
of everything written to the engine. Cleanup problems are logged and never
change the outcome. Nothing is retried.

Assembly errors (and invalid fade settings) are also sent to the callback
as ``"Error: ..."``; any other exception, which may come from the callback
itself, is re-raised without calling it again.
"""

import enum
import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from .common import round_half_away
from .errors import (
    AssemblyCancelled,
    AssemblyError,
    CoordinatorBusy,
    EngineExecutionFailed,
    InputWriteFailed,
    InsufficientClips,
    OutputReadFailed,
)
from .plan import MIN_CLIPS, plan_assembly

logger = logging.getLogger(__name__)

OUTPUT_NAME = "output.mp4"
MERGED_FILENAME = "merged_video.mp4"
MERGED_MIME_TYPE = "video/mp4"


class AssemblyState(enum.Enum):
    IDLE = "idle"
    LOADING_ENGINE = "loading_engine"
    WRITING_INPUTS = "writing_inputs"
    TRANSCODING = "transcoding"
    READING_OUTPUT = "reading_output"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class EncodingParams:
    """Output encoding: H.264 video + AAC audio in MP4."""

    video_codec: str = "libx264"
    preset: str = "fast"
    crf: int = 23
    audio_codec: str = "aac"
    audio_bitrate: str = "128k"

    def to_args(self) -> list[str]:
        return [
            "-c:v", self.video_codec, "-preset", self.preset, "-crf", str(self.crf),
            "-c:a", self.audio_codec, "-b:a", self.audio_bitrate,
        ]


@dataclass(frozen=True)
class MergedVideo:
    """The result of a successful run."""

    data: bytes
    duration: float
    filename: str = MERGED_FILENAME
    mime_type: str = MERGED_MIME_TYPE

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.data)
        return path


def input_name(index: int, clip) -> str:
    """Deterministic namespace name for the index-th input."""
    return f"input{index}{clip.extension}"


def progress_percent(elapsed: float, total: float) -> int:
    """Map elapsed output time to a 0-99 completion estimate."""
    if total <= 0:
        return 0
    return min(99, max(0, round_half_away(elapsed / total * 100)))


def build_ffmpeg_args(plan, names: list[str], encoding: EncodingParams) -> list[str]:
    """ffmpeg arguments for a plan whose inputs were written under ``names``."""
    args = []
    for name in names:
        args.extend(["-i", name])
    args.extend(["-filter_complex", plan.graph.to_filter_complex()])
    for ref in plan.graph.outputs:
        args.extend(["-map", str(ref)])
    args.extend(encoding.to_args())
    args.append(OUTPUT_NAME)
    return args


class AssemblyCoordinator:
    """Drives an engine through one assembly run at a time."""

    def __init__(self, engine, encoding: EncodingParams | None = None):
        self.engine = engine
        self.encoding = encoding or EncodingParams()
        self.state = AssemblyState.IDLE
        self.history: list[AssemblyState] = [AssemblyState.IDLE]
        self._busy = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    def run(
        self,
        playlist,
        fade_seconds: float,
        frame_rate: int,
        progress=None,
        cancel: threading.Event | None = None,
    ) -> MergedVideo:
        """Merge the playlist's clips with fades at every boundary.

        Args:
            playlist: Playlist or sequence of clips, in merge order.
            fade_seconds: Total fade per boundary (out half + in half).
            frame_rate: Assumed constant frame rate of the inputs.
            progress: Optional ``progress(percent, message)`` callback;
                percent is None for pure status messages.
            cancel: Optional event, checked between phases only.

        Returns:
            MergedVideo with the MP4 bytes.

        Raises:
            AssemblyError: See fademerge.errors for the kinds.
            ValueError: Negative fade or non-integer frame rate.
        """
        if not self._busy.acquire(blocking=False):
            raise CoordinatorBusy("An assembly run is already in progress")
        try:
            self.state = AssemblyState.IDLE
            self.history = [AssemblyState.IDLE]
            return self._run(list(playlist), fade_seconds, frame_rate,
                             progress or _discard, cancel)
        finally:
            self._busy.release()

    # ── Run phases ────────────────────────────────────────────────

    def _enter(self, state: AssemblyState, cancel=None) -> None:
        if cancel is not None and cancel.is_set():
            raise AssemblyCancelled(f"Cancelled before {state.value}")
        self.state = state
        self.history.append(state)
        logger.debug("Assembly state -> %s", state.value)

    def _fail(self, error: BaseException, progress=None) -> None:
        self.state = AssemblyState.FAILED
        self.history.append(AssemblyState.FAILED)
        logger.error("Assembly failed: %s", error)
        if progress is not None:
            progress(None, f"Error: {error}")

    def _run(self, clips, fade_seconds, frame_rate, progress, cancel) -> MergedVideo:
        if len(clips) < MIN_CLIPS:
            error = InsufficientClips(len(clips))
            self._fail(error, progress)
            raise error

        try:
            plan = plan_assembly(clips, fade_seconds, frame_rate)
        except ValueError as e:
            self._fail(e, progress)
            raise

        written: list[str] = []
        try:
            self._enter(AssemblyState.LOADING_ENGINE, cancel)
            progress(None, "Loading ffmpeg...")
            self.engine.load()

            self._enter(AssemblyState.WRITING_INPUTS, cancel)
            progress(None, "Preparing files...")
            for entry in plan.entries:
                name = input_name(entry.index, entry.clip)
                # Recorded first so a partial write is cleaned up too.
                written.append(name)
                self._write_input(name, entry.clip)

            self._enter(AssemblyState.TRANSCODING, cancel)
            self._transcode(plan, written, progress)

            self._enter(AssemblyState.READING_OUTPUT, cancel)
            progress(None, "Reading output...")
            data = self._read_output()
        except BaseException as e:
            # The output can only exist once transcoding has been attempted.
            had_output = self.state in (AssemblyState.TRANSCODING,
                                        AssemblyState.READING_OUTPUT)
            self._cleanup(written, had_output)
            # Anything else may have come from the sink itself.
            self._fail(e, progress if isinstance(e, AssemblyError) else None)
            raise

        self._enter(AssemblyState.CLEANING_UP)
        self._cleanup(written, True)
        self._enter(AssemblyState.DONE)
        progress(100, "Done")
        return MergedVideo(data=data, duration=plan.total_duration)

    def _write_input(self, name: str, clip) -> None:
        try:
            self.engine.write_file(name, clip.source)
        except OSError as e:
            raise InputWriteFailed(name, str(e)) from e

    def _transcode(self, plan, names: list[str], progress) -> None:
        total = plan.total_duration
        active = True

        def on_tick(elapsed: float) -> None:
            # Ticks arriving after the run left TRANSCODING are dropped.
            if active:
                pct = progress_percent(elapsed, total)
                progress(pct, f"Merging videos... {pct}%")

        progress(0, "Merging videos... 0%")
        args = build_ffmpeg_args(plan, names, self.encoding)
        try:
            code = self.engine.exec(args, on_tick)
        except OSError as e:
            raise EngineExecutionFailed(None, str(e)) from e
        finally:
            active = False
        if code != 0:
            raise EngineExecutionFailed(code)

    def _read_output(self) -> bytes:
        try:
            data = self.engine.read_file(OUTPUT_NAME)
        except OSError as e:
            raise OutputReadFailed(f"Could not read merged output: {e}") from e
        if not data:
            raise EngineExecutionFailed(0, "produced an empty output file")
        return data

    def _cleanup(self, written: list[str], had_output: bool) -> None:
        names = [*written, OUTPUT_NAME] if had_output else list(written)
        for name in names:
            try:
                self.engine.delete_file(name)
            except FileNotFoundError:
                logger.debug("Cleanup: %s was never created", name)
            except OSError as e:
                logger.warning("Cleanup: could not delete %s: %s", name, e)


def _discard(percent, message) -> None:
    pass
