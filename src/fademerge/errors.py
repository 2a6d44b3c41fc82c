"""Assembly error taxonomy.

Every failure of an assembly run is an AssemblyError subclass, so callers
can catch the base class and still branch on the kind. ``str(err)`` is the
human-readable status message shown to the user.
"""


class AssemblyError(Exception):
    """Base class for failed assembly runs."""


class InsufficientClips(AssemblyError):
    """Fewer than two clips at run start. No engine call is made."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"Add at least 2 clips to merge (got {count})"
        )


class EngineUnavailable(AssemblyError):
    """The transcoding engine cannot run on this host."""


class InputWriteFailed(AssemblyError):
    """A clip's bytes could not be written into the engine's namespace."""

    def __init__(self, name: str, reason: str = ""):
        self.name = name
        msg = f"Failed to write input '{name}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class EngineExecutionFailed(AssemblyError):
    """The engine exited with a failure status or produced nothing."""

    def __init__(self, code: int | None, detail: str = ""):
        self.code = code
        if detail:
            msg = f"ffmpeg failed: {detail}"
        else:
            msg = f"ffmpeg exited with code {code}"
        super().__init__(msg)


class OutputReadFailed(AssemblyError):
    """The merged output could not be read back from the engine."""


class AssemblyCancelled(AssemblyError):
    """The run was cancelled between two phases."""


class CoordinatorBusy(AssemblyError):
    """A run was started while another one is still in flight."""
