"""Filter graph builder — typed ffmpeg filter graph for a fade assembly.

The graph is built as data (nodes wired by pad labels) and only turned into
ffmpeg's ``-filter_complex`` syntax at the engine boundary, so tests can
inspect nodes and edges instead of parsing strings.

Shape of the graph for N clips:

    [0:v] fade=t=out:st=9.5:d=0.5 [v0]
    [1:v] fade=t=in:st=0:d=0.5,fade=t=out:st=7.5:d=0.5 [v1]
    [2:v] fade=t=in:st=0:d=0.5 [v2]
    [v0][0:a][v1][1:a][v2][2:a] concat=n=3:v=1:a=1 [outv][outa]

Each clip's video goes through its own chain (fade-in first, then fade-out,
or a ``copy`` passthrough when it has no windows). Audio is untouched and
fed straight from the input. A single linear concat joins everything.
"""

from dataclasses import dataclass, field

from .common import format_seconds

VIDEO_OUT = "outv"
AUDIO_OUT = "outa"


@dataclass(frozen=True)
class StreamRef:
    """A labelled pad: an input stream ("0:v") or a filter output ("v0")."""

    label: str

    def __str__(self):
        return f"[{self.label}]"


@dataclass(frozen=True)
class Filter:
    """One ffmpeg filter with ordered key=value options."""

    name: str
    options: tuple[tuple[str, str], ...] = ()

    def __str__(self):
        if not self.options:
            return self.name
        opts = ":".join(f"{k}={v}" for k, v in self.options)
        return f"{self.name}={opts}"


@dataclass(frozen=True)
class FilterNode:
    """A filter chain reading ``inputs`` and writing ``outputs``."""

    inputs: tuple[StreamRef, ...]
    filters: tuple[Filter, ...]
    outputs: tuple[StreamRef, ...]

    def __str__(self):
        ins = "".join(str(ref) for ref in self.inputs)
        chain = ",".join(str(f) for f in self.filters)
        outs = "".join(str(ref) for ref in self.outputs)
        return f"{ins}{chain}{outs}"


@dataclass(frozen=True)
class FilterGraph:
    """Directed acyclic filter graph plus the labels to map as outputs."""

    nodes: tuple[FilterNode, ...]
    outputs: tuple[StreamRef, ...] = field(
        default=(StreamRef(VIDEO_OUT), StreamRef(AUDIO_OUT)),
    )

    def edges(self) -> list[tuple[str, str]]:
        """(producer, consumer) label pairs between nodes.

        Producers are pad labels; a consumer is identified by the first
        output label of the node that reads the pad.
        """
        result = []
        for node in self.nodes:
            consumer = node.outputs[0].label
            for ref in node.inputs:
                result.append((ref.label, consumer))
        return result

    def to_filter_complex(self) -> str:
        """Serialise to ffmpeg ``-filter_complex`` syntax."""
        return "; ".join(str(node) for node in self.nodes)


# ── Builders ──────────────────────────────────────────────────────

def fade_filter(window) -> Filter:
    """ffmpeg ``fade`` filter for one FadeWindow."""
    return Filter("fade", (
        ("t", window.kind),
        ("st", format_seconds(window.start)),
        ("d", format_seconds(window.duration)),
    ))


def clip_node(index: int, schedule) -> FilterNode:
    """Per-clip video chain: fades in window order, or a copy passthrough."""
    filters = tuple(fade_filter(w) for w in schedule.windows)
    if not filters:
        filters = (Filter("copy"),)
    return FilterNode(
        inputs=(StreamRef(f"{index}:v"),),
        filters=filters,
        outputs=(StreamRef(f"v{index}"),),
    )


def concat_node(count: int) -> FilterNode:
    """Concat of ``count`` segments, each one faded video + original audio."""
    inputs = []
    for i in range(count):
        inputs.append(StreamRef(f"v{i}"))
        inputs.append(StreamRef(f"{i}:a"))
    return FilterNode(
        inputs=tuple(inputs),
        filters=(Filter("concat", (
            ("n", str(count)),
            ("v", "1"),
            ("a", "1"),
        )),),
        outputs=(StreamRef(VIDEO_OUT), StreamRef(AUDIO_OUT)),
    )


def build_filter_graph(schedules) -> FilterGraph:
    """Build the assembly graph from per-clip schedules in playlist order.

    Raises:
        ValueError: Empty schedule list.
    """
    if not schedules:
        raise ValueError("No clips to build a filter graph for")
    nodes = [clip_node(i, s) for i, s in enumerate(schedules)]
    nodes.append(concat_node(len(schedules)))
    return FilterGraph(nodes=tuple(nodes))
