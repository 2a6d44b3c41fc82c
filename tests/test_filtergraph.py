"""Tests for the typed filter graph builder.

Checks node structure and wiring directly, then the ffmpeg
serialisation as a whole string for the common cases.
"""

import pytest

from fademerge.filtergraph import (
    Filter,
    FilterNode,
    StreamRef,
    build_filter_graph,
    clip_node,
    concat_node,
    fade_filter,
)
from fademerge.schedule import ClipSchedule, FadeWindow


def _out(start, duration):
    return FadeWindow("out", start, duration)


def _in(duration):
    return FadeWindow("in", 0.0, duration)


class TestFilterRendering:
    def test_filter_with_options(self):
        f = Filter("fade", (("t", "in"), ("st", "0"), ("d", "0.5")))
        assert str(f) == "fade=t=in:st=0:d=0.5"

    def test_bare_filter(self):
        assert str(Filter("copy")) == "copy"

    def test_stream_ref(self):
        assert str(StreamRef("0:v")) == "[0:v]"

    def test_node(self):
        node = FilterNode(
            inputs=(StreamRef("0:v"),),
            filters=(Filter("copy"),),
            outputs=(StreamRef("v0"),),
        )
        assert str(node) == "[0:v]copy[v0]"

    def test_fade_filter_from_window(self):
        assert str(fade_filter(_out(9.5, 0.5))) == "fade=t=out:st=9.5:d=0.5"


class TestClipNode:
    def test_no_windows_is_copy(self):
        node = clip_node(0, ClipSchedule())
        assert [f.name for f in node.filters] == ["copy"]
        assert node.inputs == (StreamRef("0:v"),)
        assert node.outputs == (StreamRef("v0"),)

    def test_fade_in_before_fade_out(self):
        node = clip_node(1, ClipSchedule(fade_in=_in(0.5), fade_out=_out(7.5, 0.5)))
        assert str(node) == "[1:v]fade=t=in:st=0:d=0.5,fade=t=out:st=7.5:d=0.5[v1]"

    def test_fade_out_only(self):
        node = clip_node(0, ClipSchedule(fade_out=_out(9.5, 0.5)))
        assert str(node) == "[0:v]fade=t=out:st=9.5:d=0.5[v0]"


class TestConcatNode:
    def test_interleaves_video_and_audio(self):
        node = concat_node(3)
        labels = [ref.label for ref in node.inputs]
        assert labels == ["v0", "0:a", "v1", "1:a", "v2", "2:a"]

    def test_stream_counts(self):
        node = concat_node(3)
        assert str(node.filters[0]) == "concat=n=3:v=1:a=1"

    def test_outputs(self):
        assert [r.label for r in concat_node(2).outputs] == ["outv", "outa"]


class TestBuildFilterGraph:
    def _three(self):
        return [
            ClipSchedule(fade_out=_out(9.5, 0.5)),
            ClipSchedule(fade_in=_in(0.5), fade_out=_out(7.5, 0.5)),
            ClipSchedule(fade_in=_in(0.5)),
        ]

    def test_one_node_per_clip_plus_concat(self):
        graph = build_filter_graph(self._three())
        assert len(graph.nodes) == 4
        assert graph.nodes[-1].filters[0].name == "concat"

    def test_single_linear_concat(self):
        graph = build_filter_graph(self._three())
        concat_nodes = [n for n in graph.nodes if n.filters[0].name == "concat"]
        assert len(concat_nodes) == 1

    def test_filter_complex_string(self):
        graph = build_filter_graph(self._three())
        assert graph.to_filter_complex() == (
            "[0:v]fade=t=out:st=9.5:d=0.5[v0]; "
            "[1:v]fade=t=in:st=0:d=0.5,fade=t=out:st=7.5:d=0.5[v1]; "
            "[2:v]fade=t=in:st=0:d=0.5[v2]; "
            "[v0][0:a][v1][1:a][v2][2:a]concat=n=3:v=1:a=1[outv][outa]"
        )

    def test_edges_wire_every_clip_into_concat(self):
        graph = build_filter_graph(self._three())
        edges = graph.edges()
        assert ("0:v", "v0") in edges
        for i in range(3):
            assert (f"v{i}", "outv") in edges
            assert (f"{i}:a", "outv") in edges

    def test_every_consumed_label_is_produced_or_an_input(self):
        graph = build_filter_graph(self._three())
        produced = {ref.label for node in graph.nodes for ref in node.outputs}
        for node in graph.nodes:
            for ref in node.inputs:
                assert ref.label in produced or ":" in ref.label

    def test_graph_outputs(self):
        graph = build_filter_graph(self._three())
        assert [str(r) for r in graph.outputs] == ["[outv]", "[outa]"]

    def test_clip_without_windows_passthrough(self):
        graph = build_filter_graph([ClipSchedule(), ClipSchedule()])
        assert graph.to_filter_complex().startswith("[0:v]copy[v0]; [1:v]copy[v1]; ")

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="No clips"):
            build_filter_graph([])
