from __future__ import annotations

import asyncio

from seminar_flow.typewriter import Typewriter, reveal_segments


def test_segments_keep_tags_and_entities_whole() -> None:
    segments = list(reveal_segments("<p>Hi &amp; yo</p>"))

    assert segments == ["<p>", "H", "i", " ", "&amp;", " ", "y", "o", "</p>"]
    assert "".join(segments) == "<p>Hi &amp; yo</p>"


def test_frames_end_with_full_document_and_complete_once() -> None:
    calls = []
    typewriter = Typewriter("<p>ok</p>", on_complete=lambda: calls.append("done"))

    frames = list(typewriter.frames())
    typewriter.complete()

    assert frames[-1] == "<p>ok</p>"
    assert all(not frame.endswith("<") for frame in frames)
    assert calls == ["done"]
    assert typewriter.completed


def test_stream_signals_completion_after_last_segment() -> None:
    calls = []
    typewriter = Typewriter("<b>x</b>", on_complete=lambda: calls.append("done"), speed_ms=0)

    async def collect() -> list[str]:
        return [segment async for segment in typewriter.stream()]

    segments = asyncio.run(collect())

    assert segments == ["<b>", "x", "</b>"]
    assert calls == ["done"]


def test_empty_document_completes_immediately() -> None:
    calls = []
    typewriter = Typewriter("", on_complete=lambda: calls.append("done"))

    assert list(typewriter.frames()) == []
    assert calls == ["done"]
