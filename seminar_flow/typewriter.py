"""Progressive reveal of formatted text.

Markup tags (``<...>``) and entities (``&...;``) are emitted as single segments so
a partially revealed document never contains half a tag.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Callable, Iterator


def reveal_segments(html: str) -> Iterator[str]:
    """Yield the atomic segments of *html* in order; joined they equal *html*."""

    index = 0
    length = len(html)
    while index < length:
        char = html[index]
        segment = char
        if char in "<&":
            end_char = ">" if char == "<" else ";"
            end_index = html.find(end_char, index)
            if end_index != -1:
                segment = html[index : end_index + 1]
        yield segment
        index += len(segment)


class Typewriter:
    """Reveal one document, then call ``on_complete`` exactly once."""

    def __init__(
        self,
        html: str,
        *,
        on_complete: Callable[[], None] | None = None,
        speed_ms: int = 15,
    ) -> None:
        self.html = html or ""
        self.speed_ms = speed_ms
        self._on_complete = on_complete
        self._completed = False

    @property
    def completed(self) -> bool:
        return self._completed

    def complete(self) -> None:
        """Signal completion; later calls are ignored."""

        if self._completed:
            return
        self._completed = True
        if self._on_complete:
            self._on_complete()

    def frames(self) -> Iterator[str]:
        """Yield the displayed content after each segment."""

        displayed = ""
        for segment in reveal_segments(self.html):
            displayed += segment
            yield displayed
        self.complete()

    async def stream(self) -> AsyncIterator[str]:
        """Yield segments paced by ``speed_ms``; completion fires after the last one."""

        delay = max(self.speed_ms, 0) / 1000
        for segment in reveal_segments(self.html):
            yield segment
            if delay:
                await asyncio.sleep(delay)
        self.complete()
