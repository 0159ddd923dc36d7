"""Parse one header-delimited chunk of lines into a ``Passage``."""

from __future__ import annotations

from collections.abc import Sequence

from tweeparse.context import Span
from tweeparse.models.errors import ErrorList, Output
from tweeparse.models.story import Passage
from tweeparse.parser.content import parse_content
from tweeparse.parser.header import parse_header


def parse_passage(lines: Sequence[str], context: Span | None = None) -> Output[Passage]:
    """Parse a chunk whose first line is the header.

    Diagnostics and positions are chunk-relative (header on line 1, body
    from line 2). ``context`` is attached as-is, since spans are already in
    document coordinates.
    """
    header, warnings = parse_header(lines[0] if lines else "").take()
    if isinstance(header, ErrorList):
        return Output.err(header, warnings)

    body = "\n".join(lines[1:])
    content, content_warnings = parse_content(header, body).with_offset_row(1).take()

    passage = Passage(header=header, content=content, context=context)
    return Output.ok(passage, [*warnings, *content_warnings])
