"""Split a twee document into passage chunks and assemble them into a Story."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from tweeparse.context import SourceBuffer
from tweeparse.models.errors import ErrorList, Output, TweeWarning, WarningKind
from tweeparse.models.story import (
    Passage,
    ScriptContent,
    Story,
    StoryDataContent,
    StoryTitleContent,
    StylesheetContent,
    TwineContent,
)
from tweeparse.parser.header import SIGIL
from tweeparse.parser.passage import parse_passage

logger = logging.getLogger("tweeparse.parser")


def is_header_line(line: str) -> bool:
    return line.lstrip().startswith(SIGIL)


def split_passages(lines: Sequence[str]) -> Iterator[tuple[int, int]]:
    """Yield ``(start, stop)`` line-index ranges, one per passage chunk.

    Lines before the first header line are skipped. Boundaries depend only on
    where header lines are, not on whether those headers are valid.
    """
    starts = [i for i, line in enumerate(lines) if is_header_line(line)]
    for start, stop in zip(starts, [*starts[1:], len(lines)]):
        yield start, stop


class StoryAssembler:
    """Parses a whole document and folds its passages into a ``Story``.

    A chunk whose header fails to parse contributes its errors and is left
    out; later chunks are still parsed so every problem in the document is
    reported in one pass.
    """

    def assemble(self, text: str, file_name: str | None = None) -> Output[Story]:
        buffer = SourceBuffer(text, file_name)
        lines = text.split("\n")

        story = Story()
        warnings: list[TweeWarning] = []
        errors: ErrorList | None = None

        for start, stop in split_passages(lines):
            context = buffer.line_span(start + 1, stop)
            out = parse_passage(lines[start:stop], context=context).with_offset_row(start)
            result, passage_warnings = out.take()
            warnings.extend(passage_warnings)

            if isinstance(result, ErrorList):
                logger.debug(
                    "Passage at line %d rejected with %d error(s)", start + 1, len(result)
                )
                errors = ErrorList.merge(errors, result)
                continue

            warnings.extend(self._fold(story, result))

        if errors is not None:
            return Output.err(errors, warnings)
        return Output.ok(story, warnings)

    @staticmethod
    def _fold(story: Story, passage: Passage) -> list[TweeWarning]:
        """Place one passage into its slot; returns warnings for dropped duplicates."""
        match passage.content:
            case TwineContent():
                story.passages[passage.name] = passage
            case StoryTitleContent():
                if story.title is None:
                    story.title = passage
                else:
                    return [
                        TweeWarning(
                            kind=WarningKind.DUPLICATE_STORY_TITLE,
                            position=passage.position,
                            referent=story.title.position,
                        )
                    ]
            case StoryDataContent():
                if story.data is None:
                    story.data = passage
                else:
                    return [
                        TweeWarning(
                            kind=WarningKind.DUPLICATE_STORY_DATA,
                            position=passage.position,
                            referent=story.data.position,
                        )
                    ]
            case ScriptContent():
                story.scripts.append(passage)
            case StylesheetContent():
                story.stylesheets.append(passage)
        return []
