"""Passage body parsing: classification, link extraction, StoryData JSON."""

from __future__ import annotations

import json

from tweeparse.context import Position, SourceBuffer
from tweeparse.models.errors import Output, TweeWarning, WarningKind
from tweeparse.models.story import (
    SCRIPT_TAG,
    STORY_DATA,
    STORY_TITLE,
    STYLESHEET_TAG,
    PassageContent,
    PassageHeader,
    ScriptContent,
    StoryDataContent,
    StoryTitleContent,
    StylesheetContent,
    TwineContent,
    TwineLink,
)

LINK_OPEN = "[["
LINK_CLOSE = "]]"


def link_target(inner: str) -> str:
    """Extract the target passage name from the text between ``[[`` and ``]]``.

    Handles ``text|target``, ``text->target``, ``target<-text`` and a
    trailing ``][setter]`` component.
    """
    inner = inner.split("][", 1)[0]
    if "|" in inner:
        return inner.rsplit("|", 1)[1]
    if "->" in inner:
        return inner.rsplit("->", 1)[1]
    if "<-" in inner:
        return inner.split("<-", 1)[0]
    return inner


def parse_links(body: str) -> Output[list[TwineLink]]:
    """Find every ``[[...]]`` link in a body; positions are body-relative."""
    buffer = SourceBuffer(body)
    links: list[TwineLink] = []
    warnings: list[TweeWarning] = []

    cursor = 0
    while True:
        start = body.find(LINK_OPEN, cursor)
        if start == -1:
            break
        position = buffer.position_at(start)
        stop = body.find(LINK_CLOSE, start + len(LINK_OPEN))
        if stop == -1:
            warnings.append(
                TweeWarning(
                    kind=WarningKind.UNCLOSED_LINK,
                    position=position,
                    length=len(body) - start,
                )
            )
            break

        target = link_target(body[start + len(LINK_OPEN) : stop])
        stripped = target.strip()
        if stripped != target:
            warnings.append(
                TweeWarning(
                    kind=WarningKind.WHITESPACE_IN_LINK,
                    position=position,
                    length=stop + len(LINK_CLOSE) - start,
                )
            )
        links.append(TwineLink(target=stripped, position=position))
        cursor = stop + len(LINK_CLOSE)

    return Output.ok(links, warnings)


def _parse_story_data(body: str) -> Output[PassageContent]:
    try:
        value = json.loads(body)
    except json.JSONDecodeError as exc:
        warning = TweeWarning(
            kind=WarningKind.JSON_ERROR,
            position=Position(line=exc.lineno, column=exc.colno),
            detail=exc.msg,
        )
        return Output.ok(StoryDataContent(raw=body), [warning])
    if not isinstance(value, dict):
        warning = TweeWarning(kind=WarningKind.JSON_ERROR, detail="StoryData is not a JSON object")
        return Output.ok(StoryDataContent(raw=body), [warning])
    return Output.ok(StoryDataContent(raw=body, data=value))


def parse_content(header: PassageHeader, body: str) -> Output[PassageContent]:
    """Classify a passage by its header and parse its body accordingly.

    Reserved names win over tags. Diagnostic positions are relative to the
    first body line.
    """
    if header.name == STORY_TITLE:
        return Output.ok(StoryTitleContent(title=body.strip()))
    if header.name == STORY_DATA:
        return _parse_story_data(body)
    if header.has_tag(SCRIPT_TAG):
        return Output.ok(ScriptContent(body=body))
    if header.has_tag(STYLESHEET_TAG):
        return Output.ok(StylesheetContent(body=body))

    links, warnings = parse_links(body).take()
    return Output.ok(TwineContent(body=body, links=links), warnings)
