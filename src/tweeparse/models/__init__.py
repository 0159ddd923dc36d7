"""Pydantic domain models for twee stories and their diagnostics."""

from tweeparse.context import Position
from tweeparse.models.errors import (
    ErrorKind,
    ErrorList,
    Output,
    StoryParseError,
    TweeError,
    TweeWarning,
    WarningKind,
)
from tweeparse.models.story import (
    Passage,
    PassageContent,
    PassageHeader,
    ScriptContent,
    Story,
    StoryDataContent,
    StoryTitleContent,
    StylesheetContent,
    TwineContent,
    TwineLink,
)

__all__ = [
    "ErrorKind",
    "ErrorList",
    "Output",
    "Passage",
    "PassageContent",
    "PassageHeader",
    "Position",
    "ScriptContent",
    "Story",
    "StoryDataContent",
    "StoryParseError",
    "StoryTitleContent",
    "StylesheetContent",
    "TweeError",
    "TweeWarning",
    "TwineContent",
    "TwineLink",
    "WarningKind",
]
