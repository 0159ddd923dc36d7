"""Shared test fixtures for tweeparse."""

from __future__ import annotations

import pytest

from tweeparse.models.story import Story
from tweeparse.parser.assembler import StoryAssembler
from tweeparse.parser.loader import StoryLoader
from tweeparse.settings import Settings


@pytest.fixture
def assembler() -> StoryAssembler:
    return StoryAssembler()


@pytest.fixture
def loader() -> StoryLoader:
    return StoryLoader(settings=Settings(_env_file=None))


@pytest.fixture
def sample_story(assembler: StoryAssembler) -> Story:
    """Assemble the sample story fixture."""
    out = assembler.assemble(SAMPLE_STORY_TWEE)
    assert out.is_ok(), f"Sample story has errors: {out.errors}"
    return out.unwrap()


SAMPLE_STORY_TWEE = """\
:: StoryTitle
The Overgrown Path

:: StoryData
{
  "ifid": "D674C58C-DEFA-4F70-B7A2-27742230C0FC",
  "format": "SugarCube",
  "format-version": "2.36.1",
  "start": "Start"
}

:: Start [intro] {"position":"100,200"}
You stand at a fork. Take the [[left path|Left]] or the [[Right]].

:: Left
A dead end. [[Back->Start]]

:: Right
It keeps going to [[Nowhere]].

:: Story JavaScript [script]
window.story = true;

:: Story Stylesheet [stylesheet]
body { color: black; }
"""

TWO_PASSAGE_TWEE = """\
:: A passage
This
That
The Other


:: Another passage
Foo
Bar
Baz


:: StoryTitle
Test Story


"""
