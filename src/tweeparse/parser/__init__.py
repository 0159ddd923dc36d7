"""Twee parsing with source position fidelity."""

from tweeparse.parser.assembler import StoryAssembler, split_passages
from tweeparse.parser.header import parse_header
from tweeparse.parser.loader import StoryLoader
from tweeparse.parser.passage import parse_passage
from tweeparse.parser.validator import StoryValidator

__all__ = [
    "StoryAssembler",
    "StoryLoader",
    "StoryValidator",
    "parse_header",
    "parse_passage",
    "split_passages",
]
