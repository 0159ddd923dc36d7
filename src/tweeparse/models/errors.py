"""Structured diagnostics with twee source position tracking."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from tweeparse.context import Position

T = TypeVar("T")


class ErrorKind(StrEnum):
    EMPTY_NAME = "EMPTY_NAME"
    LEADING_WHITESPACE = "LEADING_WHITESPACE"
    METADATA_BEFORE_TAGS = "METADATA_BEFORE_TAGS"
    MISSING_SIGIL = "MISSING_SIGIL"
    UNESCAPED_OPEN_SQUARE = "UNESCAPED_OPEN_SQUARE"
    UNESCAPED_CLOSE_SQUARE = "UNESCAPED_CLOSE_SQUARE"
    UNESCAPED_OPEN_CURLY = "UNESCAPED_OPEN_CURLY"
    UNESCAPED_CLOSE_CURLY = "UNESCAPED_CLOSE_CURLY"
    UNCLOSED_TAG_BLOCK = "UNCLOSED_TAG_BLOCK"
    # Declared for completeness; an unclosed metadata block is reported as a
    # JSON_ERROR warning and the header keeps its default metadata.
    UNCLOSED_METADATA_BLOCK = "UNCLOSED_METADATA_BLOCK"
    BAD_INPUT_PATH = "BAD_INPUT_PATH"


class WarningKind(StrEnum):
    ESCAPED_OPEN_SQUARE = "ESCAPED_OPEN_SQUARE"
    ESCAPED_CLOSE_SQUARE = "ESCAPED_CLOSE_SQUARE"
    ESCAPED_OPEN_CURLY = "ESCAPED_OPEN_CURLY"
    ESCAPED_CLOSE_CURLY = "ESCAPED_CLOSE_CURLY"
    JSON_ERROR = "JSON_ERROR"
    DUPLICATE_STORY_TITLE = "DUPLICATE_STORY_TITLE"
    DUPLICATE_STORY_DATA = "DUPLICATE_STORY_DATA"
    MISSING_STORY_TITLE = "MISSING_STORY_TITLE"
    MISSING_STORY_DATA = "MISSING_STORY_DATA"
    UNCLOSED_LINK = "UNCLOSED_LINK"
    WHITESPACE_IN_LINK = "WHITESPACE_IN_LINK"
    DEAD_LINK = "DEAD_LINK"


_ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.EMPTY_NAME: "Passage header has an empty name",
    ErrorKind.LEADING_WHITESPACE: "Passage header has whitespace before sigil (::)",
    ErrorKind.METADATA_BEFORE_TAGS: "Passage header has metadata before tags",
    ErrorKind.MISSING_SIGIL: "Passage header missing sigil (::)",
    ErrorKind.UNESCAPED_OPEN_SQUARE: "Unescaped [ character in passage header",
    ErrorKind.UNESCAPED_CLOSE_SQUARE: "Unescaped ] character in passage header",
    ErrorKind.UNESCAPED_OPEN_CURLY: "Unescaped { character in passage header",
    ErrorKind.UNESCAPED_CLOSE_CURLY: "Unescaped } character in passage header",
    ErrorKind.UNCLOSED_TAG_BLOCK: "Unclosed tag block in passage header",
    ErrorKind.UNCLOSED_METADATA_BLOCK: "Unclosed metadata block in passage header",
}

_WARNING_MESSAGES: dict[WarningKind, str] = {
    WarningKind.ESCAPED_OPEN_SQUARE: "Escaped [ character in passage header",
    WarningKind.ESCAPED_CLOSE_SQUARE: "Escaped ] character in passage header",
    WarningKind.ESCAPED_OPEN_CURLY: "Escaped { character in passage header",
    WarningKind.ESCAPED_CLOSE_CURLY: "Escaped } character in passage header",
    WarningKind.DUPLICATE_STORY_TITLE: "Multiple StoryTitle passages found",
    WarningKind.DUPLICATE_STORY_DATA: "Multiple StoryData passages found",
    WarningKind.MISSING_STORY_TITLE: "No StoryTitle passage found",
    WarningKind.MISSING_STORY_DATA: "No StoryData passage found",
    WarningKind.UNCLOSED_LINK: "Unclosed passage link",
    WarningKind.WHITESPACE_IN_LINK: "Whitespace in passage link",
}


class TweeError(BaseModel):
    """A fatal diagnosis for one parse unit."""

    kind: ErrorKind
    position: Position = Field(default_factory=Position)
    length: int | None = None
    path: str | None = None
    reason: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def bad_input_path(cls, path: str, reason: str) -> TweeError:
        return cls(kind=ErrorKind.BAD_INPUT_PATH, path=path, reason=reason)

    @property
    def message(self) -> str:
        if self.kind is ErrorKind.BAD_INPUT_PATH:
            return f"Error opening path {self.path}: {self.reason}"
        return _ERROR_MESSAGES[self.kind]

    def with_column(self, column: int) -> TweeError:
        return self.model_copy(update={"position": self.position.model_copy(update={"column": column})})

    def with_offset_row(self, offset: int) -> TweeError:
        return self.model_copy(update={"position": self.position.with_offset_row(offset)})

    def with_offset_column(self, offset: int) -> TweeError:
        return self.model_copy(update={"position": self.position.with_offset_column(offset)})

    def with_file(self, file: str) -> TweeError:
        return self.model_copy(update={"position": self.position.with_file(file)})

    def __str__(self) -> str:
        return f"{self.position}: {self.message}"


class TweeWarning(BaseModel):
    """A non-fatal diagnosis.

    ``referent`` points at a related location, e.g. the first ``StoryTitle``
    when a second one is dropped. ``detail`` carries the JSON parser message
    for ``JSON_ERROR`` and the missing target for ``DEAD_LINK``.
    """

    kind: WarningKind
    position: Position = Field(default_factory=Position)
    referent: Position | None = None
    length: int | None = None
    detail: str | None = None
    suggestions: list[str] = []

    model_config = {"frozen": True}

    @property
    def message(self) -> str:
        if self.kind is WarningKind.JSON_ERROR:
            return f"Error encountered while parsing JSON: {self.detail}"
        if self.kind is WarningKind.DEAD_LINK:
            return f"Dead link to nonexistent passage: {self.detail}"
        return _WARNING_MESSAGES[self.kind]

    def with_column(self, column: int) -> TweeWarning:
        return self.model_copy(update={"position": self.position.model_copy(update={"column": column})})

    def with_referent(self, referent: Position) -> TweeWarning:
        return self.model_copy(update={"referent": referent})

    def with_offset_row(self, offset: int) -> TweeWarning:
        referent = self.referent.with_offset_row(offset) if self.referent else None
        return self.model_copy(
            update={"position": self.position.with_offset_row(offset), "referent": referent}
        )

    def with_offset_column(self, offset: int) -> TweeWarning:
        return self.model_copy(update={"position": self.position.with_offset_column(offset)})

    def with_file(self, file: str) -> TweeWarning:
        referent = self.referent.with_file(file) if self.referent else None
        return self.model_copy(update={"position": self.position.with_file(file), "referent": referent})

    def __str__(self) -> str:
        return f"{self.position}: {self.message}"


@dataclass
class ErrorList:
    """Ordered fatal diagnoses collected for one parse unit."""

    errors: list[TweeError] = field(default_factory=list)

    def push(self, error: TweeError) -> None:
        self.errors.append(error)

    def is_empty(self) -> bool:
        return not self.errors

    @staticmethod
    def merge(left: ErrorList | None, right: ErrorList | None) -> ErrorList:
        """Concatenate two lists, preserving the order of both."""
        merged = ErrorList()
        for source in (left, right):
            if source is not None:
                merged.errors.extend(source.errors)
        return merged

    def _map(self, fn: Callable[[TweeError], TweeError]) -> ErrorList:
        return ErrorList([fn(error) for error in self.errors])

    def with_offset_row(self, offset: int) -> ErrorList:
        return self._map(lambda e: e.with_offset_row(offset))

    def with_offset_column(self, offset: int) -> ErrorList:
        return self._map(lambda e: e.with_offset_column(offset))

    def with_file(self, file: str) -> ErrorList:
        return self._map(lambda e: e.with_file(file))

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[TweeError]:
        return iter(self.errors)

    def __getitem__(self, index: int) -> TweeError:
        return self.errors[index]


class StoryParseError(Exception):
    """Raised by ``Output.unwrap()`` when the result holds fatal errors."""

    def __init__(self, errors: ErrorList) -> None:
        self.errors = errors
        messages = [str(e) for e in errors]
        super().__init__(f"{len(errors)} error(s): {'; '.join(messages)}")


@dataclass
class Output(Generic[T]):
    """A parse result paired with the warnings gathered while producing it.

    ``result`` is either the parsed value or an ``ErrorList``. Warnings are
    kept in both cases.
    """

    result: T | ErrorList
    warnings: list[TweeWarning] = field(default_factory=list)

    @classmethod
    def ok(cls, value: T, warnings: list[TweeWarning] | None = None) -> Output[T]:
        return cls(value, list(warnings or []))

    @classmethod
    def err(cls, errors: ErrorList, warnings: list[TweeWarning] | None = None) -> Output[T]:
        return cls(errors, list(warnings or []))

    def is_ok(self) -> bool:
        return not isinstance(self.result, ErrorList)

    def is_err(self) -> bool:
        return isinstance(self.result, ErrorList)

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def value(self) -> T | None:
        return None if isinstance(self.result, ErrorList) else self.result

    @property
    def errors(self) -> ErrorList | None:
        return self.result if isinstance(self.result, ErrorList) else None

    def take(self) -> tuple[T | ErrorList, list[TweeWarning]]:
        return self.result, self.warnings

    def unwrap(self) -> T:
        if isinstance(self.result, ErrorList):
            raise StoryParseError(self.result)
        return self.result

    def with_warnings(self, warnings: list[TweeWarning]) -> Output[T]:
        return Output(self.result, [*self.warnings, *warnings])

    def _shift(self, method: str, arg: Any) -> Output[T]:
        shift = getattr(self.result, method, None)
        result = shift(arg) if shift is not None else self.result
        return Output(result, [getattr(w, method)(arg) for w in self.warnings])

    def with_offset_row(self, offset: int) -> Output[T]:
        return self._shift("with_offset_row", offset)

    def with_offset_column(self, offset: int) -> Output[T]:
        return self._shift("with_offset_column", offset)

    def with_file(self, file: str) -> Output[T]:
        return self._shift("with_file", file)
