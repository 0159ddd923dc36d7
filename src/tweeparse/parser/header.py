"""Passage header tokenizer.

Splits one ``:: name [tags] {metadata}`` line into its parts. Header lines
have no formal grammar: names may contain escaped brackets and braces, and
blocks may be missing or malformed, so block boundaries are located with
heuristics and every problem found is reported rather than the first one.
"""

from __future__ import annotations

import json
import re
from typing import Any

from tweeparse.context import Position
from tweeparse.models.errors import (
    ErrorKind,
    ErrorList,
    Output,
    TweeError,
    TweeWarning,
    WarningKind,
)
from tweeparse.models.story import PassageHeader

SIGIL = "::"

DEFAULT_METADATA: dict[str, Any] = {"position": "10,10", "size": "100,100"}

# (character, error when unescaped in the name, warning when escaped)
_NAME_SPECIALS: tuple[tuple[str, ErrorKind, WarningKind], ...] = (
    ("{", ErrorKind.UNESCAPED_OPEN_CURLY, WarningKind.ESCAPED_OPEN_CURLY),
    ("}", ErrorKind.UNESCAPED_CLOSE_CURLY, WarningKind.ESCAPED_CLOSE_CURLY),
    ("[", ErrorKind.UNESCAPED_OPEN_SQUARE, WarningKind.ESCAPED_OPEN_SQUARE),
    ("]", ErrorKind.UNESCAPED_CLOSE_SQUARE, WarningKind.ESCAPED_CLOSE_SQUARE),
)

_ESCAPE_RE = re.compile(r"\\(.?)")


def _is_escaped(text: str, index: int) -> bool:
    """True if ``text[index]`` follows an odd run of backslashes."""
    run = 0
    while index - run - 1 >= 0 and text[index - run - 1] == "\\":
        run += 1
    return run % 2 == 1


def _find_all_unescaped(text: str, char: str) -> list[int]:
    return [i for i, c in enumerate(text) if c == char and not _is_escaped(text, i)]


def _find_last_unescaped(text: str, char: str) -> int | None:
    found = _find_all_unescaped(text, char)
    return found[-1] if found else None


def _find_first_unescaped(text: str, char: str) -> int | None:
    found = _find_all_unescaped(text, char)
    return found[0] if found else None


def guess_metadata_range(line: str) -> tuple[int, int] | None:
    """Best guess at the ``[start, stop)`` range of the metadata block.

    Surplus unmatched ``{`` characters at the front are left to the name,
    where they are reported as unescaped.
    """
    opens = _find_all_unescaped(line, "{")
    closes = _find_all_unescaped(line, "}")

    if not opens:
        return None
    if not closes:
        return opens[-1], len(line)
    if len(opens) > len(closes):
        return opens[len(opens) - len(closes)], closes[-1] + 1
    return opens[0], closes[-1] + 1


def _parse_metadata(text: str) -> tuple[dict[str, Any] | None, TweeWarning | None]:
    """Parse a metadata block; on failure return a column-relative warning."""
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        warning = TweeWarning(
            kind=WarningKind.JSON_ERROR,
            position=Position(column=exc.colno),
            length=max(1, len(text) - exc.colno + 1),
            detail=exc.msg,
        )
        return None, warning
    if not isinstance(value, dict):
        warning = TweeWarning(
            kind=WarningKind.JSON_ERROR,
            position=Position(column=1),
            length=len(text),
            detail="metadata is not a JSON object",
        )
        return None, warning
    return value, None


def _check_name(
    text: str, char: str, error: ErrorKind
) -> tuple[TweeError | None, list[int]]:
    """Look for ``char`` in a name prefix.

    Returns an error at the first unescaped occurrence, or else the indices
    of the backslashes escaping each escaped occurrence.
    """
    escaped: list[int] = []
    for i, c in enumerate(text):
        if c != char:
            continue
        if not _is_escaped(text, i):
            return TweeError(kind=error, position=Position(column=i + 1), length=1), []
        escaped.append(i - 1)
    return None, escaped


def _unescape(name: str) -> str:
    return _ESCAPE_RE.sub(r"\1", name)


def parse_header(line: str) -> Output[PassageHeader]:
    """Parse a single header line.

    Positions in the returned diagnostics are on line 1; callers shift them
    into document coordinates.
    """
    warnings: list[TweeWarning] = []
    errors = ErrorList()

    if not line.startswith(SIGIL):
        trimmed = line.lstrip()
        if trimmed.startswith(SIGIL):
            errors.push(
                TweeError(
                    kind=ErrorKind.LEADING_WHITESPACE,
                    position=Position(column=1),
                    length=len(line) - len(trimmed),
                )
            )
        else:
            errors.push(
                TweeError(kind=ErrorKind.MISSING_SIGIL, position=Position(column=1), length=1)
            )

    name_end = len(line)
    metadata = dict(DEFAULT_METADATA)

    meta_range = guess_metadata_range(line)
    if meta_range is not None:
        start, stop = meta_range
        name_end = start

        # Tags must precede metadata
        if _find_last_unescaped(line[stop:], "[") is not None:
            errors.push(
                TweeError(
                    kind=ErrorKind.METADATA_BEFORE_TAGS,
                    position=Position(column=start + 1),
                    length=stop - start,
                )
            )

        parsed, warning = _parse_metadata(line[start:stop])
        if warning is not None:
            warnings.append(warning.with_offset_column(start))
        else:
            metadata.update(parsed)

    tags: list[str] = []
    tag_start = _find_last_unescaped(line[:name_end], "[")
    if tag_start is not None:
        tag_close = _find_first_unescaped(line[tag_start + 1 : name_end], "]")
        if tag_close is not None:
            tags = line[tag_start + 1 : tag_start + 1 + tag_close].split()
        else:
            errors.push(
                TweeError(
                    kind=ErrorKind.UNCLOSED_TAG_BLOCK,
                    position=Position(column=tag_start + 1),
                    length=name_end - tag_start,
                )
            )
        name_end = min(name_end, tag_start)

    prefix = line[:name_end]
    for char, error_kind, warning_kind in _NAME_SPECIALS:
        error, escaped = _check_name(prefix, char, error_kind)
        if error is not None:
            errors.push(error)
            continue
        for index in escaped:
            warnings.append(
                TweeWarning(kind=warning_kind, position=Position(column=index + 1), length=2)
            )

    name = _unescape(line[len(SIGIL) : name_end].strip()) if name_end > len(SIGIL) else ""
    if not name:
        errors.push(
            TweeError(kind=ErrorKind.EMPTY_NAME, position=Position(column=len(SIGIL) + 1), length=1)
        )

    if not errors.is_empty():
        return Output.err(errors, warnings)
    header = PassageHeader(name=name, tags=tags, metadata=metadata)
    return Output.ok(header, warnings)
