"""Twee loading from strings, files and directories."""

from __future__ import annotations

import logging
from pathlib import Path

from tweeparse.models.errors import ErrorList, Output, TweeError, TweeWarning
from tweeparse.models.story import Story
from tweeparse.parser.assembler import StoryAssembler
from tweeparse.settings import Settings

logger = logging.getLogger("tweeparse.parser")


def _bad_path(path: Path, reason: str) -> Output[Story]:
    return Output.err(ErrorList([TweeError.bad_input_path(str(path), reason)]))


class StoryLoader:
    """Loads twee input into a ``Story``.

    A file is parsed as one document. A directory is scanned for files with
    a twee extension, recursing into subdirectories, and each file's story
    is merged into the result in name order.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        assembler: StoryAssembler | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._assembler = assembler or StoryAssembler()

    # -- public loading API --------------------------------------------------

    def load_string(self, content: str, file_name: str | None = None) -> Output[Story]:
        """Assemble a story from text. No post-assembly checks are run."""
        out = self._assembler.assemble(content, file_name)
        return out.with_file(file_name) if file_name else out

    def load(self, path: Path | str) -> Output[Story]:
        """Load a file or directory, then run ``Story.check`` on success."""
        path = Path(path)
        logger.info("Loading twee from %s", path)
        out = self._load_path(path)
        story, warnings = out.take()
        if isinstance(story, ErrorList):
            logger.info("Loading %s failed with %d error(s)", path, len(story))
            return out
        out = Output.ok(story, [*warnings, *story.check()])
        logger.info(
            "Loaded %d passage(s) from %s with %d warning(s)",
            len(story), path, len(out.warnings),
        )
        return out

    # -- path handling -------------------------------------------------------

    def _load_path(self, path: Path) -> Output[Story]:
        try:
            path.stat()
        except OSError as exc:
            return _bad_path(path, str(exc))
        if path.is_file():
            return self._load_file(path)
        if path.is_dir():
            return self._load_directory(path)
        return _bad_path(path, "Path is not a file or directory")

    def _load_file(self, path: Path) -> Output[Story]:
        logger.debug("Parsing %s", path)
        try:
            content = path.read_text(encoding=self._settings.file_encoding)
        except (OSError, UnicodeDecodeError) as exc:
            return _bad_path(path, str(exc))
        return self.load_string(content, file_name=path.name)

    def _is_twee_file(self, path: Path) -> bool:
        return path.is_file() and path.suffix[1:] in self._settings.twee_extensions

    def _load_directory(self, root: Path) -> Output[Story]:
        """Merge every twee file under ``root``.

        Entries are visited in sorted name order rather than the file
        system's listing order, so a StoryTitle or StoryData kept from an
        earlier file is the same on every platform.

        Stops at the first file that fails to parse, returning its errors
        with the warnings gathered from the files before it.
        """
        try:
            entries = sorted(root.iterdir())
        except OSError as exc:
            return _bad_path(root, str(exc))

        story = Story()
        warnings: list[TweeWarning] = []
        for entry in entries:
            if entry.is_dir():
                out = self._load_directory(entry)
            elif self._is_twee_file(entry):
                out = self._load_file(entry)
            else:
                continue

            result, sub_warnings = out.take()
            if isinstance(result, ErrorList):
                logger.warning("Stopping scan of %s: %s failed to parse", root, entry)
                return Output.err(result, warnings)
            warnings.extend(sub_warnings)
            warnings.extend(story.merge_from(result))

        return Output.ok(story, warnings)
