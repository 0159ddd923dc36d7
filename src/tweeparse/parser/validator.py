"""Post-assembly story checks: missing special passages, dead links."""

from __future__ import annotations

from tweeparse.models.errors import TweeWarning, WarningKind
from tweeparse.models.story import Story


class StoryValidator:
    """Checks that need the complete set of passage names.

    Run only after every document has been assembled and merged; a link is
    dead only if no file defines its target.
    """

    def check(self, story: Story) -> list[TweeWarning]:
        warnings: list[TweeWarning] = []
        warnings.extend(self._check_title(story))
        warnings.extend(self._check_data(story))
        warnings.extend(self._check_dead_links(story))
        return warnings

    def _check_title(self, story: Story) -> list[TweeWarning]:
        if story.title is None:
            return [TweeWarning(kind=WarningKind.MISSING_STORY_TITLE)]
        return []

    def _check_data(self, story: Story) -> list[TweeWarning]:
        if story.data is None:
            return [TweeWarning(kind=WarningKind.MISSING_STORY_DATA)]
        return []

    def _check_dead_links(self, story: Story) -> list[TweeWarning]:
        """Flag links whose target names no passage, at the link's own position."""
        warnings: list[TweeWarning] = []
        names = list(story.passages.keys())
        for passage in story.passages.values():
            for link in passage.links:
                if link.target in story.passages:
                    continue
                warnings.append(
                    TweeWarning(
                        kind=WarningKind.DEAD_LINK,
                        position=link.position,
                        length=len(link.target),
                        detail=link.target,
                        suggestions=_suggest_similar(link.target, names),
                    )
                )
        return warnings


def _normalize(name: str) -> str:
    return " ".join(name.casefold().split())


def _suggest_similar(target: str, names: list[str], limit: int = 3) -> list[str]:
    """Rank existing passage names by closeness to a dead link's target.

    Case and runs of whitespace are ignored. Names containing the target (or
    contained by it) come first, closest length first; the rest are ranked
    by how many characters they do not share with the target.
    """
    wanted = _normalize(target)
    ranked: list[tuple[int, int, str]] = []
    for name in names:
        have = _normalize(name)
        if wanted in have or have in wanted:
            ranked.append((0, abs(len(have) - len(wanted)), name))
        else:
            shared = sum(1 for c in wanted if c in have)
            ranked.append((1, len(wanted) + len(have) - 2 * shared, name))
    ranked.sort()
    return [name for _, _, name in ranked[:limit]]
