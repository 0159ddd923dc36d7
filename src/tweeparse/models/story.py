"""Story model types: passage headers, passage contents, passages, stories."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from tweeparse.context import Position, Span
from tweeparse.models.errors import TweeWarning, WarningKind

STORY_TITLE = "StoryTitle"
STORY_DATA = "StoryData"
SCRIPT_TAG = "script"
STYLESHEET_TAG = "stylesheet"


class PassageHeader(BaseModel):
    """A passage declaration line: name, tags and metadata."""

    name: str = Field(min_length=1)
    tags: list[str] = []
    metadata: dict[str, Any] = {}
    position: Position = Field(default_factory=Position)

    model_config = {"frozen": True}

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def with_offset_row(self, offset: int) -> PassageHeader:
        return self.model_copy(update={"position": self.position.with_offset_row(offset)})

    def with_file(self, file: str) -> PassageHeader:
        return self.model_copy(update={"position": self.position.with_file(file)})


class TwineLink(BaseModel):
    """A link from a passage body to another passage by name."""

    target: str
    position: Position = Field(default_factory=Position)

    model_config = {"frozen": True}

    def with_offset_row(self, offset: int) -> TwineLink:
        return self.model_copy(update={"position": self.position.with_offset_row(offset)})

    def with_file(self, file: str) -> TwineLink:
        return self.model_copy(update={"position": self.position.with_file(file)})


class TwineContent(BaseModel):
    """Body of a normal narrative passage."""

    kind: Literal["normal"] = "normal"
    body: str
    links: list[TwineLink] = []

    def with_offset_row(self, offset: int) -> TwineContent:
        return self.model_copy(update={"links": [link.with_offset_row(offset) for link in self.links]})

    def with_file(self, file: str) -> TwineContent:
        return self.model_copy(update={"links": [link.with_file(file) for link in self.links]})


class StoryTitleContent(BaseModel):
    kind: Literal["story_title"] = "story_title"
    title: str


class StoryDataContent(BaseModel):
    """Body of the ``StoryData`` passage: raw JSON text and the parsed object.

    ``data`` is ``None`` when the body could not be parsed.
    """

    kind: Literal["story_data"] = "story_data"
    raw: str
    data: dict[str, Any] | None = None

    def _get(self, key: str) -> Any:
        return self.data.get(key) if self.data else None

    @property
    def ifid(self) -> str | None:
        return self._get("ifid")

    @property
    def story_format(self) -> str | None:
        return self._get("format")

    @property
    def format_version(self) -> str | None:
        return self._get("format-version")

    @property
    def start(self) -> str | None:
        return self._get("start")


class ScriptContent(BaseModel):
    kind: Literal["script"] = "script"
    body: str


class StylesheetContent(BaseModel):
    kind: Literal["stylesheet"] = "stylesheet"
    body: str


PassageContent = Annotated[
    TwineContent | StoryTitleContent | StoryDataContent | ScriptContent | StylesheetContent,
    Field(discriminator="kind"),
]


class Passage(BaseModel):
    """A parsed passage: header, typed content, and its span in the document."""

    header: PassageHeader
    content: PassageContent
    context: Span | None = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def name(self) -> str:
        return self.header.name

    @property
    def position(self) -> Position:
        return self.header.position

    @property
    def source_text(self) -> str | None:
        return self.context.contents if self.context is not None else None

    @property
    def links(self) -> list[TwineLink]:
        match self.content:
            case TwineContent(links=links):
                return links
            case StoryTitleContent() | StoryDataContent() | ScriptContent() | StylesheetContent():
                return []

    def _map_positions(self, method: str, arg: Any) -> Passage:
        content = self.content
        match content:
            case TwineContent():
                content = getattr(content, method)(arg)
            case StoryTitleContent() | StoryDataContent() | ScriptContent() | StylesheetContent():
                pass
        header = getattr(self.header, method)(arg)
        return self.model_copy(update={"header": header, "content": content})

    def with_offset_row(self, offset: int) -> Passage:
        return self._map_positions("with_offset_row", offset)

    def with_file(self, file: str) -> Passage:
        return self._map_positions("with_file", file)


class Story(BaseModel):
    """A whole story assembled from one or more twee documents."""

    title: Passage | None = None
    data: Passage | None = None
    passages: dict[str, Passage] = {}
    scripts: list[Passage] = []
    stylesheets: list[Passage] = []

    def __len__(self) -> int:
        return len(self.passages)

    def get_passage(self, name: str) -> Passage | None:
        return self.passages.get(name)

    @property
    def title_text(self) -> str | None:
        if self.title is not None and isinstance(self.title.content, StoryTitleContent):
            return self.title.content.title
        return None

    @property
    def start_passage(self) -> Passage | None:
        """The passage named by StoryData ``start``, else one named ``Start``."""
        if self.data is not None and isinstance(self.data.content, StoryDataContent):
            start = self.data.content.start
            if start and start in self.passages:
                return self.passages[start]
        return self.passages.get("Start")

    def merge_from(self, other: Story) -> list[TweeWarning]:
        """Fold ``other`` into this story, keeping existing title/data passages.

        A second title or data passage is dropped with a warning positioned at
        the incoming passage and referring back to the kept one. Normal
        passages from ``other`` replace same-named ones silently.
        """
        warnings: list[TweeWarning] = []

        if other.title is not None:
            if self.title is None:
                self.title = other.title
            else:
                warnings.append(
                    TweeWarning(
                        kind=WarningKind.DUPLICATE_STORY_TITLE,
                        position=other.title.position,
                        referent=self.title.position,
                    )
                )

        if other.data is not None:
            if self.data is None:
                self.data = other.data
            else:
                warnings.append(
                    TweeWarning(
                        kind=WarningKind.DUPLICATE_STORY_DATA,
                        position=other.data.position,
                        referent=self.data.position,
                    )
                )

        self.passages.update(other.passages)
        self.scripts.extend(other.scripts)
        self.stylesheets.extend(other.stylesheets)
        return warnings

    def check(self) -> list[TweeWarning]:
        """Run the post-assembly consistency checks (see ``StoryValidator``)."""
        from tweeparse.parser.validator import StoryValidator

        return StoryValidator().check(self)

    def with_file(self, file: str) -> Story:
        return Story(
            title=self.title.with_file(file) if self.title else None,
            data=self.data.with_file(file) if self.data else None,
            passages={name: p.with_file(file) for name, p in self.passages.items()},
            scripts=[p.with_file(file) for p in self.scripts],
            stylesheets=[p.with_file(file) for p in self.stylesheets],
        )
