"""Tests for document splitting and story assembly."""

from __future__ import annotations

from tests.conftest import SAMPLE_STORY_TWEE, TWO_PASSAGE_TWEE
from tweeparse.context import Position
from tweeparse.models.errors import ErrorKind, ErrorList, WarningKind
from tweeparse.models.story import Story, StoryDataContent, TwineContent
from tweeparse.parser.assembler import StoryAssembler, is_header_line, split_passages


class TestSplitPassages:
    def test_header_lines(self) -> None:
        assert is_header_line(":: A")
        assert is_header_line("  :: A")
        assert not is_header_line("A :: B")
        assert not is_header_line("")

    def test_preamble_skipped(self) -> None:
        lines = ["Some preamble", "", ":: First", "body", ":: Second"]
        assert list(split_passages(lines)) == [(2, 4), (4, 5)]

    def test_no_headers(self) -> None:
        assert list(split_passages(["just", "text"])) == []

    def test_malformed_header_still_splits(self) -> None:
        lines = [":: A", "x", " :: B", "y"]
        assert list(split_passages(lines)) == [(0, 2), (2, 4)]


class TestAssemble:
    def test_two_passages(self, assembler: StoryAssembler) -> None:
        out = assembler.assemble(TWO_PASSAGE_TWEE)
        assert out.is_ok()
        assert out.warnings == []
        story = out.unwrap()
        assert set(story.passages) == {"A passage", "Another passage"}
        assert story.title_text == "Test Story"
        assert story.data is None

    def test_header_positions(self, assembler: StoryAssembler) -> None:
        story = assembler.assemble(TWO_PASSAGE_TWEE).unwrap()
        assert story.passages["A passage"].position == Position(line=1, column=1)
        assert story.passages["Another passage"].position == Position(line=7, column=1)
        assert story.title is not None
        assert story.title.position.line == 13

    def test_body_and_context(self, assembler: StoryAssembler) -> None:
        story = assembler.assemble(TWO_PASSAGE_TWEE).unwrap()
        passage = story.passages["A passage"]
        assert isinstance(passage.content, TwineContent)
        assert passage.content.body == "This\nThat\nThe Other\n\n"
        assert passage.source_text == ":: A passage\nThis\nThat\nThe Other\n\n\n"
        assert passage.context is not None
        assert passage.context.start.line == 1
        assert passage.context.end.line == 6

    def test_header_warning_is_in_document_coordinates(
        self, assembler: StoryAssembler
    ) -> None:
        text = TWO_PASSAGE_TWEE.replace(":: Another passage", r":: A\[nother passage")
        out = assembler.assemble(text)
        assert out.is_ok()
        assert len(out.warnings) == 1
        assert out.warnings[0].kind == WarningKind.ESCAPED_OPEN_SQUARE
        assert out.warnings[0].position == Position(line=7, column=5)
        assert "A[nother passage" in out.unwrap().passages

    def test_metadata_warning_is_in_document_coordinates(
        self, assembler: StoryAssembler
    ) -> None:
        out = assembler.assemble(':: A\n:: B {"x": }')
        assert out.is_ok()
        assert [w.kind for w in out.warnings] == [WarningKind.JSON_ERROR]
        assert out.warnings[0].position == Position(line=2, column=12)

    def test_link_positions(self, sample_story: Story) -> None:
        start = sample_story.passages["Start"]
        assert [link.target for link in start.links] == ["Left", "Right"]
        assert start.links[0].position == Position(line=13, column=31)
        assert sample_story.passages["Right"].links[0].position == Position(line=19, column=19)

    def test_sample_story_slots(self, sample_story: Story) -> None:
        assert sample_story.title_text == "The Overgrown Path"
        assert len(sample_story) == 3
        assert [p.name for p in sample_story.scripts] == ["Story JavaScript"]
        assert [p.name for p in sample_story.stylesheets] == ["Story Stylesheet"]
        assert sample_story.stylesheets[0].content.body.startswith("body { color: black; }")

    def test_sample_story_data(self, sample_story: Story) -> None:
        assert sample_story.data is not None
        content = sample_story.data.content
        assert isinstance(content, StoryDataContent)
        assert content.ifid == "D674C58C-DEFA-4F70-B7A2-27742230C0FC"
        assert content.story_format == "SugarCube"
        assert content.format_version == "2.36.1"
        assert sample_story.start_passage is not None
        assert sample_story.start_passage.name == "Start"

    def test_header_metadata_and_tags(self, sample_story: Story) -> None:
        header = sample_story.passages["Start"].header
        assert header.tags == ["intro"]
        assert header.metadata == {"position": "100,200", "size": "100,100"}

    def test_failed_chunk_does_not_stop_parsing(self, assembler: StoryAssembler) -> None:
        text = "\n".join(
            [
                ":: Good",
                "Text [[oops",
                ":: Broken [tag",
                "body",
                r":: Es\]caped",
            ]
        )
        out = assembler.assemble(text)
        assert out.is_err()
        errors = out.errors
        assert isinstance(errors, ErrorList)
        assert [(e.kind, e.position.line, e.position.column) for e in errors] == [
            (ErrorKind.UNCLOSED_TAG_BLOCK, 3, 11)
        ]
        assert [(w.kind, w.position.line, w.position.column) for w in out.warnings] == [
            (WarningKind.UNCLOSED_LINK, 2, 6),
            (WarningKind.ESCAPED_CLOSE_SQUARE, 5, 6),
        ]

    def test_errors_from_every_chunk(self, assembler: StoryAssembler) -> None:
        out = assembler.assemble(":: \nx\n  :: Indented\ny\n:: Fine")
        assert out.errors is not None
        assert [(e.kind, e.position.line) for e in out.errors] == [
            (ErrorKind.EMPTY_NAME, 1),
            (ErrorKind.LEADING_WHITESPACE, 3),
        ]

    def test_duplicate_title_in_document(self, assembler: StoryAssembler) -> None:
        out = assembler.assemble(":: StoryTitle\nOne\n:: StoryTitle\nTwo")
        story = out.unwrap()
        assert story.title_text == "One"
        assert len(out.warnings) == 1
        warning = out.warnings[0]
        assert warning.kind == WarningKind.DUPLICATE_STORY_TITLE
        assert warning.position.line == 3
        assert warning.referent is not None and warning.referent.line == 1

    def test_duplicate_data_in_document(self, assembler: StoryAssembler) -> None:
        out = assembler.assemble(':: StoryData\n{"ifid": "1"}\n:: StoryData\n{"ifid": "2"}')
        assert [w.kind for w in out.warnings] == [WarningKind.DUPLICATE_STORY_DATA]
        assert out.unwrap().data.content.ifid == "1"  # type: ignore[union-attr]

    def test_same_name_overwrites_silently(self, assembler: StoryAssembler) -> None:
        out = assembler.assemble(":: A\nfirst\n:: A\nsecond")
        assert out.warnings == []
        passage = out.unwrap().passages["A"]
        assert passage.content.body == "second"  # type: ignore[union-attr]
        assert passage.position.line == 3

    def test_empty_document(self, assembler: StoryAssembler) -> None:
        out = assembler.assemble("")
        assert out.is_ok()
        assert len(out.unwrap()) == 0

    def test_file_name_reaches_context(self, assembler: StoryAssembler) -> None:
        story = assembler.assemble(":: A\nx", file_name="a.twee").unwrap()
        assert story.passages["A"].context is not None
        assert story.passages["A"].context.file_name == "a.twee"

    def test_check_reports_dead_link(self, assembler: StoryAssembler) -> None:
        text = ":: StoryTitle\nT\n\n:: Start\nThis has dead link to [[Dead link]]\n"
        story = assembler.assemble(text).unwrap()
        warnings = story.check()
        assert [w.kind for w in warnings] == [
            WarningKind.MISSING_STORY_DATA,
            WarningKind.DEAD_LINK,
        ]
        assert warnings[1].position == Position(line=5, column=23)
        assert warnings[1].detail == "Dead link"
