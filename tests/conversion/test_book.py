from __future__ import annotations

from uuid import UUID

import pytest

from jsonbook.conversion import book_from_fb2, build_binary_ids
from jsonbook.conversion.context import ConversionContext
from jsonbook.fb2 import models as fb2
from jsonbook.models import BOLD_WEIGHT, FootnoteKind, FootnoteLink, Link, LocalHref, Paragraph, Text

BOOK_ID = UUID("44444444-4444-4444-4444-444444444444")
COVER_ID = UUID("55555555-5555-5555-5555-555555555555")


def _para(*elements: fb2.StyleElement) -> fb2.Paragraph:
    return fb2.Paragraph(elements=list(elements))


def _section(section_id: str | None, *parts: fb2.SectionPart) -> fb2.Section:
    return fb2.Section(id=section_id, content=fb2.SectionContent(content=list(parts)))


def _title_info(**overrides) -> fb2.TitleInfo:
    params = {
        "book_title": "Pedagogical Poem",
        "authors": [fb2.VerboseAuthor(first_name="Anton", last_name="Makarenko")],
        "lang": "ru",
    }
    params.update(overrides)
    return fb2.TitleInfo(**params)


def _source(bodies: list[fb2.Body], **title_overrides) -> fb2.FictionBook:
    return fb2.FictionBook(
        description=fb2.Description(title_info=_title_info(**title_overrides)),
        bodies=bodies,
        binaries=[fb2.Binary(id="cover.jpg", content_type="image/jpeg", data=b"\xff\xd8")],
    )


def test_document_without_bodies_converts_to_empty_book() -> None:
    book = book_from_fb2(_source([]), BOOK_ID, {})

    assert book.id == BOOK_ID
    assert book.short_title == "Pedagogical Poem"
    assert book.language == "ru"
    assert book.chapters == []
    assert book.title is None
    assert book.epigraphs == []
    assert book.notes is None
    assert book.comments is None


def test_links_are_classified_against_notes_and_comments() -> None:
    main = fb2.Body(
        sections=[
            _section(
                "ch1",
                _para(
                    "Text",
                    fb2.Link(href="#n1", kind="note", elements=["1"]),
                    fb2.Link(href="#c1", elements=["*"]),
                    fb2.Link(href="#ch2", elements=["next"]),
                ),
            )
        ]
    )
    notes = fb2.Body(name="notes", sections=[_section("n1", _para("A note", fb2.Link(href="#n1", elements=["self"])))])
    comments = fb2.Body(name="comments", sections=[_section("c1", _para("A comment"))])

    book = book_from_fb2(_source([notes, main, comments]), BOOK_ID, {})

    [chapter] = book.chapters
    [paragraph] = chapter.content
    assert paragraph == Paragraph(
        content=[
            Text("Text"),
            FootnoteLink(id="n1", kind=FootnoteKind.NOTE, content=[Text("1")]),
            FootnoteLink(id="c1", kind=FootnoteKind.COMMENT, content=[Text("*")]),
            Link(href=LocalHref("ch2"), content=[Text("next")]),
        ]
    )
    assert book.notes is not None and list(book.notes.content) == ["n1"]
    assert book.comments is not None and list(book.comments.content) == ["c1"]
    # Footnote bodies are converted before any note keys are known.
    [note_paragraph] = book.notes.content["n1"].content
    assert note_paragraph.content[-1] == Link(href=LocalHref("n1"), content=[Text("self")])


def test_only_first_body_of_each_name_is_used() -> None:
    first = fb2.Body(sections=[_section("a", _para("first"))])
    second = fb2.Body(sections=[_section("b", _para("second"))])
    notes_first = fb2.Body(name="notes", sections=[_section("n1", _para("one"))])
    notes_second = fb2.Body(name="notes", sections=[_section("n2", _para("two"))])

    book = book_from_fb2(_source([first, notes_first, second, notes_second]), BOOK_ID, {})

    assert [chapter.anchor for chapter in book.chapters] == ["a"]
    assert book.notes is not None and list(book.notes.content) == ["n1"]


def test_unnamed_main_body_metadata_and_language_override() -> None:
    main = fb2.Body(
        lang="en",
        title=fb2.Title(elements=[_para("Book Title")]),
        epigraphs=[fb2.Epigraph(elements=[_para("")]), fb2.Epigraph(elements=[_para("Motto")])],
        sections=[_section("empty", _para(""))],
    )

    book = book_from_fb2(_source([main]), BOOK_ID, {})

    assert book.language == "en"
    assert book.title is not None
    assert len(book.epigraphs) == 1
    assert book.chapters == []


def test_cover_annotation_and_authors_come_from_title_info() -> None:
    source = _source(
        [],
        lang="??",
        cover_page=fb2.CoverPage(images=[fb2.InlineImage(href="#cover.jpg")]),
        annotation=fb2.Annotation(elements=[_para("About")]),
        authors=[fb2.AnonymousAuthor(), fb2.AnonymousAuthor(nickname="Anon")],
    )

    book = book_from_fb2(source, BOOK_ID, {"cover.jpg": COVER_ID})

    assert book.language is None
    assert book.cover is not None and book.cover.id == COVER_ID
    assert book.annotation is not None
    assert [author.full_name for author in book.authors] == ["Anon"]


def test_title_info_annotation_without_content_is_omitted() -> None:
    source = _source([], annotation=fb2.Annotation(id="about", elements=[_para(""), _para("")]))

    book = book_from_fb2(source, BOOK_ID, {})

    assert book.annotation is None


def test_deeply_nested_inline_markup_is_bounded(caplog: pytest.LogCaptureFixture) -> None:
    node: fb2.StyleElement = "deep"
    for _ in range(1200):
        node = fb2.Strong(elements=[node])
    main = fb2.Body(sections=[_section("ch1", _para(node))])

    book = book_from_fb2(_source([main]), BOOK_ID, {}, max_inline_depth=32)

    [chapter] = book.chapters
    assert chapter.content == [Paragraph(content=[Text("deep", font_weight=BOLD_WEIGHT)])]
    assert "nested deeper than 32" in caplog.text


def test_build_binary_ids_assigns_unique_ids_per_binary() -> None:
    source = fb2.FictionBook(binaries=[fb2.Binary(id="a.png"), fb2.Binary(id="b.png"), fb2.Binary(id="")])

    binary_ids = build_binary_ids(source)

    assert sorted(binary_ids) == ["a.png", "b.png"]
    assert binary_ids["a.png"] != binary_ids["b.png"]


def test_context_answers_lookup_queries() -> None:
    ctx = ConversionContext(binaries={"a.png": COVER_ID}, notes=frozenset({"n"}), comments=frozenset({"c"}))

    assert ctx.is_binary("a.png") and not ctx.is_binary("n")
    assert ctx.is_note("n") and not ctx.is_note("c")
    assert ctx.is_comment("c") and not ctx.is_comment("n")
    assert ctx.binary_id("a.png") == COVER_ID
    assert ctx.binary_id(None) is None
