from __future__ import annotations

from datetime import date
import json
from uuid import UUID

import pytest

from jsonbook.models import (
    BOLD_WEIGHT,
    Annotation,
    Author,
    BaselineShift,
    Book,
    Chapter,
    Cite,
    Date,
    EmptyLine,
    Epigraph,
    FontStyle,
    Footnote,
    FootnoteKind,
    FootnoteLink,
    Footnotes,
    Image,
    InlineImage,
    Link,
    LocalHref,
    Paragraph,
    Poem,
    RemoteHref,
    Stanza,
    Subtitle,
    Table,
    TableCell,
    TableRow,
    Text,
    TextDecoration,
    Title,
)
from jsonbook.serialization import DecodeError, book_from_dict, book_to_dict, dumps, loads

BOOK_ID = UUID("66666666-6666-6666-6666-666666666666")
IMG_ID = UUID("77777777-7777-7777-7777-777777777777")
NIL = UUID(int=0)


def _rich_book() -> Book:
    styled = Text(
        "styled",
        font_weight=BOLD_WEIGHT,
        font_style=frozenset({FontStyle.CODE, FontStyle.ITALIC}),
        decorations=frozenset({TextDecoration.LINE_THROUGH}),
        baseline_shift=BaselineShift.SUPERSCRIPT,
    )
    paragraph = Paragraph(
        anchor="p1",
        content=[
            Text("plain"),
            styled,
            FootnoteLink(id="n1", kind=FootnoteKind.NOTE, content=[Text("1")]),
            Link(href=RemoteHref("https://example.com"), content=[Text("site")]),
            Link(href=LocalHref("ch2"), content=[Text("next")]),
            InlineImage(id=IMG_ID, alt="icon"),
        ],
    )
    title = Title(content=[Paragraph(content=[Text("Title")]), EmptyLine()])
    poem = Poem(
        content=[Subtitle(content=[Text("I")]), Stanza(content=[Paragraph(content=[Text("line")])], title=title)],
        epigraphs=[Epigraph(content=[Paragraph(content=[Text("motto")])])],
        authors=[Paragraph(content=[Text("Poet")])],
    )
    table = Table(
        rows=[TableRow(cells=[TableCell(content=[Text("a")], anchor="c1"), TableCell()])],
        header_row=True,
    )
    chapter = Chapter(
        anchor="ch1",
        title=title,
        annotation=Annotation(content=[Paragraph(content=[Text("about")])], anchor="ann"),
        cover=Image(id=IMG_ID, anchor="img", alt="alt", title="caption"),
        content=[paragraph, poem, Cite(content=[EmptyLine()], authors=[Paragraph(content=[Text("x")])]), table, EmptyLine()],
        sub_chapters=[Chapter(content=[Image(id=IMG_ID)])],
    )
    return Book(
        id=BOOK_ID,
        short_title="Book",
        language="ru",
        date=Date(iso_date=date(1935, 1, 1), display_date="1935"),
        authors=[Author(id=NIL, full_name="Anton Makarenko", given_name="Anton", family_name="Makarenko")],
        cover=InlineImage(id=IMG_ID),
        title=title,
        epigraphs=[Epigraph(content=[Paragraph(content=[Text("motto")])], authors=[Paragraph(content=[Text("me")])])],
        notes=Footnotes(content={"n1": Footnote(content=[Paragraph(content=[Text("note")])], title=title)}),
        comments=Footnotes(content={"c1": Footnote(content=[EmptyLine()])}),
        chapters=[chapter],
    )


def test_reserialization_is_byte_identical() -> None:
    first = dumps(_rich_book())
    second = dumps(loads(first))

    assert first == second


def test_decoding_restores_the_same_tree() -> None:
    book = _rich_book()

    assert book_from_dict(book_to_dict(book)) == book


def test_empty_book_omits_optional_fields_but_keeps_chapters() -> None:
    data = book_to_dict(Book(id=BOOK_ID, short_title="Empty"))

    assert data == {
        "id": str(BOOK_ID),
        "short_title": "Empty",
        "date": {},
        "authors": [],
        "chapters": [],
    }


def test_union_members_are_externally_tagged() -> None:
    data = book_to_dict(_rich_book())
    chapter = data["chapters"][0]
    paragraph = chapter["content"][0]["Paragraph"]

    assert chapter["content"][-1] == "EmptyLine"
    assert paragraph["anchor"] == "p1"
    assert paragraph["content"][0] == {"Text": {"value": "plain"}}
    assert paragraph["content"][1] == {
        "Text": {
            "font_weight": 600,
            "font_style": ["Code", "Italic"],
            "decorations": ["LineThrough"],
            "baseline_shift": "Superscript",
            "value": "styled",
        }
    }
    assert paragraph["content"][2] == {"Footnote": {"id": "n1", "type": "Note", "content": [{"Text": {"value": "1"}}]}}
    assert paragraph["content"][3]["Link"]["href"] == {"Remote": "https://example.com"}
    assert paragraph["content"][4]["Link"]["href"] == {"Local": "ch2"}
    assert paragraph["content"][5] == {"Image": {"id": str(IMG_ID), "alt": "icon"}}
    assert chapter["content"][3]["Table"]["rows"][0]["cells"][1] == {"content": []}
    assert chapter["sub_chapters"][0] == {"content": [{"Image": {"id": str(IMG_ID)}}], "sub_chapters": []}


def test_dates_and_footnotes_layout() -> None:
    data = book_to_dict(_rich_book())

    assert data["date"] == {"iso_date": "1935-01-01", "display_date": "1935"}
    assert list(data["notes"]["content"]) == ["n1"]
    assert data["comments"] == {"content": {"c1": {"content": ["EmptyLine"]}}}


def test_dumps_keeps_non_ascii_text() -> None:
    payload = dumps(Book(id=BOOK_ID, short_title="Поэма"), indent=None)

    assert "Поэма" in payload
    assert json.loads(payload)["short_title"] == "Поэма"


def test_loads_rejects_malformed_documents() -> None:
    with pytest.raises(DecodeError, match="Invalid JSON"):
        loads("{not json")

    with pytest.raises(DecodeError, match="short_title"):
        loads(json.dumps({"id": str(BOOK_ID), "date": {}, "authors": [], "chapters": []}))

    with pytest.raises(DecodeError, match="Unknown block variant"):
        book_from_dict(
            {
                "id": str(BOOK_ID),
                "short_title": "x",
                "date": {},
                "authors": [],
                "chapters": [{"content": [{"Video": {}}], "sub_chapters": []}],
            }
        )
