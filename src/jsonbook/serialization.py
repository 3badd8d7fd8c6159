"""JSON encoding of the canonical book tree.

Union members are externally tagged (``{"Paragraph": {...}}``, ``"EmptyLine"``).
Optional fields are omitted when absent and omittable collections when empty,
so ``dumps(loads(dumps(book))) == dumps(book)``.
"""

from __future__ import annotations

from datetime import date
import json
from typing import Any, Callable
from uuid import UUID

from jsonbook.models import (
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
    Href,
    Image,
    InlineImage,
    Link,
    LocalHref,
    Paragraph,
    Poem,
    RemoteHref,
    Span,
    Stanza,
    Subtitle,
    Table,
    TableCell,
    TableRow,
    Text,
    TextDecoration,
    Title,
)

_EMPTY_LINE = "EmptyLine"


class DecodeError(ValueError):
    """Raised when a JSON document does not match the book layout."""


def _put(data: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        data[key] = value


def _put_list(data: dict[str, Any], key: str, values: list[Any]) -> None:
    if values:
        data[key] = values


# --- encoding -------------------------------------------------------------


def _text_to_dict(text: Text) -> dict[str, Any]:
    data: dict[str, Any] = {}
    _put(data, "font_weight", text.font_weight)
    _put_list(data, "font_style", sorted(style.value for style in text.font_style))
    _put_list(data, "decorations", sorted(decoration.value for decoration in text.decorations))
    _put(data, "baseline_shift", text.baseline_shift.value if text.baseline_shift is not None else None)
    data["value"] = text.value
    return data


def _href_to_dict(href: Href) -> dict[str, str]:
    if isinstance(href, LocalHref):
        return {"Local": href.anchor}
    return {"Remote": href.url}


def _inline_image_to_dict(image: InlineImage) -> dict[str, Any]:
    data: dict[str, Any] = {"id": str(image.id)}
    _put(data, "alt", image.alt)
    return data


def _span_to_dict(span: Span) -> dict[str, Any]:
    if isinstance(span, Text):
        return {"Text": _text_to_dict(span)}
    if isinstance(span, InlineImage):
        return {"Image": _inline_image_to_dict(span)}
    if isinstance(span, Link):
        return {"Link": {"href": _href_to_dict(span.href), "content": [_text_to_dict(t) for t in span.content]}}
    if isinstance(span, FootnoteLink):
        return {
            "Footnote": {
                "id": span.id,
                "type": span.kind.value,
                "content": [_text_to_dict(t) for t in span.content],
            }
        }
    raise TypeError(f"Unsupported span: {type(span).__name__}")


def _paragraph_to_dict(paragraph: Paragraph | Subtitle) -> dict[str, Any]:
    data: dict[str, Any] = {}
    _put(data, "anchor", paragraph.anchor)
    data["content"] = [_span_to_dict(span) for span in paragraph.content]
    return data


def _image_to_dict(image: Image) -> dict[str, Any]:
    data: dict[str, Any] = {"id": str(image.id)}
    _put(data, "anchor", image.anchor)
    _put(data, "alt", image.alt)
    _put(data, "title", image.title)
    return data


def _table_to_dict(table: Table) -> dict[str, Any]:
    data: dict[str, Any] = {}
    _put(data, "anchor", table.anchor)
    data["header_column"] = table.header_column
    data["header_row"] = table.header_row
    data["rows"] = [{"cells": [_cell_to_dict(cell) for cell in row.cells]} for row in table.rows]
    return data


def _cell_to_dict(cell: TableCell) -> dict[str, Any]:
    data: dict[str, Any] = {}
    _put(data, "anchor", cell.anchor)
    data["content"] = [_span_to_dict(span) for span in cell.content]
    return data


def _title_to_dict(title: Title | None) -> dict[str, Any] | None:
    if title is None:
        return None
    return {"content": [_element_to_json(element) for element in title.content]}


def _stanza_to_dict(stanza: Stanza) -> dict[str, Any]:
    data: dict[str, Any] = {}
    _put(data, "title", _title_to_dict(stanza.title))
    _put(data, "subtitle", _paragraph_to_dict(stanza.subtitle) if stanza.subtitle is not None else None)
    data["content"] = [_paragraph_to_dict(line) for line in stanza.content]
    return data


def _poem_to_dict(poem: Poem) -> dict[str, Any]:
    data: dict[str, Any] = {}
    _put(data, "anchor", poem.anchor)
    _put(data, "title", _title_to_dict(poem.title))
    _put_list(data, "epigraphs", [_epigraph_to_dict(e) for e in poem.epigraphs])
    _put_list(data, "authors", [_paragraph_to_dict(a) for a in poem.authors])
    data["content"] = [_element_to_json(element) for element in poem.content]
    return data


def _cite_to_dict(cite: Cite) -> dict[str, Any]:
    data: dict[str, Any] = {}
    _put(data, "anchor", cite.anchor)
    _put_list(data, "authors", [_paragraph_to_dict(a) for a in cite.authors])
    data["content"] = [_element_to_json(element) for element in cite.content]
    return data


def _epigraph_to_dict(epigraph: Epigraph) -> dict[str, Any]:
    data: dict[str, Any] = {}
    _put(data, "anchor", epigraph.anchor)
    _put_list(data, "authors", [_paragraph_to_dict(a) for a in epigraph.authors])
    data["content"] = [_element_to_json(element) for element in epigraph.content]
    return data


def _annotation_to_dict(annotation: Annotation | None) -> dict[str, Any] | None:
    if annotation is None:
        return None
    data: dict[str, Any] = {}
    _put(data, "anchor", annotation.anchor)
    data["content"] = [_element_to_json(element) for element in annotation.content]
    return data


_ELEMENT_ENCODERS: dict[type, tuple[str, Callable[[Any], dict[str, Any]]]] = {
    Paragraph: ("Paragraph", _paragraph_to_dict),
    Subtitle: ("Subtitle", _paragraph_to_dict),
    Poem: ("Poem", _poem_to_dict),
    Stanza: ("Stanza", _stanza_to_dict),
    Cite: ("Cite", _cite_to_dict),
    Table: ("Table", _table_to_dict),
    Image: ("Image", _image_to_dict),
}


def _element_to_json(element: Any) -> str | dict[str, Any]:
    if isinstance(element, EmptyLine):
        return _EMPTY_LINE
    encoder = _ELEMENT_ENCODERS.get(type(element))
    if encoder is None:
        raise TypeError(f"Unsupported block element: {type(element).__name__}")
    tag, encode = encoder
    return {tag: encode(element)}


def _chapter_to_dict(chapter: Chapter) -> dict[str, Any]:
    data: dict[str, Any] = {}
    _put(data, "anchor", chapter.anchor)
    _put(data, "title", _title_to_dict(chapter.title))
    _put(data, "annotation", _annotation_to_dict(chapter.annotation))
    _put(data, "cover", _image_to_dict(chapter.cover) if chapter.cover is not None else None)
    _put_list(data, "epigraphs", [_epigraph_to_dict(e) for e in chapter.epigraphs])
    data["content"] = [_element_to_json(element) for element in chapter.content]
    data["sub_chapters"] = [_chapter_to_dict(sub) for sub in chapter.sub_chapters]
    return data


def _footnotes_to_dict(footnotes: Footnotes | None) -> dict[str, Any] | None:
    if footnotes is None:
        return None
    data: dict[str, Any] = {}
    _put(data, "title", _title_to_dict(footnotes.title))
    content: dict[str, Any] = {}
    for key, footnote in footnotes.content.items():
        entry: dict[str, Any] = {}
        _put(entry, "title", _title_to_dict(footnote.title))
        entry["content"] = [_element_to_json(element) for element in footnote.content]
        content[key] = entry
    data["content"] = content
    return data


def _author_to_dict(author: Author) -> dict[str, Any]:
    data: dict[str, Any] = {"id": str(author.id), "full_name": author.full_name}
    _put(data, "given_name", author.given_name)
    _put(data, "family_name", author.family_name)
    _put(data, "middle_name", author.middle_name)
    return data


def _date_to_dict(value: Date) -> dict[str, Any]:
    data: dict[str, Any] = {}
    _put(data, "iso_date", value.iso_date.isoformat() if value.iso_date is not None else None)
    _put(data, "display_date", value.display_date)
    return data


def book_to_dict(book: Book) -> dict[str, Any]:
    """Encode *book* into plain JSON-compatible data."""

    data: dict[str, Any] = {"id": str(book.id)}
    _put(data, "language", book.language)
    data["short_title"] = book.short_title
    data["date"] = _date_to_dict(book.date)
    data["authors"] = [_author_to_dict(author) for author in book.authors]
    _put(data, "cover", _inline_image_to_dict(book.cover) if book.cover is not None else None)
    _put(data, "annotation", _annotation_to_dict(book.annotation))
    _put(data, "title", _title_to_dict(book.title))
    _put_list(data, "epigraphs", [_epigraph_to_dict(e) for e in book.epigraphs])
    _put(data, "notes", _footnotes_to_dict(book.notes))
    _put(data, "comments", _footnotes_to_dict(book.comments))
    data["chapters"] = [_chapter_to_dict(chapter) for chapter in book.chapters]
    return data


def dumps(book: Book, *, indent: int | None = 2) -> str:
    return json.dumps(book_to_dict(book), ensure_ascii=False, indent=indent)


# --- decoding -------------------------------------------------------------


def _require(data: dict[str, Any], key: str) -> Any:
    try:
        return data[key]
    except (KeyError, TypeError) as exc:
        raise DecodeError(f"Missing required field: {key}") from exc


def _uuid(raw: Any) -> UUID:
    try:
        return UUID(raw)
    except (TypeError, ValueError, AttributeError) as exc:
        raise DecodeError(f"Invalid UUID: {raw!r}") from exc


def _text_from_dict(data: dict[str, Any]) -> Text:
    baseline_shift = data.get("baseline_shift")
    return Text(
        value=_require(data, "value"),
        font_weight=data.get("font_weight"),
        font_style=frozenset(FontStyle(style) for style in data.get("font_style", [])),
        decorations=frozenset(TextDecoration(item) for item in data.get("decorations", [])),
        baseline_shift=BaselineShift(baseline_shift) if baseline_shift is not None else None,
    )


def _href_from_dict(data: dict[str, str]) -> Href:
    if "Local" in data:
        return LocalHref(data["Local"])
    if "Remote" in data:
        return RemoteHref(data["Remote"])
    raise DecodeError(f"Unknown href variant: {sorted(data)}")


def _inline_image_from_dict(data: dict[str, Any]) -> InlineImage:
    return InlineImage(id=_uuid(_require(data, "id")), alt=data.get("alt"))


def _span_from_json(raw: dict[str, Any]) -> Span:
    tag, data = _single_tag(raw)
    if tag == "Text":
        return _text_from_dict(data)
    if tag == "Image":
        return _inline_image_from_dict(data)
    if tag == "Link":
        return Link(
            href=_href_from_dict(_require(data, "href")),
            content=[_text_from_dict(t) for t in _require(data, "content")],
        )
    if tag == "Footnote":
        return FootnoteLink(
            id=_require(data, "id"),
            kind=FootnoteKind(_require(data, "type")),
            content=[_text_from_dict(t) for t in _require(data, "content")],
        )
    raise DecodeError(f"Unknown span variant: {tag}")


def _single_tag(raw: Any) -> tuple[str, Any]:
    if not isinstance(raw, dict) or len(raw) != 1:
        raise DecodeError(f"Expected a single-key tagged object, got {raw!r}")
    return next(iter(raw.items()))


def _spans(data: dict[str, Any]) -> list[Span]:
    return [_span_from_json(span) for span in _require(data, "content")]


def _paragraph_from_dict(data: dict[str, Any]) -> Paragraph:
    return Paragraph(content=_spans(data), anchor=data.get("anchor"))


def _subtitle_from_dict(data: dict[str, Any]) -> Subtitle:
    return Subtitle(content=_spans(data), anchor=data.get("anchor"))


def _image_from_dict(data: dict[str, Any]) -> Image:
    return Image(
        id=_uuid(_require(data, "id")),
        anchor=data.get("anchor"),
        alt=data.get("alt"),
        title=data.get("title"),
    )


def _table_from_dict(data: dict[str, Any]) -> Table:
    rows = [
        TableRow(cells=[TableCell(content=_spans(cell), anchor=cell.get("anchor")) for cell in _require(row, "cells")])
        for row in _require(data, "rows")
    ]
    return Table(
        rows=rows,
        header_row=bool(_require(data, "header_row")),
        header_column=bool(_require(data, "header_column")),
        anchor=data.get("anchor"),
    )


def _title_from_dict(data: dict[str, Any] | None) -> Title | None:
    if data is None:
        return None
    return Title(content=_elements(data))


def _stanza_from_dict(data: dict[str, Any]) -> Stanza:
    subtitle = data.get("subtitle")
    return Stanza(
        content=[_paragraph_from_dict(line) for line in _require(data, "content")],
        title=_title_from_dict(data.get("title")),
        subtitle=_paragraph_from_dict(subtitle) if subtitle is not None else None,
    )


def _authors(data: dict[str, Any]) -> list[Paragraph]:
    return [_paragraph_from_dict(author) for author in data.get("authors", [])]


def _poem_from_dict(data: dict[str, Any]) -> Poem:
    return Poem(
        content=_elements(data),
        anchor=data.get("anchor"),
        title=_title_from_dict(data.get("title")),
        epigraphs=[_epigraph_from_dict(e) for e in data.get("epigraphs", [])],
        authors=_authors(data),
    )


def _cite_from_dict(data: dict[str, Any]) -> Cite:
    return Cite(content=_elements(data), anchor=data.get("anchor"), authors=_authors(data))


def _epigraph_from_dict(data: dict[str, Any]) -> Epigraph:
    return Epigraph(content=_elements(data), anchor=data.get("anchor"), authors=_authors(data))


def _annotation_from_dict(data: dict[str, Any] | None) -> Annotation | None:
    if data is None:
        return None
    return Annotation(content=_elements(data), anchor=data.get("anchor"))


_ELEMENT_DECODERS: dict[str, Callable[[dict[str, Any]], Any]] = {
    "Paragraph": _paragraph_from_dict,
    "Subtitle": _subtitle_from_dict,
    "Poem": _poem_from_dict,
    "Stanza": _stanza_from_dict,
    "Cite": _cite_from_dict,
    "Table": _table_from_dict,
    "Image": _image_from_dict,
}


def _element_from_json(raw: Any) -> Any:
    if raw == _EMPTY_LINE:
        return EmptyLine()
    tag, data = _single_tag(raw)
    decoder = _ELEMENT_DECODERS.get(tag)
    if decoder is None:
        raise DecodeError(f"Unknown block variant: {tag}")
    return decoder(data)


def _elements(data: dict[str, Any]) -> list[Any]:
    return [_element_from_json(element) for element in _require(data, "content")]


def _chapter_from_dict(data: dict[str, Any]) -> Chapter:
    cover = data.get("cover")
    return Chapter(
        content=_elements(data),
        sub_chapters=[_chapter_from_dict(sub) for sub in _require(data, "sub_chapters")],
        anchor=data.get("anchor"),
        title=_title_from_dict(data.get("title")),
        annotation=_annotation_from_dict(data.get("annotation")),
        cover=_image_from_dict(cover) if cover is not None else None,
        epigraphs=[_epigraph_from_dict(e) for e in data.get("epigraphs", [])],
    )


def _footnotes_from_dict(data: dict[str, Any] | None) -> Footnotes | None:
    if data is None:
        return None
    content = {
        key: Footnote(content=_elements(entry), title=_title_from_dict(entry.get("title")))
        for key, entry in _require(data, "content").items()
    }
    return Footnotes(content=content, title=_title_from_dict(data.get("title")))


def _author_from_dict(data: dict[str, Any]) -> Author:
    return Author(
        id=_uuid(_require(data, "id")),
        full_name=_require(data, "full_name"),
        given_name=data.get("given_name"),
        family_name=data.get("family_name"),
        middle_name=data.get("middle_name"),
    )


def _date_from_dict(data: dict[str, Any]) -> Date:
    raw_iso = data.get("iso_date")
    try:
        iso_date = date.fromisoformat(raw_iso) if raw_iso is not None else None
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Invalid ISO date: {raw_iso!r}") from exc
    return Date(iso_date=iso_date, display_date=data.get("display_date"))


def book_from_dict(data: dict[str, Any]) -> Book:
    """Decode data produced by :func:`book_to_dict`."""

    cover = data.get("cover")
    return Book(
        id=_uuid(_require(data, "id")),
        short_title=_require(data, "short_title"),
        date=_date_from_dict(_require(data, "date")),
        authors=[_author_from_dict(author) for author in _require(data, "authors")],
        language=data.get("language"),
        cover=_inline_image_from_dict(cover) if cover is not None else None,
        annotation=_annotation_from_dict(data.get("annotation")),
        title=_title_from_dict(data.get("title")),
        epigraphs=[_epigraph_from_dict(e) for e in data.get("epigraphs", [])],
        notes=_footnotes_from_dict(data.get("notes")),
        comments=_footnotes_from_dict(data.get("comments")),
        chapters=[_chapter_from_dict(chapter) for chapter in _require(data, "chapters")],
    )


def loads(payload: str | bytes) -> Book:
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Invalid JSON: {exc}") from exc
    return book_from_dict(data)
