"""In-memory FictionBook 2 document, as produced by :mod:`jsonbook.fb2.reader`."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class CellKind(Enum):
    HEAD = "th"
    DATA = "td"


@dataclass(slots=True)
class InlineImage:
    href: str | None = None
    alt: str | None = None


@dataclass(slots=True)
class Strong:
    elements: list = field(default_factory=list)


@dataclass(slots=True)
class Emphasis:
    elements: list = field(default_factory=list)


@dataclass(slots=True)
class Style:
    name: str | None = None
    elements: list = field(default_factory=list)


@dataclass(slots=True)
class Strikethrough:
    elements: list = field(default_factory=list)


@dataclass(slots=True)
class Subscript:
    elements: list = field(default_factory=list)


@dataclass(slots=True)
class Superscript:
    elements: list = field(default_factory=list)


@dataclass(slots=True)
class Code:
    elements: list = field(default_factory=list)


@dataclass(slots=True)
class Link:
    """``<a>`` element; its children never contain another link."""

    href: str | None = None
    kind: str | None = None
    elements: list = field(default_factory=list)


StyleWrapper = Strong | Emphasis | Style | Strikethrough | Subscript | Superscript | Code
# Inline content: str runs, InlineImage, style wrappers and Link.
StyleElement = str | InlineImage | StyleWrapper | Link
# Inline content allowed inside a Link.
StyleLinkElement = str | InlineImage | StyleWrapper


@dataclass(slots=True)
class Paragraph:
    id: str | None = None
    elements: list[StyleElement] = field(default_factory=list)


@dataclass(slots=True)
class Subtitle:
    id: str | None = None
    elements: list[StyleElement] = field(default_factory=list)


@dataclass(slots=True)
class EmptyLine:
    pass


@dataclass(slots=True)
class Image:
    href: str | None = None
    id: str | None = None
    alt: str | None = None
    title: str | None = None


@dataclass(slots=True)
class TableCell:
    kind: CellKind = CellKind.DATA
    id: str | None = None
    elements: list[StyleElement] = field(default_factory=list)


@dataclass(slots=True)
class TableRow:
    cells: list[TableCell] = field(default_factory=list)


@dataclass(slots=True)
class Table:
    id: str | None = None
    rows: list[TableRow] = field(default_factory=list)


@dataclass(slots=True)
class Title:
    # Paragraph | EmptyLine
    elements: list = field(default_factory=list)


@dataclass(slots=True)
class Stanza:
    title: Title | None = None
    subtitle: Subtitle | None = None
    lines: list[Paragraph] = field(default_factory=list)


@dataclass(slots=True)
class Poem:
    id: str | None = None
    title: Title | None = None
    epigraphs: list[Epigraph] = field(default_factory=list)
    # Subtitle | Stanza
    stanzas: list = field(default_factory=list)
    text_authors: list[Paragraph] = field(default_factory=list)


@dataclass(slots=True)
class Cite:
    id: str | None = None
    # Paragraph | Poem | Subtitle | Table | EmptyLine
    elements: list = field(default_factory=list)
    text_authors: list[Paragraph] = field(default_factory=list)


@dataclass(slots=True)
class Epigraph:
    id: str | None = None
    # Paragraph | Poem | Cite | EmptyLine
    elements: list = field(default_factory=list)
    text_authors: list[Paragraph] = field(default_factory=list)


@dataclass(slots=True)
class Annotation:
    id: str | None = None
    # Paragraph | Poem | Cite | Subtitle | Table | EmptyLine
    elements: list = field(default_factory=list)


SectionPart = Paragraph | Poem | Subtitle | Cite | Table | Image | EmptyLine


@dataclass(slots=True)
class SectionContent:
    title: Title | None = None
    epigraphs: list[Epigraph] = field(default_factory=list)
    image: Image | None = None
    annotation: Annotation | None = None
    content: list[SectionPart] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)


@dataclass(slots=True)
class Section:
    """``<section>``; ``content`` is None for a section without children."""

    id: str | None = None
    content: SectionContent | None = None


@dataclass(slots=True)
class Body:
    name: str | None = None
    lang: str | None = None
    title: Title | None = None
    epigraphs: list[Epigraph] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)


@dataclass(slots=True)
class VerboseAuthor:
    first_name: str = ""
    last_name: str = ""
    middle_name: str | None = None
    nickname: str | None = None


@dataclass(slots=True)
class AnonymousAuthor:
    nickname: str | None = None


Author = VerboseAuthor | AnonymousAuthor


@dataclass(slots=True)
class SourceDate:
    iso_date: date | None = None
    display_date: str | None = None


@dataclass(slots=True)
class CoverPage:
    images: list[InlineImage] = field(default_factory=list)


@dataclass(slots=True)
class TitleInfo:
    book_title: str = ""
    authors: list[Author] = field(default_factory=list)
    lang: str = ""
    date: SourceDate | None = None
    cover_page: CoverPage | None = None
    annotation: Annotation | None = None


@dataclass(slots=True)
class Description:
    title_info: TitleInfo = field(default_factory=TitleInfo)


@dataclass(slots=True)
class Binary:
    id: str
    content_type: str | None = None
    data: bytes = b""


@dataclass(slots=True)
class FictionBook:
    description: Description = field(default_factory=Description)
    bodies: list[Body] = field(default_factory=list)
    binaries: list[Binary] = field(default_factory=list)
