"""Canonical book tree produced by the FB2 conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from uuid import UUID

BOLD_WEIGHT = 600


class FontStyle(str, Enum):
    ITALIC = "Italic"
    CODE = "Code"


class TextDecoration(str, Enum):
    LINE_THROUGH = "LineThrough"


class BaselineShift(str, Enum):
    SUBSCRIPT = "Subscript"
    SUPERSCRIPT = "Superscript"


class FootnoteKind(str, Enum):
    NOTE = "Note"
    COMMENT = "Comment"


@dataclass(frozen=True, slots=True)
class Text:
    """A styled run of text; facets compose independently."""

    value: str
    font_weight: int | None = None
    font_style: frozenset[FontStyle] = frozenset()
    decorations: frozenset[TextDecoration] = frozenset()
    baseline_shift: BaselineShift | None = None


@dataclass(frozen=True, slots=True)
class LocalHref:
    """Fragment target inside the book, stored without the leading ``#``."""

    anchor: str

    @property
    def target(self) -> str:
        return self.anchor


@dataclass(frozen=True, slots=True)
class RemoteHref:
    url: str

    @property
    def target(self) -> str:
        return self.url


Href = LocalHref | RemoteHref


@dataclass(frozen=True, slots=True)
class FootnoteLink:
    """Reference to an entry of the notes or comments collection."""

    id: str
    kind: FootnoteKind
    content: list[Text] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Link:
    href: Href
    content: list[Text] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class InlineImage:
    id: UUID
    alt: str | None = None


Span = FootnoteLink | Link | InlineImage | Text


@dataclass(frozen=True, slots=True)
class EmptyLine:
    """Explicit blank-line spacing item."""


@dataclass(frozen=True, slots=True)
class Paragraph:
    content: list[Span]
    anchor: str | None = None


@dataclass(frozen=True, slots=True)
class Subtitle:
    """Same shape as :class:`Paragraph`, rendered as a subheading."""

    content: list[Span]
    anchor: str | None = None


@dataclass(frozen=True, slots=True)
class Image:
    id: UUID
    anchor: str | None = None
    alt: str | None = None
    title: str | None = None


@dataclass(frozen=True, slots=True)
class TableCell:
    # Empty cells are kept so columns stay aligned.
    content: list[Span] = field(default_factory=list)
    anchor: str | None = None


@dataclass(frozen=True, slots=True)
class TableRow:
    cells: list[TableCell]


@dataclass(frozen=True, slots=True)
class Table:
    rows: list[TableRow]
    header_row: bool = False
    header_column: bool = False
    anchor: str | None = None


TitleElement = Paragraph | EmptyLine


@dataclass(frozen=True, slots=True)
class Title:
    content: list[TitleElement]


@dataclass(frozen=True, slots=True)
class Stanza:
    content: list[Paragraph]
    title: Title | None = None
    subtitle: Paragraph | None = None


PoemElement = Subtitle | Stanza


@dataclass(frozen=True, slots=True)
class Poem:
    content: list[PoemElement]
    anchor: str | None = None
    title: Title | None = None
    epigraphs: list[Epigraph] = field(default_factory=list)
    authors: list[Paragraph] = field(default_factory=list)


CiteElement = Paragraph | Poem | Subtitle | Table | EmptyLine


@dataclass(frozen=True, slots=True)
class Cite:
    content: list[CiteElement]
    anchor: str | None = None
    authors: list[Paragraph] = field(default_factory=list)


EpigraphElement = Paragraph | Poem | Cite | EmptyLine


@dataclass(frozen=True, slots=True)
class Epigraph:
    content: list[EpigraphElement]
    anchor: str | None = None
    authors: list[Paragraph] = field(default_factory=list)


AnnotationElement = Paragraph | Poem | Cite | Subtitle | Table | EmptyLine


@dataclass(frozen=True, slots=True)
class Annotation:
    content: list[AnnotationElement]
    anchor: str | None = None


Content = Paragraph | Poem | Subtitle | Cite | Table | Image | EmptyLine


@dataclass(frozen=True, slots=True)
class Chapter:
    """A converted section: own content first, then nested chapters."""

    content: list[Content] = field(default_factory=list)
    sub_chapters: list[Chapter] = field(default_factory=list)
    anchor: str | None = None
    title: Title | None = None
    annotation: Annotation | None = None
    cover: Image | None = None
    epigraphs: list[Epigraph] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Footnote:
    content: list[Content]
    title: Title | None = None


@dataclass(frozen=True, slots=True)
class Footnotes:
    """Notes or comments keyed by the source section id."""

    content: dict[str, Footnote]
    title: Title | None = None


@dataclass(frozen=True, slots=True)
class Author:
    id: UUID
    full_name: str
    given_name: str | None = None
    family_name: str | None = None
    middle_name: str | None = None


@dataclass(frozen=True, slots=True)
class Date:
    iso_date: date | None = None
    display_date: str | None = None


@dataclass(frozen=True, slots=True)
class Book:
    """Root of the canonical document tree."""

    id: UUID
    short_title: str
    date: Date = field(default_factory=Date)
    authors: list[Author] = field(default_factory=list)
    language: str | None = None
    cover: InlineImage | None = None
    annotation: Annotation | None = None
    title: Title | None = None
    epigraphs: list[Epigraph] = field(default_factory=list)
    notes: Footnotes | None = None
    comments: Footnotes | None = None
    chapters: list[Chapter] = field(default_factory=list)
