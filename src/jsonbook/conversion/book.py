"""Top-level FB2 to canonical book conversion."""

from __future__ import annotations

import logging
from typing import Mapping
from uuid import UUID

from jsonbook.conversion.blocks import convert_annotation, convert_epigraph, convert_title
from jsonbook.conversion.chapters import convert_chapter, convert_footnotes
from jsonbook.conversion.context import DEFAULT_MAX_INLINE_DEPTH, DEFAULT_MAX_SECTION_DEPTH, ConversionContext
from jsonbook.conversion.metadata import (
    AuthorIdFactory,
    convert_authors,
    convert_cover,
    convert_date,
    nil_author_id,
    parse_language,
)
from jsonbook.fb2 import models as fb2
from jsonbook.models import Book, Chapter, Epigraph

logger = logging.getLogger(__name__)

NOTES_BODY = "notes"
COMMENTS_BODY = "comments"


def _first_body(bodies: list[fb2.Body], name: str | None) -> fb2.Body | None:
    matches = [body for body in bodies if body.name == name]
    if len(matches) > 1:
        logger.debug("Found %d bodies named %r, using the first", len(matches), name)
    return matches[0] if matches else None


def book_from_fb2(
    source: fb2.FictionBook,
    book_id: UUID,
    binary_ids: Mapping[str, UUID],
    *,
    author_id_factory: AuthorIdFactory = nil_author_id,
    max_section_depth: int = DEFAULT_MAX_SECTION_DEPTH,
    max_inline_depth: int = DEFAULT_MAX_INLINE_DEPTH,
) -> Book:
    """Convert a parsed FictionBook into a :class:`~jsonbook.models.Book`.

    Never fails for a well-typed source: anything that converts to nothing is
    omitted. Notes and comments are converted first because links in the main
    body are classified against their keys.
    """

    title_info = source.description.title_info

    # Footnote bodies are converted without any note/comment keys.
    bare_ctx = ConversionContext(
        binaries=binary_ids,
        max_section_depth=max_section_depth,
        max_inline_depth=max_inline_depth,
    )
    notes_body = _first_body(source.bodies, NOTES_BODY)
    comments_body = _first_body(source.bodies, COMMENTS_BODY)
    notes = convert_footnotes(notes_body, bare_ctx) if notes_body is not None else None
    comments = convert_footnotes(comments_body, bare_ctx) if comments_body is not None else None

    ctx = ConversionContext(
        binaries=binary_ids,
        notes=frozenset(notes.content) if notes is not None else frozenset(),
        comments=frozenset(comments.content) if comments is not None else frozenset(),
        max_section_depth=max_section_depth,
        max_inline_depth=max_inline_depth,
    )

    language = parse_language(title_info.lang)
    annotation = convert_annotation(title_info.annotation, ctx) if title_info.annotation is not None else None

    chapters: list[Chapter] = []
    epigraphs: list[Epigraph] = []
    title = None
    main_body = _first_body(source.bodies, None)
    if main_body is not None:
        for section in main_body.sections:
            chapter = convert_chapter(section, ctx)
            if chapter is not None:
                chapters.append(chapter)
        for epigraph in main_body.epigraphs:
            converted = convert_epigraph(epigraph, ctx)
            if converted is not None:
                epigraphs.append(converted)
        title = convert_title(main_body.title, ctx) if main_body.title is not None else None
        language = parse_language(main_body.lang) or language

    book = Book(
        id=book_id,
        short_title=title_info.book_title,
        date=convert_date(title_info.date),
        authors=convert_authors(title_info.authors, author_id_factory),
        language=language,
        cover=convert_cover(title_info.cover_page, ctx),
        annotation=annotation,
        title=title,
        epigraphs=epigraphs,
        notes=notes,
        comments=comments,
        chapters=chapters,
    )
    logger.debug(
        "Converted %r: %d chapters, %d notes, %d comments",
        book.short_title,
        len(chapters),
        len(notes.content) if notes is not None else 0,
        len(comments.content) if comments is not None else 0,
    )
    return book
