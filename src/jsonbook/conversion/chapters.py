"""Section recursion into chapters, and notes/comments bodies into footnotes."""

from __future__ import annotations

import logging

from jsonbook.conversion.blocks import (
    convert_annotation,
    convert_blocks,
    convert_epigraph,
    convert_image,
    convert_title,
)
from jsonbook.conversion.context import ConversionContext
from jsonbook.fb2 import models as fb2
from jsonbook.models import Chapter, Footnote, Footnotes

logger = logging.getLogger(__name__)


def convert_chapter(section: fb2.Section, ctx: ConversionContext, depth: int = 1) -> Chapter | None:
    """Convert a section depth-first; drop it when neither content nor sub-chapters survive.

    Sections nested deeper than ``ctx.max_section_depth`` are dropped with a
    warning instead of recursing further.
    """

    body = section.content
    if body is None:
        return None

    content = convert_blocks(body.content, ctx)
    sub_chapters: list[Chapter] = []
    if body.sections and depth >= ctx.max_section_depth:
        logger.warning(
            "Dropping %d sub-sections of %r: nesting deeper than %d",
            len(body.sections),
            section.id,
            ctx.max_section_depth,
        )
    else:
        for sub_section in body.sections:
            chapter = convert_chapter(sub_section, ctx, depth + 1)
            if chapter is not None:
                sub_chapters.append(chapter)

    if not content and not sub_chapters:
        return None

    epigraphs = []
    for epigraph in body.epigraphs:
        converted = convert_epigraph(epigraph, ctx)
        if converted is not None:
            epigraphs.append(converted)

    return Chapter(
        content=content,
        sub_chapters=sub_chapters,
        anchor=section.id,
        title=convert_title(body.title, ctx) if body.title is not None else None,
        annotation=convert_annotation(body.annotation, ctx) if body.annotation is not None else None,
        cover=convert_image(body.image, ctx) if body.image is not None else None,
        epigraphs=epigraphs,
    )


def convert_footnote(section: fb2.Section, ctx: ConversionContext) -> tuple[str, Footnote] | None:
    if not section.id or section.content is None:
        return None
    content = convert_blocks(section.content.content, ctx)
    if not content:
        return None
    title = convert_title(section.content.title, ctx) if section.content.title is not None else None
    return section.id, Footnote(content=content, title=title)


def convert_footnotes(body: fb2.Body, ctx: ConversionContext) -> Footnotes | None:
    """Index a notes/comments body by section id; later duplicates overwrite earlier ones."""

    entries: dict[str, Footnote] = {}
    for section in body.sections:
        entry = convert_footnote(section, ctx)
        if entry is None:
            continue
        key, footnote = entry
        if key in entries:
            logger.debug("Duplicate footnote key %r in body %r, keeping the last one", key, body.name)
        entries[key] = footnote

    if not entries:
        return None
    title = convert_title(body.title, ctx) if body.title is not None else None
    return Footnotes(content=entries, title=title)
