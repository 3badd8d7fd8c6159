"""Block-level converters: paragraphs, poems, citations, tables and images.

Every container is dropped (``None``) when nothing inside it survives
conversion. Tables are the exception at the cell level: an empty cell is kept
so that columns stay aligned, and only rows without cells are dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from jsonbook.conversion.context import ConversionContext
from jsonbook.conversion.spans import convert_inline, resource_name
from jsonbook.fb2 import models as fb2
from jsonbook.models import (
    Annotation,
    AnnotationElement,
    Cite,
    CiteElement,
    Content,
    EmptyLine,
    Epigraph,
    EpigraphElement,
    Image,
    Paragraph,
    Poem,
    PoemElement,
    Stanza,
    Subtitle,
    Table,
    TableCell,
    TableRow,
    Title,
    TitleElement,
)

logger = logging.getLogger(__name__)

_Converter = Callable[[Any, ConversionContext], Any]


def convert_paragraph(paragraph: fb2.Paragraph | fb2.Subtitle, ctx: ConversionContext) -> Paragraph | None:
    content = convert_inline(paragraph.elements, ctx)
    if not content:
        return None
    return Paragraph(content=content, anchor=paragraph.id)


def convert_subtitle(subtitle: fb2.Subtitle | fb2.Paragraph, ctx: ConversionContext) -> Subtitle | None:
    content = convert_inline(subtitle.elements, ctx)
    if not content:
        return None
    return Subtitle(content=content, anchor=subtitle.id)


def convert_empty_line(_: fb2.EmptyLine, ctx: ConversionContext) -> EmptyLine:
    return EmptyLine()


def convert_image(image: fb2.Image, ctx: ConversionContext) -> Image | None:
    binary_id = ctx.binary_id(resource_name(image.href))
    if binary_id is None:
        logger.debug("Dropping image with unknown binary: %r", image.href)
        return None
    return Image(id=binary_id, anchor=image.id, alt=image.alt, title=image.title)


def convert_title(title: fb2.Title, ctx: ConversionContext) -> Title | None:
    content: list[TitleElement] = _convert_elements(title.elements, ctx, _TITLE_CONVERTERS)
    if not content:
        return None
    return Title(content=content)


def convert_stanza(stanza: fb2.Stanza, ctx: ConversionContext) -> Stanza | None:
    lines = _collect(stanza.lines, ctx, convert_paragraph)
    if not lines:
        return None
    return Stanza(
        content=lines,
        title=_optional(stanza.title, ctx, convert_title),
        subtitle=_optional(stanza.subtitle, ctx, convert_paragraph),
    )


def convert_poem(poem: fb2.Poem, ctx: ConversionContext) -> Poem | None:
    content: list[PoemElement] = _convert_elements(poem.stanzas, ctx, _POEM_CONVERTERS)
    if not content:
        return None
    return Poem(
        content=content,
        anchor=poem.id,
        title=_optional(poem.title, ctx, convert_title),
        epigraphs=_collect(poem.epigraphs, ctx, convert_epigraph),
        authors=_collect(poem.text_authors, ctx, convert_paragraph),
    )


def convert_cite(cite: fb2.Cite, ctx: ConversionContext) -> Cite | None:
    content: list[CiteElement] = _convert_elements(cite.elements, ctx, _CITE_CONVERTERS)
    if not content:
        return None
    return Cite(
        content=content,
        anchor=cite.id,
        authors=_collect(cite.text_authors, ctx, convert_paragraph),
    )


def convert_epigraph(epigraph: fb2.Epigraph, ctx: ConversionContext) -> Epigraph | None:
    content: list[EpigraphElement] = _convert_elements(epigraph.elements, ctx, _EPIGRAPH_CONVERTERS)
    if not content:
        return None
    return Epigraph(
        content=content,
        anchor=epigraph.id,
        authors=_collect(epigraph.text_authors, ctx, convert_paragraph),
    )


def convert_annotation(annotation: fb2.Annotation, ctx: ConversionContext) -> Annotation | None:
    content: list[AnnotationElement] = _convert_elements(annotation.elements, ctx, _ANNOTATION_CONVERTERS)
    if not content:
        return None
    return Annotation(content=content, anchor=annotation.id)


def _is_head(rows: list[fb2.TableRow], row: int, column: int) -> bool:
    if row >= len(rows) or column >= len(rows[row].cells):
        return False
    return rows[row].cells[column].kind is fb2.CellKind.HEAD


def convert_table(table: fb2.Table, ctx: ConversionContext) -> Table | None:
    """Convert a table, inferring header row/column from the leading cells."""

    first_head = _is_head(table.rows, 0, 0)
    header_column = first_head and _is_head(table.rows, 1, 0)
    header_row = first_head and _is_head(table.rows, 0, 1)

    rows: list[TableRow] = []
    for row in table.rows:
        cells = [TableCell(content=convert_inline(cell.elements, ctx), anchor=cell.id) for cell in row.cells]
        if cells:
            rows.append(TableRow(cells=cells))

    if not rows:
        return None
    return Table(rows=rows, header_row=header_row, header_column=header_column, anchor=table.id)


def convert_block(part: fb2.SectionPart, ctx: ConversionContext) -> Content | None:
    """Convert one section-level node; ``<empty-line/>`` always survives."""

    return _dispatch(part, ctx, _CONTENT_CONVERTERS)


def convert_blocks(parts: Iterable[fb2.SectionPart], ctx: ConversionContext) -> list[Content]:
    return _convert_elements(parts, ctx, _CONTENT_CONVERTERS)


def _optional(node: Any, ctx: ConversionContext, converter: _Converter) -> Any:
    if node is None:
        return None
    return converter(node, ctx)


def _collect(nodes: Iterable[Any], ctx: ConversionContext, converter: _Converter) -> list[Any]:
    converted = []
    for node in nodes:
        result = converter(node, ctx)
        if result is not None:
            converted.append(result)
    return converted


def _dispatch(node: Any, ctx: ConversionContext, converters: dict[type, _Converter]) -> Any:
    converter = converters.get(type(node))
    if converter is None:
        raise TypeError(f"Unsupported block node here: {type(node).__name__}")
    return converter(node, ctx)


def _convert_elements(nodes: Iterable[Any], ctx: ConversionContext, converters: dict[type, _Converter]) -> list[Any]:
    converted = []
    for node in nodes:
        result = _dispatch(node, ctx, converters)
        if result is not None:
            converted.append(result)
    return converted


_TITLE_CONVERTERS: dict[type, _Converter] = {
    fb2.Paragraph: convert_paragraph,
    fb2.EmptyLine: convert_empty_line,
}

_POEM_CONVERTERS: dict[type, _Converter] = {
    fb2.Subtitle: convert_subtitle,
    fb2.Stanza: convert_stanza,
}

_CITE_CONVERTERS: dict[type, _Converter] = {
    fb2.Paragraph: convert_paragraph,
    fb2.Poem: convert_poem,
    fb2.Subtitle: convert_subtitle,
    fb2.Table: convert_table,
    fb2.EmptyLine: convert_empty_line,
}

_EPIGRAPH_CONVERTERS: dict[type, _Converter] = {
    fb2.Paragraph: convert_paragraph,
    fb2.Poem: convert_poem,
    fb2.Cite: convert_cite,
    fb2.EmptyLine: convert_empty_line,
}

_ANNOTATION_CONVERTERS: dict[type, _Converter] = {
    fb2.Paragraph: convert_paragraph,
    fb2.Poem: convert_poem,
    fb2.Cite: convert_cite,
    fb2.Subtitle: convert_subtitle,
    fb2.Table: convert_table,
    fb2.EmptyLine: convert_empty_line,
}

_CONTENT_CONVERTERS: dict[type, _Converter] = {
    fb2.Paragraph: convert_paragraph,
    fb2.Poem: convert_poem,
    fb2.Subtitle: convert_subtitle,
    fb2.Cite: convert_cite,
    fb2.Table: convert_table,
    fb2.Image: convert_image,
    fb2.EmptyLine: convert_empty_line,
}
