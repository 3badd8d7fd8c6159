"""FB2 reader with raw and zipped container support.

Builds the :mod:`jsonbook.fb2.models` tree from FictionBook XML. Element
matching ignores namespaces, so documents declaring the FictionBook namespace
under any prefix (or none) read the same way.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from datetime import date
from io import BytesIO
import logging
from pathlib import Path
import re
from typing import Any, Callable, Iterator
from zipfile import BadZipFile, ZipFile

from lxml import etree

from jsonbook.fb2 import models as fb2

logger = logging.getLogger(__name__)

_ZIP_MAGIC = b"PK\x03\x04"
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(slots=True)
class FB2ReadError(Exception):
    """Raised when a FictionBook payload cannot be read or parsed."""

    path: Path | None
    message: str

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.message} (path={self.path})"


def normalize_whitespace(text: str) -> str:
    """Collapse repeated whitespace and trim boundaries."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def _local_name(element: etree._Element) -> str:
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element.tag).localname


def _attr(element: etree._Element, name: str) -> str | None:
    for key, value in element.attrib.items():
        if etree.QName(key).localname == name:
            return value
    return None


def _children(element: etree._Element) -> Iterator[tuple[str, etree._Element]]:
    for child in element:
        name = _local_name(child)
        if name:
            yield name, child


def _first_child(element: etree._Element, name: str) -> etree._Element | None:
    for child_name, child in _children(element):
        if child_name == name:
            return child
    return None


def _text_of(element: etree._Element | None) -> str | None:
    if element is None:
        return None
    text = normalize_whitespace(" ".join(element.itertext()))
    return text or None


_INLINE_WRAPPERS: dict[str, type] = {
    "strong": fb2.Strong,
    "emphasis": fb2.Emphasis,
    "strikethrough": fb2.Strikethrough,
    "sub": fb2.Subscript,
    "sup": fb2.Superscript,
    "code": fb2.Code,
}


def _inline(element: etree._Element, *, in_link: bool = False) -> list[fb2.StyleElement]:
    items: list[fb2.StyleElement] = []
    if element.text:
        items.append(element.text)
    for child in element:
        if isinstance(child.tag, str):
            items.extend(_inline_node(child, in_link=in_link))
        if child.tail:
            items.append(child.tail)
    return items


def _block_inline(element: etree._Element) -> list[fb2.StyleElement]:
    """Inline content of a text block, without the markup indentation at its edges."""

    items = _inline(element)
    if items and isinstance(items[0], str):
        items[0] = items[0].lstrip()
    if items and isinstance(items[-1], str):
        items[-1] = items[-1].rstrip()
    return [item for item in items if not isinstance(item, str) or item]


def _inline_node(element: etree._Element, *, in_link: bool) -> list[fb2.StyleElement]:
    name = _local_name(element)
    wrapper = _INLINE_WRAPPERS.get(name)
    if wrapper is not None:
        return [wrapper(elements=_inline(element, in_link=in_link))]
    if name == "style":
        return [fb2.Style(name=_attr(element, "name"), elements=_inline(element, in_link=in_link))]
    if name == "a":
        if in_link:
            return _inline(element, in_link=True)
        return [fb2.Link(href=_attr(element, "href"), kind=_attr(element, "type"), elements=_inline(element, in_link=True))]
    if name == "image":
        return [fb2.InlineImage(href=_attr(element, "href"), alt=_attr(element, "alt"))]
    logger.debug("Skipping unknown inline element <%s>", name)
    return []


def _paragraph(element: etree._Element) -> fb2.Paragraph:
    return fb2.Paragraph(id=_attr(element, "id"), elements=_block_inline(element))


def _subtitle(element: etree._Element) -> fb2.Subtitle:
    return fb2.Subtitle(id=_attr(element, "id"), elements=_block_inline(element))


def _empty_line(_: etree._Element) -> fb2.EmptyLine:
    return fb2.EmptyLine()


def _image(element: etree._Element) -> fb2.Image:
    return fb2.Image(
        href=_attr(element, "href"),
        id=_attr(element, "id"),
        alt=_attr(element, "alt"),
        title=_attr(element, "title"),
    )


def _elements(element: etree._Element, builders: dict[str, Callable[[etree._Element], Any]]) -> list[Any]:
    nodes = []
    for name, child in _children(element):
        builder = builders.get(name)
        if builder is not None:
            nodes.append(builder(child))
    return nodes


def _text_authors(element: etree._Element) -> list[fb2.Paragraph]:
    return [_paragraph(child) for name, child in _children(element) if name == "text-author"]


def _title(element: etree._Element) -> fb2.Title:
    return fb2.Title(elements=_elements(element, {"p": _paragraph, "empty-line": _empty_line}))


def _optional_title(element: etree._Element) -> fb2.Title | None:
    child = _first_child(element, "title")
    return _title(child) if child is not None else None


def _table(element: etree._Element) -> fb2.Table:
    rows = []
    for name, row in _children(element):
        if name != "tr":
            continue
        cells = [
            fb2.TableCell(
                kind=fb2.CellKind.HEAD if cell_name == "th" else fb2.CellKind.DATA,
                id=_attr(cell, "id"),
                elements=_block_inline(cell),
            )
            for cell_name, cell in _children(row)
            if cell_name in {"th", "td"}
        ]
        rows.append(fb2.TableRow(cells=cells))
    return fb2.Table(id=_attr(element, "id"), rows=rows)


def _stanza(element: etree._Element) -> fb2.Stanza:
    subtitle = _first_child(element, "subtitle")
    return fb2.Stanza(
        title=_optional_title(element),
        subtitle=_subtitle(subtitle) if subtitle is not None else None,
        lines=[_paragraph(child) for name, child in _children(element) if name == "v"],
    )


def _poem(element: etree._Element) -> fb2.Poem:
    return fb2.Poem(
        id=_attr(element, "id"),
        title=_optional_title(element),
        epigraphs=[_epigraph(child) for name, child in _children(element) if name == "epigraph"],
        stanzas=_elements(element, {"subtitle": _subtitle, "stanza": _stanza}),
        text_authors=_text_authors(element),
    )


def _cite(element: etree._Element) -> fb2.Cite:
    return fb2.Cite(
        id=_attr(element, "id"),
        elements=_elements(
            element,
            {"p": _paragraph, "poem": _poem, "subtitle": _subtitle, "table": _table, "empty-line": _empty_line},
        ),
        text_authors=_text_authors(element),
    )


def _epigraph(element: etree._Element) -> fb2.Epigraph:
    return fb2.Epigraph(
        id=_attr(element, "id"),
        elements=_elements(element, {"p": _paragraph, "poem": _poem, "cite": _cite, "empty-line": _empty_line}),
        text_authors=_text_authors(element),
    )


def _annotation(element: etree._Element) -> fb2.Annotation:
    return fb2.Annotation(
        id=_attr(element, "id"),
        elements=_elements(
            element,
            {
                "p": _paragraph,
                "poem": _poem,
                "cite": _cite,
                "subtitle": _subtitle,
                "table": _table,
                "empty-line": _empty_line,
            },
        ),
    )


_SECTION_PARTS: dict[str, Callable[[etree._Element], fb2.SectionPart]] = {
    "p": _paragraph,
    "poem": _poem,
    "subtitle": _subtitle,
    "cite": _cite,
    "table": _table,
    "image": _image,
    "empty-line": _empty_line,
}


def _section(element: etree._Element) -> fb2.Section:
    children = list(_children(element))
    if not children:
        return fb2.Section(id=_attr(element, "id"))

    content = fb2.SectionContent()
    for name, child in children:
        if name == "title" and content.title is None:
            content.title = _title(child)
        elif name == "epigraph":
            content.epigraphs.append(_epigraph(child))
        elif name == "annotation" and content.annotation is None:
            content.annotation = _annotation(child)
        elif name == "section":
            content.sections.append(_section(child))
        elif name == "image" and _is_section_cover(content):
            content.image = _image(child)
        elif name in _SECTION_PARTS:
            content.content.append(_SECTION_PARTS[name](child))
        else:
            logger.debug("Skipping unknown section element <%s>", name)
    return fb2.Section(id=_attr(element, "id"), content=content)


def _is_section_cover(content: fb2.SectionContent) -> bool:
    # A leading image, before the annotation and any content, is the section cover.
    return content.image is None and content.annotation is None and not content.content and not content.sections


def _body(element: etree._Element) -> fb2.Body:
    return fb2.Body(
        name=_attr(element, "name"),
        lang=_attr(element, "lang"),
        title=_optional_title(element),
        epigraphs=[_epigraph(child) for name, child in _children(element) if name == "epigraph"],
        sections=[_section(child) for name, child in _children(element) if name == "section"],
    )


def _author(element: etree._Element) -> fb2.Author:
    first = _text_of(_first_child(element, "first-name"))
    middle = _text_of(_first_child(element, "middle-name"))
    last = _text_of(_first_child(element, "last-name"))
    nickname = _text_of(_first_child(element, "nickname"))
    if first is None and middle is None and last is None:
        return fb2.AnonymousAuthor(nickname=nickname)
    return fb2.VerboseAuthor(first_name=first or "", last_name=last or "", middle_name=middle, nickname=nickname)


def _date(element: etree._Element) -> fb2.SourceDate:
    iso_date = None
    raw_value = _attr(element, "value")
    if raw_value:
        try:
            iso_date = date.fromisoformat(raw_value.strip())
        except ValueError:
            logger.debug("Ignoring malformed date value %r", raw_value)
    return fb2.SourceDate(iso_date=iso_date, display_date=_text_of(element))


def _title_info(element: etree._Element | None) -> fb2.TitleInfo:
    if element is None:
        return fb2.TitleInfo()

    date_node = _first_child(element, "date")
    cover_node = _first_child(element, "coverpage")
    annotation_node = _first_child(element, "annotation")
    cover_page = None
    if cover_node is not None:
        cover_page = fb2.CoverPage(
            images=[
                fb2.InlineImage(href=_attr(child, "href"), alt=_attr(child, "alt"))
                for name, child in _children(cover_node)
                if name == "image"
            ]
        )

    return fb2.TitleInfo(
        book_title=_text_of(_first_child(element, "book-title")) or "",
        authors=[_author(child) for name, child in _children(element) if name == "author"],
        lang=_text_of(_first_child(element, "lang")) or "",
        date=_date(date_node) if date_node is not None else None,
        cover_page=cover_page,
        annotation=_annotation(annotation_node) if annotation_node is not None else None,
    )


def _binary(element: etree._Element) -> fb2.Binary | None:
    binary_id = _attr(element, "id")
    if not binary_id:
        return None
    content_type = _attr(element, "content-type")
    try:
        data = base64.b64decode("".join((element.text or "").split()))
    except (binascii.Error, ValueError):
        # The id stays resolvable so references to it still convert.
        logger.warning("Binary %r has a malformed base64 payload, keeping it without data", binary_id)
        data = b""
    return fb2.Binary(id=binary_id, content_type=content_type, data=data)


def build_fiction_book(root: etree._Element) -> fb2.FictionBook:
    """Build the source model from a parsed ``<FictionBook>`` root element."""

    description = _first_child(root, "description")
    title_info = _first_child(description, "title-info") if description is not None else None

    binaries = []
    for name, child in _children(root):
        if name == "binary":
            binary = _binary(child)
            if binary is not None:
                binaries.append(binary)

    return fb2.FictionBook(
        description=fb2.Description(title_info=_title_info(title_info)),
        bodies=[_body(child) for name, child in _children(root) if name == "body"],
        binaries=binaries,
    )


class FB2Reader:
    """Read FictionBook sources from raw XML or zipped containers."""

    def read(self, path: Path) -> fb2.FictionBook:
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise FB2ReadError(path, f"Failed to read source file: {exc}") from exc

        if self._is_zipped(path, raw):
            raw = self._extract_from_zip(path, raw)
        return self.read_bytes(raw, path=path)

    def read_bytes(self, xml_bytes: bytes, *, path: Path | None = None) -> fb2.FictionBook:
        parser = etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False, huge_tree=False)
        try:
            root = etree.fromstring(xml_bytes, parser=parser)
        except etree.XMLSyntaxError as exc:
            raise FB2ReadError(path, f"Malformed FB2 XML: {exc}") from exc

        if _local_name(root) != "FictionBook":
            raise FB2ReadError(path, f"Unexpected root element <{_local_name(root)}>")
        return build_fiction_book(root)

    def _is_zipped(self, path: Path, raw: bytes) -> bool:
        if raw.startswith(_ZIP_MAGIC):
            return True
        return path.suffix.lower() in {".zip", ".fbz"}

    def _extract_from_zip(self, path: Path, raw: bytes) -> bytes:
        try:
            with ZipFile(BytesIO(raw), "r") as archive:
                candidates = [name for name in archive.namelist() if not name.endswith("/")]
                fb2_name = next((name for name in candidates if name.lower().endswith(".fb2")), None)
                target = fb2_name or (candidates[0] if candidates else None)
                if not target:
                    raise FB2ReadError(path, "Zipped FB2 container has no readable files")
                return archive.read(target)
        except BadZipFile as exc:
            raise FB2ReadError(path, f"Corrupt FB2 archive: {exc}") from exc


def read_fb2(path: str | Path) -> fb2.FictionBook:
    """Read a ``.fb2``, ``.fb2.zip`` or ``.fbz`` file."""

    return FB2Reader().read(Path(path))


def read_fb2_bytes(xml_bytes: bytes) -> fb2.FictionBook:
    return FB2Reader().read_bytes(xml_bytes)
