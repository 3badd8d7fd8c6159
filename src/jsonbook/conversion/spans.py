"""Flatten FB2 inline markup into styled spans.

Style wrappers (``<strong>``, ``<emphasis>``, ``<sub>``...) are resolved
recursively and then applied to every :class:`~jsonbook.models.Text` found
below them, including the text runs carried by footnote references and links.
Images never carry styling.

Hyperlinks are disambiguated in a fixed order: a target naming a known binary
becomes an inline image, then note keys, comment keys, ``type="note"`` links
(kept as plain text) and finally an ordinary link.
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Callable, Iterable
from urllib.parse import urlsplit

from jsonbook.conversion.context import ConversionContext
from jsonbook.fb2 import models as fb2
from jsonbook.models import (
    BOLD_WEIGHT,
    BaselineShift,
    FontStyle,
    FootnoteKind,
    FootnoteLink,
    Href,
    InlineImage,
    Link,
    LocalHref,
    RemoteHref,
    Span,
    Text,
    TextDecoration,
)

logger = logging.getLogger(__name__)

# Schemes whose URLs are meaningless without a host.
_HOST_SCHEMES = frozenset({"http", "https", "ftp", "ws", "wss"})


def _bold(text: Text) -> Text:
    return replace(text, font_weight=BOLD_WEIGHT)


def _italic(text: Text) -> Text:
    return replace(text, font_style=text.font_style | {FontStyle.ITALIC})


def _code(text: Text) -> Text:
    return replace(text, font_style=text.font_style | {FontStyle.CODE})


def _strikethrough(text: Text) -> Text:
    return replace(text, decorations=text.decorations | {TextDecoration.LINE_THROUGH})


def _subscript(text: Text) -> Text:
    return replace(text, baseline_shift=BaselineShift.SUBSCRIPT)


def _superscript(text: Text) -> Text:
    return replace(text, baseline_shift=BaselineShift.SUPERSCRIPT)


def _unstyled(text: Text) -> Text:
    return text


_STYLE_MODIFIERS: dict[type, Callable[[Text], Text]] = {
    fb2.Strong: _bold,
    fb2.Emphasis: _italic,
    fb2.Code: _code,
    fb2.Strikethrough: _strikethrough,
    fb2.Subscript: _subscript,
    fb2.Superscript: _superscript,
    fb2.Style: _unstyled,
}


def apply_to_text(span: Span, modifier: Callable[[Text], Text]) -> Span:
    """Apply *modifier* to every text run of *span*; images pass through."""

    if isinstance(span, Text):
        return modifier(span)
    if isinstance(span, (FootnoteLink, Link)):
        return replace(span, content=[modifier(text) for text in span.content])
    return span


def parse_href(raw: str | None) -> Href | None:
    """Resolve an ``l:href`` value into a local anchor or an absolute URL."""

    if not raw:
        return None
    if raw.startswith("#"):
        anchor = raw[1:]
        return LocalHref(anchor) if anchor else None
    if any(ch.isspace() or not ch.isprintable() for ch in raw):
        return None

    try:
        parts = urlsplit(raw)
    except ValueError:
        return None
    if not parts.scheme:
        return None
    if parts.scheme.lower() in _HOST_SCHEMES and not parts.netloc:
        return None
    return RemoteHref(raw)


def resource_name(href: str | None) -> str | None:
    """Binary name referenced by an image ``l:href`` (``#cover.jpg`` -> ``cover.jpg``)."""

    if not href:
        return None
    return href[1:] if href.startswith("#") else href


def convert_inline_image(image: fb2.InlineImage, ctx: ConversionContext) -> InlineImage | None:
    binary_id = ctx.binary_id(resource_name(image.href))
    if binary_id is None:
        logger.debug("Dropping inline image with unknown binary: %r", image.href)
        return None
    return InlineImage(id=binary_id, alt=image.alt)


def convert_spans(element: fb2.StyleElement, ctx: ConversionContext) -> list[Span]:
    """Convert one inline node into zero or more spans."""

    return _convert(element, ctx, in_link=False, depth=1)


def convert_inline(elements: Iterable[fb2.StyleElement], ctx: ConversionContext) -> list[Span]:
    """Convert a sequence of inline nodes, preserving order."""

    return _convert_all(elements, ctx, in_link=False, depth=1)


def _convert_all(
    elements: Iterable[fb2.StyleElement], ctx: ConversionContext, *, in_link: bool, depth: int
) -> list[Span]:
    spans: list[Span] = []
    for element in elements:
        spans.extend(_convert(element, ctx, in_link=in_link, depth=depth))
    return spans


def _convert(element: fb2.StyleElement, ctx: ConversionContext, *, in_link: bool, depth: int) -> list[Span]:
    if isinstance(element, str):
        return [Text(element)] if element else []

    if isinstance(element, fb2.InlineImage):
        image = convert_inline_image(element, ctx)
        return [image] if image is not None else []

    if depth > ctx.max_inline_depth:
        logger.warning("Inline markup nested deeper than %d, keeping only its text and images", ctx.max_inline_depth)
        return _flatten_unstyled(element, ctx)

    if isinstance(element, fb2.Link):
        if in_link:
            # Links do not nest: keep only the inner content.
            return _convert_all(element.elements, ctx, in_link=True, depth=depth + 1)
        return _convert_link(element, ctx, depth)

    modifier = _STYLE_MODIFIERS.get(type(element))
    if modifier is None:
        raise TypeError(f"Unsupported inline node: {type(element).__name__}")

    children = _convert_all(element.elements, ctx, in_link=in_link, depth=depth + 1)
    return [apply_to_text(span, modifier) for span in children]


def _flatten_unstyled(element: fb2.StyleElement, ctx: ConversionContext) -> list[Span]:
    """Collect the text runs and images of a subtree without recursion."""

    spans: list[Span] = []
    stack: list[fb2.StyleElement] = [element]
    while stack:
        node = stack.pop()
        if isinstance(node, str):
            if node:
                spans.append(Text(node))
        elif isinstance(node, fb2.InlineImage):
            image = convert_inline_image(node, ctx)
            if image is not None:
                spans.append(image)
        elif isinstance(node, fb2.Link) or type(node) in _STYLE_MODIFIERS:
            stack.extend(reversed(node.elements))
        else:
            raise TypeError(f"Unsupported inline node: {type(node).__name__}")
    return spans


def _convert_link(link: fb2.Link, ctx: ConversionContext, depth: int) -> list[Span]:
    content = _convert_all(link.elements, ctx, in_link=True, depth=depth + 1)
    href = parse_href(link.href)
    if href is None:
        if link.href:
            logger.debug("Unresolvable link target %r, keeping its content", link.href)
        return content

    images = [span for span in content if isinstance(span, InlineImage)]
    texts = [span for span in content if isinstance(span, Text)]
    target = href.target

    if ctx.is_binary(target):
        alt = "".join(text.value for text in texts)
        return [InlineImage(id=ctx.binaries[target], alt=alt or None)]

    spans: list[Span] = []
    if texts:
        if ctx.is_note(target):
            spans.append(FootnoteLink(id=target, kind=FootnoteKind.NOTE, content=texts))
        elif ctx.is_comment(target):
            spans.append(FootnoteLink(id=target, kind=FootnoteKind.COMMENT, content=texts))
        elif link.kind == "note":
            spans.extend(texts)
        else:
            spans.append(Link(href=href, content=texts))
    spans.extend(images)
    return spans
