"""Title-info metadata: authors, publication date, language and cover."""

from __future__ import annotations

import logging
from typing import Callable
from uuid import UUID

import langcodes

from jsonbook.conversion.context import ConversionContext
from jsonbook.conversion.spans import convert_inline_image
from jsonbook.fb2 import models as fb2
from jsonbook.models import Author, Date, InlineImage

logger = logging.getLogger(__name__)

AuthorIdFactory = Callable[[str], UUID]

NIL_UUID = UUID(int=0)


def nil_author_id(full_name: str) -> UUID:
    """Default author id: the nil UUID, left for a later identity step."""

    return NIL_UUID


def _non_empty(value: str | None) -> str | None:
    return value if value else None


def convert_author(author: fb2.Author, author_id_factory: AuthorIdFactory = nil_author_id) -> Author | None:
    """Build an author from name parts, falling back to the nickname.

    Returns None when neither the name parts nor the nickname give a name.
    """

    if isinstance(author, fb2.VerboseAuthor):
        given_name = _non_empty(author.first_name)
        family_name = _non_empty(author.last_name)
        middle_name = _non_empty(author.middle_name)
    else:
        given_name = family_name = middle_name = None

    full_name = " ".join(part for part in (given_name, middle_name, family_name) if part)
    if not full_name:
        full_name = author.nickname or ""
    if not full_name:
        return None

    return Author(
        id=author_id_factory(full_name),
        full_name=full_name,
        given_name=given_name,
        family_name=family_name,
        middle_name=middle_name,
    )


def convert_authors(authors: list[fb2.Author], author_id_factory: AuthorIdFactory = nil_author_id) -> list[Author]:
    converted: list[Author] = []
    for author in authors:
        result = convert_author(author, author_id_factory)
        if result is None:
            logger.debug("Skipping author without any usable name")
            continue
        converted.append(result)
    return converted


def convert_date(source: fb2.SourceDate | None) -> Date:
    if source is None:
        return Date()
    return Date(iso_date=source.iso_date, display_date=_non_empty(source.display_date))


def parse_language(raw: str | None) -> str | None:
    """Return *raw* when it is a well-formed BCP 47 tag, otherwise None."""

    if not raw:
        return None
    tag = raw.strip()
    if not tag or not langcodes.tag_is_valid(tag):
        logger.debug("Ignoring unparsable language tag %r", raw)
        return None
    return tag


def convert_cover(cover_page: fb2.CoverPage | None, ctx: ConversionContext) -> InlineImage | None:
    """First cover image that resolves to a known binary."""

    if cover_page is None:
        return None
    for image in cover_page.images:
        converted = convert_inline_image(image, ctx)
        if converted is not None:
            return converted
    return None
