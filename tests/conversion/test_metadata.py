from __future__ import annotations

from datetime import date
from uuid import UUID, uuid5, NAMESPACE_URL

from jsonbook.conversion.context import ConversionContext
from jsonbook.conversion.metadata import (
    NIL_UUID,
    convert_author,
    convert_authors,
    convert_cover,
    convert_date,
    parse_language,
)
from jsonbook.fb2 import models as fb2
from jsonbook.models import Author, Date, InlineImage

COVER_ID = UUID("33333333-3333-3333-3333-333333333333")


def test_author_name_parts_join_in_fixed_order() -> None:
    author = fb2.VerboseAuthor(first_name="Anton", middle_name="Semyonovich", last_name="Makarenko")

    assert convert_author(author) == Author(
        id=NIL_UUID,
        full_name="Anton Semyonovich Makarenko",
        given_name="Anton",
        family_name="Makarenko",
        middle_name="Semyonovich",
    )


def test_author_missing_parts_leave_no_double_spaces() -> None:
    converted = convert_author(fb2.VerboseAuthor(first_name="Anton", last_name="Makarenko", middle_name=""))

    assert converted is not None
    assert converted.full_name == "Anton Makarenko"
    assert converted.middle_name is None


def test_author_falls_back_to_nickname() -> None:
    verbose = convert_author(fb2.VerboseAuthor(nickname="Nick"))
    anonymous = convert_author(fb2.AnonymousAuthor(nickname="Anon"))

    assert verbose == Author(id=NIL_UUID, full_name="Nick")
    assert anonymous == Author(id=NIL_UUID, full_name="Anon")


def test_author_without_any_name_is_dropped() -> None:
    authors = [
        fb2.VerboseAuthor(nickname=""),
        fb2.AnonymousAuthor(),
        fb2.VerboseAuthor(last_name="Tolstoy"),
    ]

    assert [author.full_name for author in convert_authors(authors)] == ["Tolstoy"]


def test_author_ids_come_from_the_factory() -> None:
    def factory(full_name: str) -> UUID:
        return uuid5(NAMESPACE_URL, full_name)

    converted = convert_author(fb2.AnonymousAuthor(nickname="Anon"), factory)

    assert converted is not None
    assert converted.id == uuid5(NAMESPACE_URL, "Anon")


def test_date_parts_are_independently_optional() -> None:
    assert convert_date(None) == Date()
    assert convert_date(fb2.SourceDate(display_date="")) == Date()
    assert convert_date(fb2.SourceDate(iso_date=date(1935, 1, 1), display_date="1935")) == Date(
        iso_date=date(1935, 1, 1), display_date="1935"
    )


def test_language_tags_are_validated() -> None:
    assert parse_language("ru") == "ru"
    assert parse_language("en-US") == "en-US"
    assert parse_language("") is None
    assert parse_language(None) is None
    assert parse_language("not a language") is None


def test_cover_uses_first_resolvable_image() -> None:
    ctx = ConversionContext(binaries={"cover.jpg": COVER_ID})
    cover_page = fb2.CoverPage(
        images=[fb2.InlineImage(href="#absent.jpg"), fb2.InlineImage(href="#cover.jpg", alt="Cover")]
    )

    assert convert_cover(cover_page, ctx) == InlineImage(id=COVER_ID, alt="Cover")
    assert convert_cover(None, ctx) is None
    assert convert_cover(fb2.CoverPage(images=[fb2.InlineImage(href="#absent.jpg")]), ctx) is None
