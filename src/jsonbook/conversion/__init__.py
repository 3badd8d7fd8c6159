"""FB2 to canonical book conversion."""

from .book import book_from_fb2
from .context import ConversionContext, build_binary_ids
from .metadata import nil_author_id

__all__ = [
    "ConversionContext",
    "book_from_fb2",
    "build_binary_ids",
    "nil_author_id",
]
