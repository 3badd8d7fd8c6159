"""Read-only lookups shared by every converter during one conversion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping
from uuid import UUID, uuid4

from jsonbook.fb2.models import FictionBook

DEFAULT_MAX_SECTION_DEPTH = 128
DEFAULT_MAX_INLINE_DEPTH = 64


@dataclass(frozen=True, slots=True)
class ConversionContext:
    """Binary ids plus the note and comment keys known before body traversal."""

    binaries: Mapping[str, UUID]
    notes: frozenset[str] = frozenset()
    comments: frozenset[str] = frozenset()
    max_section_depth: int = DEFAULT_MAX_SECTION_DEPTH
    max_inline_depth: int = DEFAULT_MAX_INLINE_DEPTH

    def binary_id(self, name: str | None) -> UUID | None:
        """Return the caller-assigned id for a binary resource name."""

        if not name:
            return None
        return self.binaries.get(name)

    def is_binary(self, name: str) -> bool:
        return name in self.binaries

    def is_note(self, key: str) -> bool:
        return key in self.notes

    def is_comment(self, key: str) -> bool:
        return key in self.comments


def build_binary_ids(source: FictionBook) -> dict[str, UUID]:
    """Assign a fresh random id to every named binary of *source*."""

    binary_ids: dict[str, UUID] = {}
    for binary in source.binaries:
        if binary.id and binary.id not in binary_ids:
            binary_ids[binary.id] = uuid4()
    return binary_ids
