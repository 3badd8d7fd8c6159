"""Runtime configuration for conversion entrypoints."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import Mapping

from jsonbook.conversion.context import DEFAULT_MAX_INLINE_DEPTH, DEFAULT_MAX_SECTION_DEPTH

DEFAULT_JSON_INDENT = 2
DEFAULT_LOG_LEVEL = "WARNING"


def _parse_int(*, name: str, raw_value: str, minimum: int) -> int:
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw_value!r}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


@dataclass(frozen=True, slots=True)
class ConversionSettings:
    """Validated settings for FB2 conversion runs."""

    max_section_depth: int = DEFAULT_MAX_SECTION_DEPTH
    max_inline_depth: int = DEFAULT_MAX_INLINE_DEPTH
    json_indent: int = DEFAULT_JSON_INDENT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ConversionSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        max_depth_raw = source.get("JSONBOOK_MAX_SECTION_DEPTH", "").strip()
        inline_depth_raw = source.get("JSONBOOK_MAX_INLINE_DEPTH", "").strip()
        indent_raw = source.get("JSONBOOK_JSON_INDENT", "").strip()
        log_level = source.get("JSONBOOK_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL

        max_section_depth = (
            _parse_int(name="JSONBOOK_MAX_SECTION_DEPTH", raw_value=max_depth_raw, minimum=1)
            if max_depth_raw
            else DEFAULT_MAX_SECTION_DEPTH
        )
        max_inline_depth = (
            _parse_int(name="JSONBOOK_MAX_INLINE_DEPTH", raw_value=inline_depth_raw, minimum=1)
            if inline_depth_raw
            else DEFAULT_MAX_INLINE_DEPTH
        )
        json_indent = (
            _parse_int(name="JSONBOOK_JSON_INDENT", raw_value=indent_raw, minimum=0)
            if indent_raw
            else DEFAULT_JSON_INDENT
        )
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"JSONBOOK_LOG_LEVEL is not a logging level: {log_level}")

        return cls(
            max_section_depth=max_section_depth,
            max_inline_depth=max_inline_depth,
            json_indent=json_indent,
            log_level=log_level,
        )
