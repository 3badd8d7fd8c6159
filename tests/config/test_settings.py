from __future__ import annotations

import pytest

from jsonbook.config import DEFAULT_JSON_INDENT, DEFAULT_LOG_LEVEL, ConversionSettings
from jsonbook.conversion.context import DEFAULT_MAX_INLINE_DEPTH, DEFAULT_MAX_SECTION_DEPTH


def test_settings_defaults_apply_for_empty_environment() -> None:
    settings = ConversionSettings.from_env({})

    assert settings.max_section_depth == DEFAULT_MAX_SECTION_DEPTH
    assert settings.max_inline_depth == DEFAULT_MAX_INLINE_DEPTH
    assert settings.json_indent == DEFAULT_JSON_INDENT
    assert settings.log_level == DEFAULT_LOG_LEVEL


def test_settings_load_from_env() -> None:
    settings = ConversionSettings.from_env(
        {
            "JSONBOOK_MAX_SECTION_DEPTH": "16",
            "JSONBOOK_MAX_INLINE_DEPTH": "8",
            "JSONBOOK_JSON_INDENT": "0",
            "JSONBOOK_LOG_LEVEL": "debug",
        }
    )

    assert settings.max_section_depth == 16
    assert settings.max_inline_depth == 8
    assert settings.json_indent == 0
    assert settings.log_level == "DEBUG"


def test_settings_validate_values() -> None:
    with pytest.raises(ValueError, match="JSONBOOK_MAX_SECTION_DEPTH"):
        ConversionSettings.from_env({"JSONBOOK_MAX_SECTION_DEPTH": "0"})

    with pytest.raises(ValueError, match="JSONBOOK_JSON_INDENT"):
        ConversionSettings.from_env({"JSONBOOK_JSON_INDENT": "wide"})

    with pytest.raises(ValueError, match="JSONBOOK_LOG_LEVEL"):
        ConversionSettings.from_env({"JSONBOOK_LOG_LEVEL": "chatty"})

    with pytest.raises(ValueError, match="JSONBOOK_MAX_INLINE_DEPTH"):
        ConversionSettings.from_env({"JSONBOOK_MAX_INLINE_DEPTH": "-3"})
