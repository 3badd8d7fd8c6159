"""CLI command converting an FB2 book into canonical JSON."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from uuid import UUID, uuid4

from dotenv import load_dotenv

from jsonbook.config import ConversionSettings
from jsonbook.conversion import book_from_fb2, build_binary_ids
from jsonbook.fb2 import FB2ReadError, read_fb2
from jsonbook.serialization import dumps

logger = logging.getLogger(__name__)


def _parse_uuid(raw: str) -> UUID:
    try:
        return UUID(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a UUID: {raw}") from exc


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Convert an FB2 book into canonical JSON")
    parser.add_argument("--path", required=True, help="Source .fb2, .fb2.zip or .fbz file")
    parser.add_argument("--output", help="Write JSON here instead of stdout")
    parser.add_argument("--book-id", type=_parse_uuid, help="Book UUID (random when omitted)")
    args = parser.parse_args(argv)

    try:
        settings = ConversionSettings.from_env()
    except ValueError as exc:
        print(json.dumps({"error": f"Configuration error: {exc}"}, ensure_ascii=True, indent=2))
        return 1

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level,
    )

    source_path = Path(args.path)
    try:
        source = read_fb2(source_path)
    except FB2ReadError as exc:
        print(json.dumps({"source_path": str(source_path), "error": str(exc)}, ensure_ascii=True, indent=2))
        return 1

    binary_ids = build_binary_ids(source)
    book = book_from_fb2(
        source,
        args.book_id or uuid4(),
        binary_ids,
        max_section_depth=settings.max_section_depth,
        max_inline_depth=settings.max_inline_depth,
    )
    payload = dumps(book, indent=settings.json_indent or None)

    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        logger.info("Wrote %s (%d chapters, %d binaries)", args.output, len(book.chapters), len(binary_ids))
    else:
        sys.stdout.write(payload + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
