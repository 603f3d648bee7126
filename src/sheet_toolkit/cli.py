"""
Module: sheet_toolkit.cli

Purpose:
    Command line entry point: export a JSON payload to PDF.

    sheet-export detail PAYLOAD.json           # {"name": ..., "price": ...}
    sheet-export list PAYLOAD.json             # {"group": {...}, "items": [...]}
    sheet-export group-detail PAYLOAD.json

Output:
    default  write the PDF to --output-dir and print its path
    --blob   print {"filename", "size", "formattedSize"} as JSON
    --bytes  write the raw PDF to stdout

Used By:
    - ``sheet-export`` console script, ``python -m sheet_toolkit``
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from sheet_toolkit import __version__
from sheet_toolkit.core.errors import ExportError
from sheet_toolkit.core.models import DetailPayload, ItemPayload, ListPayload
from sheet_toolkit.exporter.config import ExportConfig, load_export_config
from sheet_toolkit.exporter.controller import export
from sheet_toolkit.exporter.output import OutputMode

logger = logging.getLogger(__name__)

DOCUMENT_KINDS = ("detail", "list", "group-detail")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sheet-export",
        description="Export product details and price lists to paginated PDF.",
    )
    parser.add_argument("kind", choices=DOCUMENT_KINDS, help="Document layout")
    parser.add_argument("payload", type=Path, help="JSON payload file")
    parser.add_argument("--config", type=Path, help="ExportConfig JSON file")
    parser.add_argument("--output-dir", type=Path, help="Directory for the PDF")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--blob", action="store_true", help="Print blob metadata as JSON")
    output.add_argument("--bytes", action="store_true", help="Write the PDF to stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _load_payload(kind: str, path: Path):
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if kind == "detail":
        return DetailPayload(ItemPayload.from_dict(data))
    if not isinstance(data, dict):
        raise ExportError(f"List payload must be a JSON object: {path}")
    return ListPayload.from_dict(data, detailed=(kind == "group-detail"))


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_export_config(args.config) if args.config else ExportConfig()
        payload = _load_payload(args.kind, args.payload)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read input: {e}")
        return 2
    except ExportError as e:
        logger.error(f"Invalid payload: {e}")
        return 2

    if args.bytes:
        mode = OutputMode.BYTES
    elif args.blob:
        mode = OutputMode.BLOB
    else:
        mode = OutputMode.FILE

    try:
        result = export(payload, config, mode=mode, output_dir=args.output_dir)
    except ExportError as e:
        logger.error(f"Export failed: {e}")
        return 1

    for warning in result.warnings:
        logger.warning(warning)

    if mode is OutputMode.BYTES:
        sys.stdout.buffer.write(result.output)
        sys.stdout.buffer.flush()
    elif mode is OutputMode.BLOB:
        blob = result.blob
        print(json.dumps({
            "filename": blob.filename,
            "size": blob.size,
            "formattedSize": blob.formatted_size,
            "pageCount": result.page_count,
        }))
    else:
        print(result.path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
