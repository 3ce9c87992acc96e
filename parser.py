"""
Spreadsheet Q&A core — CLI entry point.

Usage:
    python parser.py normalize <excel_file> [--output <doc.json>] [--name <name>] [--transcript]
    python parser.py extract <reply.txt> [--output <result.json>]

``normalize`` loads an .xlsx / .xls workbook and writes the normalised
Document (records, columns, transcript) as JSON, or prints just the
transcript.

``extract`` reads a saved model reply and writes the narrative text and
the chart description recovered from it, if any.

Set LOG_LEVEL (or put it in a .env file) to change verbosity.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import dotenv

from ai.response_parser import extract_visualization
from extractors.errors import WorkbookError
from normalizer import normalize_file

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    dotenv.load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )


def _write(text: str, output_path: Optional[str]) -> None:
    if output_path is None:
        sys.stdout.write(text + "\n")
        return
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(text)
    logger.info("Output written to %s", output_path)


# -------------------------------------------------------------------
# Commands
# -------------------------------------------------------------------


def _cmd_normalize(args: argparse.Namespace) -> int:
    excel_path = args.excel_file
    if not os.path.isfile(excel_path):
        logger.error("File not found: %s", excel_path)
        return 1

    try:
        document = normalize_file(excel_path, name=args.name)
    except WorkbookError as exc:
        logger.error("%s [%s] %s", exc.user_message, exc.code, exc.detail)
        return 1

    if args.transcript:
        _write(document.transcript, args.output)
        return 0

    output_path = args.output or f"{Path(excel_path).stem}_document.json"
    _write(document.model_dump_json(indent=2), output_path)
    return 0


def _cmd_extract(args: argparse.Namespace) -> int:
    reply_path = args.reply_file
    if not os.path.isfile(reply_path):
        logger.error("File not found: %s", reply_path)
        return 1

    with open(reply_path, "r", encoding="utf-8") as f:
        reply = f.read()

    result = extract_visualization(reply)
    if result.visualization is None:
        logger.info("No visualization found in %s", reply_path)
    _write(result.model_dump_json(indent=2), args.output)
    return 0


# -------------------------------------------------------------------
# CLI
# -------------------------------------------------------------------


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Normalise spreadsheets for Q&A and extract charts from model replies.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    normalize_parser = subparsers.add_parser(
        "normalize",
        help="Normalise an .xlsx / .xls file into a JSON document",
    )
    normalize_parser.add_argument("excel_file", help="Path to the .xlsx or .xls file")
    normalize_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output path (default: <input_name>_document.json, or stdout with --transcript)",
    )
    normalize_parser.add_argument(
        "-n",
        "--name",
        default=None,
        help="Display name for the document (default: the file name)",
    )
    normalize_parser.add_argument(
        "-t",
        "--transcript",
        action="store_true",
        help="Output only the plain-text transcript",
    )
    normalize_parser.set_defaults(handler=_cmd_normalize)

    extract_parser = subparsers.add_parser(
        "extract",
        help="Split a saved model reply into narrative and visualization",
    )
    extract_parser.add_argument("reply_file", help="Path to a text file holding the reply")
    extract_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output JSON path (default: stdout)",
    )
    extract_parser.set_defaults(handler=_cmd_extract)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    _configure_logging()
    args = build_arg_parser().parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
