"""CLI entry point for CSV to SQLite conversion.

Usage:
    python -m scripts.convert_csv data.csv data.db [--table data] [--infer-types]
        [--batch-size 5000] [--delimiter ,|auto] [--skip-malformed]

The default batch size can also be set with CSV2SQLITE_BATCH_SIZE.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from csv2sqlite import ConversionError, convert
from csv2sqlite.ingestion.loader import DEFAULT_BATCH_SIZE

logger = logging.getLogger(__name__)

BATCH_SIZE_ENV = "CSV2SQLITE_BATCH_SIZE"


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Convert a CSV file to an SQLite database")
    parser.add_argument("input", type=Path, help="Input CSV file path")
    parser.add_argument("output", type=Path, help="Output SQLite database path")
    parser.add_argument("-t", "--table", default="data", help="Table name in the database")
    parser.add_argument(
        "--infer-types", action="store_true", help="Automatically infer column types"
    )
    parser.add_argument(
        "--batch-size",
        type=positive_int,
        default=os.environ.get(BATCH_SIZE_ENV, str(DEFAULT_BATCH_SIZE)),
        help=f"Rows per transaction (default: {BATCH_SIZE_ENV} or {DEFAULT_BATCH_SIZE})",
    )
    parser.add_argument(
        "-d", "--delimiter", default=",", help="Field delimiter, or 'auto' to detect it"
    )
    parser.add_argument("--encoding", default="utf-8-sig", help="Input file encoding")
    parser.add_argument(
        "--skip-malformed",
        action="store_true",
        help="Skip rows whose field count differs from the header instead of aborting",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not args.input.is_file():
        logger.error("Input file not found: %s", args.input)
        return 1

    try:
        result = convert(
            args.input,
            args.output,
            table_name=args.table,
            infer_types=args.infer_types,
            batch_size=args.batch_size,
            delimiter=args.delimiter,
            encoding=args.encoding,
            skip_malformed=args.skip_malformed,
        )
    except ConversionError as e:
        logger.error("Conversion failed: %s", e)
        return 1

    logger.info("Table: %s in %s", result.table_name, result.output_path)
    logger.info("Rows inserted: %d", result.rows_loaded)
    return 0


if __name__ == "__main__":
    sys.exit(main())
