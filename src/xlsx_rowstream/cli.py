"""Command-line interface for streaming a sheet to CSV."""

import csv
import logging
import sys
from typing import TextIO

import typer

from xlsx_rowstream.models import Row
from xlsx_rowstream.reader import DEFAULT_ROW_CACHE_SIZE, StreamingReader

app = typer.Typer(add_completion=False)

logger = logging.getLogger(__name__)


def write_csv(reader: StreamingReader, output: TextIO) -> int:
    """
    Write every row of the reader to ``output`` as CSV.

    Missing cells and missing columns are padded with empty strings so each
    column lands in its spreadsheet position. Missing rows are not padded.

    Returns:
        int: Number of rows written.
    """
    writer = csv.writer(output, delimiter=",", quoting=csv.QUOTE_MINIMAL)
    row_count = 0
    row: Row
    for row in reader:
        writer.writerow(row.to_list())
        row_count += 1
        if row_count % 10000 == 0:
            logger.info("Processed %d rows", row_count)

    logger.info("Completed streaming %d rows", row_count)
    return row_count


@app.command()
def main(
    source: str = typer.Argument(
        ...,
        help="Workbook: /path/to/file.xlsx, s3://bucket/key, https://url, or - for stdin",
    ),
    sheet_index: int = typer.Option(
        0,
        help="Zero-based index of the sheet to read",
    ),
    row_cache_size: int = typer.Option(
        DEFAULT_ROW_CACHE_SIZE,
        min=1,
        help="Number of rows read ahead per batch",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Fail on truncated or malformed sheet data instead of stopping quietly",
    ),
    output: str | None = typer.Option(
        None,
        help="Output CSV file path (default: stdout)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Stream one sheet of an XLSX workbook to CSV, row by row.

    Sources:
    - Local files: /path/to/file.xlsx
    - Standard input: -
    - S3: s3://bucket/key
    - HTTP/HTTPS: https://example.com/file.xlsx
    """
    # Log to stderr so CSV on stdout stays clean
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, stream=sys.stderr)

    try:
        if source == "-":
            reader = StreamingReader.from_stream(
                sys.stdin.buffer, sheet_index, row_cache_size, strict=strict
            )
        else:
            reader = StreamingReader.from_uri(
                source, sheet_index, row_cache_size, strict=strict
            )

        with reader:
            if output:
                with open(output, "w", encoding="utf-8", newline="") as f:
                    write_csv(reader, f)
                typer.echo(f"CSV written to: {output}", err=True)
            else:
                write_csv(reader, sys.stdout)

    except ImportError as e:
        typer.echo(
            f"Error: Missing dependency: {e}\nInstall with: pip install xlsx-rowstream[all]",
            err=True,
        )
        raise typer.Exit(code=1) from None
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        if verbose:
            import traceback

            traceback.print_exc(file=sys.stderr)
        raise typer.Exit(code=1) from None


if __name__ == "__main__":
    app()
