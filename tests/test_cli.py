import contextlib
from pathlib import Path
import tempfile

import openpyxl
from typer.testing import CliRunner

from xlsx_rowstream.cli import app


def test_cli_stream_xlsx_to_csv() -> None:
    """Test CLI streaming XLSX to CSV."""
    # Create a temporary XLSX file
    with tempfile.NamedTemporaryFile(suffix=".xlsx", delete=False) as tmp:
        xlsx_path = tmp.name
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(["A", "B", "C"])
    ws.append([1, 2, 3])
    wb.save(xlsx_path)
    try:
        runner = CliRunner()
        result = runner.invoke(app, [xlsx_path])
        assert result.exit_code == 0
        assert "A,B,C" in result.output
        assert "1,2,3" in result.output
    finally:
        Path(xlsx_path).unlink()


def test_cli_pads_missing_columns_not_rows(sparse_workbook: Path) -> None:
    """Test that missing cells are padded by position and missing rows are skipped."""
    runner = CliRunner()
    result = runner.invoke(app, [str(sparse_workbook)])

    assert result.exit_code == 0
    lines = [line for line in result.output.splitlines() if "," in line]
    assert lines == ["10,Name", "20,Total", "30,40"]


def test_cli_with_output_file() -> None:
    """Test CLI with output file option."""
    with tempfile.NamedTemporaryFile(suffix=".xlsx", delete=False) as tmp:
        xlsx_path = tmp.name
    with tempfile.NamedTemporaryFile(suffix=".csv", delete=False) as out:
        csv_path = out.name

    try:
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["Header1", "Header2"])
        ws.append([1, 2])
        ws["D2"] = "far"
        wb.save(xlsx_path)

        runner = CliRunner()
        result = runner.invoke(app, [xlsx_path, "--output", csv_path])
        assert result.exit_code == 0
        assert "CSV written to:" in result.output

        # Verify output file was created and has content
        assert Path(csv_path).exists()
        content = Path(csv_path).read_text()
        assert "Header1,Header2" in content
        assert "1,2,,far" in content

    finally:
        Path(xlsx_path).unlink()
        if Path(csv_path).exists():
            Path(csv_path).unlink()


def test_cli_with_sheet_index() -> None:
    """Test CLI with specific sheet index."""
    with tempfile.NamedTemporaryFile(suffix=".xlsx", delete=False) as tmp:
        xlsx_path = tmp.name

    try:
        wb = openpyxl.Workbook()
        ws1 = wb.active
        ws1.title = "Sheet1"
        ws1.append(["A", "B"])

        ws2 = wb.create_sheet("Sheet2")
        ws2.append(["X", "Y", "Z"])
        ws2.append([1, 2, 3])
        wb.save(xlsx_path)

        runner = CliRunner()
        result = runner.invoke(app, [xlsx_path, "--sheet-index", "1", "--row-cache-size", "1"])
        assert result.exit_code == 0
        assert "X,Y,Z" in result.output
        assert "1,2,3" in result.output
        assert "A,B" not in result.output

    finally:
        Path(xlsx_path).unlink()


def test_cli_reads_stdin(sparse_workbook: Path) -> None:
    """Test CLI reading the workbook from standard input."""
    runner = CliRunner()
    result = runner.invoke(app, ["-"], input=sparse_workbook.read_bytes())

    assert result.exit_code == 0
    assert "20,Total" in result.output


def test_cli_with_verbose() -> None:
    """Test CLI with verbose logging."""
    with tempfile.NamedTemporaryFile(suffix=".xlsx", delete=False) as tmp:
        xlsx_path = tmp.name

    try:
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["A"])
        wb.save(xlsx_path)

        runner = CliRunner()
        result = runner.invoke(app, [xlsx_path, "--verbose"])
        assert result.exit_code == 0

    finally:
        Path(xlsx_path).unlink()


def test_cli_file_not_found() -> None:
    """Test CLI with non-existent file."""
    runner = CliRunner()
    result = runner.invoke(app, ["/nonexistent/file.xlsx"])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_cli_invalid_sheet_index(sparse_workbook: Path) -> None:
    """Test CLI with a sheet index past the last sheet."""
    runner = CliRunner()
    result = runner.invoke(app, [str(sparse_workbook), "--sheet-index", "7"])
    assert result.exit_code == 1
    assert "Unable to find sheet at index [7]" in result.output


def test_cli_rejects_zero_row_cache_size(sparse_workbook: Path) -> None:
    """Test that the batch size option must be positive."""
    runner = CliRunner()
    result = runner.invoke(app, [str(sparse_workbook), "--row-cache-size", "0"])
    assert result.exit_code != 0


def test_cli_with_invalid_file() -> None:
    """Test CLI with invalid XLSX file."""
    with tempfile.NamedTemporaryFile(mode="wb", suffix=".xlsx", delete=False) as tmp:
        tmp.write(b"not a valid xlsx file")
        invalid_path = tmp.name

    try:
        runner = CliRunner()
        result = runner.invoke(app, [invalid_path])
        assert result.exit_code == 1
        assert "Error" in result.output

    finally:
        # On Windows, file may still be locked
        with contextlib.suppress(PermissionError):
            Path(invalid_path).unlink()
