"""Example: Reading XLSX from HTTP/HTTPS URL or an open binary stream."""

import sys

from xlsx_rowstream import StreamingReader

# Read from an HTTP URL
with StreamingReader.from_uri("https://example.com/exports/orders.xlsx", timeout=60) as reader:
    print("Source metadata:", reader.get_metadata())
    for i, row in enumerate(reader, 1):
        print(f"Row {row.index + 1}: {row.to_list()}")
        if i >= 10:  # Print first 10 rows
            break

# Or use an explicit HTTPSource for authentication
# from xlsx_rowstream.sources import HTTPSource
# source = HTTPSource(
#     url="https://example.com/path/to/file.xlsx",
#     headers={"Authorization": "Bearer token123"},
# )
# reader = StreamingReader.from_stream(source)

# Any binary file object works too, e.g. a pipe
if not sys.stdin.isatty():
    with StreamingReader.from_stream(sys.stdin.buffer) as reader:
        print(sum(1 for _ in reader), "rows on stdin")
