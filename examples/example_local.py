"""Example: Reading XLSX from local filesystem."""

from xlsx_rowstream import StreamingReader

# Read the first sheet, 500 rows per batch
with StreamingReader.open("examples/report.xlsx", sheet_index=0, row_cache_size=500) as reader:
    print("Sheet metadata:", reader.get_metadata())
    print("\nRows:")
    try:
        row_iterator = iter(reader)
        while True:
            # Fetch and print the next 10 rows
            rows_in_batch = 0
            for _ in range(10):
                try:
                    row = next(row_iterator)
                except StopIteration:
                    print("\n--- End of sheet ---")
                    break
                print(f"Row {row.index + 1}: {row.to_list()}")
                rows_in_batch += 1

            if rows_in_batch < 10:
                break

            user_input = input("\nPress Enter for next 10 rows, or type 'q' and Enter to quit: ")
            if user_input.lower() == "q":
                break
    except KeyboardInterrupt:
        print("\nUser interrupted. Exiting.")

# Leaving the with block releases the workbook even if we stopped early.
