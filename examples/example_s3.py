"""Example: Reading XLSX from AWS S3."""

from xlsx_rowstream import StreamingReader

# Read from S3 using a URI; the object is copied to a temporary file first
reader = StreamingReader.from_uri("s3://my-bucket/path/to/file.xlsx", region="us-east-1")

# Or use an explicit S3Source for more control
# import boto3
# from xlsx_rowstream.sources import S3Source
# s3_client = boto3.client("s3", region_name="us-east-1")
# source = S3Source(bucket="my-bucket", key="path/to/file.xlsx", client=s3_client)
# reader = StreamingReader.from_stream(source, sheet_index=1)

with reader:
    print("Sheet metadata:", reader.get_metadata())
    for row in reader:
        print(f"Row {row.index + 1}: {row.values()}")
