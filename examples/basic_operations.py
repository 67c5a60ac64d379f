# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
import os
import sys

from bucketfs import BucketFS, EndOfData, S3Store

def main():
    if len(sys.argv) < 2:
        print("Usage: python basic_operations.py <bucket> [path]")
        sys.exit(1)

    bucket = sys.argv[1]
    path = sys.argv[2] if len(sys.argv) > 2 else ""
    fs = BucketFS(S3Store.from_session(), bucket)

    # Describe the path
    info = fs.stat(path)
    print(f"{info.name}: {info.kind.value}, {info.size} bytes, modified {info.mod_time}")

    with fs.open(path) as handle:
        if info.is_dir:
            # List the directory one page at a time
            while True:
                try:
                    page = handle.readdir(100)
                except EndOfData:
                    break
                for entry in page:
                    suffix = "/" if entry.is_dir else ""
                    print(f"- {entry.name}{suffix} ({entry.info().size} bytes)")
        else:
            # Print the first and last 64 bytes
            print(f"Head: {handle.read(64)!r}")
            handle.seek(min(64, info.size), os.SEEK_END)
            print(f"Tail: {handle.read()!r}")

if __name__ == "__main__":
    main()
