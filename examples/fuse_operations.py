# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved
'''
This example reads files from a bucket mounted read-only with bucketfs.

Setup:
    # Install the package
    pip install -e .

    # Install FUSE on your system
    # On Ubuntu/Debian:
    sudo apt-get install fuse

    # On macOS (using Homebrew):
    brew install macfuse

    # Configure AWS credentials (~/.aws/credentials) or pass --profile

Usage:
    # Mount a bucket
    python -m bucketfs.fuse <bucket> <mountpoint>

    # Run this example against the mount
    python fuse_operations.py <mountpoint>

    # Unmount when done
    fusermount -u <mountpoint>   # Linux
    umount <mountpoint>          # macOS

Troubleshooting:
    # Enable debug logging and operation traces
    python -m bucketfs.fuse <bucket> <mountpoint> --trace
'''
import os
import sys

def main():
    if len(sys.argv) != 2:
        print("Usage: python fuse_operations.py <mountpoint>")
        sys.exit(1)

    mountpoint = sys.argv[1]

    # Walk the bucket
    for root, dirs, files in os.walk(mountpoint):
        for name in files:
            path = os.path.join(root, name)
            print(f"{path}: {os.path.getsize(path)} bytes")

    # Writes are rejected
    try:
        with open(os.path.join(mountpoint, "example.txt"), 'w') as f:
            f.write("Hello FUSE")
    except OSError as e:
        print(f"Write rejected as expected: {e}")

if __name__ == '__main__':
    main()
