# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
bucketfs: a read-only filesystem view of an object storage bucket.
"""
from .client import (
    BucketFSError,
    ClosedError,
    EndOfData,
    InvalidArgumentError,
    NotExistError,
    ObjectNotFoundError,
    ObjectStore,
    S3Store,
    TransportError,
)
from .fs import BucketFS, DirEntry, FileHandle, FileKind, HandleState, Metadata

__version__ = "0.1.0"
