# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Read-only filesystem view of an object storage bucket.

Usage:
    from bucketfs import BucketFS, S3Store

    fs = BucketFS(S3Store.from_session(), "my-bucket")
    fs.stat("models")                 # directory synthesized from key prefixes
    with fs.open("models/config.json") as fh:
        data = fh.read()
    with fs.open("models") as fh:
        for entry in fh.readdir():
            print(entry.name, entry.kind)
"""
import time

from ..utils import logger, time_function, trace_op
from .file import FileHandle
from .lister import DirectoryLister
from .metadata import DELIMITER, Metadata
from .resolver import MetadataResolver


class BucketFS:
    """
    Filesystem adapter bound to one bucket.

    The adapter only holds the store binding; every handle it returns
    carries its own state, so distinct handles can be used from different
    threads.

    Attributes:
        client (ObjectStore): Store client
        bucket (str): Name of the bucket being served
        resolver (MetadataResolver): Resolves paths to metadata
        lister (DirectoryLister): Lists directory contents
    """

    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket
        self.resolver = MetadataResolver(client, bucket)
        self.lister = DirectoryLister(client, bucket)
        logger.info(f"BucketFS bound to bucket {bucket}")

    def __repr__(self):
        return f"BucketFS(bucket={self.bucket!r})"

    @staticmethod
    def _get_path(path: str) -> str:
        """Convert a filesystem path to an object key."""
        return path.lstrip(DELIMITER)

    def stat(self, path: str) -> Metadata:
        """
        Describe the file or directory at path.

        Args:
            path (str): Path inside the bucket; "" or "/" is the root

        Returns:
            Metadata: File or directory metadata

        Raises:
            NotExistError: If nothing exists at path
            TransportError: If a store request fails
        """
        trace_op("stat", path)
        return self.resolver.stat(self._get_path(path))

    def open(self, path: str) -> FileHandle:
        """
        Open the file or directory at path for reading.

        Args:
            path (str): Path inside the bucket

        Returns:
            FileHandle: A handle with its metadata already resolved

        Raises:
            NotExistError: If nothing exists at path
            TransportError: If a store request fails
        """
        trace_op("open", path)
        start_time = time.time()
        handle = FileHandle(self, self._get_path(path))._open()
        time_function("open", start_time)
        return handle
