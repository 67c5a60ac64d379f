# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Path to metadata resolution.

A path is looked up as an object first. Keys ending in the delimiter are
directory markers. When no object exists, the path is still a directory
if any key starts with it.
"""
import posixpath
import time

from ..client.exceptions import NotExistError, ObjectNotFoundError, TransportError
from ..utils import logger, time_function
from .metadata import DELIMITER, Metadata


def clean_path(path: str) -> str:
    """
    Normalize a path for the directory probe.

    Args:
        path (str): Caller supplied path

    Returns:
        str: The normalized path without leading or trailing delimiters,
            "" for the bucket root
    """
    if not path.strip(DELIMITER):
        return ''
    cleaned = posixpath.normpath(path).strip(DELIMITER)
    return '' if cleaned == '.' else cleaned


class MetadataResolver:
    """
    Resolves paths to Metadata records.

    Attributes:
        client (ObjectStore): Store client
        bucket (str): Bucket holding the objects
    """

    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    def stat(self, path: str, op: str = "stat") -> Metadata:
        """
        Resolve path to a file or directory.

        Args:
            path (str): Object key, "" for the bucket root
            op (str): Operation name used to tag errors. Defaults to "stat".

        Returns:
            Metadata: File metadata from the head lookup, or synthetic
                directory metadata

        Raises:
            NotExistError: If neither an object nor a prefix matches
            TransportError: If a store request fails
        """
        start_time = time.time()
        if not clean_path(path):
            # The bucket root has no key to look up.
            return Metadata.directory('')
        try:
            head = self.client.head_object(self.bucket, path)
        except ObjectNotFoundError:
            logger.debug(f"No object for '{path}', probing for an implicit directory")
            return self._stat_directory(path, op)
        except Exception as e:
            logger.error(f"head_object failed for '{path}': {e}")
            raise TransportError(op, path, cause=e) from e

        if path.endswith(DELIMITER):
            # Directory marker object; its content length is meaningless.
            logger.debug(f"'{path}' is a directory marker")
            return Metadata.directory(path)

        time_function("stat (file)", start_time)
        return Metadata.file(path, head.content_length, head.last_modified)

    def _stat_directory(self, path: str, op: str) -> Metadata:
        name = clean_path(path)
        try:
            output = self.client.list_objects_v2(self.bucket, name, max_keys=1)
        except Exception as e:
            logger.error(f"Directory probe failed for '{name}': {e}")
            raise TransportError(op, path, cause=e) from e

        if output.key_count == 0 and name:
            logger.debug(f"'{path}' does not exist")
            raise NotExistError(op, path)
        return Metadata.directory(name)
