# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Directory listing over a flat object store.

Hierarchy is emulated with delimited prefix listings: common prefixes
become subdirectories and keys become files. Pagination state is handed
back to the caller verbatim so a listing can be resumed.
"""
import time
from dataclasses import dataclass, field
from typing import List, Optional

from ..client.exceptions import TransportError
from ..utils import logger
from .metadata import DELIMITER, DirEntry

PAGE_SIZE = 1000


def listing_prefix(path: str) -> str:
    """
    Return the prefix that enumerates the children of path.

    Args:
        path (str): Directory path, with or without leading or trailing delimiters.

    Returns:
        str: "" for the bucket root, otherwise the path ending in the delimiter.
    """
    prefix = path.lstrip(DELIMITER)
    if prefix and not prefix.endswith(DELIMITER):
        prefix += DELIMITER
    return prefix


@dataclass
class ListingPage:
    """
    One page of directory entries.

    Attributes:
        subdirectories (list): Entries for common prefixes
        files (list): Entries for plain keys
        next_token (str): Continuation token for the next page, if any
        is_truncated (bool): True while more pages remain
    """
    subdirectories: List[DirEntry] = field(default_factory=list)
    files: List[DirEntry] = field(default_factory=list)
    next_token: Optional[str] = None
    is_truncated: bool = False

    @property
    def entries(self) -> List[DirEntry]:
        return self.subdirectories + self.files


class DirectoryLister:
    """
    Lists the children of a directory path page by page.

    Attributes:
        client (ObjectStore): Store client
        bucket (str): Bucket being listed
    """

    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    def list(self, path: str, continuation_token: Optional[str] = None, max_keys: int = PAGE_SIZE) -> ListingPage:
        """
        Fetch one page of entries under path.

        Args:
            path (str): Directory path to list
            continuation_token (str, optional): Token returned by the previous page
            max_keys (int): Page size bound passed to the store

        Returns:
            ListingPage: Subdirectories, files and pagination state

        Raises:
            TransportError: If the store listing fails
        """
        prefix = listing_prefix(path)
        logger.debug(f"Listing prefix '{prefix}' (token={continuation_token}, max_keys={max_keys})")
        client_start = time.time()
        try:
            output = self.client.list_objects_v2(
                self.bucket,
                prefix,
                delimiter=DELIMITER,
                continuation_token=continuation_token,
                max_keys=max_keys,
            )
        except Exception as e:
            logger.error(f"list_objects_v2 failed for prefix '{prefix}': {e}")
            raise TransportError("readdir", path, cause=e) from e
        logger.debug(f"list_objects_v2 for prefix '{prefix}' completed in {time.time() - client_start:.4f} seconds")

        page = ListingPage(next_token=output.next_continuation_token, is_truncated=output.is_truncated)
        for common_prefix in output.common_prefixes:
            page.subdirectories.append(DirEntry.for_directory(common_prefix))
        for obj in output.contents:
            # Directory markers are already covered by the common prefixes.
            if obj.key.endswith(DELIMITER):
                continue
            page.files.append(DirEntry.for_file(obj.key, obj.size, obj.last_modified))
        return page

    def list_all(self, path: str, continuation_token: Optional[str] = None) -> List[DirEntry]:
        """
        Fetch every remaining entry under path.

        Args:
            path (str): Directory path to list
            continuation_token (str, optional): Token to resume from

        Returns:
            list: All entries, subdirectories and files in listing order

        Raises:
            TransportError: If a page fails; its ``partial`` attribute holds
                the entries gathered before the failure
        """
        entries = []
        token = continuation_token
        while True:
            try:
                page = self.list(path, token, PAGE_SIZE)
            except TransportError as e:
                e.partial = entries
                raise
            entries.extend(page.entries)
            if not page.is_truncated:
                return entries
            token = page.next_token
