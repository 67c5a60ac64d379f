# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
File handles for bucketfs.

A FileHandle is returned by BucketFS.open. It caches the path's metadata,
keeps a read offset, and serves reads from a byte-range stream that is
opened lazily and dropped whenever the position changes. Directory
handles page through their children with a continuation token.

A handle is meant for one caller at a time; no locking is done.
"""
import enum
import os
from typing import List, Optional

from ..client.exceptions import (
    ClosedError,
    EndOfData,
    InvalidArgumentError,
    ObjectNotFoundError,
    NotExistError,
    TransportError,
)
from ..utils import logger
from .lister import PAGE_SIZE
from .metadata import DirEntry, Metadata
from .reader import open_range


class HandleState(enum.Enum):
    FRESH = "fresh"          # metadata not fetched yet
    READY = "ready"          # metadata known, no open stream
    STREAMING = "streaming"  # range stream open
    CLOSED = "closed"


class FileHandle:
    """
    Stateful handle over one object or directory.

    Attributes:
        path (str): Full object key
        offset (int): Position of the next read
        listing_token (str): Continuation token of an in-progress listing
        listing_exhausted (bool): True once the listing reached its end
    """

    def __init__(self, fs, path: str):
        # Handles are created by BucketFS.open, which resolves the metadata.
        self._fs = fs
        self.path = path
        self.offset = 0
        self.listing_token: Optional[str] = None
        self.listing_exhausted = False
        self._metadata: Optional[Metadata] = None
        self._stream = None
        self._state = HandleState.FRESH

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self):
        return f"<FileHandle path={self.path!r} state={self._state.value} offset={self.offset}>"

    def _open(self) -> "FileHandle":
        """Fetch the metadata; called once by BucketFS.open."""
        self._metadata = self._fs.resolver.stat(self.path, op="open")
        self._state = HandleState.READY
        return self

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is HandleState.CLOSED

    @property
    def metadata(self) -> Metadata:
        return self._metadata

    @property
    def name(self) -> str:
        return self._metadata.name

    @property
    def eof(self) -> bool:
        """True once the offset has reached the end of the object."""
        if self._metadata is None:
            raise ClosedError("read", self.path, "file not opened through BucketFS.open")
        return self.offset >= self._metadata.size

    def stat(self) -> Metadata:
        """Return the metadata cached when the handle was opened."""
        self._check_open("stat")
        return self._metadata

    def _check_open(self, op: str):
        if self._state is HandleState.CLOSED:
            raise ClosedError(op, self.path)
        if self._state is HandleState.FRESH:
            raise ClosedError(op, self.path, "file not opened through BucketFS.open")

    def _open_stream(self, length: int):
        try:
            stream = open_range(
                self._fs.client, self._fs.bucket, self.path, self.offset, length, self._metadata.size
            )
        except EndOfData:
            raise
        except ObjectNotFoundError as e:
            raise NotExistError("read", self.path) from e
        except Exception as e:
            logger.error(f"Range request failed for {self.path} at offset {self.offset}: {e}")
            raise TransportError("read", self.path, cause=e) from e
        self._stream = stream
        self._state = HandleState.STREAMING

    def _release_stream(self):
        if self._stream is None:
            return
        try:
            self._stream.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing stream for {self.path}: {e}")
        self._stream = None
        if self._state is HandleState.STREAMING:
            self._state = HandleState.READY

    def readinto(self, buffer) -> int:
        """
        Read up to len(buffer) bytes into buffer at the current offset.

        A short read does not mean the end of the object; check ``eof``.
        Once the end is reached further calls return 0.

        Args:
            buffer: Writable bytes-like object (bytearray, memoryview)

        Returns:
            int: Number of bytes read

        Raises:
            ClosedError: If the handle is closed
            NotExistError: If the object vanished since open
            TransportError: If the range request or the stream read fails
        """
        self._check_open("read")
        view = memoryview(buffer).cast("B")
        if len(view) == 0:
            return 0

        while True:
            fresh = False
            if self._stream is None:
                try:
                    self._open_stream(len(view))
                except EndOfData:
                    return 0
                fresh = True

            try:
                data = self._stream.read(len(view))
            except Exception as e:
                self._release_stream()
                raise TransportError("read", self.path, cause=e) from e

            n = len(data)
            view[:n] = data
            self.offset += n
            if n == 0 or self.eof:
                self._release_stream()
            if n > 0 or self.eof:
                return n
            if fresh:
                raise TransportError("read", self.path, cause=IOError(
                    f"range starting at {self.offset} returned no data before end of object"))
            # The previous range ran out before the object did; fetch the next one.
            logger.debug(f"Range exhausted for {self.path} at offset {self.offset}, reopening")

    def read(self, size: int = -1) -> bytes:
        """
        Read and return up to size bytes, or everything left if size is negative.

        Args:
            size (int): Maximum number of bytes. Defaults to -1.

        Returns:
            bytes: The data read, b"" at the end of the object
        """
        self._check_open("read")
        remaining = max(self._metadata.size - self.offset, 0)
        size = remaining if size < 0 else min(size, remaining)
        buf = bytearray(size)
        view = memoryview(buf)
        total = 0
        while total < size:
            try:
                n = self.readinto(view[total:])
            except TransportError as e:
                e.partial = bytes(buf[:total])
                raise
            if n == 0:
                break
            total += n
        return bytes(buf[:total])

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """
        Move the read position.

        With SEEK_END the target is ``size - offset``: a positive offset
        counts back from the end of the object.

        Args:
            offset (int): Position argument
            whence (int): os.SEEK_SET, os.SEEK_CUR or os.SEEK_END. Defaults to SEEK_SET.

        Returns:
            int: The new offset

        Raises:
            ClosedError: If the handle is closed
            InvalidArgumentError: If whence is unknown or the target is negative
        """
        self._check_open("seek")
        if whence == os.SEEK_SET:
            target = offset
        elif whence == os.SEEK_CUR:
            target = self.offset + offset
        elif whence == os.SEEK_END:
            target = self._metadata.size - offset
        else:
            raise InvalidArgumentError(f"invalid whence {whence}", "seek", self.path)
        if target < 0:
            raise InvalidArgumentError(f"negative position {target}", "seek", self.path)
        if target != self.offset:
            # A range stream cannot be repositioned.
            self._release_stream()
        self.offset = target
        return target

    def tell(self) -> int:
        return self.offset

    def read_at(self, buffer, offset: int) -> int:
        """Seek to offset from the start, then read into buffer."""
        self.seek(offset, os.SEEK_SET)
        return self.readinto(buffer)

    def readdir(self, n: int = 0) -> List[DirEntry]:
        """
        List the directory's children.

        If n > 0, returns at most n entries per call and resumes where the
        previous call stopped. If n <= 0, returns every remaining entry.

        Args:
            n (int): Page size. Defaults to 0.

        Returns:
            list: DirEntry objects for subdirectories and files

        Raises:
            ClosedError: If the handle is closed
            EndOfData: If the listing was already exhausted
            TransportError: If a listing request fails; for n <= 0 its
                ``partial`` attribute holds the entries gathered so far
        """
        self._check_open("readdir")
        if self.listing_exhausted:
            raise EndOfData(f"no more entries in {self.path!r}")
        lister = self._fs.lister
        if n <= 0:
            entries = lister.list_all(self.path, self.listing_token)
            self.listing_token = None
            self.listing_exhausted = True
            return entries

        page = lister.list(self.path, self.listing_token, min(n, PAGE_SIZE))
        self.listing_token = page.next_token
        if not page.is_truncated:
            self.listing_exhausted = True
        return page.entries

    def close(self):
        """Close the handle and release its stream. Safe to call repeatedly."""
        if self._state is HandleState.CLOSED:
            return
        self._release_stream()
        self._state = HandleState.CLOSED
