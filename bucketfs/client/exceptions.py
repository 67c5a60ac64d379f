# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Exceptions raised by bucketfs.

Every error carries a short ``ERR_*`` code alongside its message. Errors
tied to a filesystem call also record the operation name and the path.
"""
from typing import Any, Optional


class BucketFSError(Exception):
    """Base exception for bucketfs errors."""
    def __init__(self, message: str, code: str = "ERR_UNKNOWN"):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


class ObjectNotFoundError(BucketFSError):
    """The store has no object under the requested key.

    Raised by store collaborators only; the filesystem layer turns it into
    a directory probe or a NotExistError.
    """
    def __init__(self, bucket: str, key: str):
        self.bucket = bucket
        self.key = key
        super().__init__(f"Object {key} does not exist in bucket {bucket}", code="ERR_OBJECT_NOT_FOUND")


class PathError(BucketFSError):
    """An error tied to a filesystem operation on a path."""
    def __init__(self, message: str, op: str, path: str, code: str = "ERR_PATH"):
        self.op = op
        self.path = path
        super().__init__(f"{op} {path}: {message}", code=code)


class NotExistError(PathError):
    """No object and no matching prefix exists for the path."""
    def __init__(self, op: str, path: str):
        super().__init__("file does not exist", op, path, code="ERR_NOT_EXIST")


class InvalidArgumentError(PathError):
    """An argument would put the handle in an invalid position."""
    def __init__(self, message: str, op: str, path: str):
        super().__init__(message, op, path, code="ERR_INVALID")


class ClosedError(PathError):
    """Operation attempted on a closed or never-opened file handle."""
    def __init__(self, op: str, path: str, message: str = "file already closed"):
        super().__init__(message, op, path, code="ERR_CLOSED")


class TransportError(PathError):
    """The underlying store call failed.

    Attributes:
        partial: Bytes or directory entries produced before the failure,
            or None when nothing was produced.
    """
    def __init__(self, op: str, path: str, cause: Optional[BaseException] = None, partial: Any = None):
        self.cause = cause
        self.partial = partial
        message = str(cause) if cause is not None else "store request failed"
        super().__init__(message, op, path, code=f"ERR_TRANSPORT_{op.upper()}")


class EndOfData(BucketFSError):
    """Sentinel: every byte or directory entry has been consumed."""
    def __init__(self, message: str = "end of data"):
        super().__init__(message, code="ERR_EOF")
