# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Metadata records for bucketfs.

Files and directories share one immutable record type tagged with a
FileKind. Directories are never stored; their metadata is synthesized
with size 0 and an epoch modification time.
"""
import enum
import posixpath
import stat
from dataclasses import dataclass
from datetime import datetime, timezone

DELIMITER = '/'
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

FILE_MODE = 0o664
DIR_MODE = 0o775

ROOT_NAME = '.'


class FileKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"


def base_name(key: str) -> str:
    """
    Return the last path segment of a key.

    Args:
        key (str): Object key or path, with or without a trailing delimiter.

    Returns:
        str: The base name, or "." for the bucket root.
    """
    name = posixpath.basename(key.strip(DELIMITER))
    return name or ROOT_NAME


@dataclass(frozen=True)
class Metadata:
    """
    Describes a file or a directory.

    Attributes:
        name (str): Base name without any delimiter
        size (int): Size in bytes, always 0 for directories
        mod_time (datetime): Last modification time
        kind (FileKind): FILE or DIRECTORY
    """
    name: str
    size: int
    mod_time: datetime
    kind: FileKind

    def __post_init__(self):
        if DELIMITER in self.name:
            raise ValueError(f"metadata name must be a base name, got {self.name!r}")
        if self.kind is FileKind.DIRECTORY and self.size != 0:
            raise ValueError(f"directory {self.name!r} must have size 0, got {self.size}")

    @classmethod
    def file(cls, key: str, size: int, mod_time: datetime) -> "Metadata":
        return cls(name=base_name(key), size=size, mod_time=mod_time, kind=FileKind.FILE)

    @classmethod
    def directory(cls, key: str) -> "Metadata":
        return cls(name=base_name(key), size=0, mod_time=EPOCH, kind=FileKind.DIRECTORY)

    @property
    def is_dir(self) -> bool:
        return self.kind is FileKind.DIRECTORY

    @property
    def mode(self) -> int:
        """Permission bits: 0o775 for directories, 0o664 for files."""
        return DIR_MODE if self.is_dir else FILE_MODE

    @property
    def st_mode(self) -> int:
        """Permission bits combined with the file type bits."""
        return (stat.S_IFDIR if self.is_dir else stat.S_IFREG) | self.mode

    def to_stat(self, uid: int = 0, gid: int = 0, blksize: int = 4096) -> dict:
        """
        Build a FUSE-style attribute dictionary.

        Args:
            uid (int): Owner user id. Defaults to 0.
            gid (int): Owner group id. Defaults to 0.
            blksize (int): Block size used to compute st_blocks. Defaults to 4096.

        Returns:
            dict: Attributes keyed by st_* names.
        """
        mtime = self.mod_time.timestamp()
        return {
            'st_mode': self.st_mode,
            'st_nlink': 2 if self.is_dir else 1,
            'st_size': self.size,
            'st_uid': uid,
            'st_gid': gid,
            'st_atime': mtime,
            'st_mtime': mtime,
            'st_ctime': mtime,
            'st_blksize': blksize,
            'st_blocks': (self.size + 511) // 512,
        }


@dataclass(frozen=True)
class DirEntry:
    """An entry produced while listing a directory."""
    metadata: Metadata

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def kind(self) -> FileKind:
        return self.metadata.kind

    @property
    def is_dir(self) -> bool:
        return self.metadata.is_dir

    def info(self) -> Metadata:
        """Resolve the entry to its metadata; no store call is needed."""
        return self.metadata

    @classmethod
    def for_directory(cls, prefix: str) -> "DirEntry":
        return cls(Metadata.directory(prefix))

    @classmethod
    def for_file(cls, key: str, size: int, mod_time: datetime) -> "DirEntry":
        return cls(Metadata.file(key, size, mod_time))
