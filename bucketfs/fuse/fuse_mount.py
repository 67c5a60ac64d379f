# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Read-only FUSE mount for bucketfs.

This module serves a BucketFS through FUSE so a bucket can be browsed
with ordinary tools. Every write-side operation fails with EROFS.

Usage:
    # Create a mount point
    mkdir -p /mnt/bucket

    # Mount the bucket
    python -m bucketfs.fuse my-bucket /mnt/bucket

    # Now you can read the files as if they were local
    ls /mnt/bucket
    cat /mnt/bucket/example.txt
"""

from fuse import FUSE, FuseOSError, Operations
import errno
import itertools
import os
import sys
import time
from threading import Lock

from bucketfs.client.exceptions import BucketFSError, ClosedError, InvalidArgumentError, NotExistError
from bucketfs.client.store import S3Store
from bucketfs.fs.adapter import BucketFS

from ..utils import logger, time_function, trace_op, configure_logging
from .mount_utils import unmount, setup_signal_handlers, get_mount_options


def _to_fuse_error(e):
    """
    Map a bucketfs error to a FuseOSError.

    Args:
        e (Exception): The error raised by the filesystem layer

    Returns:
        FuseOSError: The error to raise back to FUSE
    """
    if isinstance(e, NotExistError):
        return FuseOSError(errno.ENOENT)
    if isinstance(e, InvalidArgumentError):
        return FuseOSError(errno.EINVAL)
    if isinstance(e, ClosedError):
        return FuseOSError(errno.EBADF)
    return FuseOSError(errno.EIO)


class _OpenFile:
    """An open FileHandle plus the lock serializing FUSE calls on it."""
    __slots__ = ('handle', 'lock')

    def __init__(self, handle):
        self.handle = handle
        self.lock = Lock()


class BucketFuse(Operations):
    """
    Read-only FUSE operations backed by a BucketFS.

    Attributes:
        fs (BucketFS): The filesystem adapter being served
        uid (int): Owner reported for every entry
        gid (int): Group reported for every entry
    """

    def __init__(self, fs):
        logger.info(f"Initializing BucketFuse for bucket: {fs.bucket}")
        self.fs = fs
        self.uid = os.getuid()
        self.gid = os.getgid()
        self._files = {}
        self._files_lock = Lock()
        self._next_fh = itertools.count(1)

    def _get_file(self, fh):
        with self._files_lock:
            open_file = self._files.get(fh)
        if open_file is None:
            raise FuseOSError(errno.EBADF)
        return open_file

    def getattr(self, path, fh=None):
        """
        Get file attributes.

        Args:
            path (str): Path to the file or directory
            fh (int, optional): File handle

        Returns:
            dict: File attributes

        Raises:
            FuseOSError: ENOENT if the path does not exist, EIO on store errors
        """
        trace_op("getattr", path, fh=fh)
        start_time = time.time()
        try:
            if fh:
                metadata = self._get_file(fh).handle.metadata
            else:
                metadata = self.fs.stat(path)
        except BucketFSError as e:
            logger.debug(f"getattr failed for {path}: {e}")
            raise _to_fuse_error(e)
        time_function("getattr", start_time)
        return metadata.to_stat(self.uid, self.gid)

    def readdir(self, path, fh):
        """
        List directory contents.

        Args:
            path (str): Path to the directory
            fh (int): File handle

        Returns:
            list: Entry names including '.' and '..'
        """
        trace_op("readdir", path, fh=fh)
        start_time = time.time()
        try:
            with self.fs.open(path) as handle:
                entries = handle.readdir(0)
        except BucketFSError as e:
            logger.error(f"readdir failed for {path}: {e}")
            raise _to_fuse_error(e)
        result = ['.', '..'] + [entry.name for entry in entries]
        logger.debug(f"readdir returning {len(result)} entries for {path}")
        time_function("readdir", start_time)
        return result

    def open(self, path, flags):
        """
        Open a file for reading.

        Args:
            path (str): Path to the file
            flags (int): Open flags (O_RDONLY, O_WRONLY, etc.)

        Returns:
            int: File handle number

        Raises:
            FuseOSError: EROFS for write access, ENOENT if the file does not exist
        """
        trace_op("open", path, flags=flags)
        if (flags & os.O_ACCMODE) != os.O_RDONLY:
            logger.warning(f"open: rejecting write access to {path}")
            raise FuseOSError(errno.EROFS)
        try:
            handle = self.fs.open(path)
        except BucketFSError as e:
            logger.error(f"open failed for {path}: {e}")
            raise _to_fuse_error(e)
        fh = next(self._next_fh)
        with self._files_lock:
            self._files[fh] = _OpenFile(handle)
        logger.debug(f"open: {path} assigned fh={fh}")
        return fh

    def read(self, path, size, offset, fh):
        """
        Read file contents.

        Args:
            path (str): Path to the file
            size (int): Number of bytes to read
            offset (int): Offset in the file to start reading from
            fh (int): File handle

        Returns:
            bytes: The requested data
        """
        trace_op("read", path, size=size, offset=offset, fh=fh)
        open_file = self._get_file(fh)
        buf = bytearray(size)
        view = memoryview(buf)
        total = 0
        try:
            with open_file.lock:
                handle = open_file.handle
                if handle.offset != offset:
                    handle.seek(offset)
                while total < size:
                    n = handle.readinto(view[total:])
                    if n == 0:
                        break
                    total += n
        except BucketFSError as e:
            logger.error(f"read failed for {path} at offset {offset}: {e}")
            raise _to_fuse_error(e)
        return bytes(buf[:total])

    def release(self, path, fh):
        """
        Close the handle behind fh.

        Args:
            path (str): Path to the file
            fh (int): File handle

        Returns:
            int: 0
        """
        trace_op("release", path, fh=fh)
        with self._files_lock:
            open_file = self._files.pop(fh, None)
        if open_file is not None:
            with open_file.lock:
                open_file.handle.close()
        return 0

    def opendir(self, path):
        trace_op("opendir", path)
        try:
            metadata = self.fs.stat(path)
        except BucketFSError as e:
            raise _to_fuse_error(e)
        if not metadata.is_dir:
            raise FuseOSError(errno.ENOTDIR)
        return 0

    def access(self, path, mode):
        trace_op("access", path, mode=mode)
        if mode & os.W_OK:
            raise FuseOSError(errno.EROFS)
        try:
            self.fs.stat(path)
        except BucketFSError as e:
            raise _to_fuse_error(e)
        return 0

    def statfs(self, path):
        """
        Get filesystem statistics.

        Object stores have no fixed capacity; report a large, full-free
        read-only filesystem.

        Args:
            path (str): Path to get statistics for

        Returns:
            dict: A dictionary containing filesystem statistics
        """
        trace_op("statfs", path)
        block_size = 4096
        total_blocks = 1250000000     # 5TB
        return {
            'f_bsize': block_size,
            'f_frsize': block_size,
            'f_blocks': total_blocks,
            'f_bfree': 0,
            'f_bavail': 0,
            'f_files': 1000000000,
            'f_ffree': 0,
            'f_favail': 0,
            'f_flag': os.ST_RDONLY,
            'f_namemax': 1024,
        }

    def _read_only(self, operation, path):
        trace_op(operation, path)
        logger.warning(f"{operation}: {path} is on a read-only filesystem")
        raise FuseOSError(errno.EROFS)

    def write(self, path, data, offset, fh):
        self._read_only("write", path)

    def create(self, path, mode, fi=None):
        self._read_only("create", path)

    def truncate(self, path, length, fh=None):
        self._read_only("truncate", path)

    def unlink(self, path):
        self._read_only("unlink", path)

    def mkdir(self, path, mode):
        self._read_only("mkdir", path)

    def rmdir(self, path):
        self._read_only("rmdir", path)

    def rename(self, old, new):
        self._read_only("rename", old)

    def chmod(self, path, mode):
        self._read_only("chmod", path)

    def chown(self, path, uid, gid):
        self._read_only("chown", path)

    def symlink(self, target, source):
        self._read_only("symlink", target)

    def link(self, target, source):
        self._read_only("link", target)

    def destroy(self, path):
        """Close every handle still open when the filesystem is unmounted."""
        with self._files_lock:
            open_files = list(self._files.values())
            self._files.clear()
        for open_file in open_files:
            open_file.handle.close()
        logger.info(f"Closed {len(open_files)} open handles on unmount")


def mount(bucket, mountpoint, foreground=True, allow_other=False, profile=None, region=None, endpoint_url=None):
    """
    Mount a bucket read-only at the specified mountpoint.

    Args:
        bucket (str): Name of the bucket to mount
        mountpoint (str): Local path where the filesystem should be mounted
        foreground (bool, optional): Run in foreground. Defaults to True.
        allow_other (bool, optional): Allow other users to access the mount.
            Requires 'user_allow_other' in /etc/fuse.conf. Defaults to False.
        profile (str, optional): AWS profile name
        region (str, optional): AWS region name
        endpoint_url (str, optional): Endpoint of an S3-compatible store
    """
    logger.info(f"Mounting bucket {bucket} at {mountpoint}")
    start_time = time.time()

    if os.path.exists(mountpoint) and not os.path.isdir(mountpoint):
        logger.error(f"Mountpoint path exists but is not a directory: {mountpoint}")
        print(f"Error: {mountpoint} exists but is not a directory. Please specify a directory path.")
        return
    if not os.path.exists(mountpoint):
        logger.info(f"Mountpoint {mountpoint} does not exist, creating it...")
        try:
            os.makedirs(mountpoint, mode=0o755)
        except OSError as e:
            logger.error(f"Failed to create mountpoint {mountpoint}: {e}")
            print(f"Error: Failed to create mountpoint directory {mountpoint}: {e}")
            return

    store = S3Store.from_session(profile=profile, region=region, endpoint_url=endpoint_url)
    operations = BucketFuse(BucketFS(store, bucket))
    options = get_mount_options(foreground, allow_other)
    setup_signal_handlers(mountpoint, unmount)

    try:
        logger.info(f"Starting FUSE mount with options: {options}")
        FUSE(operations, mountpoint, nothreads=False, **options)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, unmounting...")
        unmount(mountpoint)
    except RuntimeError as e:
        logger.error(f"Error during mount: {e}")
        print(f"Error: {e}")
        unmount(mountpoint)
    finally:
        time_function("mount", start_time)


def main(argv=None):
    """
    CLI entry point for mounting buckets.

    Usage:
        python -m bucketfs.fuse <bucket> <mountpoint>

    Options:
        --profile, --region, --endpoint-url: S3 client configuration
        --allow-other: Allow other users to access the mount
            (requires user_allow_other in /etc/fuse.conf)
        --trace: Enable detailed tracing of file operations for debugging
        --log-level: Log level name (default: BUCKETFS_LOG_LEVEL or INFO)
    """
    import argparse
    parser = argparse.ArgumentParser(description='Mount an object storage bucket as a read-only filesystem')
    parser.add_argument('bucket', help='The name of the bucket to mount')
    parser.add_argument('mountpoint', help='The directory to mount the bucket on')
    parser.add_argument('--profile', help='AWS profile to use')
    parser.add_argument('--region', help='AWS region of the bucket')
    parser.add_argument('--endpoint-url', help='Endpoint URL of an S3-compatible store')
    parser.add_argument('--allow-other', action='store_true',
                        help='Allow other users to access the mount (requires user_allow_other in /etc/fuse.conf)')
    parser.add_argument('--trace', action='store_true',
                        help='Enable detailed tracing of file operations for debugging')
    parser.add_argument('--log-level', help='Log level (DEBUG, INFO, WARNING, ERROR)')

    args = parser.parse_args(argv)

    if args.trace:
        os.environ['BUCKETFS_TRACE_OPS'] = 'true'
        print("Detailed operation tracing enabled")
    configure_logging('DEBUG' if args.trace else args.log_level)

    logger.info(f"Starting bucketfs CLI with arguments: {sys.argv}")
    mount(args.bucket, args.mountpoint, allow_other=args.allow_other,
          profile=args.profile, region=args.region, endpoint_url=args.endpoint_url)


if __name__ == '__main__':
    main()
