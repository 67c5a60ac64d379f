# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Byte-range streams with read-ahead.
"""
from ..client.exceptions import EndOfData
from ..utils import logger

READAHEAD = 64 * 1024  # 64KB read-ahead per range request


def open_range(client, bucket, key, start, length, total_size):
    """
    Open a stream over bytes [start, start + length + READAHEAD).

    The range is clipped to the object's last byte. The caller owns the
    returned stream and must close it.

    Args:
        client (ObjectStore): Store client
        bucket (str): Bucket holding the object
        key (str): Object key
        start (int): First byte to fetch
        length (int): Number of bytes the caller asked for
        total_size (int): Object size in bytes

    Returns:
        A binary stream with read() and close()

    Raises:
        EndOfData: If start is at or past the end of the object; no
            request is made
    """
    if start >= total_size:
        raise EndOfData(f"offset {start} is past the end of {key} ({total_size} bytes)")
    end = min(start + length + READAHEAD - 1, total_size - 1)
    logger.debug(f"Opening range bytes={start}-{end} of {key}")
    return client.get_object_range(bucket, key, start, end)
