# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Logging helpers for bucketfs.

This module holds the package logger and the timing and tracing helpers
used by the filesystem adapter and the FUSE layer.
"""

import logging
import time
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s] - %(message)s'

logger = logging.getLogger('BucketFS')

def trace_enabled():
    """Return True when BUCKETFS_TRACE_OPS asks for operation traces."""
    return os.environ.get('BUCKETFS_TRACE_OPS', '').lower() in ('true', '1', 'yes')

def configure_logging(level=None):
    """
    Configure root logging for command-line use.

    Args:
        level (str, optional): Log level name. Defaults to BUCKETFS_LOG_LEVEL,
            then INFO.
    """
    level = (level or os.environ.get('BUCKETFS_LOG_LEVEL') or 'INFO').upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.setLevel(level)

def time_function(func_name, start_time):
    """
    Helper function for timing operations.
    
    Calculates and logs the elapsed time for a function call.
    
    Args:
        func_name (str): Name of the function being timed
        start_time (float): Start time from time.time()
        
    Returns:
        float: Elapsed time in seconds
    """
    elapsed = time.time() - start_time
    logger.info(f"{func_name} completed in {elapsed:.4f} seconds")
    return elapsed 

def trace_op(operation, path, **details):
    """
    Trace a file operation for debugging purposes.
    
    Logs the operation and its details when the BUCKETFS_TRACE_OPS
    environment variable is set.
    
    Args:
        operation (str): The file operation being performed
        path (str): The path of the file being operated on
        **details: Additional details to log
    """
    if trace_enabled():
        detail_str = ', '.join(f"{k}={v}" for k, v in details.items())
        logger.debug(f"TRACE: {operation} on {path} {detail_str}")
