# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Object store collaborators.

This module defines the small surface bucketfs needs from an object store
and a boto3-backed implementation of it.

Classes:
    ObjectStore: Protocol implemented by store clients.
    S3Store: ObjectStore over a boto3 S3 client.
"""
from typing import Any, BinaryIO, Optional, Protocol

import boto3
from botocore.exceptions import ClientError

from ..utils import logger
from .exceptions import ObjectNotFoundError
from .types import HeadObjectOutput, ListObjectsV2Output, ObjectSummary

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class ObjectStore(Protocol):
    """Store operations consumed by the filesystem layer."""

    def head_object(self, bucket: str, key: str) -> HeadObjectOutput:
        ...

    def list_objects_v2(
        self,
        bucket: str,
        prefix: str,
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_keys: int = 1000,
    ) -> ListObjectsV2Output:
        ...

    def get_object_range(self, bucket: str, key: str, start: int, end: int) -> BinaryIO:
        ...


def _is_not_found(e: ClientError) -> bool:
    """
    Check whether a botocore error means the object is absent.

    Args:
        e (ClientError): The error raised by the boto3 client.

    Returns:
        bool: True for 404 / NoSuchKey / NotFound responses.
    """
    error = e.response.get("Error", {})
    status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return str(error.get("Code")) in NOT_FOUND_CODES or status == 404


def _convert_client_error(e: ClientError, bucket: str, key: str) -> Exception:
    """
    Convert a botocore error to the store error the filesystem layer expects.

    Not-found responses become ObjectNotFoundError; anything else is
    returned unchanged so the caller can tag it with the operation.

    Args:
        e (ClientError): The error raised by the boto3 client.
        bucket (str): Bucket the request targeted.
        key (str): Key the request targeted.

    Returns:
        Exception: The converted error.
    """
    if _is_not_found(e):
        return ObjectNotFoundError(bucket, key)
    return e


class S3Store:
    """
    ObjectStore backed by a boto3 S3 client.

    No retries are layered on top of the client; configure them on the
    botocore client if needed.

    Attributes:
        client: The boto3 S3 client used for every request.
    """

    def __init__(self, client: Any):
        self.client = client

    @classmethod
    def from_session(
        cls,
        profile: Optional[str] = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ) -> "S3Store":
        """
        Build a store from a boto3 session.

        Args:
            profile (str, optional): AWS profile name. Defaults to the default profile.
            region (str, optional): Region name. Defaults to the session's region.
            endpoint_url (str, optional): Custom endpoint for S3-compatible stores.

        Returns:
            S3Store: A store wrapping a new S3 client.
        """
        session = boto3.session.Session(profile_name=profile, region_name=region)
        logger.info(f"Creating S3 client (profile={profile or 'default'}, region={session.region_name}, endpoint={endpoint_url})")
        return cls(session.client("s3", endpoint_url=endpoint_url))

    def head_object(self, bucket: str, key: str) -> HeadObjectOutput:
        try:
            resp = self.client.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            raise _convert_client_error(e, bucket, key) from e
        return HeadObjectOutput(
            content_length=resp["ContentLength"],
            last_modified=resp["LastModified"],
            etag=resp.get("ETag"),
        )

    def list_objects_v2(
        self,
        bucket: str,
        prefix: str,
        delimiter: Optional[str] = None,
        continuation_token: Optional[str] = None,
        max_keys: int = 1000,
    ) -> ListObjectsV2Output:
        params = {"Bucket": bucket, "Prefix": prefix, "MaxKeys": max_keys}
        if delimiter:
            params["Delimiter"] = delimiter
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        resp = self.client.list_objects_v2(**params)
        return ListObjectsV2Output(
            common_prefixes=[p["Prefix"] for p in resp.get("CommonPrefixes", [])],
            contents=[
                ObjectSummary(key=obj["Key"], size=obj["Size"], last_modified=obj["LastModified"])
                for obj in resp.get("Contents", [])
            ],
            next_continuation_token=resp.get("NextContinuationToken"),
            is_truncated=bool(resp.get("IsTruncated", False)),
        )

    def get_object_range(self, bucket: str, key: str, start: int, end: int) -> BinaryIO:
        try:
            resp = self.client.get_object(Bucket=bucket, Key=key, Range=f"bytes={start}-{end}")
        except ClientError as e:
            raise _convert_client_error(e, bucket, key) from e
        return resp["Body"]
