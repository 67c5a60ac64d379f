from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from bucketfs.client.exceptions import ObjectNotFoundError
from bucketfs.client.store import S3Store

MTIME = datetime(2024, 5, 1, tzinfo=timezone.utc)


def client_error(code, status, operation="HeadObject"):
    return ClientError(
        {"Error": {"Code": code, "Message": "boom"}, "ResponseMetadata": {"HTTPStatusCode": status}},
        operation,
    )


@pytest.fixture
def client():
    return MagicMock()


def test_head_object(client):
    client.head_object.return_value = {"ContentLength": 5, "LastModified": MTIME, "ETag": '"abc"'}
    out = S3Store(client).head_object("bucket", "a.txt")
    client.head_object.assert_called_once_with(Bucket="bucket", Key="a.txt")
    assert out.content_length == 5
    assert out.last_modified == MTIME
    assert out.etag == '"abc"'


@pytest.mark.parametrize("code,status", [("404", 404), ("NoSuchKey", 404), ("NotFound", 404)])
def test_head_object_not_found(client, code, status):
    client.head_object.side_effect = client_error(code, status)
    with pytest.raises(ObjectNotFoundError) as exc_info:
        S3Store(client).head_object("bucket", "missing")
    assert exc_info.value.key == "missing"
    assert isinstance(exc_info.value.__cause__, ClientError)


def test_head_object_other_errors_propagate(client):
    client.head_object.side_effect = client_error("403", 403)
    with pytest.raises(ClientError):
        S3Store(client).head_object("bucket", "secret")


def test_list_objects_v2(client):
    client.list_objects_v2.return_value = {
        "CommonPrefixes": [{"Prefix": "dir/sub/"}],
        "Contents": [{"Key": "dir/b.txt", "Size": 3, "LastModified": MTIME}],
        "NextContinuationToken": "token-2",
        "IsTruncated": True,
    }
    out = S3Store(client).list_objects_v2("bucket", "dir/", delimiter="/", continuation_token="token-1", max_keys=2)
    client.list_objects_v2.assert_called_once_with(
        Bucket="bucket", Prefix="dir/", MaxKeys=2, Delimiter="/", ContinuationToken="token-1"
    )
    assert out.common_prefixes == ["dir/sub/"]
    assert out.contents[0].key == "dir/b.txt"
    assert out.contents[0].size == 3
    assert out.next_continuation_token == "token-2"
    assert out.is_truncated
    assert out.key_count == 2


def test_list_objects_v2_omits_unset_arguments(client):
    client.list_objects_v2.return_value = {"KeyCount": 0, "IsTruncated": False}
    out = S3Store(client).list_objects_v2("bucket", "dir", max_keys=1)
    client.list_objects_v2.assert_called_once_with(Bucket="bucket", Prefix="dir", MaxKeys=1)
    assert out.key_count == 0
    assert not out.is_truncated


def test_get_object_range(client):
    body = MagicMock()
    client.get_object.return_value = {"Body": body}
    assert S3Store(client).get_object_range("bucket", "a.txt", 2, 4) is body
    client.get_object.assert_called_once_with(Bucket="bucket", Key="a.txt", Range="bytes=2-4")


def test_get_object_range_not_found(client):
    client.get_object.side_effect = client_error("NoSuchKey", 404, "GetObject")
    with pytest.raises(ObjectNotFoundError):
        S3Store(client).get_object_range("bucket", "gone", 0, 10)


def test_from_session():
    with patch("boto3.session.Session") as session_cls:
        session_cls.return_value.region_name = "eu-west-1"
        store = S3Store.from_session(profile="dev", region="eu-west-1", endpoint_url="http://localhost:9000")
    session_cls.assert_called_once_with(profile_name="dev", region_name="eu-west-1")
    session_cls.return_value.client.assert_called_once_with("s3", endpoint_url="http://localhost:9000")
    assert store.client is session_cls.return_value.client.return_value
