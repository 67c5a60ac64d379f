import io
import os
from datetime import datetime, timezone

import pytest

from bucketfs import BucketFS
from bucketfs.client.exceptions import ObjectNotFoundError
from bucketfs.client.types import HeadObjectOutput, ListObjectsV2Output, ObjectSummary

BUCKET = "test-bucket"
MTIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    """Configure test environment."""
    # Exercise the trace logging paths in every test
    os.environ.setdefault("BUCKETFS_TRACE_OPS", "true")


class RecordingStream(io.BytesIO):
    """Range body that remembers the byte range it was opened for."""

    def __init__(self, data, start, end):
        super().__init__(data)
        self.start = start
        self.end = end


class InMemoryStore:
    """
    ObjectStore test double keeping objects in a dict.

    Listing follows ListObjectsV2: keys are walked in sorted order, keys
    sharing a delimited prefix collapse into one common prefix, and both
    count towards max_keys. Set ``errors[op]`` to make "head", "list" or
    "get" raise, and ``list_fail_after`` to fail listings after that many
    successful calls.
    """

    def __init__(self, objects=None):
        self.objects = dict(objects or {})
        self.calls = []
        self.streams = []
        self.errors = {}
        self.list_fail_after = None

    def put(self, key, data):
        self.objects[key] = data

    def _maybe_fail(self, op):
        if op in self.errors:
            raise self.errors[op]

    def calls_for(self, op):
        return [call for call in self.calls if call[0] == op]

    def head_object(self, bucket, key):
        self.calls.append(("head", key))
        self._maybe_fail("head")
        if key not in self.objects:
            raise ObjectNotFoundError(bucket, key)
        return HeadObjectOutput(content_length=len(self.objects[key]), last_modified=MTIME, etag='"etag"')

    def list_objects_v2(self, bucket, prefix, delimiter=None, continuation_token=None, max_keys=1000):
        self.calls.append(("list", prefix, delimiter, continuation_token, max_keys))
        self._maybe_fail("list")
        if self.list_fail_after is not None and len(self.calls_for("list")) > self.list_fail_after:
            raise ConnectionError("connection reset by peer")

        items = []
        seen = set()
        for key in sorted(self.objects):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if delimiter and delimiter in rest:
                common = prefix + rest[:rest.index(delimiter) + 1]
                if common not in seen:
                    seen.add(common)
                    items.append((common, None))
            else:
                items.append((key, ObjectSummary(key=key, size=len(self.objects[key]), last_modified=MTIME)))
        if continuation_token:
            items = [item for item in items if item[0] > continuation_token]

        page = items[:max_keys]
        truncated = len(items) > max_keys
        return ListObjectsV2Output(
            common_prefixes=[name for name, obj in page if obj is None],
            contents=[obj for _, obj in page if obj is not None],
            next_continuation_token=page[-1][0] if truncated else None,
            is_truncated=truncated,
        )

    def get_object_range(self, bucket, key, start, end):
        self.calls.append(("get", key, start, end))
        self._maybe_fail("get")
        if key not in self.objects:
            raise ObjectNotFoundError(bucket, key)
        stream = RecordingStream(self.objects[key][start:end + 1], start, end)
        self.streams.append(stream)
        return stream


@pytest.fixture
def store():
    """Store seeded with a file at the root and one in a subdirectory."""
    return InMemoryStore({"a.txt": b"hello", "dir/b.txt": b"bye"})


@pytest.fixture
def empty_store():
    return InMemoryStore()


@pytest.fixture
def fs(store):
    return BucketFS(store, BUCKET)
