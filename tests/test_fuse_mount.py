import errno
import os
import stat

import pytest

try:
    from fuse import FuseOSError
    from bucketfs.fuse.fuse_mount import BucketFuse, main
    from bucketfs.fuse.mount_utils import get_mount_options
except (ImportError, OSError) as e:  # fusepy needs libfuse at import time
    pytest.skip(f"fusepy unavailable: {e}", allow_module_level=True)

from bucketfs import BucketFS

from conftest import BUCKET


@pytest.fixture
def ops(store):
    return BucketFuse(BucketFS(store, BUCKET))


def test_getattr(ops):
    attrs = ops.getattr("/a.txt")
    assert stat.S_ISREG(attrs['st_mode'])
    assert attrs['st_size'] == 5
    assert stat.S_ISDIR(ops.getattr("/")['st_mode'])
    assert stat.S_ISDIR(ops.getattr("/dir")['st_mode'])


def test_getattr_missing(ops):
    with pytest.raises(FuseOSError) as exc_info:
        ops.getattr("/missing")
    assert exc_info.value.errno == errno.ENOENT


def test_getattr_store_failure(ops, store):
    store.errors["head"] = ConnectionError("down")
    with pytest.raises(FuseOSError) as exc_info:
        ops.getattr("/a.txt")
    assert exc_info.value.errno == errno.EIO


def test_readdir(ops):
    assert sorted(ops.readdir("/", None)) == ['.', '..', 'a.txt', 'dir']
    assert sorted(ops.readdir("/dir", None)) == ['.', '..', 'b.txt']


def test_open_read_release(ops, store):
    fh = ops.open("/a.txt", os.O_RDONLY)
    assert ops.read("/a.txt", 3, 0, fh) == b"hel"
    assert ops.read("/a.txt", 10, 3, fh) == b"lo"
    assert ops.read("/a.txt", 4, 1, fh) == b"ello"
    assert ops.getattr("/a.txt", fh)['st_size'] == 5
    ops.release("/a.txt", fh)
    with pytest.raises(FuseOSError) as exc_info:
        ops.read("/a.txt", 1, 0, fh)
    assert exc_info.value.errno == errno.EBADF
    assert all(stream.closed for stream in store.streams)


def test_sequential_fuse_reads_reuse_the_stream(ops, store):
    fh = ops.open("/a.txt", os.O_RDONLY)
    ops.read("/a.txt", 2, 0, fh)
    ops.read("/a.txt", 2, 2, fh)
    assert len(store.calls_for("get")) == 1


def test_open_for_write_is_read_only(ops):
    for flags in (os.O_WRONLY, os.O_RDWR):
        with pytest.raises(FuseOSError) as exc_info:
            ops.open("/a.txt", flags)
        assert exc_info.value.errno == errno.EROFS


def test_write_operations_are_read_only(ops):
    calls = [
        lambda: ops.write("/a.txt", b"x", 0, 1),
        lambda: ops.create("/new.txt", 0o644),
        lambda: ops.truncate("/a.txt", 0),
        lambda: ops.unlink("/a.txt"),
        lambda: ops.mkdir("/new", 0o755),
        lambda: ops.rmdir("/dir"),
        lambda: ops.rename("/a.txt", "/b.txt"),
        lambda: ops.chmod("/a.txt", 0o600),
        lambda: ops.chown("/a.txt", 0, 0),
        lambda: ops.symlink("/link", "/a.txt"),
    ]
    for call in calls:
        with pytest.raises(FuseOSError) as exc_info:
            call()
        assert exc_info.value.errno == errno.EROFS


def test_opendir_and_access(ops):
    assert ops.opendir("/dir") == 0
    with pytest.raises(FuseOSError) as exc_info:
        ops.opendir("/a.txt")
    assert exc_info.value.errno == errno.ENOTDIR
    assert ops.access("/a.txt", os.R_OK) == 0
    with pytest.raises(FuseOSError) as exc_info:
        ops.access("/a.txt", os.W_OK)
    assert exc_info.value.errno == errno.EROFS


def test_destroy_closes_open_handles(ops, store):
    fh = ops.open("/a.txt", os.O_RDONLY)
    ops.read("/a.txt", 1, 0, fh)
    ops.destroy("/")
    assert store.streams[0].closed


def test_statfs_is_read_only(ops):
    assert ops.statfs("/")['f_flag'] & os.ST_RDONLY


def test_mount_options_are_read_only():
    options = get_mount_options()
    assert options['ro'] is True
    assert 'allow_other' not in options
    assert get_mount_options(allow_other=True)['allow_other'] is True


def test_main_parses_arguments(monkeypatch):
    calls = []
    monkeypatch.setattr("bucketfs.fuse.fuse_mount.mount", lambda *args, **kwargs: calls.append((args, kwargs)))
    monkeypatch.delenv("BUCKETFS_TRACE_OPS", raising=False)
    main(["my-bucket", "/mnt/bucket", "--region", "us-east-1", "--allow-other"])
    assert calls == [(
        ("my-bucket", "/mnt/bucket"),
        {"allow_other": True, "profile": None, "region": "us-east-1", "endpoint_url": None},
    )]
