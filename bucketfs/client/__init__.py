from .exceptions import (
    BucketFSError,
    ClosedError,
    EndOfData,
    InvalidArgumentError,
    NotExistError,
    ObjectNotFoundError,
    PathError,
    TransportError,
)
from .store import ObjectStore, S3Store
from .types import HeadObjectOutput, ListObjectsV2Output, ObjectSummary
