from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

@dataclass
class HeadObjectOutput:
    """Metadata for an object."""
    content_length: int
    last_modified: datetime
    etag: Optional[str] = None

@dataclass
class ObjectSummary:
    """One object returned by a listing page."""
    key: str
    size: int
    last_modified: datetime

@dataclass
class ListObjectsV2Output:
    """One page of a delimited object listing."""
    common_prefixes: List[str] = field(default_factory=list)
    contents: List[ObjectSummary] = field(default_factory=list)
    next_continuation_token: Optional[str] = None
    is_truncated: bool = False

    @property
    def key_count(self) -> int:
        return len(self.common_prefixes) + len(self.contents)
