from .adapter import BucketFS
from .file import FileHandle, HandleState
from .lister import DirectoryLister, ListingPage
from .metadata import DIR_MODE, EPOCH, FILE_MODE, DirEntry, FileKind, Metadata
from .reader import READAHEAD, open_range
from .resolver import MetadataResolver
