from .fuse_mount import BucketFuse, mount, main
