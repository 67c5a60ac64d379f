from .fuse_mount import main

main()
