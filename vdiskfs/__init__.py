"""Virtual disk files with MBR/EBR partitions and an ext2-style filesystem: mount and rename."""

__version__ = "0.1.0"

__all__ = ["structures", "mounts", "mount", "rename"]