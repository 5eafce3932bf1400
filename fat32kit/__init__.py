"""Parse, check and describe FAT32 boot sectors, FSInfo blocks, directory entries and long file names."""

__version__ = "0.1.0"
__all__ = ["helpers", "lfn", "structs", "utf8"]