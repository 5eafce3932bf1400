"""On-disk FAT32 structures and in-memory file and directory records."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, fields
from typing import ClassVar, List

SECTOR_SIZE = 512
DIRENT_SIZE = 32
NDIR_PER_SEC = SECTOR_SIZE // DIRENT_SIZE

BOOT_SIGNATURE = 0xAA55
EXTENDED_SIGNATURE = 0x29
FSINFO_SIG1 = 0x41615252
FSINFO_SIG2 = 0x61417272
FSINFO_SIG3 = 0xAA550000


class DirentAttr(enum.IntFlag):
    """Bits of a directory entry's attribute byte."""

    RO = 0x01
    HIDDEN = 0x02
    SYSTEM_FILE = 0x04
    VOLUME_LABEL = 0x08
    LONG_FILE_NAME = 0x0F
    DIR = 0x10
    ARCHIVE = 0x20


class ClusterType(enum.IntEnum):
    """Classification of a FAT table entry."""

    FREE = 0x0
    RESERVED = 0x1
    BAD = 0xFFFFFF7
    LAST = 0xFFFFFF8
    USED = 0xFFFFFF9


def _unpack(cls, layout: struct.Struct, data: bytes):
    if len(data) < layout.size:
        raise ValueError(f"{cls.__name__} needs {layout.size} bytes, got {len(data)}")
    return cls(*layout.unpack_from(data))


def _pack(obj, layout: struct.Struct) -> bytes:
    return layout.pack(*(getattr(obj, f.name) for f in fields(obj)))


_BOOT_LAYOUT = struct.Struct("<3s8sHBHBHHBHHHIIIHHIHH12sBBBI11s8s420sH")
_FSINFO_LAYOUT = struct.Struct("<I480sIII12sI")
_DIRENT_LAYOUT = struct.Struct("<11sBBBHHHHHHHI")
_LFN_LAYOUT = struct.Struct("<B10sBBB12sH4s")


@dataclass
class BootSector:
    """The volume id: first sector of a FAT32 partition."""

    SIZE: ClassVar[int] = _BOOT_LAYOUT.size

    asm_code: bytes = bytes(3)
    oem: bytes = bytes(8)
    bytes_per_sec: int = 0
    sec_per_cluster: int = 0
    reserved_area_nsec: int = 0
    nfats: int = 0
    max_files: int = 0
    fs_nsec: int = 0
    media_type: int = 0
    zero: int = 0
    sec_per_track: int = 0
    n_heads: int = 0
    hidden_secs: int = 0
    nsec_in_fs: int = 0
    nsec_per_fat: int = 0
    mirror_flags: int = 0
    version: int = 0
    first_cluster: int = 0
    info_sec_num: int = 0
    backup_boot_loc: int = 0
    reserved: bytes = bytes(12)
    logical_drive_num: int = 0
    reserved1: int = 0
    extended_sig: int = 0
    serial_num: int = 0
    volume_label: bytes = bytes(11)
    fs_type: bytes = bytes(8)
    ignore: bytes = bytes(420)
    sig: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "BootSector":
        """Parse the first 512 bytes of ``data``."""
        return _unpack(cls, _BOOT_LAYOUT, data)

    def to_bytes(self) -> bytes:
        """Serialise to the 512-byte on-disk form."""
        return _pack(self, _BOOT_LAYOUT)


@dataclass
class FsInfo:
    """The FSInfo sector of a FAT32 partition."""

    SIZE: ClassVar[int] = _FSINFO_LAYOUT.size

    sig1: int = 0
    reserved0: bytes = bytes(480)
    sig2: int = 0
    free_cluster_count: int = 0
    next_free_cluster: int = 0
    reserved1: bytes = bytes(12)
    sig3: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "FsInfo":
        """Parse the first 512 bytes of ``data``."""
        return _unpack(cls, _FSINFO_LAYOUT, data)

    def to_bytes(self) -> bytes:
        """Serialise to the 512-byte on-disk form."""
        return _pack(self, _FSINFO_LAYOUT)


@dataclass
class Dirent:
    """A 32-byte short-name directory entry."""

    SIZE: ClassVar[int] = _DIRENT_LAYOUT.size

    filename: bytes = bytes(11)
    attr: int = 0
    reserved0: int = 0
    ctime_tenths: int = 0
    ctime: int = 0
    create_date: int = 0
    access_date: int = 0
    hi_start: int = 0
    mod_time: int = 0
    mod_date: int = 0
    lo_start: int = 0
    file_nbytes: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "Dirent":
        """Parse the first 32 bytes of ``data``."""
        return _unpack(cls, _DIRENT_LAYOUT, data)

    def to_bytes(self) -> bytes:
        """Serialise to the 32-byte on-disk form."""
        return _pack(self, _DIRENT_LAYOUT)

    def cluster_id(self) -> int:
        """First cluster of the entry's data."""
        return (self.hi_start << 16) | self.lo_start

    def is_dir(self) -> bool:
        return self.attr == DirentAttr.DIR

    def is_lfn(self) -> bool:
        return self.attr == DirentAttr.LONG_FILE_NAME


@dataclass
class LfnEntry:
    """A 32-byte long-file-name directory entry."""

    SIZE: ClassVar[int] = _LFN_LAYOUT.size

    seqno: int = 0
    name1_5: bytes = bytes(10)
    attr: int = int(DirentAttr.LONG_FILE_NAME)
    reserved: int = 0
    cksum: int = 0
    name6_11: bytes = bytes(12)
    reserved1: int = 0
    name12_13: bytes = bytes(4)

    @classmethod
    def from_bytes(cls, data: bytes) -> "LfnEntry":
        """Parse the first 32 bytes of ``data``."""
        return _unpack(cls, _LFN_LAYOUT, data)

    def to_bytes(self) -> bytes:
        """Serialise to the 32-byte on-disk form."""
        return _pack(self, _LFN_LAYOUT)

    def is_last(self) -> bool:
        return (self.seqno & 0x40) != 0

    def is_first(self) -> bool:
        return (self.seqno & ~0x40) == 1

    def is_deleted(self) -> bool:
        return (self.seqno & 0xE5) == 0xE5

    def name_bytes(self) -> bytes:
        """The 26 bytes of UTF-16LE name characters, in order."""
        return bytes(self.name1_5) + bytes(self.name6_11) + bytes(self.name12_13)


@dataclass
class PiFile:
    """A file's contents held in memory."""

    data: bytes = b""

    @property
    def n_data(self) -> int:
        return len(self.data)


@dataclass
class PiDirent:
    """A directory entry as presented to callers."""

    name: str
    raw_name: bytes
    cluster_id: int
    is_dir: bool
    nbytes: int


def parse_dirents(data: bytes) -> List[Dirent]:
    """Split raw directory data into 32-byte entries."""
    if len(data) % DIRENT_SIZE:
        raise ValueError(f"directory data length {len(data)} is not a multiple of {DIRENT_SIZE}")
    view = memoryview(data)
    return [
        Dirent.from_bytes(bytes(view[offset:offset + DIRENT_SIZE]))
        for offset in range(0, len(data), DIRENT_SIZE)
    ]