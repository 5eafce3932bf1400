"""Checks, classification and text rendering for FAT32 structures."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Union

from .structs import (
    BOOT_SIGNATURE,
    EXTENDED_SIGNATURE,
    FSINFO_SIG1,
    FSINFO_SIG2,
    FSINFO_SIG3,
    SECTOR_SIZE,
    BootSector,
    ClusterType,
    Dirent,
    DirentAttr,
    FsInfo,
    LfnEntry,
)

_FAT_ENTRY_MASK = 0x0FFFFFFF
_DELETED_MARK = 0xE5
_NAME_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")

_TYPE_NAMES = {
    ClusterType.FREE: "FREE_CLUSTER",
    ClusterType.RESERVED: "RESERVED_CLUSTER",
    ClusterType.BAD: "BAD_CLUSTER",
    ClusterType.LAST: "LAST_CLUSTER",
    ClusterType.USED: "USED_CLUSTER",
}

_KIND_NAMES = {
    int(DirentAttr.SYSTEM_FILE): " SYSTEM FILE",
    int(DirentAttr.VOLUME_LABEL): " VOLUME LABEL",
    int(DirentAttr.DIR): " DIR",
    int(DirentAttr.ARCHIVE): " ARCHIVE",
}


class Fat32Error(Exception):
    """Raised when FAT32 data breaks an invariant the filesystem relies on."""


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise Fat32Error(message)


def _is_pow2(x: int) -> bool:
    return (x & -x) == x


def _cstr(raw: bytes) -> str:
    """Text of a fixed-size field, up to the first NUL byte."""
    return bytes(raw).split(b"\0", 1)[0].decode("latin-1")


def _as_lfn(d: Dirent) -> LfnEntry:
    return LfnEntry.from_bytes(d.to_bytes())


def check_volume_id(boot: BootSector) -> None:
    """Raise ``Fat32Error`` unless ``boot`` looks like a usable FAT32 volume id."""
    _require(boot.bytes_per_sec == SECTOR_SIZE,
             f"bytes_per_sec must be {SECTOR_SIZE}, got {boot.bytes_per_sec}")
    _require(boot.nfats == 2, f"expected 2 FATs, got {boot.nfats}")
    _require(boot.sig == BOOT_SIGNATURE, f"bad boot signature {boot.sig:#x}")
    _require(_is_pow2(boot.sec_per_cluster),
             f"sec_per_cluster {boot.sec_per_cluster} is not a power of two")
    _require(boot.bytes_per_sec in (512, 1024, 2048, 4096),
             f"bad bytes_per_sec {boot.bytes_per_sec}")
    _require(boot.max_files == 0, f"max_files must be 0, got {boot.max_files}")
    _require(boot.fs_nsec == 0, f"fs_nsec must be 0, got {boot.fs_nsec}")
    _require(boot.zero == 0, f"FAT16 size field must be 0, got {boot.zero}")
    _require(boot.nsec_in_fs != 0, "nsec_in_fs must not be 0")
    _require(boot.info_sec_num == 1, f"info_sec_num must be 1, got {boot.info_sec_num}")
    _require(boot.backup_boot_loc == 6,
             f"backup_boot_loc must be 6, got {boot.backup_boot_loc}")
    _require(boot.extended_sig == EXTENDED_SIGNATURE,
             f"bad extended signature {boot.extended_sig:#x}")


def describe_volume_id(msg: str, boot: BootSector) -> str:
    """Render ``boot`` as text, then check it."""
    lines = [
        f"{msg}:",
        f"\toem               = <{_cstr(boot.oem)}>",
        f"\tbytes_per_sec     = {boot.bytes_per_sec}",
        f"\tsec_per_cluster   = {boot.sec_per_cluster}",
        f"\treserved size     = {boot.reserved_area_nsec}",
        f"\tnfats             = {boot.nfats}",
        f"\tmax_files         = {boot.max_files}",
        f"\tfs n sectors      = {boot.fs_nsec}",
        f"\tmedia type        = {boot.media_type:x}",
        f"\tsec per track     = {boot.sec_per_track}",
        f"\tn heads           = {boot.n_heads}",
        f"\tn hidden secs     = {boot.hidden_secs}",
        f"\tn nsec in FS      = {boot.nsec_in_fs}",
        f"\tn nsec per fat    = {boot.nsec_per_fat}",
        f"\tn mirror flags    = {boot.mirror_flags:b}",
        f"\tn version         = {boot.version}",
        f"\tn first_cluster   = {boot.first_cluster}",
        f"\tn info_sec_num    = {boot.info_sec_num}",
        f"\tn back_boot_loc   = {boot.backup_boot_loc}",
        f"\tn logical_drive_num= {boot.logical_drive_num}",
        f"\tn extended sig    = {boot.extended_sig:x}",
        f"\tn serial_num      = {boot.serial_num:x}",
        f"\tn volume label    = <{_cstr(boot.volume_label)}>",
        f"\tn fs_type         = <{_cstr(boot.fs_type)}>",
        f"\tn sig             = {boot.sig:x}",
    ]
    check_volume_id(boot)
    return "\n".join(lines) + "\n"


def check_fsinfo(info: FsInfo) -> None:
    """Raise ``Fat32Error`` unless all three FSInfo signatures are right."""
    _require(info.sig1 == FSINFO_SIG1, f"bad FSInfo sig1 {info.sig1:#x}")
    _require(info.sig2 == FSINFO_SIG2, f"bad FSInfo sig2 {info.sig2:#x}")
    _require(info.sig3 == FSINFO_SIG3, f"bad FSInfo sig3 {info.sig3:#x}")


def describe_fsinfo(msg: str, info: FsInfo) -> str:
    """Render an FSInfo sector as text."""
    return (
        f"{msg}:\n"
        f"\tsig1              = {info.sig1:x}\n"
        f"\tsig2              = {info.sig2:x}\n"
        f"\tsig3              = {info.sig3:x}\n"
        f"\tfree cluster cnt  = {info.free_cluster_count}\n"
        f"\tnext free cluster = {info.next_free_cluster:x}\n"
    )


def fat_entry_type(value: int) -> ClusterType:
    """Classify a FAT table entry, ignoring its upper four bits."""
    x = value & _FAT_ENTRY_MASK
    if x in (ClusterType.FREE, ClusterType.RESERVED, ClusterType.BAD):
        return ClusterType(x)
    if 0x2 <= x <= 0xFFFFFEF:
        return ClusterType.USED
    if 0xFFFFFF0 <= x <= 0xFFFFFF6:
        raise Fat32Error(f"reserved value: {x:x}")
    return ClusterType.LAST


def fat_entry_type_str(value: int) -> str:
    """Name of a cluster type as returned by ``fat_entry_type``."""
    try:
        return _TYPE_NAMES[ClusterType(value)]
    except ValueError:
        raise Fat32Error(f"bad value: {value:x}") from None


def is_attr(x: int, flag: int) -> bool:
    """Whether attribute byte ``x`` carries ``flag``; LFN matches only itself."""
    x, flag = int(x), int(flag)
    if x == DirentAttr.LONG_FILE_NAME:
        return x == flag
    return (x & flag) == flag


def dirent_free(d: Dirent) -> bool:
    """Whether directory entry ``d`` is unallocated or deleted."""
    if d.attr == DirentAttr.LONG_FILE_NAME:
        return _as_lfn(d).is_deleted()
    return d.filename[0] in (0, _DELETED_MARK)


def dir_attr_str(attr: int) -> str:
    """Describe an attribute byte in words."""
    attr = int(attr)
    if attr == DirentAttr.LONG_FILE_NAME:
        return " LONG FILE NAME"
    parts: List[str] = []
    if is_attr(attr, DirentAttr.RO):
        parts.append("R/O")
        attr &= ~DirentAttr.RO
    if is_attr(attr, DirentAttr.HIDDEN):
        parts.append(" HIDDEN")
        attr &= ~DirentAttr.HIDDEN
    kind = _KIND_NAMES.get(int(attr))
    if kind is None:
        raise Fat32Error(f"unhandled attr={int(attr):x}")
    parts.append(kind)
    return "".join(parts)


def _to_8dot3(filename: bytes) -> str:
    raw = bytes(filename)
    return (raw[:8].rstrip(b" ") + b"." + raw[8:11]).decode("latin-1")


def dirent_name(d: Dirent) -> str:
    """The entry's 8.3 name with trailing spaces of the base removed."""
    return _to_8dot3(d.filename)


def is_valid_name(name: str) -> bool:
    """Whether ``name`` can be stored as an upper-case 8.3 short name."""
    n = len(name)
    if "." in name:
        if not 5 <= n <= 12 or name[n - 4] != ".":
            return False
        dot = n - 4
        return all(c in _NAME_CHARS for i, c in enumerate(name) if i != dot)
    return 1 <= n <= 8 and all(c in _NAME_CHARS for c in name)


def dirent_set_name(d: Dirent, name: str) -> Dirent:
    """Store ``name`` in ``d`` as a space-padded 8.3 name and return ``d``."""
    if not is_valid_name(name):
        raise ValueError(f"not a valid 8.3 name: {name!r}")
    if "." in name:
        base, ext = name[:-4], name[-3:]
    else:
        base, ext = name, ""
    d.filename = (base.ljust(8) + ext.ljust(3)).encode("ascii")
    return d


def _dirent_body(d: Dirent) -> str:
    if dirent_free(d):
        return "\tdirent is not allocated\n"
    if d.attr == DirentAttr.LONG_FILE_NAME:
        return "\tdirent is an LFN\n"
    out: List[str] = []
    if is_attr(d.attr, DirentAttr.ARCHIVE):
        out.append("[ARCHIVE]: assuming short part of LFN:")
    elif not is_attr(d.attr, DirentAttr.DIR):
        out.append(f"need to handle attr {d.attr:x} ({dir_attr_str(d.attr)})\n")
    out.append("\n")
    out.append(f"\tfilename      = raw=<{_cstr(d.filename)}> 8.3=<{_to_8dot3(d.filename)}>\n")
    out.append("\tbyte version  = {")
    for i, byte in enumerate(d.filename):
        if i == 8:
            out.append("\n\t\t\t\t")
        out.append(f"'{chr(byte)}'/{byte:x},")
    out.append("}\n")
    out.append(f"\tattr         = {d.attr:x} ")
    if d.attr & DirentAttr.RO:
        out.append(" [Read-only]\n")
    if d.attr & DirentAttr.HIDDEN:
        out.append(" [HIDDEN]\n")
    if d.attr & DirentAttr.SYSTEM_FILE:
        out.append(" [SYSTEM FILE: don't move]\n")
    out.append("\n")
    out.append(f"\thi_start      = {d.hi_start:x}\n")
    out.append(f"\tlo_start      = {d.lo_start}\n")
    out.append(f"\tfile_nbytes   = {d.file_nbytes}\n")
    return "".join(out)


def describe_dirent(msg: str, d: Dirent) -> str:
    """Render a directory entry as text; long names are not expanded."""
    return f"{msg}: " + _dirent_body(d)


def dir_lookup(raw_name: Union[bytes, str], dirents: Sequence[Dirent]) -> Optional[int]:
    """Index of the allocated short entry whose raw 11-byte name matches, or None."""
    if isinstance(raw_name, str):
        raw_name = raw_name.encode("latin-1")
    key = bytes(raw_name[:11])
    for index, d in enumerate(dirents):
        if dirent_free(d) or d.is_lfn():
            continue
        if bytes(d.filename) == key:
            return index
    return None


def format_string(msg: str, data: bytes) -> str:
    """Render ``data`` as characters below ``msg``."""
    return f"{msg}\n" + bytes(data).decode("latin-1") + "\n"


def _rows(msg: str, items: Iterable[str]) -> str:
    out = [f"{msg}\n"]
    for i, item in enumerate(items):
        if i % 16 == 0:
            out.append("\n\t")
        out.append(item)
    out.append("\n")
    return "".join(out)


def format_bytes(msg: str, data: bytes) -> str:
    """Render ``data`` as hex bytes, sixteen to a row."""
    return _rows(msg, (f"{b:x}, " for b in bytes(data)))


def format_words(msg: str, words: Iterable[int]) -> str:
    """Render 32-bit ``words`` in hex, sixteen to a row."""
    return _rows(msg, (f"0x{w:x}, " for w in words))