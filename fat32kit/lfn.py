"""Long file name entries: checksums, name reconstruction and rendering."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from .helpers import Fat32Error, _as_lfn, _dirent_body, describe_dirent, dirent_free, is_attr
from .structs import Dirent, DirentAttr, LfnEntry
from .utf8 import to_utf8

MAX_LFN_ENTRIES = 2
_LOWER_CASE_MARK = 0x18
_TERMINATORS = ((0x00, 0x00), (0xFF, 0xFF))


def lfn_checksum(short_name: bytes) -> int:
    """Checksum of an 11-byte short name as stored in its LFN entries."""
    if len(short_name) < 11:
        raise ValueError(f"short name needs 11 bytes, got {len(short_name)}")
    total = 0
    for byte in bytes(short_name[:11]):
        total = (((total & 1) << 7) + (total >> 1) + byte) & 0xFF
    return total


def _decode_segment(raw: bytes) -> bytes:
    out = bytearray()
    for lo, hi in zip(raw[0::2], raw[1::2]):
        if (lo, hi) in _TERMINATORS:
            break
        out += to_utf8(lo | (hi << 8))
    return bytes(out)


def lfn_get_name(entries: Sequence[LfnEntry]) -> str:
    """Reassemble the long name from entries given in on-disk order."""
    encoded = bytearray()
    for entry in reversed(entries):
        if entry.attr != DirentAttr.LONG_FILE_NAME:
            raise Fat32Error(f"entry attr {entry.attr:#x} is not a long file name")
        for segment in (entry.name1_5, entry.name6_11, entry.name12_13):
            encoded += _decode_segment(bytes(segment))
    return encoded.decode("utf-8", "surrogatepass")


def check_lfn_run(entries: Iterable[LfnEntry], checksum: int) -> None:
    """Raise ``Fat32Error`` unless ``entries`` form one live, consistent LFN run."""
    run = list(entries)
    if not run:
        raise Fat32Error("empty long file name run")
    if len(run) > MAX_LFN_ENTRIES:
        raise Fat32Error(f"long file name uses {len(run)} entries, at most {MAX_LFN_ENTRIES} supported")
    for entry in run:
        if entry.is_deleted():
            raise Fat32Error(f"deleted entry in long file name run (seqno {entry.seqno:#x})")
        if entry.cksum != checksum:
            raise Fat32Error(f"checksum {entry.cksum:#x} does not match {checksum:#x}")
    if not run[0].is_last():
        raise Fat32Error("first entry on disk is not marked last")
    if not run[-1].is_first():
        raise Fat32Error("final entry on disk is not sequence number 1")


def describe_lfn_entry(entry: LfnEntry, checksum: int) -> str:
    """Render one LFN entry as text."""
    n = entry.seqno
    out = [
        f"\tseqno = {n:x}, first={int(entry.is_first())}, "
        f"last={int(entry.is_last())}, deleted={int(entry.is_deleted())}\n"
    ]
    raw = entry.name_bytes()
    for i, (lo, hi) in enumerate(zip(raw[0::2], raw[1::2])):
        if lo == 0 and hi == 0:
            break
        out.append(f"lfn[{2 * i}] = '{chr(lo)}' = {lo:x}\n")
    out.append(f"\tcksum={entry.cksum:x} (expected={checksum:x})\n")
    return "".join(out)


def _run_length(dirents: Sequence[Dirent], start: int) -> int:
    """Length of the LFN run at ``start``, checking the short entry after it."""
    count = 0
    for d in dirents[start:]:
        if not d.is_lfn():
            break
        count += 1
    if start + count >= len(dirents):
        raise Fat32Error("long file name run has no short entry after it")
    attr = dirents[start + count].attr
    if not (is_attr(attr, DirentAttr.DIR) or is_attr(attr, DirentAttr.ARCHIVE)):
        raise Fat32Error(f"short entry after long name has attr {attr:#x}")
    return count


def _lfn_entries(dirents: Sequence[Dirent], start: int, count: int) -> List[LfnEntry]:
    return [_as_lfn(d) for d in dirents[start:start + count]]


def dir_filename(dirents: Sequence[Dirent], start: int) -> Tuple[str, int]:
    """Name of the file whose entries begin at ``start``, and its short entry's index."""
    d = dirents[start]
    if dirent_free(d):
        raise Fat32Error("directory entry is free")
    if d.is_lfn():
        count = _run_length(dirents, start)
        return lfn_get_name(_lfn_entries(dirents, start, count)), start + count
    if not (is_attr(d.attr, DirentAttr.DIR)
            or is_attr(d.attr, DirentAttr.ARCHIVE)
            or is_attr(d.attr, DirentAttr.VOLUME_LABEL)):
        raise Fat32Error(f"unexpected attr {d.attr:#x}")
    lower = d.reserved0 == _LOWER_CASE_MARK

    def fold(byte: int) -> str:
        c = chr(byte)
        return c.lower() if lower and "A" <= c <= "Z" else c

    base = "".join(fold(b) for b in d.filename[:8] if b != 0x20)
    ext = "".join(fold(b) for b in d.filename[8:11])
    return f"{base}.{ext}", start


def describe_lfn(msg: str, dirents: Sequence[Dirent], start: int) -> Tuple[str, int]:
    """Render the file at ``start`` with its long name; return text and entries used."""
    d = dirents[start]
    if not d.is_lfn():
        return describe_dirent(msg, d), 1
    count = _run_length(dirents, start)
    short = dirents[start + count]
    entries = _lfn_entries(dirents, start, count)
    check_lfn_run(entries, lfn_checksum(short.filename))
    name = lfn_get_name(entries)
    text = f"{msg}: \n\treconstructed filename = <{name}>\n\t" + _dirent_body(short)
    return text, count + 1