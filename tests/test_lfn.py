import pytest
from hypothesis import given
from hypothesis import strategies as st

from fat32kit.helpers import Fat32Error
from fat32kit.lfn import (
    check_lfn_run,
    describe_lfn,
    describe_lfn_entry,
    dir_filename,
    lfn_checksum,
    lfn_get_name,
)
from fat32kit.structs import Dirent, DirentAttr, LfnEntry

SHORT = b"LONGFI~1TXT"


def make_lfn(name, short_name=SHORT):
    """Build LFN entries for ``name`` in on-disk order."""
    cksum = lfn_checksum(short_name)
    units = name.encode("utf-16-le")
    if len(units) % 26:
        units += b"\0\0"
    units += b"\xff" * (-len(units) % 26)
    chunks = [units[i:i + 26] for i in range(0, len(units), 26)]
    entries = []
    for seq, chunk in enumerate(chunks, 1):
        seqno = seq | (0x40 if seq == len(chunks) else 0)
        entries.append(LfnEntry(seqno=seqno, name1_5=chunk[:10], cksum=cksum,
                                name6_11=chunk[10:22], name12_13=chunk[22:26]))
    return list(reversed(entries))


def as_dirents(name, short_name=SHORT, attr=DirentAttr.ARCHIVE):
    run = [Dirent.from_bytes(e.to_bytes()) for e in make_lfn(name, short_name)]
    return run + [Dirent(filename=short_name, attr=int(attr), file_nbytes=7)]


def test_checksum_of_zero_name():
    assert lfn_checksum(bytes(11)) == 0


def test_checksum_uses_only_eleven_bytes():
    assert lfn_checksum(SHORT + b"extra") == lfn_checksum(SHORT)


def test_checksum_rejects_short_input():
    with pytest.raises(ValueError):
        lfn_checksum(b"SHORT")


@given(st.binary(min_size=11, max_size=11))
def test_checksum_is_a_byte(name):
    assert 0 <= lfn_checksum(name) <= 0xFF


@pytest.mark.parametrize("name", ["hello.txt", "naïve€.txt", "a_long_file_name.txt", "exactly13char"])
def test_get_name_round_trip(name):
    assert lfn_get_name(make_lfn(name)) == name


@given(st.text(st.characters(min_codepoint=1, max_codepoint=0xFFFE,
                             blacklist_categories=("Cs",)), min_size=1, max_size=26))
def test_get_name_round_trip_any_bmp(name):
    assert lfn_get_name(make_lfn(name)) == name


def test_get_name_rejects_non_lfn_entry():
    entry = make_lfn("abc")[0]
    entry.attr = int(DirentAttr.ARCHIVE)
    with pytest.raises(Fat32Error):
        lfn_get_name([entry])


def test_check_lfn_run():
    cksum = lfn_checksum(SHORT)
    good = make_lfn("a_long_file_name.txt")
    assert len(good) == 2
    assert check_lfn_run(good, cksum) is None
    with pytest.raises(Fat32Error):
        check_lfn_run(good, (cksum + 1) & 0xFF)
    with pytest.raises(Fat32Error):
        check_lfn_run(list(reversed(good)), cksum)


def test_check_lfn_run_errors():
    cksum = lfn_checksum(SHORT)
    with pytest.raises(Fat32Error):
        check_lfn_run([], cksum)
    with pytest.raises(Fat32Error):
        check_lfn_run(make_lfn("x" * 30), cksum)
    deleted = make_lfn("abc")
    deleted[0].seqno = 0xE5
    with pytest.raises(Fat32Error):
        check_lfn_run(deleted, cksum)


def test_describe_lfn_entry():
    entry = make_lfn("ab")[0]
    text = describe_lfn_entry(entry, entry.cksum)
    assert "first=1, last=1, deleted=0" in text
    assert "lfn[0] = 'a'" in text
    assert "lfn[2] = 'b'" in text
    assert f"cksum={entry.cksum:x} (expected={entry.cksum:x})" in text


def test_dir_filename_short_entry():
    dirents = [Dirent(filename=b"HELLO   TXT", attr=int(DirentAttr.ARCHIVE))]
    assert dir_filename(dirents, 0) == ("HELLO.TXT", 0)


def test_dir_filename_lower_case_mark():
    dirents = [Dirent(filename=b"HELLO   TXT", attr=int(DirentAttr.ARCHIVE), reserved0=0x18)]
    assert dir_filename(dirents, 0) == ("hello.txt", 0)


def test_dir_filename_long_name():
    dirents = [Dirent(filename=b"OTHER   BIN", attr=int(DirentAttr.ARCHIVE))]
    dirents += as_dirents("a_long_file_name.txt")
    name, index = dir_filename(dirents, 1)
    assert name == "a_long_file_name.txt"
    assert index == 3
    assert dirents[index].filename == SHORT


def test_dir_filename_errors():
    with pytest.raises(Fat32Error):
        dir_filename([Dirent(filename=bytes(11))], 0)
    with pytest.raises(Fat32Error):
        dir_filename([Dirent(filename=b"SYS     BIN", attr=int(DirentAttr.SYSTEM_FILE))], 0)
    dangling = as_dirents("hello.txt")[:-1]
    with pytest.raises(Fat32Error):
        dir_filename(dangling, 0)
    bad_short = as_dirents("hello.txt", attr=DirentAttr.SYSTEM_FILE)
    with pytest.raises(Fat32Error):
        dir_filename(bad_short, 0)


def test_describe_lfn_long_name():
    dirents = as_dirents("hello.txt")
    text, used = describe_lfn("file", dirents, 0)
    assert used == len(dirents)
    assert text.startswith("file: \n")
    assert "reconstructed filename = <hello.txt>" in text
    assert "file_nbytes   = 7" in text


def test_describe_lfn_short_only():
    dirents = [Dirent(filename=b"HELLO   TXT", attr=int(DirentAttr.ARCHIVE))]
    text, used = describe_lfn("file", dirents, 0)
    assert used == 1
    assert "8.3=<HELLO.TXT>" in text
    assert "reconstructed" not in text


def test_describe_lfn_checksum_mismatch():
    dirents = as_dirents("hello.txt")
    dirents[-1] = Dirent(filename=b"DIFFERENTXT", attr=int(DirentAttr.ARCHIVE))
    with pytest.raises(Fat32Error):
        describe_lfn("file", dirents, 0)