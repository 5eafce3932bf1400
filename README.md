# fat32kit

`fat32kit` reads and writes the fixed-size structures of a FAT32 volume. You give it raw
bytes and it returns dataclasses. It can also check those structures and render them as
readable text.

## Modules

### `fat32kit.structs`

- `BootSector` (the volume id) and `FsInfo` are 512-byte sectors. `Dirent` and `LfnEntry`
  are 32-byte directory entries. Each one has `from_bytes(data)` to parse and `to_bytes()`
  to write back. `from_bytes` raises `ValueError` if `data` is too short.
- `Dirent.cluster_id()` joins `hi_start` and `lo_start`. `Dirent.is_dir()` and
  `Dirent.is_lfn()` test the attribute byte.
- `LfnEntry` has `is_first()`, `is_last()`, `is_deleted()` and `name_bytes()`.
  `name_bytes()` returns the 26 raw UTF-16LE name bytes.
- `parse_dirents(data)` splits directory data into a list of `Dirent`. The length of `data`
  must be a multiple of 32.
- `DirentAttr` names the attribute bits. `ClusterType` names the kinds of FAT entry.
- `PiFile` holds a file's contents in memory. `PiDirent` holds one entry of a directory
  listing: name, raw name, cluster, whether it is a directory, and size.

### `fat32kit.helpers`

- `check_volume_id(boot)` and `check_fsinfo(info)` raise `Fat32Error` when a structure is
  not one they accept. `check_volume_id` requires all of the following:
  - 512 bytes per sector;
  - two FATs;
  - signature `0xAA55`;
  - a power-of-two number of sectors per cluster;
  - FSInfo at sector 1;
  - the backup boot sector at sector 6;
  - extended signature `0x29`.
- `fat_entry_type(value)` classifies a FAT table value as a `ClusterType` and ignores the
  top four bits. It raises `Fat32Error` for the reserved range. `fat_entry_type_str` gives
  the type's name.
- `is_attr`, `dirent_free` and `dir_attr_str` inspect attribute bytes and entries.
- `is_valid_name` accepts upper-case 8.3 names only. `dirent_set_name(d, name)` stores
  such a name space-padded in `d`, or raises `ValueError`. `dirent_name(d)` reads the name
  back as `BASE.EXT`.
- `dir_lookup(raw_name, dirents)` returns the index of the allocated short entry whose raw
  11-byte name matches, or `None`.
- These functions return text rather than printing it:
  - `describe_volume_id` (it runs `check_volume_id` after rendering);
  - `describe_fsinfo`;
  - `describe_dirent`;
  - `format_string`;
  - `format_bytes`;
  - `format_words`.

### `fat32kit.lfn`

- `lfn_checksum(short_name)` computes the checksum of an 11-byte short name, as stored in
  that name's long-file-name entries.
- `lfn_get_name(entries)` rebuilds a long name from `LfnEntry` objects in on-disk order.
- `check_lfn_run(entries, checksum)` raises `Fat32Error` unless the run is valid. A valid
  run:
  - has one or two live entries;
  - has matching checksums in every entry;
  - starts with an entry marked last;
  - ends with sequence number 1.
- `dir_filename(dirents, start)` returns `(name, index)`. `name` is the display name of the
  file whose entries begin at `start`, long or short. `index` is the position of its short
  entry.
- `describe_lfn(msg, dirents, start)` returns `(text, count)`. `count` is the number of
  directory entries that the file uses.
- `describe_lfn_entry` renders a single `LfnEntry`.

### `fat32kit.utf8`

- `to_utf8(cp)` encodes a single code point, up to U+10FFFF. Code point 0 gives `b""`.
- `to_cp(data)` decodes the first character of `data`.
- `codepoint_len(cp)` and `utf8_len(lead)` give encoded lengths. Invalid input raises
  `ValueError`.

## Example

```python
from fat32kit.structs import BootSector, parse_dirents
from fat32kit.helpers import check_volume_id, dir_lookup
from fat32kit.lfn import dir_filename

with open("partition.img", "rb") as f:
    boot = BootSector.from_bytes(f.read(512))
check_volume_id(boot)

entries = parse_dirents(root_cluster_bytes)
index = dir_lookup(b"CONFIG  TXT", entries)
if index is not None:
    name, short = dir_filename(entries, index)
    print(name, entries[short].file_nbytes)
```

`root_cluster_bytes` holds the data of the root directory's cluster. You read it from the
image yourself.

## What it does not do

`fat32kit` works on structures you have already read into memory. It does not:

- open disks or partition tables;
- follow cluster chains through the FAT;
- read or write whole files;
- create, delete, rename or truncate directory entries on a volume.

There is no command-line tool.

## Installing

```
pip install .
pip install ".[test]"
pytest
```

The second command adds pytest and hypothesis, which the test suite needs.