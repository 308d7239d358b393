# vdiskfs

`vdiskfs` works with virtual disk files. A disk file starts with a one-byte
marker and a master boot record (MBR) with four partition entries. An
extended partition can hold a chain of logical partitions, each headed by
an EBR. A formatted partition holds an ext2-style filesystem. It starts with
a superblock and has inodes and folder, file and pointer blocks.

The package has four modules:

- `vdiskfs.structures`: the binary records of the format. `MBR`,
  `Partition`, `EBR`, `Superblock`, `Inode`, `Content`, `FolderBlock`,
  `FileBlock` and `PointerBlock` are dataclasses. Each has `pack()`, which
  returns bytes, and a `unpack(data)` class method. `read_mbr(stream)` and
  `write_mbr(stream, mbr)` read and write the marker byte together with the
  MBR. `is_number(c)` and `is_letter(c)` test single ASCII characters.
  `MkusrRequest` holds a user name, a password and a group name.
- `vdiskfs.mounts`: `MountTable`, the in-memory table of mounted
  partitions, with `MountedPartition` entries.
- `vdiskfs.mount`: the `mount` command. `parse_mount()` parses its
  parameters and `mount_partition()` mounts a partition.
- `vdiskfs.rename`: the `rename` command. `parse_rename()` parses its
  parameters and `rename_entry()` renames a file or folder inside a mounted
  partition.

It uses only the standard library. It needs Python 3.10 or later.

## Records

```python
import io
from vdiskfs.structures import MBR, Partition, read_mbr, write_mbr

mbr = MBR(size=1024 * 1024, signature=42, fit="F")
mbr.partition_1 = Partition(status="A", type="P", fit="F", start=200, size=4096, name="part1")

buffer = io.BytesIO()
write_mbr(buffer, mbr)
buffer.seek(0)
assert read_mbr(buffer) == mbr
```

All records are little-endian. Names are stored in fixed, NUL-padded fields:
16 bytes for partitions and EBRs, 12 bytes for folder entries. Unused block
pointers and free folder entries hold -1. A short buffer or a missing MBR
marker raises `DiskError`.

## Mounting a partition

Parameters are written the way a command line would write them: `>path=`
and `>name=`. A value may be quoted, and an unquoted path must start with
`/`. Parameter names are not case sensitive. The partition name is turned to
lower case. Text from a `#` onwards is kept as `comment` on the request.

```python
from vdiskfs.mount import ParameterError, mount_partition, parse_mount
from vdiskfs.mounts import MountTable
from vdiskfs.structures import DiskError

table = MountTable()

try:
    request = parse_mount('>path="/tmp/disks/disk1.dsk" >name=Part1')
    mounted = mount_partition(request, table)
    print(mounted.partition_id)          # 731disk1
except (ParameterError, DiskError) as exc:
    print(f"mount failed: {exc}")

print(table.describe())
```

If a command line has neither parameter, `parse_mount()` returns a request
whose `lists_mounts` is true. The caller can then print
`table.describe()`. If it has only one of the two, `ParameterError` is raised.
Invalid or empty parameters do not raise by themselves. They are collected
as messages in the `warnings` of the request or of the error.

`mount_partition()` looks through the primary partitions and then along the
EBR chain of the extended partition. The chain is followed for at most 12
logical partitions. An extended partition cannot be mounted. A partition
that is already mounted from the same disk is refused too.

Each mounted partition gets an id built from the prefix `73`, a counter and
the disk file name without its extension, for example `731disk1`. The
lowest free counter is used. The id does not depend on where the partition
sits in the MBR. Up to fifteen partitions of one disk can be mounted at a
time.

`MountTable` can also be used on its own:

```python
table = MountTable()
table.insert("part1", "disk1", "/tmp/disks/disk1.dsk")

pid = table.partition_id("part1")     # "731disk1"
table.has_id(pid)                     # True
table.is_mounted("part1", "/tmp/disks/disk1.dsk")  # True
table.disk_path(pid)                  # "/tmp/disks/disk1.dsk"
table.partition_name(pid)             # "part1"
len(table)                            # 1

for mounted in table:
    print(mounted)

table.remove(pid)                     # KeyError if the id is not mounted
```

## Renaming a file or folder

`rename` takes `>path=` and `>name=`. The last part of the path is the entry
to rename and the rest is the folder that holds it. An unquoted path needs
at least one folder below `/`. To rename an entry of the root folder, quote
the path, as in `>path="/notes.txt"`. The new name is kept as given and is
cut to the 12 bytes that a folder entry holds.

```python
from vdiskfs.rename import RenameParameterError, parse_rename, rename_entry

try:
    request = parse_rename(">path=/home/docs/notes.txt >name=todo.txt")
    entry = rename_entry(True, pid, request, table)
    print(entry.name, entry.inode)
except (RenameParameterError, DiskError, PermissionError) as exc:
    print(f"rename failed: {exc}")
```

`rename_entry()` needs an open session, which the caller passes as its first
argument. The partition id must be in the table. It walks the path from the
root inode and writes the changed folder block back to the disk. It returns
the updated `Content` entry.

## Errors

Failures raise exceptions:

- `ParameterError` (for `mount`) and `RenameParameterError` (for `rename`)
  come from a missing required parameter. Both are subclasses of
  `ValueError` and carry the parser's `warnings`.
- `PermissionError` is raised by `rename_entry()` when no session is open.
- `DiskError` covers everything wrong with a disk file, a partition or a
  path inside the filesystem.

## What it does not do

- There is no command-line program and no interpreter for command scripts.
  The functions are meant to be called from Python.
- Disks are not created, partitioned or formatted here, and nothing creates
  users or groups. `MkusrRequest` is only a data holder. The records in
  `vdiskfs.structures` can be used to build a disk image by hand.
- Sessions and logins are not managed. `rename_entry()` only receives
  whether one is open.
- `rename_entry()` works on formatted primary partitions only. A mounted
  logical partition is reported as not formatted. Only the twelve direct
  blocks of each folder are searched, and indirect blocks are not followed.
- There is no unmount command. `MountTable.remove()` takes an entry out of
  the table.

## Running the tests

Install the package with its `test` extra, then run `pytest` from the
project directory.