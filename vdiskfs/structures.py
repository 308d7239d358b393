"""Binary on-disk structures of the virtual disk format and small helpers."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar

ZERO = "0"
ONE = "1"
NULL_CHAR = "\0"
MBR_ID = "a"

FOLDER_TYPE = ZERO
FILE_TYPE = ONE
FS_MAGIC = 0xEF53

PARTITION_NAME_SIZE = 16
ENTRY_NAME_SIZE = 12
DIRECT_BLOCKS = 12
INODE_BLOCKS = 15
FOLDER_ENTRIES = 4
FILE_BLOCK_SIZE = 64
POINTERS_PER_BLOCK = 16


class DiskError(Exception):
    """Raised when disk contents cannot be read or written as expected."""


def is_number(c: str) -> bool:
    """Return True if ``c`` is a single ASCII digit."""
    return len(c) == 1 and "0" <= c <= "9"


def is_letter(c: str) -> bool:
    """Return True if ``c`` is a single ASCII letter."""
    return len(c) == 1 and ("A" <= c <= "Z" or "a" <= c <= "z")


def _char(value: str) -> bytes:
    raw = value.encode("latin-1") if value else b"\0"
    if len(raw) != 1:
        raise DiskError(f"expected a single character, got {value!r}")
    return raw


def _unchar(raw: bytes) -> str:
    return raw.decode("latin-1")


def _name(value: str) -> bytes:
    return value.encode("utf-8")


def _unname(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", "replace")


def _fields(fmt: struct.Struct, data: bytes, what: str) -> tuple:
    if len(data) < fmt.size:
        raise DiskError(f"{what} needs {fmt.size} bytes, got {len(data)}")
    return fmt.unpack_from(data)


@dataclass
class Partition:
    """A primary or extended partition entry of the MBR."""

    status: str = "E"
    type: str = NULL_CHAR
    fit: str = NULL_CHAR
    start: int = 0
    size: int = 0
    name: str = ""

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<cccxii16s")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return self._FORMAT.pack(
            _char(self.status), _char(self.type), _char(self.fit),
            self.start, self.size, _name(self.name),
        )

    @classmethod
    def unpack(cls, data: bytes) -> Partition:
        status, kind, fit, start, size, name = _fields(cls._FORMAT, data, "partition")
        return cls(_unchar(status), _unchar(kind), _unchar(fit), start, size, _unname(name))


@dataclass
class MBR:
    """Master boot record: disk header plus four partition entries."""

    size: int = 0
    created: int = 0
    signature: int = 0
    fit: str = NULL_CHAR
    partition_1: Partition = field(default_factory=Partition)
    partition_2: Partition = field(default_factory=Partition)
    partition_3: Partition = field(default_factory=Partition)
    partition_4: Partition = field(default_factory=Partition)

    _HEADER: ClassVar[struct.Struct] = struct.Struct("<i4xqic3x")
    SIZE: ClassVar[int] = _HEADER.size + 4 * Partition.SIZE

    def partitions(self) -> tuple[Partition, Partition, Partition, Partition]:
        """The four partition entries in table order."""
        return (self.partition_1, self.partition_2, self.partition_3, self.partition_4)

    def pack(self) -> bytes:
        header = self._HEADER.pack(self.size, self.created, self.signature, _char(self.fit))
        return header + b"".join(p.pack() for p in self.partitions())

    @classmethod
    def unpack(cls, data: bytes) -> MBR:
        if len(data) < cls.SIZE:
            raise DiskError(f"MBR needs {cls.SIZE} bytes, got {len(data)}")
        size, created, signature, fit = cls._HEADER.unpack_from(data)
        offset = cls._HEADER.size
        parts = [
            Partition.unpack(data[offset + n * Partition.SIZE: offset + (n + 1) * Partition.SIZE])
            for n in range(4)
        ]
        return cls(size, created, signature, _unchar(fit), *parts)


@dataclass
class EBR:
    """Extended boot record heading a logical partition."""

    status: str = "E"
    fit: str = NULL_CHAR
    start: int = 0
    size: int = 0
    next: int = -1
    name: str = ""

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<ccxxiii16s")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return self._FORMAT.pack(
            _char(self.status), _char(self.fit), self.start, self.size, self.next,
            _name(self.name),
        )

    @classmethod
    def unpack(cls, data: bytes) -> EBR:
        status, fit, start, size, nxt, name = _fields(cls._FORMAT, data, "EBR")
        return cls(_unchar(status), _unchar(fit), start, size, nxt, _unname(name))


@dataclass
class Superblock:
    """Filesystem superblock stored at the start of a formatted partition."""

    filesystem_type: int = 2
    inodes_count: int = 0
    blocks_count: int = 0
    free_blocks_count: int = 0
    free_inodes_count: int = 0
    mtime: int = 0
    umtime: int = 0
    mnt_count: int = 0
    magic: int = FS_MAGIC
    inode_size: int = 0
    block_size: int = 0
    first_ino: int = 0
    first_blo: int = 0
    bm_inode_start: int = 0
    bm_block_start: int = 0
    inode_start: int = 0
    block_start: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<5i4x2q10i")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return self._FORMAT.pack(
            self.filesystem_type, self.inodes_count, self.blocks_count,
            self.free_blocks_count, self.free_inodes_count,
            self.mtime, self.umtime,
            self.mnt_count, self.magic, self.inode_size, self.block_size,
            self.first_ino, self.first_blo, self.bm_inode_start, self.bm_block_start,
            self.inode_start, self.block_start,
        )

    @classmethod
    def unpack(cls, data: bytes) -> Superblock:
        return cls(*_fields(cls._FORMAT, data, "superblock"))


@dataclass
class Inode:
    """An inode; ``type`` is FOLDER_TYPE or FILE_TYPE, unused blocks are -1."""

    uid: int = 0
    gid: int = 0
    size: int = 0
    atime: int = 0
    ctime: int = 0
    mtime: int = 0
    block: list[int] = field(default_factory=lambda: [-1] * INODE_BLOCKS)
    type: str = FOLDER_TYPE
    perm: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct(f"<3i4x3q{INODE_BLOCKS}ic3xi4x")
    SIZE: ClassVar[int] = _FORMAT.size

    @property
    def is_file(self) -> bool:
        return self.type == FILE_TYPE

    def pack(self) -> bytes:
        if len(self.block) != INODE_BLOCKS:
            raise DiskError(f"inode must have {INODE_BLOCKS} block pointers")
        return self._FORMAT.pack(
            self.uid, self.gid, self.size, self.atime, self.ctime, self.mtime,
            *self.block, _char(self.type), self.perm,
        )

    @classmethod
    def unpack(cls, data: bytes) -> Inode:
        values = _fields(cls._FORMAT, data, "inode")
        uid, gid, size, atime, ctime, mtime = values[:6]
        block = list(values[6:6 + INODE_BLOCKS])
        kind, perm = values[6 + INODE_BLOCKS:]
        return cls(uid, gid, size, atime, ctime, mtime, block, _unchar(kind), perm)


@dataclass
class Content:
    """One directory entry: a name and the position of its inode (-1 if free)."""

    name: str = ""
    inode: int = -1

    _FORMAT: ClassVar[struct.Struct] = struct.Struct(f"<{ENTRY_NAME_SIZE}si")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return self._FORMAT.pack(_name(self.name), self.inode)

    @classmethod
    def unpack(cls, data: bytes) -> Content:
        name, inode = _fields(cls._FORMAT, data, "folder entry")
        return cls(_unname(name), inode)


@dataclass
class FolderBlock:
    """A directory block holding four entries."""

    content: list[Content] = field(
        default_factory=lambda: [Content() for _ in range(FOLDER_ENTRIES)]
    )

    SIZE: ClassVar[int] = FOLDER_ENTRIES * Content.SIZE

    def pack(self) -> bytes:
        if len(self.content) != FOLDER_ENTRIES:
            raise DiskError(f"folder block must have {FOLDER_ENTRIES} entries")
        return b"".join(entry.pack() for entry in self.content)

    @classmethod
    def unpack(cls, data: bytes) -> FolderBlock:
        if len(data) < cls.SIZE:
            raise DiskError(f"folder block needs {cls.SIZE} bytes, got {len(data)}")
        step = Content.SIZE
        return cls([Content.unpack(data[n * step:(n + 1) * step]) for n in range(FOLDER_ENTRIES)])


@dataclass
class FileBlock:
    """A block of raw file content."""

    content: bytes = b""

    SIZE: ClassVar[int] = FILE_BLOCK_SIZE

    def pack(self) -> bytes:
        if len(self.content) > self.SIZE:
            raise DiskError(f"file block holds at most {self.SIZE} bytes")
        return self.content.ljust(self.SIZE, b"\0")

    @classmethod
    def unpack(cls, data: bytes) -> FileBlock:
        if len(data) < cls.SIZE:
            raise DiskError(f"file block needs {cls.SIZE} bytes, got {len(data)}")
        return cls(bytes(data[:cls.SIZE]))


@dataclass
class PointerBlock:
    """An indirect block of pointers to other blocks (-1 if unused)."""

    pointers: list[int] = field(default_factory=lambda: [-1] * POINTERS_PER_BLOCK)

    _FORMAT: ClassVar[struct.Struct] = struct.Struct(f"<{POINTERS_PER_BLOCK}i")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        if len(self.pointers) != POINTERS_PER_BLOCK:
            raise DiskError(f"pointer block must have {POINTERS_PER_BLOCK} pointers")
        return self._FORMAT.pack(*self.pointers)

    @classmethod
    def unpack(cls, data: bytes) -> PointerBlock:
        return cls(list(_fields(cls._FORMAT, data, "pointer block")))


@dataclass
class MkusrRequest:
    """Parameters of a user-creation request."""

    username: str
    password: str
    groupname: str


def read_mbr(stream: BinaryIO) -> MBR:
    """Read the marker byte and the MBR that follows it from ``stream``."""
    marker = stream.read(1)
    if marker != _char(MBR_ID):
        raise DiskError("MBR marker not found at the start of the disk")
    return MBR.unpack(stream.read(MBR.SIZE))


def write_mbr(stream: BinaryIO, mbr: MBR) -> None:
    """Write the marker byte followed by ``mbr`` to ``stream``."""
    stream.write(_char(MBR_ID) + mbr.pack())