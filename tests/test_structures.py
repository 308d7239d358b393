import io

import pytest

from vdiskfs.structures import (
    EBR,
    MBR,
    Content,
    DiskError,
    FileBlock,
    FolderBlock,
    Inode,
    MkusrRequest,
    Partition,
    PointerBlock,
    Superblock,
    is_letter,
    is_number,
    read_mbr,
    write_mbr,
)


def _sample_mbr():
    return MBR(
        size=1024 * 1024,
        created=1_700_000_000,
        signature=42,
        fit="F",
        partition_1=Partition("A", "P", "B", 200, 300, "part1"),
        partition_2=Partition("F", "E", "W", 500, 400, "ext"),
    )


def test_partition_round_trip():
    part = Partition("A", "P", "F", 137, 2048, "particion1")
    packed = part.pack()
    assert len(packed) == Partition.SIZE
    assert Partition.unpack(packed) == part


def test_partition_size_is_fixed():
    packed = Partition("A", "P", "F", 0, 0, "x").pack()
    assert len(packed) == 28
    assert Partition.SIZE == 28


def test_partition_name_truncated_to_sixteen_bytes():
    part = Partition(name="abcdefghijklmnopqrstu")
    assert Partition.unpack(part.pack()).name == "abcdefghijklmnop"


def test_mbr_size_is_fixed():
    packed = _sample_mbr().pack()
    assert len(packed) == 136
    assert MBR.SIZE == 136


def test_mbr_round_trip_and_partitions_order():
    mbr = _sample_mbr()
    restored = MBR.unpack(mbr.pack())
    assert restored == mbr
    names = [p.name for p in restored.partitions()]
    assert names[:2] == ["part1", "ext"]
    assert all(p.status == "E" for p in restored.partitions()[2:])


def test_mbr_unpack_short_data():
    with pytest.raises(DiskError):
        MBR.unpack(b"\0" * 10)


def test_ebr_defaults_and_round_trip():
    ebr = EBR()
    assert ebr.next == -1
    assert ebr.status == "E"
    full = EBR("A", "B", 900, 100, 1200, "logica1")
    assert EBR.unpack(full.pack()) == full


def test_superblock_round_trip_keeps_magic():
    sb = Superblock(filesystem_type=3, inodes_count=10, blocks_count=30, inode_start=500,
                    block_start=2000, mtime=123, umtime=456)
    restored = Superblock.unpack(sb.pack())
    assert restored == sb
    assert restored.magic == 0xEF53


def test_inode_round_trip():
    inode = Inode(uid=1, gid=1, size=-1, atime=5, ctime=6, mtime=7, type="1", perm=664)
    inode.block[0] = 4000
    restored = Inode.unpack(inode.pack())
    assert restored == inode
    assert restored.is_file
    assert restored.block[1:] == [-1] * 14


def test_inode_wrong_block_count():
    with pytest.raises(DiskError):
        Inode(block=[1, 2]).pack()


def test_content_and_folder_block_round_trip():
    block = FolderBlock()
    block.content[0] = Content(".", 100)
    block.content[1] = Content("users.txt", 212)
    packed = block.pack()
    assert len(packed) == FolderBlock.SIZE
    restored = FolderBlock.unpack(packed)
    assert restored == block
    assert restored.content[3].inode == -1


def test_content_name_truncated_to_twelve_bytes():
    entry = Content("nombre_largo_archivo", 7)
    assert Content.unpack(entry.pack()).name == "nombre_largo"


def test_file_block_padding_and_overflow():
    block = FileBlock(b"1,G,root\n")
    packed = block.pack()
    assert len(packed) == FileBlock.SIZE
    assert FileBlock.unpack(packed).content.rstrip(b"\0") == b"1,G,root\n"
    with pytest.raises(DiskError):
        FileBlock(b"x" * (FileBlock.SIZE + 1)).pack()


def test_pointer_block_round_trip():
    block = PointerBlock()
    block.pointers[3] = 77
    restored = PointerBlock.unpack(block.pack())
    assert restored == block
    assert restored.pointers.count(-1) == len(block.pointers) - 1


@pytest.mark.parametrize("char,expected", [("0", True), ("9", True), ("a", False), ("/", False), ("", False)])
def test_is_number(char, expected):
    assert is_number(char) is expected


@pytest.mark.parametrize("char,expected", [("a", True), ("Z", True), ("5", False), ("[", False), ("ab", False)])
def test_is_letter(char, expected):
    assert is_letter(char) is expected


def test_write_then_read_mbr():
    stream = io.BytesIO()
    mbr = _sample_mbr()
    write_mbr(stream, mbr)
    assert stream.getvalue()[:1] == b"a"
    stream.seek(0)
    assert read_mbr(stream) == mbr


def test_read_mbr_without_marker():
    stream = io.BytesIO(b"b" + _sample_mbr().pack())
    with pytest.raises(DiskError):
        read_mbr(stream)


def test_mkusr_request_fields():
    password = "password"
    request = MkusrRequest(username="user1", password=password, groupname="usuarios")
    assert (request.username, request.password, request.groupname) == ("user1", "password", "usuarios")