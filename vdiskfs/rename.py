"""Parsing and execution of the ``rename`` command."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from .mount import _BLANKS, _Scanner
from .mounts import MountTable
from .structures import (
    DIRECT_BLOCKS,
    ENTRY_NAME_SIZE,
    Content,
    DiskError,
    FolderBlock,
    Inode,
    Superblock,
    read_mbr,
)

_PATH_KEY = ">path="


class RenameParameterError(ValueError):
    """Raised when a ``rename`` command line lacks required parameters."""

    def __init__(self, message: str, warnings: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.warnings = tuple(warnings)


@dataclass(frozen=True)
class RenameRequest:
    """Parsed parameters of ``rename``: the parent directory, the entry and its new name."""

    path: str
    old_name: str
    new_name: str
    comment: str = ""
    warnings: tuple[str, ...] = ()


def _split_path(raw: str, quoted: bool) -> tuple[str, str] | None:
    cut = raw.rfind("/") + 1
    directory, name = raw[:cut], raw[cut:]
    if not name:
        return None
    # An unquoted path needs at least one directory besides the leading slash.
    effective = directory if quoted else directory[1:]
    return (directory, name) if effective else None


def parse_rename(parameters: str) -> RenameRequest:
    """Parse the ``>path=`` and ``>name=`` parameters of ``rename``.

    Raises RenameParameterError when either parameter is missing or invalid.
    """
    scanner = _Scanner(parameters, "rename")
    location: tuple[str, str] | None = None
    new_name: str | None = None

    for key, start in scanner.parameters():
        if key == "path":
            started, raw = scanner.value(start, "/")
            if not started:
                continue
            location = None
            if raw is None:
                continue
            quoted = parameters[start + len(_PATH_KEY):].lstrip(_BLANKS).startswith('"')
            location = _split_path(raw, quoted)
            if location is None:
                scanner.warn(f'"{scanner.token(start)}" posee una ruta vacia')
        else:
            started, raw = scanner.value(start)
            if not started:
                continue
            new_name = None
            if raw is None:
                continue
            if raw:
                new_name = raw
            else:
                scanner.warn(f'"{scanner.token(start)}" posee un nombre vacío.')

    warnings = tuple(scanner.warnings)
    if location is not None and new_name is not None:
        directory, old_name = location
        return RenameRequest(directory, old_name, new_name, scanner.comment, warnings)

    missing = [
        f'Falta el parametro obligatorio ">{param}" para renombrar.'
        for param, value in (("path", location), ("name", new_name))
        if value is None
    ]
    raise RenameParameterError(" ".join(missing), warnings)


def _formatted_partition_start(disk: BinaryIO, name: str | None, partition_id: str) -> int:
    """Start offset of the formatted primary partition called ``name``."""
    mbr = read_mbr(disk)
    for partition in mbr.partitions():
        if partition.status == "E" or partition.name != name:
            continue
        if partition.type == "E":
            raise DiskError(
                "La partición montada coincide con una extendida, "
                "solo pueden montarse primarias o lógicas"
            )
        if partition.status != "F":
            break
        return partition.start
    raise DiskError(
        f"La partición {partition_id} no ha sido formateada, utilice mkfs primero"
    )


def _read_inode(disk: BinaryIO, offset: int) -> Inode:
    disk.seek(offset)
    return Inode.unpack(disk.read(Inode.SIZE))


def _find_entry(
    disk: BinaryIO, inode: Inode, name: str
) -> tuple[int, FolderBlock, Content] | None:
    """Search the direct blocks of a folder inode for an entry called ``name``."""
    for pointer in inode.block[:DIRECT_BLOCKS]:
        if pointer == -1:
            return None
        disk.seek(pointer)
        block = FolderBlock.unpack(disk.read(FolderBlock.SIZE))
        for entry in block.content:
            if entry.inode == -1:
                break
            if entry.name == name:
                return pointer, block, entry
    return None


def _fit_name(name: str) -> str:
    return name.encode("utf-8")[:ENTRY_NAME_SIZE].decode("utf-8", "ignore")


def rename_entry(
    session_open: bool, partition_id: str, request: RenameRequest, table: MountTable
) -> Content:
    """Rename ``request.old_name`` inside ``request.path`` on a mounted partition.

    Returns the updated directory entry after writing it back to disk.
    """
    if not session_open:
        raise PermissionError("no se encontró sesión activa")
    if not table.has_id(partition_id):
        raise DiskError(
            f"La particion con id {partition_id} no fue encontrada en la lista "
            "de particiones montadas (use mount para ver esta lista)"
        )

    disk_path = table.disk_path(partition_id)
    try:
        disk = open(disk_path, "r+b")
    except OSError as exc:
        raise DiskError(
            f"No se ha podido abrir el disco asociado a la partición {partition_id}, "
            f"con ruta {disk_path}"
        ) from exc

    with disk:
        start = _formatted_partition_start(
            disk, table.partition_name(partition_id), partition_id
        )
        disk.seek(start)
        superblock = Superblock.unpack(disk.read(Superblock.SIZE))
        inode = _read_inode(disk, superblock.inode_start)

        for component in filter(None, request.path.split("/")):
            if inode.is_file:
                raise DiskError(
                    f"el nombre {component} corresponde a un archivo, no a un subdirectorio"
                )
            found = _find_entry(disk, inode, component)
            if found is None:
                raise DiskError(
                    f"no se ha encontrado el directorio {component} de la ruta "
                    f"{request.path} en el árbol de directorios"
                )
            inode = _read_inode(disk, found[2].inode)

        if inode.is_file:
            raise DiskError(
                f"la ruta {request.path} corresponde a un archivo, no a un subdirectorio"
            )

        found = _find_entry(disk, inode, request.old_name)
        if found is None:
            raise DiskError(
                f"no se ha encontrado el archivo/directorio {request.old_name} de la ruta "
                f"{request.path} en el árbol de directorios"
            )
        position, block, entry = found
        entry.name = _fit_name(request.new_name)
        disk.seek(position)
        disk.write(block.pack())
        return entry