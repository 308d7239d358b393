"""Parsing and execution of the ``mount`` command."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Iterator

from .mounts import MountedPartition, MountTable
from .structures import EBR, DiskError, read_mbr

MAX_LOGICAL_PARTITIONS = 12
_BLANKS = " \t"
_KEYS = {"p": "path=", "n": "name="}


class ParameterError(ValueError):
    """Raised when a command line lacks required parameters."""

    def __init__(self, message: str, warnings: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.warnings = tuple(warnings)


@dataclass(frozen=True)
class MountRequest:
    """Parsed parameters of ``mount``; all empty means "list mounted partitions"."""

    disk_path: str = ""
    disk_name: str = ""
    partition_name: str = ""
    comment: str = ""
    warnings: tuple[str, ...] = ()

    @property
    def lists_mounts(self) -> bool:
        return not (self.disk_path or self.disk_name or self.partition_name)

    @property
    def full_path(self) -> str:
        return self.disk_path + self.disk_name

    @property
    def disk_label(self) -> str:
        """Disk file name without its extension."""
        stem, dot, _ = self.disk_name.rpartition(".")
        return stem if dot else self.disk_name


class _Scanner:
    """Walks a ``>key=value`` parameter line, collecting comments and warnings."""

    def __init__(self, text: str, command: str) -> None:
        self.text = text
        self.pos = 0
        self.command = command
        self.comment = ""
        self.warnings: list[str] = []

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _start_comment(self, at: int) -> None:
        self.comment = self.text[at:]
        self.pos = len(self.text)

    def _invalid(self, start: int) -> None:
        end = start
        while end < len(self.text) and self.text[end] not in _BLANKS:
            end += 1
        token = self.text[start:end]
        self.warnings.append(f'El parametro "{token}" es inválido para {self.command}.')
        self.pos = end

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def token(self, start: int) -> str:
        return self.text[start:self.pos]

    def parameters(self) -> Iterator[tuple[str, int]]:
        """Yield ``(key, start)`` for each well-formed ``>key=`` prefix."""
        while not self.at_end:
            char = self.text[self.pos]
            if char in _BLANKS:
                self.pos += 1
                continue
            if char == "#":
                self._start_comment(self.pos)
                return
            start = self.pos
            key = self._key(start)
            if key is not None:
                yield key, start

    def _key(self, start: int) -> str | None:
        text = self.text
        if text[start] != ">":
            self._invalid(start)
            return None
        first = start + 1
        if first >= len(text):
            self.pos = len(text)
            return None
        if text[first] == "#":
            self._start_comment(first)
            return None
        pattern = _KEYS.get(text[first].lower())
        if pattern is None:
            self._invalid(start)
            return None
        for offset, expected in enumerate(pattern):
            at = first + offset
            if at >= len(text):
                self.pos = len(text)
                return None
            if text[at] == "#":
                self._start_comment(at)
                return None
            if text[at].lower() != expected:
                self._invalid(start)
                return None
        self.pos = first + len(pattern)
        return pattern[:-1]

    def value(self, start: int, bare_start: str | None = None) -> tuple[bool, str | None]:
        """Read a value after ``=``.

        Returns ``(started, value)``: ``started`` tells whether a value began
        (which discards any earlier one), ``value`` is None if it did not complete.
        """
        text = self.text
        while not self.at_end and text[self.pos] in _BLANKS:
            self.pos += 1
        if self.at_end:
            return False, None
        char = text[self.pos]
        if char == "#":
            self._start_comment(self.pos)
            return False, None
        if char == '"':
            end = self.pos + 1
            while end < len(text) and text[end] not in '"#':
                end += 1
            if end >= len(text):
                self.pos = len(text)
                return True, None
            if text[end] == "#":
                self._start_comment(end)
                return True, None
            raw = text[self.pos + 1:end]
            self.pos = end + 1
            return True, raw
        if bare_start is not None and char != bare_start:
            self._invalid(start)
            return False, None
        end = self.pos
        while end < len(text) and text[end] not in _BLANKS and text[end] != "#":
            end += 1
        if end < len(text) and text[end] == "#":
            self._start_comment(end)
            return True, None
        raw = text[self.pos:end]
        self.pos = end
        return True, raw


def _split_path(raw: str) -> tuple[str, str] | None:
    cut = raw.rfind("/") + 1
    directory, name = raw[:cut], raw[cut:]
    return (directory, name) if directory and name else None


def parse_mount(parameters: str) -> MountRequest:
    """Parse the ``>path=`` and ``>name=`` parameters of ``mount``.

    With neither parameter the request lists the mounted partitions;
    with only one of them a ParameterError is raised.
    """
    scanner = _Scanner(parameters, "mount")
    location: tuple[str, str] | None = None
    name: str | None = None

    for key, start in scanner.parameters():
        if key == "path":
            started, raw = scanner.value(start, "/")
            if not started:
                continue
            location = None
            if raw is None:
                continue
            location = _split_path(raw)
            if location is None:
                scanner.warn(f'"{scanner.token(start)}" posee una ruta vacia')
        else:
            started, raw = scanner.value(start)
            if not started:
                continue
            name = None
            if raw is None:
                continue
            if raw:
                name = raw.lower()
            else:
                scanner.warn(f'"{scanner.token(start)}" posee un nombre vacío.')

    warnings = tuple(scanner.warnings)
    if location is not None and name is not None:
        directory, disk_name = location
        return MountRequest(directory, disk_name, name, scanner.comment, warnings)
    if location is None and name is None:
        return MountRequest(comment=scanner.comment, warnings=warnings)

    missing = [
        f'Falta el parametro obligatorio ">{param}" para poder montar la partición.'
        for param, value in (("path", location), ("name", name))
        if value is None
    ]
    raise ParameterError(" ".join(missing), warnings)


def _not_found(name: str, full_path: str) -> DiskError:
    return DiskError(
        f"La particion {name} no pudo encontrarse en el disco con ruta {full_path}."
    )


def _read_ebr(disk: BinaryIO, offset: int) -> EBR:
    disk.seek(offset)
    return EBR.unpack(disk.read(EBR.SIZE))


def _locate_partition(disk: BinaryIO, name: str, full_path: str) -> None:
    """Check that a mountable partition called ``name`` exists on ``disk``."""
    mbr = read_mbr(disk)
    extended = None
    for partition in mbr.partitions():
        if partition.status == "E":
            continue
        if partition.name == name:
            if partition.type == "E":
                raise DiskError(
                    f"No puede montarse la particion {name} ya que es extendida."
                )
            return
        if partition.type == "E":
            extended = partition

    if extended is None:
        raise _not_found(name, full_path)

    ebr = _read_ebr(disk, extended.start)
    if ebr.status == "E":
        raise _not_found(name, full_path)

    for _ in range(MAX_LOGICAL_PARTITIONS):
        if ebr.name == name:
            return
        if ebr.next == -1:
            raise _not_found(name, full_path)
        ebr = _read_ebr(disk, ebr.next)
    raise DiskError(
        f"Se detectaron mas de {MAX_LOGICAL_PARTITIONS} particiones logicas."
    )


def mount_partition(request: MountRequest, table: MountTable) -> MountedPartition:
    """Mount the partition named by ``request`` into ``table`` and return its entry."""
    if request.lists_mounts:
        raise ParameterError("Se requieren los parametros >path y >name para montar.")
    full_path = request.full_path
    try:
        disk = open(full_path, "rb")
    except OSError as exc:
        raise DiskError(f"No se ha podido abrir el disco en {full_path}.") from exc
    with disk:
        _locate_partition(disk, request.partition_name, full_path)

    if table.is_mounted(request.partition_name, full_path):
        raise DiskError(
            f"La particion {request.partition_name} del disco {full_path} ya se encuentra "
            f"montada en memoria. ID: {table.partition_id(request.partition_name)}."
        )
    try:
        return table.insert(request.partition_name, request.disk_label, full_path)
    except ValueError as exc:
        raise DiskError(
            f"La particion {request.partition_name} del disco {full_path} no pudo montarse."
        ) from exc