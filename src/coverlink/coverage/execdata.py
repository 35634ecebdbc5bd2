"""JaCoCo execution data (.exec) reader and writer.

The file is a sequence of blocks, each introduced by a type byte. All
integers are big-endian; strings use Java's modified UTF-8 with a u16 length
prefix.

    0x01 header          u16 magic (0xC0C0), u16 format version (0x1007)
    0x10 session info    str id, i64 start, i64 dump
    0x11 execution data  i64 class id, str class name, bool[] probes

Boolean arrays are a varint length followed by the values packed LSB-first,
eight per byte. The first block must be a header; further headers may
appear where several dumps were appended to the same file.
"""

from __future__ import annotations

import struct
from pathlib import Path

import structlog

from coverlink.core.errors import ExecutionDataError
from coverlink.coverage.models import (
    ExecutionData,
    ExecutionDataReport,
    ExecutionDataStore,
    SessionInfo,
)

log = structlog.get_logger()

BLOCK_HEADER = 0x01
BLOCK_SESSIONINFO = 0x10
BLOCK_EXECUTIONDATA = 0x11

MAGIC_NUMBER = 0xC0C0
FORMAT_VERSION = 0x1007

NO_EXECUTION_DATA_MESSAGE = (
    "Project coverage is set to 0% as no JaCoCo execution data has been dumped"
)
INVALID_EXECUTION_DATA_MESSAGE = "JaCoCo execution data could not be read, coverage is set to 0%"

_U16 = struct.Struct(">H")
_I64 = struct.Struct(">q")


# =============================================================================
# Modified UTF-8
# =============================================================================


def _utf16_units(text: str) -> tuple[int, ...]:
    data = text.encode("utf-16-be", "surrogatepass")
    return struct.unpack(f">{len(data) // 2}H", data)


def encode_modified_utf8(text: str) -> bytes:
    out = bytearray()
    for unit in _utf16_units(text):
        if 0 < unit < 0x80:
            out.append(unit)
        elif unit < 0x800:
            out += bytes((0xC0 | unit >> 6, 0x80 | unit & 0x3F))
        else:
            out += bytes((0xE0 | unit >> 12, 0x80 | (unit >> 6) & 0x3F, 0x80 | unit & 0x3F))
    return bytes(out)


def decode_modified_utf8(data: bytes) -> str:
    units: list[int] = []
    i = 0
    try:
        while i < len(data):
            b = data[i]
            if b < 0x80:
                units.append(b)
                i += 1
            elif b >> 5 == 0b110:
                units.append((b & 0x1F) << 6 | data[i + 1] & 0x3F)
                i += 2
            elif b >> 4 == 0b1110:
                units.append((b & 0x0F) << 12 | (data[i + 1] & 0x3F) << 6 | data[i + 2] & 0x3F)
                i += 3
            else:
                raise ExecutionDataError.invalid_file(f"malformed string byte {b:#x}")
    except IndexError as e:
        raise ExecutionDataError.invalid_file("truncated string") from e
    return struct.pack(f">{len(units)}H", *units).decode("utf-16-be", "surrogatepass")


# =============================================================================
# Reading
# =============================================================================


class _Cursor:
    """Sequential reader over an in-memory buffer."""

    __slots__ = ("_data", "pos")

    def __init__(self, data: bytes) -> None:
        self._data = data
        self.pos = 0

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self._data)

    def take(self, n: int) -> bytes:
        end = self.pos + n
        if end > len(self._data):
            raise ExecutionDataError.truncated(self.pos, n)
        chunk = self._data[self.pos : end]
        self.pos = end
        return chunk

    def byte(self) -> int:
        return self.take(1)[0]

    def u16(self) -> int:
        return _U16.unpack(self.take(2))[0]

    def i64(self) -> int:
        return _I64.unpack(self.take(8))[0]

    def utf(self) -> str:
        return decode_modified_utf8(self.take(self.u16()))

    def varint(self) -> int:
        value = 0
        shift = 0
        while True:
            b = self.byte()
            value |= (b & 0x7F) << shift
            if not b & 0x80:
                return value
            shift += 7

    def booleans(self) -> tuple[bool, ...]:
        count = self.varint()
        packed = self.take((count + 7) // 8)
        return tuple(bool(packed[i >> 3] >> (i & 7) & 1) for i in range(count))


def parse_execution_data(data: bytes) -> ExecutionDataReport:
    """Decode an execution data buffer.

    Raises:
        ExecutionDataError: On a missing header, bad magic, unsupported
            version, unknown block, truncated block, or conflicting records.
    """
    report = ExecutionDataReport()
    cursor = _Cursor(data)
    current: ExecutionDataStore | None = None
    first = True

    while not cursor.at_end:
        offset = cursor.pos
        block = cursor.byte()
        if first and block != BLOCK_HEADER:
            raise ExecutionDataError.invalid_file()
        first = False

        if block == BLOCK_HEADER:
            if cursor.u16() != MAGIC_NUMBER:
                raise ExecutionDataError.invalid_file("bad magic number")
            version = cursor.u16()
            if version != FORMAT_VERSION:
                raise ExecutionDataError.incompatible_version(version)
        elif block == BLOCK_SESSIONINFO:
            info = SessionInfo(id=cursor.utf(), start=cursor.i64(), dump=cursor.i64())
            report.session_infos.append(info)
            current = report.sessions.setdefault(info.id, ExecutionDataStore())
        elif block == BLOCK_EXECUTIONDATA:
            record = ExecutionData(
                class_id=cursor.i64(), name=cursor.utf(), probes=cursor.booleans()
            )
            report.merged.put(record)
            if current is not None:
                current.put(record)
        else:
            raise ExecutionDataError.unknown_block(block, offset)

    return report


def read_execution_data(path: Path | None) -> ExecutionDataReport:
    """Read an execution data file.

    A missing path, or one that is not a regular file, means no data was
    recorded. An unreadable or malformed file is reported and treated the
    same way. Both yield an empty report.
    """
    if path is None or not path.is_file():
        log.info("execdata.missing", message=NO_EXECUTION_DATA_MESSAGE, path=str(path))
        return ExecutionDataReport()

    try:
        report = parse_execution_data(path.read_bytes())
    except (OSError, ExecutionDataError) as e:
        log.warning(
            "execdata.unreadable",
            message=INVALID_EXECUTION_DATA_MESSAGE,
            path=str(path),
            error=str(e),
        )
        return ExecutionDataReport()

    log.debug(
        "execdata.read",
        path=str(path),
        sessions=len(report.sessions),
        classes=len(report.merged),
    )
    return report


# =============================================================================
# Writing
# =============================================================================


def _utf(text: str) -> bytes:
    encoded = encode_modified_utf8(text)
    return _U16.pack(len(encoded)) + encoded


def _varint(value: int) -> bytes:
    out = bytearray()
    while value & ~0x7F:
        out.append(value & 0x7F | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _booleans(values: tuple[bool, ...]) -> bytes:
    packed = bytearray((len(values) + 7) // 8)
    for i, value in enumerate(values):
        if value:
            packed[i >> 3] |= 1 << (i & 7)
    return _varint(len(values)) + bytes(packed)


def encode_execution_data(
    store: ExecutionDataStore, session: SessionInfo | None = None
) -> bytes:
    """Encode a store as a single-dump execution data buffer."""
    out = bytearray((BLOCK_HEADER,))
    out += _U16.pack(MAGIC_NUMBER) + _U16.pack(FORMAT_VERSION)
    if session is not None:
        out.append(BLOCK_SESSIONINFO)
        out += _utf(session.id) + _I64.pack(session.start) + _I64.pack(session.dump)
    for record in store:
        out.append(BLOCK_EXECUTIONDATA)
        out += _I64.pack(record.class_id) + _utf(record.name) + _booleans(record.probes)
    return bytes(out)


def write_execution_data(
    path: Path, store: ExecutionDataStore, session: SessionInfo | None = None
) -> None:
    path.write_bytes(encode_execution_data(store, session))
