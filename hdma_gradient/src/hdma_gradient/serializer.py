"""Render HDMA tables as assembler data statements (and read them back).

Byte tables::

    red_table:
    db $0A,$20
    db $83,$21,$22,$23
    db $00

Word tables put the values in ``dw`` statements (little endian, so the
bytes land in memory in the same order as in a byte table)::

    green_blue_table:
    db $0A : dw $8040
    db $82 : dw $8041,$8142
    db $00
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from .errors import HdmaError, InvalidColumnWidthError, TableStateError
from .rows import CONTINUOUS_BIT, MAX_ROW_COUNT, ContinuousRow, RepeatRow
from .table import HdmaTable, WriteMode


def _format_bytes(values: Iterable[bytes]) -> str:
    return ",".join(f"${byte:02X}" for value in values for byte in value)


def _format_words(values: Iterable[bytes], width: int) -> str:
    words = []
    for value in values:
        padded = value.ljust(width, b"\x00")
        for i in range(0, width, 2):
            words.append(f"${padded[i + 1]:02X}{padded[i]:02X}")
    return ",".join(words)


def _format_row(count_byte: int, values: Sequence[bytes], table: HdmaTable) -> str:
    if table.write_mode == WriteMode.WORDS:
        return f"db ${count_byte:02X} : dw {_format_words(values, table.data_width)}"
    return f"db ${count_byte:02X},{_format_bytes(values)}"


def render_table(table: HdmaTable) -> str:
    """Return the assembler text for ``table`` and mark it serialized."""

    if not table.finished:
        raise TableStateError(f"{table.name} has no terminator")

    lines = [f"{table.name}:"]
    for row in table.rows:
        if isinstance(row, RepeatRow):
            lines.append(_format_row(row.count, [row.value], table))
        elif isinstance(row, ContinuousRow):
            lines.append(_format_row(CONTINUOUS_BIT | len(row.values), row.values, table))
        else:
            lines.append("db $00")
    table.mark_serialized()
    return "\n".join(lines) + "\n"


def render_tables(tables: Iterable[HdmaTable]) -> str:
    return "\n".join(render_table(table) for table in tables)


@dataclass
class DecodedTable:
    name: str
    scanlines: List[bytes] = field(default_factory=list)


def _parse_operand(text: str) -> int:
    text = text.strip()
    try:
        if text.startswith("$"):
            return int(text[1:], 16)
        return int(text, 10)
    except ValueError as exc:
        raise HdmaError(f"Invalid operand: {text!r}") from exc


def _parse_data(text: str) -> tuple[str | None, bytearray]:
    name: str | None = None
    data = bytearray()
    for raw_line in text.splitlines():
        line = raw_line.split(";", 1)[0].strip()
        if not line:
            continue
        if line.endswith(":") and " " not in line:
            if name is None:
                name = line[:-1]
            continue
        for statement in line.split(":"):
            statement = statement.strip()
            directive, _, operands = statement.partition(" ")
            directive = directive.lower()
            if directive not in ("db", "dw"):
                raise HdmaError(f"Unsupported statement: {statement!r}")
            for operand in operands.split(","):
                value = _parse_operand(operand)
                if directive == "db":
                    if value > 0xFF:
                        raise HdmaError(f"Byte operand out of range: {operand.strip()}")
                    data.append(value)
                else:
                    if value > 0xFFFF:
                        raise HdmaError(f"Word operand out of range: {operand.strip()}")
                    data.extend((value & 0xFF, value >> 8))
    return name, data


def decode_table(
    text: str,
    column_width: int,
    write_mode: WriteMode = WriteMode.BYTES,
) -> DecodedTable:
    """Rebuild the per-scanline values from rendered table text.

    Row boundaries are not stored, so the column width (and write mode) of
    the table must be supplied. Reading stops at the terminator.
    """

    if column_width < 1 or column_width > 4:
        raise InvalidColumnWidthError(f"Column width must be between 1 and 4, got {column_width}")
    width = column_width
    if write_mode == WriteMode.WORDS:
        width += column_width & 1

    name, data = _parse_data(text)
    decoded = DecodedTable(name or "")

    def take(offset: int, size: int) -> bytes:
        if offset + size > len(data):
            raise HdmaError("Table data ends in the middle of a row")
        return bytes(data[offset : offset + size])

    pos = 0
    while True:
        count = take(pos, 1)[0]
        pos += 1
        if count == 0:
            return decoded
        if count & CONTINUOUS_BIT:
            lines = count & MAX_ROW_COUNT
            if lines == 0:
                raise HdmaError("Continuous row without values")
            for _ in range(lines):
                decoded.scanlines.append(take(pos, width)[:column_width])
                pos += width
        else:
            value = take(pos, width)[:column_width]
            pos += width
            decoded.scanlines.extend([value] * count)
