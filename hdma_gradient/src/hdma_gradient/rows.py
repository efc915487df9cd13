"""HDMA table rows.

An HDMA table is a list of rows, each starting with a line count byte:

- repeat row:      ``count`` (1-127), then one value written on every line
- continuous row:  ``$80 | n``, then ``n`` values, one per scanline
- terminator:      ``$00``

Values are between one and four bytes wide, depending on the transfer mode
of the channel that reads the table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Union

from .errors import InvalidColumnWidthError, InvalidCountError

MAX_ROW_COUNT = 0x7F
CONTINUOUS_BIT = 0x80
MIN_COLUMN_WIDTH = 1
MAX_COLUMN_WIDTH = 4


def _check_width(width: int) -> None:
    if width < MIN_COLUMN_WIDTH or width > MAX_COLUMN_WIDTH:
        raise InvalidColumnWidthError(
            f"Column width must be between {MIN_COLUMN_WIDTH} and {MAX_COLUMN_WIDTH} bytes, got {width}"
        )


def _check_count(count: int) -> None:
    if count < 1 or count > MAX_ROW_COUNT:
        raise InvalidCountError(f"Row count must be between 1 and {MAX_ROW_COUNT}, got {count}")


@dataclass(frozen=True)
class RepeatRow:
    """``count`` scanlines sharing one value."""

    count: int
    value: bytes

    def __post_init__(self) -> None:
        _check_count(self.count)
        _check_width(len(self.value))


@dataclass(frozen=True)
class ContinuousRow:
    """One value per scanline; the scanline count is the number of values."""

    values: tuple[bytes, ...]

    def __post_init__(self) -> None:
        _check_count(len(self.values))
        width = len(self.values[0])
        _check_width(width)
        if any(len(value) != width for value in self.values):
            raise InvalidColumnWidthError("All values of a continuous row must have the same width")


@dataclass(frozen=True)
class Terminator:
    """End of table marker (``db $00``)."""


TERMINATOR = Terminator()

Row = Union[RepeatRow, ContinuousRow, Terminator]


def new_repeat(count: int, value: Sequence[int] | bytes) -> RepeatRow:
    return RepeatRow(count, bytes(value))


def new_continuous(samples: Sequence[int] | bytes, column_width: int) -> ContinuousRow:
    """Split ``samples`` into ``column_width`` sized values.

    A short final value is padded with copies of its own last byte, so that
    no input byte is dropped and the value count is ``ceil(len / width)``.
    """

    _check_width(column_width)
    data = bytes(samples)
    if not data:
        raise InvalidCountError("A continuous row needs at least one value")

    values = []
    for offset in range(0, len(data), column_width):
        chunk = data[offset : offset + column_width]
        if len(chunk) < column_width:
            chunk += chunk[-1:] * (column_width - len(chunk))
        values.append(chunk)
    return ContinuousRow(tuple(values))


def new_scanline(value: Sequence[int] | bytes) -> ContinuousRow:
    return ContinuousRow((bytes(value),))


def row_scanlines(row: Row) -> int:
    if isinstance(row, RepeatRow):
        return row.count
    if isinstance(row, ContinuousRow):
        return len(row.values)
    return 0


def row_width(row: Row) -> int | None:
    if isinstance(row, RepeatRow):
        return len(row.value)
    if isinstance(row, ContinuousRow):
        return len(row.values[0])
    return None


def iter_scanline_values(row: Row) -> Iterator[bytes]:
    """Yield the value written on each scanline covered by ``row``."""

    if isinstance(row, RepeatRow):
        for _ in range(row.count):
            yield row.value
    elif isinstance(row, ContinuousRow):
        yield from row.values
