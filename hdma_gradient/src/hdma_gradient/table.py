"""HDMA table model."""

from __future__ import annotations

from enum import StrEnum
from typing import List

from .coagulate import coagulate, coagulate_repeat
from .errors import InvalidColumnWidthError, InvalidRangeError, TableStateError
from .rows import (
    MAX_COLUMN_WIDTH,
    MIN_COLUMN_WIDTH,
    TERMINATOR,
    ContinuousRow,
    RepeatRow,
    Row,
    Terminator,
    row_scanlines,
    row_width,
)


class WriteMode(StrEnum):
    BYTES = "bytes"
    WORDS = "words"


class TableState(StrEnum):
    UNBUILT = "unbuilt"
    RAW = "raw"
    COAGULATED = "coagulated"
    SERIALIZED = "serialized"


class HdmaTable:
    """An ordered list of rows plus the metadata needed to render them.

    ``real`` tables are read directly by an HDMA channel and may hold 1, 2
    or 4 byte values. Pseudo tables (``real=False``) are read by the
    scrollable gradient code instead; they may use 3 byte values but have no
    continuous rows.
    """

    def __init__(
        self,
        name: str,
        column_width: int,
        write_mode: WriteMode = WriteMode.BYTES,
        real: bool = True,
    ) -> None:
        if column_width < MIN_COLUMN_WIDTH or column_width > MAX_COLUMN_WIDTH:
            raise InvalidColumnWidthError(
                f"{name}: column width must be between {MIN_COLUMN_WIDTH} and {MAX_COLUMN_WIDTH}, got {column_width}"
            )
        if column_width == 3 and real:
            raise InvalidColumnWidthError(f"{name}: 3 byte columns are only valid in pseudo tables")
        if column_width == 3 and write_mode == WriteMode.WORDS:
            raise InvalidColumnWidthError(f"{name}: 3 byte columns cannot be written as words")

        self.name = name
        self.column_width = column_width
        self.write_mode = WriteMode(write_mode)
        self.real = real
        self.state = TableState.UNBUILT
        self._rows: List[Row] = []

    def __repr__(self) -> str:
        return (
            f"HdmaTable(name={self.name!r}, column_width={self.column_width}, "
            f"write_mode={self.write_mode.value}, rows={len(self._rows)}, state={self.state.value})"
        )

    @property
    def rows(self) -> tuple[Row, ...]:
        return tuple(self._rows)

    @property
    def data_width(self) -> int:
        """Bytes written per scanline; word writes round up to an even count."""

        if self.write_mode == WriteMode.WORDS:
            return self.column_width + (self.column_width & 1)
        return self.column_width

    @property
    def finished(self) -> bool:
        return bool(self._rows) and isinstance(self._rows[-1], Terminator)

    @property
    def scanlines(self) -> int:
        return sum(row_scanlines(row) for row in self._rows)

    def _ensure_open(self) -> None:
        if self.state == TableState.SERIALIZED:
            raise TableStateError(f"{self.name} has already been serialized")

    def _ensure_built(self) -> None:
        if self.state == TableState.UNBUILT:
            raise TableStateError(f"{self.name} has no rows to coagulate")

    def push(self, row: Row) -> None:
        self._ensure_open()
        if self.state == TableState.COAGULATED:
            raise TableStateError(f"{self.name} is coagulated; no rows can be added")
        if self.finished:
            raise TableStateError(f"{self.name} is terminated; no rows can follow")
        if isinstance(row, Terminator):
            self.finish()
            return
        width = row_width(row)
        if width != self.column_width:
            raise InvalidColumnWidthError(
                f"{self.name}: row holds {width} byte values, table expects {self.column_width}"
            )
        if isinstance(row, ContinuousRow) and not self.real:
            raise TableStateError(f"{self.name}: pseudo tables only hold repeat rows")
        self._rows.append(row)
        if self.state == TableState.UNBUILT:
            self.state = TableState.RAW

    def finish(self) -> None:
        self._ensure_open()
        if not self.finished:
            self._rows.append(TERMINATOR)
            if self.state == TableState.UNBUILT:
                self.state = TableState.RAW

    def validate(self, expected_scanlines: int) -> None:
        if self.scanlines != expected_scanlines:
            raise InvalidRangeError(
                f"{self.name} covers {self.scanlines} scanlines, expected {expected_scanlines}"
            )

    def byte_size(self) -> int:
        size = 0
        for row in self._rows:
            if isinstance(row, RepeatRow):
                size += 1 + self.data_width
            elif isinstance(row, ContinuousRow):
                size += 1 + len(row.values) * self.data_width
            else:
                size += 1
        return size

    def coagulate(self) -> None:
        # Pseudo tables have no continuous rows, only merge their repeats.
        self._ensure_open()
        self._ensure_built()
        self._rows = coagulate(self._rows) if self.real else coagulate_repeat(self._rows)
        self.state = TableState.COAGULATED

    def coagulate_repeat(self) -> None:
        self._ensure_open()
        self._ensure_built()
        self._rows = coagulate_repeat(self._rows)
        self.state = TableState.COAGULATED

    def mark_serialized(self) -> None:
        self._ensure_open()
        self.state = TableState.SERIALIZED
