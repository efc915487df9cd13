"""Row compression ("coagulation") for HDMA tables.

A repeat row costs ``1 + width`` bytes no matter how many lines it covers,
while a continuous row costs ``width`` bytes per line plus one shared count
byte. Any run of two or more equal lines is therefore stored as a repeat
row, and the remaining lines are packed into continuous rows.
"""

from __future__ import annotations

from itertools import groupby
from typing import Iterable, List, Sequence

from .rows import (
    MAX_ROW_COUNT,
    ContinuousRow,
    RepeatRow,
    Row,
    Terminator,
    iter_scanline_values,
)


def _split_segments(rows: Iterable[Row]) -> List[tuple[List[Row], Terminator | None]]:
    # Each segment ends at a terminator (or at the end of the list).
    segments: List[tuple[List[Row], Terminator | None]] = []
    current: List[Row] = []
    for row in rows:
        if isinstance(row, Terminator):
            segments.append((current, row))
            current = []
        else:
            current.append(row)
    if current or not segments:
        segments.append((current, None))
    return segments


def _repeat_rows(count: int, value: bytes) -> List[Row]:
    rows: List[Row] = []
    while count > 0:
        chunk = min(count, MAX_ROW_COUNT)
        rows.append(RepeatRow(chunk, value))
        count -= chunk
    return rows


def _continuous_rows(values: Sequence[bytes]) -> List[Row]:
    return [
        ContinuousRow(tuple(values[i : i + MAX_ROW_COUNT]))
        for i in range(0, len(values), MAX_ROW_COUNT)
    ]


def _coagulate_segment(rows: Sequence[Row]) -> List[Row]:
    stream = [value for row in rows for value in iter_scanline_values(row)]

    output: List[Row] = []
    pending: List[bytes] = []
    for value, run in groupby(stream):
        length = sum(1 for _ in run)
        if length == 1:
            pending.append(value)
            continue
        if pending:
            output.extend(_continuous_rows(pending))
            pending = []
        output.extend(_repeat_rows(length, value))
    if pending:
        output.extend(_continuous_rows(pending))
    return output


def coagulate(rows: Iterable[Row]) -> List[Row]:
    """Return the smallest row list describing the same scanline values.

    Row boundaries are ignored: the values of every row before a terminator
    are treated as one stream, runs of two or more equal values become
    repeat rows and the rest is packed into continuous rows. Terminators stay
    where they are and are never merged across.
    """

    output: List[Row] = []
    for segment, terminator in _split_segments(rows):
        output.extend(_coagulate_segment(segment))
        if terminator is not None:
            output.append(terminator)
    return output


def coagulate_repeat(rows: Iterable[Row]) -> List[Row]:
    """Merge neighbouring repeat rows that carry the same value.

    Continuous rows and terminators are copied unchanged and break runs.
    Used for tables built solely from repeat rows, such as big gradients.
    """

    output: List[Row] = []
    run_value: bytes | None = None
    run_count = 0

    def flush() -> None:
        nonlocal run_value, run_count
        if run_value is not None:
            output.extend(_repeat_rows(run_count, run_value))
        run_value = None
        run_count = 0

    for row in rows:
        if isinstance(row, RepeatRow):
            if row.value == run_value:
                run_count += row.count
                continue
            flush()
            run_value = row.value
            run_count = row.count
        else:
            flush()
            output.append(row)
    flush()
    return output
