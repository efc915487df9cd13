import pytest

from hdma_gradient.errors import InvalidColumnWidthError, InvalidCountError
from hdma_gradient.rows import (
    TERMINATOR,
    ContinuousRow,
    RepeatRow,
    iter_scanline_values,
    new_continuous,
    new_repeat,
    new_scanline,
    row_scanlines,
)


def test_new_repeat_accepts_full_count() -> None:
    row = new_repeat(127, [0x20])

    assert row == RepeatRow(127, b"\x20")
    assert row_scanlines(row) == 127


def test_new_repeat_rejects_out_of_range_counts() -> None:
    with pytest.raises(InvalidCountError):
        new_repeat(128, [0x20])
    with pytest.raises(InvalidCountError):
        new_repeat(0, [0x20])


def test_new_repeat_rejects_bad_value_width() -> None:
    with pytest.raises(InvalidColumnWidthError):
        new_repeat(1, b"")
    with pytest.raises(InvalidColumnWidthError):
        new_repeat(1, b"\x01\x02\x03\x04\x05")


def test_new_continuous_splits_by_width() -> None:
    row = new_continuous([0x01, 0x02, 0x03, 0x04], 2)

    assert row.values == (b"\x01\x02", b"\x03\x04")
    assert row_scanlines(row) == 2


def test_new_continuous_pads_partial_value_with_its_last_byte() -> None:
    row = new_continuous([0x01, 0x02, 0x03], 2)
    assert row.values == (b"\x01\x02", b"\x03\x03")

    row = new_continuous([0x10, 0x11, 0x12, 0x13, 0x14], 4)
    assert row.values == (b"\x10\x11\x12\x13", b"\x14\x14\x14\x14")


def test_new_continuous_limits() -> None:
    assert row_scanlines(new_continuous(bytes(127), 1)) == 127

    with pytest.raises(InvalidCountError):
        new_continuous(bytes(128), 1)
    with pytest.raises(InvalidCountError):
        new_continuous(b"", 1)
    with pytest.raises(InvalidColumnWidthError):
        new_continuous(b"\x00", 5)


def test_continuous_row_rejects_mixed_widths() -> None:
    with pytest.raises(InvalidColumnWidthError):
        ContinuousRow((b"\x00", b"\x00\x00"))


def test_new_scanline_is_single_value_continuous_row() -> None:
    row = new_scanline([0x3F])

    assert row == ContinuousRow((b"\x3f",))
    assert row_scanlines(row) == 1


def test_iter_scanline_values() -> None:
    assert list(iter_scanline_values(new_repeat(3, [0x01]))) == [b"\x01"] * 3
    assert list(iter_scanline_values(new_continuous([1, 2], 1))) == [b"\x01", b"\x02"]
    assert list(iter_scanline_values(TERMINATOR)) == []
    assert row_scanlines(TERMINATOR) == 0
