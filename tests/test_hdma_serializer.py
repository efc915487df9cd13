import pytest

from hdma_gradient.errors import HdmaError, TableStateError
from hdma_gradient.rows import ContinuousRow, RepeatRow, new_continuous, new_scanline
from hdma_gradient.serializer import decode_table, render_table, render_tables
from hdma_gradient.table import HdmaTable, WriteMode


def _table(rows, width=1, write_mode=WriteMode.BYTES, name="test_table", real=True):
    table = HdmaTable(name, width, write_mode, real=real)
    for row in rows:
        table.push(row)
    table.finish()
    return table


def test_render_byte_table() -> None:
    table = _table([RepeatRow(10, b"\x20"), ContinuousRow((b"\x21", b"\x22", b"\x23"))])

    assert render_table(table).splitlines() == [
        "test_table:",
        "db $0A,$20",
        "db $83,$21,$22,$23",
        "db $00",
    ]


def test_render_word_table() -> None:
    table = _table(
        [RepeatRow(10, b"\x40\x80"), ContinuousRow((b"\x41\x80", b"\x42\x81"))],
        width=2,
        write_mode=WriteMode.WORDS,
        name="green_blue_table",
    )

    assert render_table(table).splitlines() == [
        "green_blue_table:",
        "db $0A : dw $8040",
        "db $82 : dw $8041,$8142",
        "db $00",
    ]


def test_render_four_byte_words() -> None:
    table = _table([RepeatRow(2, b"\x00\x05\xff\x7f")], width=4, write_mode=WriteMode.WORDS)

    assert render_table(table).splitlines()[1] == "db $02 : dw $0500,$7FFF"


def test_render_single_byte_word_table_pads_high_byte() -> None:
    table = _table([RepeatRow(3, b"\x12")], width=1, write_mode=WriteMode.WORDS)

    assert render_table(table).splitlines()[1] == "db $03 : dw $0012"


def test_render_three_byte_pseudo_table() -> None:
    table = _table([RepeatRow(4, b"\x21\x42\x83")], width=3, real=False)

    assert render_table(table).splitlines()[1] == "db $04,$21,$42,$83"


def test_render_requires_terminator() -> None:
    table = HdmaTable("t", 1)
    table.push(new_scanline([1]))

    with pytest.raises(TableStateError):
        render_table(table)


def test_render_tables_separates_with_blank_line() -> None:
    text = render_tables([_table([RepeatRow(1, b"\x01")], name="a"), _table([RepeatRow(1, b"\x02")], name="b")])

    assert text == "a:\ndb $01,$01\ndb $00\n\nb:\ndb $01,$02\ndb $00\n"


def test_round_trip_continuous_rows() -> None:
    stream = bytes(range(0, 200))
    rows = [new_continuous(stream[:127], 1), new_continuous(stream[127:], 1)]
    text = render_table(_table(rows))

    decoded = decode_table(text, 1)

    assert decoded.name == "test_table"
    assert b"".join(decoded.scanlines) == stream


def test_round_trip_word_table() -> None:
    stream = bytes([0x00, 0x10, 0x1F, 0x00, 0x00, 0x10, 0xE0, 0x03])
    table = _table([new_continuous(stream, 4)], width=4, write_mode=WriteMode.WORDS)

    decoded = decode_table(render_table(table), 4, WriteMode.WORDS)

    assert b"".join(decoded.scanlines) == stream


def test_decode_expands_repeat_rows() -> None:
    text = "t:\ndb $03,$20 ; three lines\ndb $81,$21\ndb $00\n"

    assert decode_table(text, 1).scanlines == [b"\x20", b"\x20", b"\x20", b"\x21"]


def test_decode_rejects_truncated_tables() -> None:
    with pytest.raises(HdmaError):
        decode_table("t:\ndb $83,$01,$02\n", 1)
    with pytest.raises(HdmaError):
        decode_table("t:\ndb $02,$01\n", 1)
    with pytest.raises(HdmaError):
        decode_table("t:\nlda #$00\n", 1)
