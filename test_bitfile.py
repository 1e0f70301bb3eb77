#!/usr/bin/env python3
"""BitWriter / BitReader tests"""

import io

import pytest

from bitfile import BitReader, BitWriter

def test_write_packs_msb_first():
    out = io.BytesIO()
    writer = BitWriter(out)
    writer.write(257, 9)    # 100000001
    writer.write(0, 7)
    writer.close()
    assert out.getvalue() == bytes([0b10000000, 0b10000000])
    assert not out.closed

def test_flush_pads_with_zeros():
    out = io.BytesIO()
    writer = BitWriter(out)
    writer.write(0b101, 3)
    writer.flush()
    assert out.getvalue() == bytes([0b10100000])
    assert writer.bits_written == 3

def test_value_must_fit():
    writer = BitWriter(io.BytesIO())
    with pytest.raises(ValueError):
        writer.write(512, 9)
    with pytest.raises(ValueError):
        writer.write(-1, 9)

def test_mixed_widths_read_back():
    values = [(65, 9), (511, 9), (1000, 10), (1, 11), ((1 << 20) - 1, 20), (3, 20)]
    out = io.BytesIO()
    with BitWriter(out) as writer:
        for value, width in values:
            writer.write(value, width)

    reader = BitReader(io.BytesIO(out.getvalue()), chunk_size=3)
    assert [reader.read(width) for _, width in values] == [value for value, _ in values]
    # Only zero padding left, fewer bits than a code word
    assert reader.read(9) is None

def test_file_names_are_opened_and_closed(tmp_path):
    path = tmp_path / 'bits.bin'
    writer = BitWriter(str(path))
    writer.write(0xABC, 12)
    writer.close()
    assert writer.file.closed
    assert path.read_bytes() == bytes([0xAB, 0xC0])

    with BitReader(path) as reader:
        assert reader.read(12) == 0xABC
        assert reader.read(4) == 0
        assert reader.read(1) is None
    assert reader.file.closed
