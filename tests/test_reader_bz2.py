from __future__ import annotations

import bz2
import io
import random

import pytest

from pullstream.engine.reader import CompressingReader, DecompressingReader
from pullstream.errors import InvalidInput


def _compress(data: bytes) -> bytes:
    with CompressingReader(io.BytesIO(data)) as c:
        return c.read()


def test_smoke() -> None:
    m = bytes([1, 2, 3, 4, 5, 6, 7, 8])
    data = _compress(m)
    # Native bzip2 framing: the stdlib one-shot decoder agrees.
    assert bz2.decompress(data) == m


def test_smoke_chained_readers() -> None:
    m = bytes([1, 2, 3, 4, 5, 6, 7, 8])
    c = CompressingReader(io.BytesIO(m))
    d = DecompressingReader(c)
    assert d.read() == m


def test_smoke_larger_than_scratch_buffer() -> None:
    m = b"\x03" * (128 * 1024 + 1)
    d = DecompressingReader(CompressingReader(io.BytesIO(m)))
    assert d.read() == m


def test_self_terminating() -> None:
    m = b"\x03" * (128 * 1024 + 1)
    compressed = _compress(m)

    rnd = random.Random(1234)
    v = bytes(rnd.getrandbits(8) for _ in range(1024))
    result = compressed + v * 200

    d = DecompressingReader(io.BytesIO(result))
    data = bytearray(len(m))
    assert d.readinto(data) == len(m)
    assert data == m
    assert d.total_in() == len(compressed)
    assert d.read(10) == b""


def test_zero_length_read_at_eof() -> None:
    compressed = _compress(b"")
    d = DecompressingReader(io.BytesIO(compressed))
    assert d.readinto(bytearray()) == 0


def test_zero_length_read_with_data() -> None:
    m = b"\x03" * (128 * 1024 + 1)
    src = io.BytesIO(_compress(m))
    d = DecompressingReader(src)
    assert d.readinto(bytearray()) == 0
    assert src.tell() == 0
    assert d.read() == m


def test_zero_length_read_after_stream_end() -> None:
    d = DecompressingReader(io.BytesIO(_compress(b"hello")))
    assert d.read() == b"hello"
    assert d.readinto(bytearray()) == 0
    assert d.pull(memoryview(bytearray())) == 0


def test_empty_input_yields_trailer_and_decodes_to_nothing() -> None:
    compressed = _compress(b"")
    assert len(compressed) > 0

    d = DecompressingReader(io.BytesIO(compressed))
    assert d.readinto(bytearray(64)) == 0
    assert d.total_in() == len(compressed)


def test_compressor_zero_length_read_consumes_nothing() -> None:
    src = io.BytesIO(b"abc" * 100)
    c = CompressingReader(src)
    assert c.readinto(bytearray()) == 0
    assert src.tell() == 0
    assert bz2.decompress(c.read()) == b"abc" * 100


def test_idempotent_completion() -> None:
    d = DecompressingReader(io.BytesIO(_compress(b"xyz" * 10)))
    assert d.read() == b"xyz" * 10
    assert d.finished
    for size in (1, 7, 64 * 1024):
        assert d.readinto(bytearray(size)) == 0


def test_counters_are_monotonic_and_exact() -> None:
    m = bytes(range(256)) * 600
    compressed = _compress(m)

    d = DecompressingReader(io.BytesIO(compressed), buffer_size=512)
    last_in = last_out = 0
    out = bytearray()
    buf = bytearray(1000)
    while True:
        n = d.readinto(buf)
        assert d.total_in() >= last_in
        assert d.total_out() >= last_out
        last_in, last_out = d.total_in(), d.total_out()
        if n == 0:
            break
        out += buf[:n]
    assert out == m
    assert d.total_in() == len(compressed)
    assert d.total_out() == len(m)


def test_compressor_counters() -> None:
    m = b"ratio " * 5000
    c = CompressingReader(io.BytesIO(m), level=9)
    out = c.read()
    assert c.total_in() == len(m)
    assert c.total_out() == len(out)
    assert c.total_out() < c.total_in()


def test_unwrap_gives_back_the_source() -> None:
    src = io.BytesIO(_compress(b"abc"))
    d = DecompressingReader(src)
    assert d.unwrap() is src
    assert d.closed
    with pytest.raises(ValueError):
        d.read()


def test_close_does_not_close_source() -> None:
    src = io.BytesIO(_compress(b"abc"))
    with DecompressingReader(src) as d:
        assert d.read() == b"abc"
    assert not src.closed


def test_corrupt_input_is_invalid_input_and_poisons_reader() -> None:
    d = DecompressingReader(io.BytesIO(b"this is not a bzip2 stream at all"))
    with pytest.raises(InvalidInput):
        d.read()
    with pytest.raises(InvalidInput):
        d.read()


def test_truncated_input_is_invalid_input() -> None:
    compressed = _compress(b"truncate me " * 1000)
    d = DecompressingReader(io.BytesIO(compressed[:-6]))
    with pytest.raises(InvalidInput):
        d.read()


def test_empty_source_decompresses_to_nothing() -> None:
    d = DecompressingReader(io.BytesIO(b""))
    assert d.read() == b""


def test_empty_stream_followed_by_garbage_is_invalid_input() -> None:
    # No decoded byte can carry the end-of-stream signal, so the trailing
    # bytes reach the finished decoder.
    d = DecompressingReader(io.BytesIO(_compress(b"") + b"garbage"))
    with pytest.raises(InvalidInput):
        d.read()


def test_buffered_reader_on_top() -> None:
    text = b"".join(b"line %d\n" % i for i in range(2000))
    r = io.BufferedReader(DecompressingReader(io.BytesIO(_compress(text))))
    assert r.readline() == b"line 0\n"
    assert r.read() == text[len(b"line 0\n") :]


def _read_bounded(r: io.RawIOBase, chunk: int) -> bytes:
    out = bytearray()
    buf = bytearray(chunk)
    while True:
        n = r.readinto(buf)
        assert 0 <= n <= len(buf)
        if n == 0:
            return bytes(out)
        out += buf[:n]


@pytest.mark.p1
@pytest.mark.parametrize("level", [1, 9])
def test_multi_block_roundtrip_with_small_reads(level: int) -> None:
    # Level 1 uses 100 kB blocks: several blocks of text plus a noisy tail.
    rnd = random.Random(level)
    text = b"".join(b"line %07d: qty=%d price=%d.%02d\n" % (i, i % 13, i % 97, i % 100) for i in range(40_000))
    noise = rnd.randbytes(300_000)
    m = text + noise
    assert len(m) > 900 * 1024

    c = CompressingReader(io.BytesIO(m), level=level)
    compressed = _read_bounded(c, 1000)
    assert c.total_in() == len(m)
    assert bz2.decompress(compressed) == m

    d = DecompressingReader(io.BytesIO(compressed))
    assert _read_bounded(d, 1000) == m
    assert d.total_in() == len(compressed)
