"""Reader-based compression/decompression streams.

``CompressingReader`` wraps an uncompressed source: reading from it yields
compressed bytes. ``DecompressingReader`` wraps a compressed source: reading
from it yields the original bytes. Both are ``io.RawIOBase`` objects, so the
usual ``read``/``readall``/``io.BufferedReader`` plumbing works on top.
"""

from __future__ import annotations

import io
import shutil
from typing import Any

from pullstream.core.codec_base import StreamCodec
from pullstream.core.registry import DEFAULT_CODEC, new_compressor, new_decompressor
from pullstream.core.status import Action, Level
from pullstream.engine.adapter import DEFAULT_BUFFER_SIZE, BufferedPullAdapter


class _PullReader(io.RawIOBase):
    def __init__(self, adapter: BufferedPullAdapter) -> None:
        super().__init__()
        self._inner: BufferedPullAdapter | None = adapter

    def _adapter(self) -> BufferedPullAdapter:
        if self._inner is None or self.closed:
            raise ValueError("I/O operation on closed or unwrapped reader")
        return self._inner

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        return self.pull(buffer)

    def pull(self, buffer: Any) -> int:
        return self._adapter().pull(buffer)

    def unwrap(self) -> Any:
        """Return the wrapped source. The reader is closed afterwards."""
        src = self._adapter().unwrap()
        self._inner = None
        self.close()
        return src

    def total_in(self) -> int:
        return self._adapter().codec.total_in()

    def total_out(self) -> int:
        return self._adapter().codec.total_out()

    @property
    def codec(self) -> StreamCodec:
        return self._adapter().codec

    @property
    def finished(self) -> bool:
        return self._adapter().finished


def _compress_step(codec: StreamCodec, input: memoryview, output: memoryview, eof: bool) -> int:
    action = Action.FINISH if eof else Action.CONTINUE
    return codec.compress(input, output, action)


def _decompress_step(codec: StreamCodec, input: memoryview, output: memoryview, eof: bool) -> int:
    return codec.decompress(input, output)


class CompressingReader(_PullReader):
    """
    Compressed data is read from this stream; uncompressed data is pulled
    from ``source``.

    total_out() only bears a relation to total_in() once the compressor
    flushes, which in general happens at the end of the stream. At that
    point total_out() / total_in() is the compression ratio.
    """

    def __init__(
        self,
        source: Any,
        level: int | Level | str | None = None,
        codec: str = DEFAULT_CODEC,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        super().__init__(
            BufferedPullAdapter(new_compressor(codec, level), source, _compress_step, buffer_size)
        )

    def pull(self, buffer: Any) -> int:
        adapter = self._adapter()
        # An empty output slice can never show progress; the codec would stall.
        if memoryview(buffer).nbytes == 0:
            return 0
        return adapter.pull(buffer)


class DecompressingReader(_PullReader):
    """
    Decompressed data is read from this stream; compressed data is pulled
    from ``source``.

    The stream ends with the codec frame: bytes following it in ``source``
    are left unconsumed (total_in() stops at the frame end).
    """

    def __init__(
        self,
        source: Any,
        codec: str = DEFAULT_CODEC,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        super().__init__(
            BufferedPullAdapter(new_decompressor(codec), source, _decompress_step, buffer_size)
        )

    def pull(self, buffer: Any) -> int:
        adapter = self._adapter()
        # Zero-length reads would otherwise loop forever waiting for progress.
        if memoryview(buffer).nbytes == 0:
            return 0
        return adapter.pull(buffer)


def copy_stream(reader: io.RawIOBase, out: Any, chunk_size: int = DEFAULT_BUFFER_SIZE) -> int:
    """Copy everything ``reader`` yields into the writable ``out``; return bytes written."""
    total = 0
    buf = bytearray(chunk_size)
    view = memoryview(buf)
    while True:
        n = reader.readinto(view)
        if not n:
            break
        out.write(view[:n])
        total += n
    return total


def compress_bytes(
    data: bytes,
    codec: str = DEFAULT_CODEC,
    level: int | Level | str | None = None,
) -> bytes:
    with CompressingReader(io.BytesIO(data), level=level, codec=codec) as r:
        return r.readall()


def decompress_bytes(data: bytes, codec: str = DEFAULT_CODEC) -> bytes:
    with DecompressingReader(io.BytesIO(data), codec=codec) as r:
        out = io.BytesIO()
        shutil.copyfileobj(r, out)
        return out.getvalue()
