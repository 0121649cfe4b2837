"""Buffered pull adapter: drives a StreamCodec from an owned byte source.

The adapter owns three things:
  - a StreamCodec (compressor or decompressor),
  - the source it pulls untransformed bytes from,
  - a fixed-capacity scratch buffer holding source bytes not yet consumed.

``pull(destination)`` fills the caller's slice with transformed bytes. It
loops internally only while the codec produced nothing and the source is
not exhausted; any other outcome returns to the caller.
"""

from __future__ import annotations

import errno
import logging
from collections.abc import Callable
from typing import Any

from pullstream.core.codec_base import StreamCodec
from pullstream.core.status import Status
from pullstream.errors import InvalidInput

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 32 * 1024

# (codec, input slice, output slice, source eof) -> status
Transform = Callable[[StreamCodec, memoryview, memoryview, bool], int]


class BufferedPullAdapter:
    def __init__(
        self,
        codec: StreamCodec,
        source: Any,
        transform: Transform,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        if buffer_size <= 0:
            raise ValueError(f"buffer_size must be > 0, got {buffer_size}")
        self.codec = codec
        self._source = source
        self._transform = transform
        self._scratch = bytearray(buffer_size)
        self._view = memoryview(self._scratch)
        self._filled = 0
        self._cursor = 0
        self._finished = False
        self._failed: InvalidInput | None = None

    @property
    def capacity(self) -> int:
        return len(self._scratch)

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def source(self) -> Any:
        if self._source is None:
            raise ValueError("adapter has been unwrapped")
        return self._source

    def unwrap(self) -> Any:
        """Give the source back to the caller. The adapter is unusable afterwards."""
        src = self.source
        self._source = None
        return src

    def _refill(self) -> int:
        src = self.source
        readinto = getattr(src, "readinto", None)
        if readinto is not None:
            n = readinto(self._view)
            if n is None:
                raise BlockingIOError(errno.EAGAIN, "source has no data available (non-blocking)")
        else:
            data = src.read(len(self._scratch))
            n = len(data)
            self._scratch[:n] = data
        self._filled = n
        self._cursor = 0
        logger.debug("refilled scratch: %d bytes", n)
        return n

    def pull(self, destination: Any) -> int:
        if self._finished:
            return 0
        if self._failed is not None:
            raise InvalidInput(str(self._failed), status=self._failed.status)
        if self._source is None:
            raise ValueError("adapter has been unwrapped")

        with memoryview(destination).cast("B") as out:
            while True:
                eof = False
                if self._cursor == self._filled:
                    eof = self._refill() == 0

                codec = self.codec
                before_in = codec.total_in()
                before_out = codec.total_out()
                rc = self._transform(codec, self._view[self._cursor : self._filled], out, eof)
                self._cursor += codec.total_in() - before_in
                produced = codec.total_out() - before_out
                if produced > len(out):
                    # The codec claims more output than the destination can hold.
                    logger.debug("codec produced %d bytes into a %d byte slice", produced, len(out))
                    self._failed = InvalidInput("invalid input", status=int(rc))
                    raise self._failed

                if rc == Status.STREAM_END and produced > 0:
                    self._finished = True
                    logger.debug("stream end: total_in=%d total_out=%d", codec.total_in(), codec.total_out())
                elif rc in (Status.OUTPUT_BUFFER_FULL, Status.STREAM_END):
                    pass
                elif rc >= 0:
                    pass
                else:
                    logger.debug("codec error status %d", int(rc))
                    self._failed = InvalidInput("invalid input", status=int(rc))
                    raise self._failed

                if produced == 0 and not eof:
                    continue
                return produced
