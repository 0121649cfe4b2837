from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pullstream.core.status import Action, Level, Status


class StreamCodec(ABC):
    """
    Stateful, chunk-oriented transform driven by the pull adapter.

    NOTE: progress is never returned directly. Callers snapshot
    total_in()/total_out() before a call and diff them afterwards:
      - delta(total_in)  = input bytes consumed by that call
      - delta(total_out) = bytes written at the start of ``output``
    """

    codec_id: ClassVar[str]

    @abstractmethod
    def compress(self, input: Any, output: Any, action: Action) -> Status:
        raise NotImplementedError

    @abstractmethod
    def decompress(self, input: Any, output: Any) -> Status:
        raise NotImplementedError

    @abstractmethod
    def total_in(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def total_out(self) -> int:
        raise NotImplementedError


class EngineStreamCodec(StreamCodec):
    """
    StreamCodec over a Python "compressobj"-style engine.

    Engines take whole input slices and hand back output of any length, so the
    overflow beyond the caller's slice is kept pending here and drained first
    on the next call. New input is only accepted once nothing is pending.

    Decompression holds back the last decoded byte until the engine reaches the
    end of the frame: the call that reports STREAM_END then always produces
    output (unless the decoded stream is empty).
    """

    min_level: ClassVar[int]
    max_level: ClassVar[int]
    levels: ClassVar[dict[Level, int]]
    engine_errors: ClassVar[tuple[type[BaseException], ...]] = ()

    def __init__(self, *, compress: bool, level: int | None = None) -> None:
        self._compressing = compress
        if compress:
            lvl = self.levels[Level.DEFAULT] if level is None else int(level)
            if not (self.min_level <= lvl <= self.max_level):
                raise ValueError(
                    f"{self.codec_id} level must be {self.min_level}..{self.max_level}, got {lvl}"
                )
            self.level: int | None = lvl
            self._engine = self._new_compressor(lvl)
        else:
            self.level = None
            self._engine = self._new_decompressor()

        self._pending = bytearray()
        self._total_in = 0
        self._total_out = 0
        self._flushed = False  # compress: engine trailer requested
        self._ended = False  # decompress: engine saw the end of the frame

    @classmethod
    def new_compress(cls, level: int | None = None) -> EngineStreamCodec:
        return cls(compress=True, level=level)

    @classmethod
    def new_decompress(cls) -> EngineStreamCodec:
        return cls(compress=False)

    @abstractmethod
    def _new_compressor(self, level: int) -> Any:
        """Return an object with ``compress(data) -> bytes`` and ``flush() -> bytes``."""
        raise NotImplementedError

    @abstractmethod
    def _new_decompressor(self) -> Any:
        """Return an object with ``decompress(data)``, ``eof`` and ``unused_data``."""
        raise NotImplementedError

    def _flush_engine(self) -> bytes:
        return self._engine.flush()

    # counters

    def total_in(self) -> int:
        return self._total_in

    def total_out(self) -> int:
        return self._total_out

    @property
    def is_compressor(self) -> bool:
        return self._compressing

    # helpers

    def _drain(self, output: memoryview, pos: int, keep: int = 0) -> int:
        """Move pending bytes into ``output[pos:]``; return the new write position."""
        n = min(len(output) - pos, len(self._pending) - keep)
        if n <= 0:
            return pos
        output[pos : pos + n] = self._pending[:n]
        del self._pending[:n]
        self._total_out += n
        return pos + n

    # transforms

    def compress(self, input: Any, output: Any, action: Action) -> Status:
        if not self._compressing:
            return Status.SEQUENCE_ERROR
        out = memoryview(output).cast("B")

        if self._flushed and not self._pending:
            return Status.STREAM_END

        pos = self._drain(out, 0)
        if self._pending:
            return Status.FINISH_OK if self._flushed else Status.OUTPUT_BUFFER_FULL

        if not self._flushed:
            n_in = len(input)
            try:
                if n_in:
                    self._pending += self._engine.compress(input)
                self._total_in += n_in
                if action is Action.FINISH:
                    self._pending += self._flush_engine()
                    self._flushed = True
            except self.engine_errors:
                return Status.DATA_ERROR
            self._drain(out, pos)

        if self._flushed:
            return Status.FINISH_OK if self._pending else Status.STREAM_END
        return Status.RUN_OK

    def decompress(self, input: Any, output: Any) -> Status:
        if self._compressing:
            return Status.SEQUENCE_ERROR
        out = memoryview(output).cast("B")
        n_in = len(input)

        if self._ended:
            if not self._pending:
                # Frame already over: only an empty slice (source eof) is legal.
                return Status.SEQUENCE_ERROR if n_in else Status.STREAM_END
            self._drain(out, 0)
            return Status.OUTPUT_BUFFER_FULL if self._pending else Status.STREAM_END

        if not n_in:
            # No more input will ever come.
            if self._pending:
                self._drain(out, 0)
                return Status.OUTPUT_BUFFER_FULL if self._pending else Status.OK
            if self._total_in:
                return Status.UNEXPECTED_EOF
            return Status.OK

        pos = self._drain(out, 0, keep=1)
        if len(self._pending) > 1:
            return Status.OUTPUT_BUFFER_FULL

        try:
            chunk = self._engine.decompress(input)
        except self.engine_errors:
            return Status.DATA_ERROR
        consumed = n_in
        if self._engine.eof:
            consumed -= len(self._engine.unused_data)
            self._ended = True
        self._total_in += consumed
        self._pending += chunk

        if self._ended:
            self._drain(out, pos)
            return Status.OUTPUT_BUFFER_FULL if self._pending else Status.STREAM_END
        self._drain(out, pos, keep=1)
        return Status.OUTPUT_BUFFER_FULL if len(self._pending) > 1 else Status.OK
