from __future__ import annotations

import zlib
from typing import Any

from pullstream.core.codec_base import EngineStreamCodec
from pullstream.core.status import Level


class CodecZlib(EngineStreamCodec):
    """zlib/DEFLATE stream codec (no external deps)."""

    codec_id = "zlib"
    min_level = 0
    max_level = 9
    levels = {Level.FASTEST: 1, Level.DEFAULT: 6, Level.BEST: 9}
    engine_errors = (zlib.error,)

    def _new_compressor(self, level: int) -> Any:
        return zlib.compressobj(level)

    def _new_decompressor(self) -> Any:
        return zlib.decompressobj()

    def _flush_engine(self) -> bytes:
        return self._engine.flush(zlib.Z_FINISH)
