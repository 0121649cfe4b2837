from __future__ import annotations

import bz2
from typing import Any

from pullstream.core.codec_base import EngineStreamCodec
from pullstream.core.status import Level


class CodecBz2(EngineStreamCodec):
    """bzip2 stream codec (stdlib ``bz2``, no external deps)."""

    codec_id = "bz2"
    min_level = 1
    max_level = 9
    levels = {Level.FASTEST: 1, Level.DEFAULT: 6, Level.BEST: 9}
    # BZ2Decompressor signals corrupt data with a plain OSError.
    engine_errors = (OSError, ValueError)

    def _new_compressor(self, level: int) -> Any:
        return bz2.BZ2Compressor(level)

    def _new_decompressor(self) -> Any:
        return bz2.BZ2Decompressor()
