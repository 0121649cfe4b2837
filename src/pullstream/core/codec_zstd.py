from __future__ import annotations

from typing import Any

from pullstream.core.codec_base import EngineStreamCodec
from pullstream.core.status import Level
from pullstream.errors import MissingBackend

try:
    import zstandard as zstd  # type: ignore
except Exception:  # pragma: no cover
    zstd = None


def have_zstd() -> bool:
    return zstd is not None


class CodecZstd(EngineStreamCodec):
    """
    Zstandard stream codec.

    Note: one frame per stream. The decompressor stops at the end of the
    first frame (``read_across_frames`` off), so bytes after it are left in
    the source untouched.
    """

    codec_id = "zstd"
    min_level = 1
    max_level = 22
    levels = {Level.FASTEST: 1, Level.DEFAULT: 3, Level.BEST: 19}
    engine_errors = (zstd.ZstdError,) if zstd is not None else ()

    @staticmethod
    def _require() -> None:
        if zstd is None:
            raise MissingBackend(
                "Module 'zstandard' not available. Install with: python3 -m pip install zstandard"
            )

    def _new_compressor(self, level: int) -> Any:
        self._require()
        return zstd.ZstdCompressor(level=level).compressobj()

    def _new_decompressor(self) -> Any:
        self._require()
        return zstd.ZstdDecompressor().decompressobj()

    def _flush_engine(self) -> bytes:
        return self._engine.flush(zstd.COMPRESSOBJ_FLUSH_FINISH)
