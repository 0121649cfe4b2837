"""Codec registry: codec id -> StreamCodec class, plus level resolution."""

from __future__ import annotations

from pullstream.core.codec_base import EngineStreamCodec
from pullstream.core.codec_bz2 import CodecBz2
from pullstream.core.codec_zlib import CodecZlib
from pullstream.core.codec_zstd import CodecZstd, have_zstd
from pullstream.core.status import Level
from pullstream.errors import UsageError

DEFAULT_CODEC = "bz2"

_CODECS: dict[str, type[EngineStreamCodec]] = {
    CodecBz2.codec_id: CodecBz2,
    CodecZlib.codec_id: CodecZlib,
    CodecZstd.codec_id: CodecZstd,
}

CODEC_IDS: tuple[str, ...] = tuple(sorted(_CODECS))

__all__ = [
    "CODEC_IDS",
    "DEFAULT_CODEC",
    "codec_available",
    "codec_class",
    "have_zstd",
    "new_compressor",
    "new_decompressor",
    "resolve_level",
]


def codec_class(codec_id: str) -> type[EngineStreamCodec]:
    key = codec_id.strip().lower()
    try:
        return _CODECS[key]
    except KeyError:
        raise UsageError(
            f"unknown codec: {codec_id!r} (expected one of: {', '.join(CODEC_IDS)})"
        ) from None


def codec_available(codec_id: str) -> bool:
    cls = codec_class(codec_id)
    if cls is CodecZstd:
        return have_zstd()
    return True


def resolve_level(codec_id: str, level: int | Level | str | None) -> int:
    """Map a level preset (or None) to the codec's integer level.

    Integers are passed through; range checks happen when the codec is built.
    """
    cls = codec_class(codec_id)
    if level is None:
        return cls.levels[Level.DEFAULT]
    if isinstance(level, Level):
        return cls.levels[level]
    if isinstance(level, str):
        s = level.strip().lower()
        for preset in Level:
            if preset.value == s:
                return cls.levels[preset]
        try:
            return int(s)
        except ValueError:
            raise UsageError(f"invalid level: {level!r}") from None
    return int(level)


def new_compressor(
    codec_id: str = DEFAULT_CODEC, level: int | Level | str | None = None
) -> EngineStreamCodec:
    cls = codec_class(codec_id)
    return cls.new_compress(resolve_level(codec_id, level))


def new_decompressor(codec_id: str = DEFAULT_CODEC) -> EngineStreamCodec:
    return codec_class(codec_id).new_decompress()
