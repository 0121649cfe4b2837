"""Status, action and level vocabulary shared by codecs and the pull adapter.

Status numbering follows libbzip2 (``BZ_*``): non-negative values mean
progress, negative values are errors, except ``OUTPUT_BUFFER_FULL`` which is
negative but only says "give me a bigger output slice".
"""

from __future__ import annotations

from enum import Enum, IntEnum


class Status(IntEnum):
    OK = 0
    RUN_OK = 1
    FLUSH_OK = 2
    FINISH_OK = 3
    STREAM_END = 4

    SEQUENCE_ERROR = -1
    PARAM_ERROR = -2
    DATA_ERROR = -4
    DATA_ERROR_MAGIC = -5
    UNEXPECTED_EOF = -7
    OUTPUT_BUFFER_FULL = -8


class Action(Enum):
    """Compression-only hint: may more input arrive after this slice?"""

    CONTINUE = "continue"
    FINISH = "finish"


class Level(Enum):
    """Codec-independent level presets, resolved per codec by the registry."""

    FASTEST = "fastest"
    DEFAULT = "default"
    BEST = "best"
