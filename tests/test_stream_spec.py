from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from pullstream.stream_spec import StreamSpecError, load_stream_spec


def test_stream_spec_inline_minimal() -> None:
    obj = {"spec": "pullstream.stream.v1", "name": "bz2 default"}
    spec = load_stream_spec(json.dumps(obj))
    assert spec.codec == "bz2"
    assert spec.level is None
    assert spec.buffer_size == 32 * 1024


def test_stream_spec_level_preset_is_resolved() -> None:
    obj = {"spec": "pullstream.stream.v1", "codec": "ZLIB", "level": "best"}
    spec = load_stream_spec(json.dumps(obj))
    assert spec.codec == "zlib"
    assert spec.level == 9
    assert spec.name == "stream"


@pytest.mark.parametrize(
    "obj",
    [
        {"spec": "pullstream.stream.v1", "wat": 1},
        {"spec": "pullstream.stream.v0"},
        {"spec": "pullstream.stream.v1", "codec": "lzw"},
        {"spec": "pullstream.stream.v1", "codec": "bz2", "level": 42},
        {"spec": "pullstream.stream.v1", "level": True},
        {"spec": "pullstream.stream.v1", "level": 2.5},
        {"spec": "pullstream.stream.v1", "buffer_size": 0},
        {"spec": "pullstream.stream.v1", "buffer_size": "big"},
        {"spec": "pullstream.stream.v1", "name": ""},
    ],
)
def test_stream_spec_rejects_bad_fields(obj: dict) -> None:
    with pytest.raises(StreamSpecError):
        load_stream_spec(json.dumps(obj))


def test_stream_spec_rejects_non_object_and_bad_json() -> None:
    with pytest.raises(StreamSpecError):
        load_stream_spec("[1, 2]")
    with pytest.raises(StreamSpecError):
        load_stream_spec("{nope")
    with pytest.raises(StreamSpecError):
        load_stream_spec("   ")


def test_stream_spec_from_file(tmp_path: Path) -> None:
    p = tmp_path / "s.json"
    p.write_text(
        json.dumps({"spec": "pullstream.stream.v1", "name": "small", "codec": "zlib", "buffer_size": 64}),
        encoding="utf-8",
    )
    spec = load_stream_spec("@" + str(p))
    assert spec.name == "small"
    assert spec.buffer_size == 64

    with pytest.raises(StreamSpecError):
        load_stream_spec("@" + str(tmp_path / "missing.json"))


def test_stream_spec_opens_readers() -> None:
    spec = load_stream_spec(json.dumps({"spec": "pullstream.stream.v1", "codec": "zlib", "buffer_size": 16}))
    data = b"configured " * 300
    compressed = spec.open_compressor(io.BytesIO(data)).read()
    assert spec.open_decompressor(io.BytesIO(compressed)).read() == data
