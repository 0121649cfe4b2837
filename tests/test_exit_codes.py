from __future__ import annotations

from pullstream.errors import (
    EXIT_CODES,
    EXIT_CORRUPT,
    CorruptStream,
    InvalidInput,
    MissingBackend,
    PullStreamError,
    UsageError,
    exit_code_info,
    render_exit_codes_markdown,
)


def test_exit_codes_are_unique_and_documented() -> None:
    codes = [e.code for e in EXIT_CODES]
    assert len(codes) == len(set(codes))

    md = render_exit_codes_markdown()
    for e in EXIT_CODES:
        assert f"| {e.code} | `{e.name}` |" in md


def test_exit_code_lookup() -> None:
    info = exit_code_info(EXIT_CORRUPT)
    assert info is not None and info.name == "CORRUPT"
    assert exit_code_info(999) is None


def test_error_hierarchy() -> None:
    e = InvalidInput(status=-4)
    assert str(e) == "invalid input"
    assert e.status == -4
    assert isinstance(e, CorruptStream)
    assert isinstance(e, ValueError)
    assert e.exit_code == EXIT_CORRUPT

    assert issubclass(UsageError, PullStreamError)
    assert issubclass(MissingBackend, RuntimeError)
