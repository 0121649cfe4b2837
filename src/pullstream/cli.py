"""pullstream CLI.

This is the stable CLI entrypoint (console-script: ``pullstream``).

UX policy:
  - ``-`` means stdin/stdout for INPUT/OUTPUT.
  - A stream spec (``--spec``) is the source of truth when given; explicit
    flags are rejected alongside it.
"""

from __future__ import annotations

import argparse
import contextlib
import json
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from pullstream.core.registry import CODEC_IDS, DEFAULT_CODEC, codec_available
from pullstream.engine.adapter import DEFAULT_BUFFER_SIZE
from pullstream.engine.reader import copy_stream
from pullstream.errors import EXIT_USAGE, PullStreamError
from pullstream.stream_spec import StreamSpecError, StreamSpecV1, load_stream_spec

logger = logging.getLogger(__name__)


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")
    p.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")


def _add_stream_args(p: argparse.ArgumentParser, with_level: bool) -> None:
    p.add_argument("input", type=str, help="Input file ('-' for stdin)")
    p.add_argument("output", type=str, help="Output file ('-' for stdout)")
    p.add_argument("--codec", default=None, choices=CODEC_IDS, help=f"Codec (default: {DEFAULT_CODEC})")
    if with_level:
        p.add_argument(
            "--level",
            default=None,
            help="Compression level (integer, or fastest/default/best)",
        )
    p.add_argument(
        "--buffer-size",
        type=int,
        default=None,
        help=f"Scratch buffer size in bytes (default: {DEFAULT_BUFFER_SIZE})",
    )
    p.add_argument(
        "--spec", default=None, help="Stream spec: inline JSON or @file.json (pullstream.stream.v1)"
    )


@contextlib.contextmanager
def _open_in(arg: str) -> Iterator[BinaryIO]:
    if arg == "-":
        yield sys.stdin.buffer
        return
    with Path(arg).open("rb") as f:
        yield f


@contextlib.contextmanager
def _open_out(arg: str) -> Iterator[BinaryIO]:
    if arg == "-":
        yield sys.stdout.buffer
        sys.stdout.buffer.flush()
        return
    with Path(arg).open("wb") as f:
        yield f


def _stream_spec_from_args(ns: argparse.Namespace) -> StreamSpecV1:
    level = getattr(ns, "level", None)
    if ns.spec is not None:
        if ns.codec is not None or level is not None or ns.buffer_size is not None:
            raise StreamSpecError("--spec cannot be combined with --codec/--level/--buffer-size")
        return load_stream_spec(str(ns.spec))

    obj: dict[str, object] = {"spec": "pullstream.stream.v1", "name": "cli"}
    if ns.codec is not None:
        obj["codec"] = ns.codec
    if level is not None:
        obj["level"] = str(level)
    if ns.buffer_size is not None:
        obj["buffer_size"] = ns.buffer_size

    return load_stream_spec(json.dumps(obj))


def _compress(ns: argparse.Namespace) -> int:
    spec = _stream_spec_from_args(ns)
    with _open_in(ns.input) as src, _open_out(ns.output) as dst:
        with spec.open_compressor(src) as r:
            n = copy_stream(r, dst, chunk_size=spec.buffer_size)
            logger.info(
                "compressed %d -> %d bytes (%s, level %s)",
                r.total_in(),
                n,
                spec.codec,
                r.codec.level,
            )
    return 0


def _decompress(ns: argparse.Namespace) -> int:
    spec = _stream_spec_from_args(ns)
    with _open_in(ns.input) as src, _open_out(ns.output) as dst:
        with spec.open_decompressor(src) as r:
            n = copy_stream(r, dst, chunk_size=spec.buffer_size)
            logger.info("decompressed %d -> %d bytes (%s)", r.total_in(), n, spec.codec)
    return 0


def _spec_validate(spec_arg: str) -> int:
    spec = load_stream_spec(spec_arg)
    print(f"OK: {spec.name} codec={spec.codec} level={spec.level} buffer_size={spec.buffer_size}")
    return 0


def _list_codecs() -> int:
    for cid in CODEC_IDS:
        state = "available" if codec_available(cid) else "missing"
        print(f"{cid}\t{state}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pullstream", description="Streaming compress/decompress")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_c = sub.add_parser("compress", help="Compress INPUT into OUTPUT")
    _add_stream_args(p_c, with_level=True)
    _add_common_args(p_c)

    p_d = sub.add_parser("decompress", help="Decompress INPUT into OUTPUT")
    _add_stream_args(p_d, with_level=False)
    _add_common_args(p_d)

    p_v = sub.add_parser("spec-validate", help="Validate a stream spec (inline JSON or @file.json)")
    p_v.add_argument("spec")
    _add_common_args(p_v)

    p_l = sub.add_parser("codecs", help="List codecs and whether their backend is installed")
    _add_common_args(p_l)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    if getattr(ns, "verbose", False):
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            stream=sys.stderr,
        )

    try:
        if ns.cmd == "compress":
            return _compress(ns)
        if ns.cmd == "decompress":
            return _decompress(ns)
        if ns.cmd == "spec-validate":
            return _spec_validate(str(ns.spec))
        if ns.cmd == "codecs":
            return _list_codecs()
        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except StreamSpecError as e:
        # Treat as usage/config error.
        if getattr(ns, "debug", False):
            raise
        print(f"[pullstream] {e}", file=sys.stderr)
        return EXIT_USAGE
    except PullStreamError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[pullstream] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", 10) or 10)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[pullstream] error: {e}", file=sys.stderr)
        return 10


if __name__ == "__main__":
    raise SystemExit(main())
