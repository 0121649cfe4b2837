"""Typed errors for pullstream.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- Codec-level failures collapse into one kind (InvalidInput); the raw status
  code travels on the exception for diagnostics only.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_CORRUPT = 11
EXIT_MISSING_BACKEND = 12


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid args, invalid stream spec, unknown codec)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (I/O error, unexpected error)"),
    ExitCodeInfo(EXIT_CORRUPT, "CORRUPT", "Invalid input: the codec rejected the compressed stream"),
    ExitCodeInfo(EXIT_MISSING_BACKEND, "MISSING_BACKEND", "Codec backend not installed (e.g. zstandard)"),
)

_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE, do not edit manually.\n")
    lines.append("> Source of truth: `src/pullstream/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Most internal errors extend `PullStreamError` and carry an `exit_code`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    lines.append("- Source I/O errors (`OSError`) are reported as `GENERIC`.\n")
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class PullStreamError(Exception):
    """Base error for pullstream."""

    exit_code: int = EXIT_GENERIC


class UsageError(PullStreamError, ValueError):
    exit_code = EXIT_USAGE


class CorruptStream(PullStreamError, ValueError):
    exit_code = EXIT_CORRUPT


class InvalidInput(CorruptStream):
    """The codec reported an error status while transforming the stream."""

    def __init__(self, message: str = "invalid input", status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class MissingBackend(PullStreamError, RuntimeError):
    exit_code = EXIT_MISSING_BACKEND
