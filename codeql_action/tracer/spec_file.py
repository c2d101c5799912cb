"""Tracer spec file format.

A tracer spec is a text file read by the native tracer runtime:

    line 0      path of the log file the runtime writes to
    line 1      number of interception blocks N
    line 2..N+1 one block descriptor per line
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from codeql_action.core.exceptions.errors import IOFailure, TracerSpecFormatError

_LINE_SPLIT = re.compile(r"\r?\n")


@dataclass(frozen=True)
class TracerSpec:
    """Parsed tracer spec.

    Attributes:
        log_path: Log file named on the first line.
        blocks: Block descriptor lines, in file order.
    """

    log_path: str
    blocks: tuple[str, ...]

    @property
    def count(self) -> int:
        """Return the declared number of blocks."""
        return len(self.blocks)

    def render(self) -> str:
        """Render the spec in the exact layout the tracer runtime expects."""
        return "\n".join([self.log_path, str(self.count), *self.blocks])


def parse_tracer_spec(text: str, source: str | None = None) -> TracerSpec:
    """Parse tracer spec text.

    Args:
        text: File content.
        source: File name used in error messages.

    Returns:
        Parsed TracerSpec.

    Raises:
        TracerSpecFormatError: If the header is missing, the count is not a
            non-negative integer, or the number of block lines differs from it.
    """
    lines = _LINE_SPLIT.split(text)
    # The file may or may not end with a newline
    while len(lines) > 2 and lines[-1] == "":
        lines.pop()

    if len(lines) < 2:
        raise TracerSpecFormatError(
            "Tracer spec is missing its two header lines",
            path=source,
        )

    raw_count = lines[1].strip()
    try:
        count = int(raw_count, 10)
    except ValueError as e:
        raise TracerSpecFormatError(
            f"Tracer spec block count is not an integer: {raw_count!r}",
            path=source,
        ) from e
    if count < 0:
        raise TracerSpecFormatError(
            f"Tracer spec block count is negative: {count}",
            path=source,
        )

    blocks = tuple(lines[2:])
    if len(blocks) != count:
        raise TracerSpecFormatError(
            f"Tracer spec declares {count} blocks but lists {len(blocks)}",
            path=source,
            details={"declared": count, "listed": len(blocks)},
        )

    return TracerSpec(log_path=lines[0], blocks=blocks)


def read_tracer_spec(path: Path) -> TracerSpec:
    """Read and parse a tracer spec file.

    Raises:
        IOFailure: If the file cannot be read.
        TracerSpecFormatError: If the content is malformed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IOFailure(
            f"Cannot read tracer spec: {e}",
            path=str(path),
        ) from e
    return parse_tracer_spec(text, source=str(path))


def concatenate_specs(specs: Iterable[TracerSpec], log_path: str) -> TracerSpec:
    """Join several specs into one, keeping block order.

    Each spec's own log path is discarded; the result logs to log_path.
    """
    blocks: list[str] = []
    for spec in specs:
        blocks.extend(spec.blocks)
    return TracerSpec(log_path=log_path, blocks=tuple(blocks))
