"""Marker command run under the build tracer by the extractor probe.

Usage: python -m codeql_action.tracer_env <output-file>

Writes the process environment, as a JSON object, to the given file.
"""

import json
import os
import sys


def dump_environment(output_file: str) -> None:
    """Write the current environment to output_file as JSON."""
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(dict(os.environ), f)


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("usage: python -m codeql_action.tracer_env <output-file>", file=sys.stderr)
        return 2
    dump_environment(args[0])
    return 0


if __name__ == "__main__":
    sys.exit(main())
