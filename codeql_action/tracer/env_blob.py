"""Binary encoding of the compound tracer environment.

Layout, all integers signed 32-bit little-endian:

    [count] then count times [length L][L bytes of UTF-8 "key=value\\0"]

The native injector parses this file directly, so the layout is fixed.
"""

import struct
from collections.abc import Mapping

from codeql_action.core.exceptions.errors import EnvironmentBlobError

ENVIRONMENT_SUFFIX = ".environment"

_INT32 = struct.Struct("<i")


def encode_environment(env: Mapping[str, str]) -> bytes:
    """Encode an environment mapping into the compound environment blob."""
    parts = [_INT32.pack(len(env))]
    for key, value in env.items():
        entry = f"{key}={value}\0".encode()
        parts.append(_INT32.pack(len(entry)))
        parts.append(entry)
    return b"".join(parts)


def decode_environment(blob: bytes) -> dict[str, str]:
    """Decode a compound environment blob.

    Raises:
        EnvironmentBlobError: If the blob is truncated, has trailing bytes, or
            contains a malformed entry.
    """
    if len(blob) < _INT32.size:
        raise EnvironmentBlobError("Environment blob is shorter than its count header")

    (count,) = _INT32.unpack_from(blob, 0)
    if count < 0:
        raise EnvironmentBlobError(f"Environment blob has a negative entry count: {count}")

    env: dict[str, str] = {}
    offset = _INT32.size
    for index in range(count):
        if offset + _INT32.size > len(blob):
            raise EnvironmentBlobError(f"Environment blob truncated before entry {index}")
        (length,) = _INT32.unpack_from(blob, offset)
        offset += _INT32.size

        end = offset + length
        if length <= 0 or end > len(blob):
            raise EnvironmentBlobError(f"Environment blob entry {index} has invalid length {length}")
        raw = blob[offset:end]
        offset = end

        if not raw.endswith(b"\0"):
            raise EnvironmentBlobError(f"Environment blob entry {index} is not NUL-terminated")
        try:
            text = raw[:-1].decode("utf-8")
        except UnicodeDecodeError as e:
            raise EnvironmentBlobError(f"Environment blob entry {index} is not UTF-8") from e

        key, sep, value = text.partition("=")
        if not sep:
            raise EnvironmentBlobError(f"Environment blob entry {index} has no '=' separator")
        env[key] = value

    if offset != len(blob):
        raise EnvironmentBlobError(
            f"Environment blob has {len(blob) - offset} trailing bytes after {count} entries"
        )
    return env
