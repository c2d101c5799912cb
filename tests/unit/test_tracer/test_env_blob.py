"""Tests for the compound environment blob encoding."""

import struct

import pytest

from codeql_action.core.exceptions.errors import EnvironmentBlobError
from codeql_action.tracer.env_blob import decode_environment, encode_environment


class TestEncodeEnvironment:
    """Tests for encode_environment."""

    def test_empty(self) -> None:
        """Test an empty environment is just a zero count."""
        assert encode_environment({}) == b"\x00\x00\x00\x00"

    def test_fixed_bytes(self) -> None:
        """Test the exact layout of a two entry environment."""
        blob = encode_environment({"X": "1", "Y": "2"})

        assert blob == (
            b"\x02\x00\x00\x00"
            b"\x04\x00\x00\x00X=1\x00"
            b"\x04\x00\x00\x00Y=2\x00"
        )

    def test_length_counts_utf8_bytes(self) -> None:
        """Test entry lengths are byte lengths, not character counts."""
        blob = encode_environment({"K": "é"})

        # "K=" + two bytes for é + NUL
        assert blob[4:8] == struct.pack("<i", 5)
        assert blob[8:] == "K=é\0".encode()

    def test_empty_value(self) -> None:
        """Test an empty value still carries the separator."""
        assert encode_environment({"K": ""})[4:] == b"\x03\x00\x00\x00K=\x00"


class TestDecodeEnvironment:
    """Tests for decode_environment."""

    def test_round_trip(self) -> None:
        """Test decoding an encoded environment gives it back."""
        env = {"PATH": "/usr/bin", "SEMMLE_RUNNER": "/opt/runner", "EQ": "a=b"}
        assert decode_environment(encode_environment(env)) == env

    def test_value_containing_separator(self) -> None:
        """Test only the first '=' splits key from value."""
        blob = b"\x01\x00\x00\x00\x06\x00\x00\x00A=b=c\x00"
        assert decode_environment(blob) == {"A": "b=c"}

    def test_too_short(self) -> None:
        """Test a blob without a full count header is rejected."""
        with pytest.raises(EnvironmentBlobError):
            decode_environment(b"\x01\x00")

    def test_negative_count(self) -> None:
        """Test a negative count is rejected."""
        with pytest.raises(EnvironmentBlobError):
            decode_environment(struct.pack("<i", -1))

    def test_truncated_entry(self) -> None:
        """Test an entry cut short is rejected."""
        blob = encode_environment({"X": "1"})
        with pytest.raises(EnvironmentBlobError):
            decode_environment(blob[:-2])

    def test_missing_entry(self) -> None:
        """Test a count larger than the number of entries is rejected."""
        blob = struct.pack("<i", 2) + encode_environment({"X": "1"})[4:]
        with pytest.raises(EnvironmentBlobError):
            decode_environment(blob)

    def test_trailing_bytes(self) -> None:
        """Test bytes after the last entry are rejected."""
        with pytest.raises(EnvironmentBlobError):
            decode_environment(encode_environment({"X": "1"}) + b"\x00")

    def test_missing_nul(self) -> None:
        """Test an entry must end with NUL."""
        blob = b"\x01\x00\x00\x00\x03\x00\x00\x00X=1"
        with pytest.raises(EnvironmentBlobError):
            decode_environment(blob)

    def test_missing_separator(self) -> None:
        """Test an entry must contain '='."""
        blob = b"\x01\x00\x00\x00\x03\x00\x00\x00XY\x00"
        with pytest.raises(EnvironmentBlobError):
            decode_environment(blob)
