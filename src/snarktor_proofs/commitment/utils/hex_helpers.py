"""
Hex String Utilities

This module provides utilities for converting between hex strings and bytes
and for coercing caller input into 32-byte commitment values.
"""

from typing import Union

from ..constants import HASH_SIZE_BYTES

HEX_DIGITS = "0123456789abcdefABCDEF"


def is_hex_string(value: str) -> bool:
    """
    Check whether a string is a 0x-prefixed hex string.

    Args:
        value: Candidate string

    Returns:
        True if the string starts with '0x' and contains only hex digits after it

    Examples:
        >>> is_hex_string("0x12ab")
        True
        >>> is_hex_string("12ab")
        False
    """
    if not isinstance(value, str) or not value[:2].lower() == "0x":
        return False
    return all(c in HEX_DIGITS for c in value[2:])


def hex_to_bytes(hex_str: str) -> bytes:
    """
    Convert a hex string to bytes.

    Args:
        hex_str: Hex string (with or without '0x' prefix)

    Returns:
        Bytes representation of the hex string

    Examples:
        >>> hex_to_bytes("0x1234")
        b'\\x12\\x34'
        >>> hex_to_bytes("0x123")
        b'\\x01\\x23'
    """
    if hex_str[:2].lower() == "0x":
        hex_str = hex_str[2:]

    # Pad to even length
    if len(hex_str) % 2 == 1:
        hex_str = "0" + hex_str

    return bytes.fromhex(hex_str)


def bytes_to_hex(data: bytes, prefix: bool = True) -> str:
    """
    Convert bytes to a hex string.

    Args:
        data: Bytes to convert
        prefix: Whether to include '0x' prefix

    Returns:
        Hex string representation

    Examples:
        >>> bytes_to_hex(b'\\x12\\x34')
        "0x1234"
        >>> bytes_to_hex(b'\\x12\\x34', prefix=False)
        "1234"
    """
    hex_str = bytes(data).hex()
    return f"0x{hex_str}" if prefix else hex_str


def validate_hex_length(hex_str: str, expected_bytes: int) -> bool:
    """
    Validate that a hex string represents the expected number of bytes.

    Args:
        hex_str: The hex string to validate
        expected_bytes: Expected number of bytes

    Returns:
        True if the hex string has the correct length
    """
    if not is_hex_string(hex_str):
        return False

    hex_part = hex_str[2:]
    return len(hex_part) == expected_bytes * 2


def to_bytes32(value: Union[bytes, bytearray, str]) -> bytes:
    """
    Coerce a commitment given as bytes or hex string into exactly 32 bytes.

    Args:
        value: 32-byte value, or a 0x-prefixed hex string of 64 digits

    Returns:
        The 32-byte value as immutable bytes

    Raises:
        ValueError: If the value is not 32 bytes long or not valid hex
    """
    if isinstance(value, str):
        if not validate_hex_length(value, HASH_SIZE_BYTES):
            raise ValueError(f"Expected a 32-byte hex string, got {value!r}")
        return bytes.fromhex(value[2:])

    if isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
        if len(data) != HASH_SIZE_BYTES:
            raise ValueError(f"Expected {HASH_SIZE_BYTES} bytes, got {len(data)} bytes")
        return data

    raise ValueError(f"Expected bytes or hex string, got {type(value).__name__}")
