"""
Commitment Utility Functions

This package provides hex string handling and 32-byte coercion helpers used
throughout the commitment library.
"""

from .hex_helpers import (
    is_hex_string,
    hex_to_bytes,
    bytes_to_hex,
    validate_hex_length,
    to_bytes32,
)

__all__ = [
    'is_hex_string',
    'hex_to_bytes',
    'bytes_to_hex',
    'validate_hex_length',
    'to_bytes32',
]
