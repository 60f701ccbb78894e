"""
Commitment Hashing

This module implements the single hash function used for every commitment in
the system: proof leaves, Merkle pair combination, signing messages and the
default input sentinels. It is keccak-256 as computed by the EVM, so every
value produced here can be recomputed on-chain with ``keccak256``.
"""

import json
from typing import Any

from web3 import Web3


def keccak256(data: bytes) -> bytes:
    """
    Hash raw bytes with keccak-256.

    Args:
        data: Bytes to hash

    Returns:
        32-byte digest

    Examples:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return bytes(Web3.keccak(primitive=bytes(data)))


def keccak_text(text: str) -> bytes:
    """Hash the UTF-8 encoding of a string."""
    return keccak256(text.encode("utf-8"))


def hash_pair(left: bytes, right: bytes) -> bytes:
    """
    Combine two Merkle nodes.

    Args:
        left: Left child hash (32 bytes)
        right: Right child hash (32 bytes)

    Returns:
        keccak256(left || right), equal to Solidity's
        keccak256(abi.encodePacked(left, right)) for two bytes32 values

    Note:
        Uses fixed left||right ordering (no sorting, no length prefixes).
    """
    return keccak256(left + right)


def canonical_json(value: Any) -> str:
    """
    Serialize a JSON-compatible value deterministically.

    Keys are sorted and no whitespace is emitted, so two implementations that
    agree on this encoding agree on the resulting commitment.

    Raises:
        TypeError: If the value contains objects JSON cannot represent
        ValueError: If the value contains NaN or infinities
    """
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
