"""
Tests for hex string utilities and commitment hashing primitives.
"""

import unittest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'src'))

from Crypto.Hash import keccak as pycryptodome_keccak

from snarktor_proofs.commitment.hashing import canonical_json, hash_pair, keccak256, keccak_text
from snarktor_proofs.commitment.utils.hex_helpers import (
    bytes_to_hex,
    hex_to_bytes,
    is_hex_string,
    to_bytes32,
    validate_hex_length,
)


def reference_keccak(data: bytes) -> bytes:
    """keccak-256 from an independent implementation."""
    return pycryptodome_keccak.new(digest_bits=256, data=data).digest()


class TestHexHelpers(unittest.TestCase):

    def test_is_hex_string(self):
        self.assertTrue(is_hex_string("0x12ab"))
        self.assertTrue(is_hex_string("0X12AB"))
        self.assertTrue(is_hex_string("0x"))
        self.assertFalse(is_hex_string("12ab"))
        self.assertFalse(is_hex_string("0xzz"))
        self.assertFalse(is_hex_string(b"0x12"))

    def test_hex_to_bytes_pads_odd_length(self):
        self.assertEqual(hex_to_bytes("0x1234"), b"\x12\x34")
        self.assertEqual(hex_to_bytes("0x123"), b"\x01\x23")
        self.assertEqual(hex_to_bytes("ff"), b"\xff")

    def test_bytes_to_hex(self):
        self.assertEqual(bytes_to_hex(b"\x12\x34"), "0x1234")
        self.assertEqual(bytes_to_hex(b"\x12\x34", prefix=False), "1234")
        self.assertEqual(bytes_to_hex(b""), "0x")

    def test_validate_hex_length(self):
        self.assertTrue(validate_hex_length("0x" + "ab" * 32, 32))
        self.assertFalse(validate_hex_length("0x" + "ab" * 31, 32))
        self.assertFalse(validate_hex_length("ab" * 32, 32))

    def test_to_bytes32(self):
        value = bytes(range(32))
        self.assertEqual(to_bytes32(value), value)
        self.assertEqual(to_bytes32(bytearray(value)), value)
        self.assertEqual(to_bytes32("0x" + value.hex()), value)
        with self.assertRaises(ValueError):
            to_bytes32(b"\x00" * 31)
        with self.assertRaises(ValueError):
            to_bytes32("0x1234")
        with self.assertRaises(ValueError):
            to_bytes32(12345)


class TestHashing(unittest.TestCase):

    def test_keccak_empty_vector(self):
        self.assertEqual(
            keccak256(b"").hex(),
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470",
        )

    def test_keccak_matches_reference(self):
        for data in (b"", b"\x00", b"proof1", bytes(range(256))):
            self.assertEqual(keccak256(data), reference_keccak(data))

    def test_keccak_text_is_utf8(self):
        self.assertEqual(keccak_text("default_public_input"), reference_keccak(b"default_public_input"))
        self.assertEqual(keccak_text("é"), reference_keccak("é".encode("utf-8")))

    def test_hash_pair_is_ordered_concatenation(self):
        left = b"\x01" * 32
        right = b"\x02" * 32
        self.assertEqual(hash_pair(left, right), reference_keccak(left + right))
        self.assertNotEqual(hash_pair(left, right), hash_pair(right, left))

    def test_canonical_json(self):
        self.assertEqual(canonical_json({"b": 1, "a": [1, 2]}), '{"a":[1,2],"b":1}')
        self.assertEqual(canonical_json("é"), '"é"')
        with self.assertRaises(ValueError):
            canonical_json(float("nan"))
        with self.assertRaises(TypeError):
            canonical_json({"x": object()})


if __name__ == '__main__':
    unittest.main()
