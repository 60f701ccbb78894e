"""
Commitment Constants

This module contains the constants shared by the normalizer, the Merkle tree
engine and the submission authenticator. Changing any value here changes the
commitments produced, so every value must match the on-chain verifier.

References:
- Solidity ABI packed encoding: https://docs.soliditylang.org/en/latest/abi-spec.html#non-standard-packed-mode
- EIP-191 signed data: https://eips.ethereum.org/EIPS/eip-191
"""

# ====================
# Hash Parameters
# ====================

# Size of every commitment, Merkle node and signing message (keccak-256 digest)
HASH_SIZE_BYTES = 32

# Largest value of the uint256 fields in the signing message
UINT256_MAX = 2**256 - 1

# Solidity types of the signing message fields, in signing order
SIGNING_MESSAGE_TYPES = ["uint256", "uint256", "bytes32", "bytes32"]

# ====================
# Normalizer Defaults
# ====================

# Hashed in place of public inputs / verification key when the caller omits them
DEFAULT_PUBLIC_INPUT_SENTINEL = "default_public_input"
DEFAULT_VERIFICATION_KEY_SENTINEL = "default_verification_key"

# Fields extracted from structured proofs, in concatenation order
# (snarkjs-style output: {"proof": ..., "publicSignals": [...], "vk": {...}})
STRUCTURED_PROOF_FIELDS = ("proof", "publicSignals", "vk")

# ====================
# Signatures
# ====================

# r (32) + s (32) + v (1)
SIGNATURE_SIZE_BYTES = 65

# Accepted recovery ids: raw (0/1) and Ethereum-offset (27/28)
SIGNATURE_V_VALUES = (0, 1, 27, 28)

# secp256k1 group order; r and s must lie in [1, N)
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
