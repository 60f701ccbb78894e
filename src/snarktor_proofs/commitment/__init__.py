"""
Commitment Library

Canonical hashing of proof payloads and the binary Merkle commitment tree
shared by the off-chain client and the on-chain verifier.

Modules:
- constants: hash width, sentinel literals and field priorities
- hashing: keccak-256 commitment hash and canonical JSON
- normalizer: proof payload normalization
- merkle: commitment tree and inclusion paths
- utils: hex helpers
"""

from .hashing import canonical_json, hash_pair, keccak256, keccak_text
from .merkle import (
    InclusionPath,
    batch_verify_paths,
    build_levels,
    build_root,
    compute_root_from_path,
    generate_inclusion_path,
    get_tree_depth,
    validate_tree_structure,
    verify_inclusion_path,
    verify_merkle_root,
)
from .normalizer import (
    HexPayload,
    NormalizedProof,
    ProofHashes,
    RawBytesPayload,
    StandardizedSubmission,
    StructuredPayload,
    ValidationReport,
    as_payload,
    derive_proof_hash,
    normalize,
    standardize_proof_submission,
    validate_structure,
)

__all__ = [
    # Hashing
    "canonical_json",
    "hash_pair",
    "keccak256",
    "keccak_text",
    # Commitment tree
    "InclusionPath",
    "batch_verify_paths",
    "build_levels",
    "build_root",
    "compute_root_from_path",
    "generate_inclusion_path",
    "get_tree_depth",
    "validate_tree_structure",
    "verify_inclusion_path",
    "verify_merkle_root",
    # Normalizer
    "HexPayload",
    "NormalizedProof",
    "ProofHashes",
    "RawBytesPayload",
    "StandardizedSubmission",
    "StructuredPayload",
    "ValidationReport",
    "as_payload",
    "derive_proof_hash",
    "normalize",
    "standardize_proof_submission",
    "validate_structure",
]
