"""
Commitment Tree Operations

This package provides the binary Merkle tree used to commit to a batch of
base proofs, together with inclusion-path generation and verification.

The module is organized into two components:
- tree: root and level construction with odd-node promotion
- proof: inclusion path generation and verification
"""

# Tree building utilities
from .tree import (
    build_levels,
    build_root,
    coerce_leaves,
    get_tree_depth,
    next_level,
    validate_tree_structure,
    verify_merkle_root,
)

# Inclusion path generation and verification
from .proof import (
    InclusionPath,
    batch_verify_paths,
    compute_root_from_path,
    generate_inclusion_path,
    promotion_level,
    verify_inclusion_path,
)

__all__ = [
    # Tree utilities
    "build_levels",
    "build_root",
    "coerce_leaves",
    "get_tree_depth",
    "next_level",
    "validate_tree_structure",
    "verify_merkle_root",
    # Path functions
    "InclusionPath",
    "batch_verify_paths",
    "compute_root_from_path",
    "generate_inclusion_path",
    "promotion_level",
    "verify_inclusion_path",
]
