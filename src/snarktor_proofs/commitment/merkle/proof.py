"""
Inclusion Path Generation and Verification

This module provides functions for generating and verifying inclusion paths,
the sibling hashes that let a verifier recompute the commitment tree root
from a single base-proof commitment without the rest of the leaves.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ...errors import IndexOutOfRange
from ..hashing import hash_pair
from ..utils.hex_helpers import bytes_to_hex, to_bytes32
from .tree import LeafInput, coerce_leaves, next_level

logger = logging.getLogger(__name__)


@dataclass
class InclusionPath:
    """
    Sibling hashes authenticating one leaf against a commitment tree root.

    Mirrors the verifier contract's ``(bytes32[] path, uint256 index, bytes32 leaf)``
    tuple. Siblings are ordered from the leaf level towards the root.
    """
    leaf: bytes
    leaf_index: int
    siblings: List[bytes] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Render the path with hex strings, as used by the HTTP and CLI surfaces."""
        return {
            "siblings": [bytes_to_hex(s) for s in self.siblings],
            "leaf_index": self.leaf_index,
            "leaf": bytes_to_hex(self.leaf),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InclusionPath":
        """Parse a path rendered by ``to_dict``."""
        return cls(
            leaf=to_bytes32(data["leaf"]),
            leaf_index=int(data["leaf_index"]),
            siblings=[to_bytes32(s) for s in data.get("siblings", [])],
        )

    def as_contract_tuple(self) -> tuple:
        """Arguments for the contract's MerkleProof struct."""
        return (list(self.siblings), self.leaf_index, self.leaf)


def generate_inclusion_path(leaves: Sequence[LeafInput], leaf_index: int) -> InclusionPath:
    """
    Build the inclusion path for the leaf at ``leaf_index``.

    Walks the same bottom-up construction as ``build_root``. At each level the
    sibling of the node on the authenticating path is recorded: an even index
    takes the node on its right if there is one (a promoted last node has no
    sibling on that level), an odd index always takes the node on its left.

    Args:
        leaves: Ordered, non-empty sequence of 32-byte commitments
        leaf_index: Position of the leaf to prove

    Returns:
        InclusionPath with the root-ward sibling sequence

    Raises:
        IndexOutOfRange: If leaf_index does not address a leaf

    Example:
        >>> path = generate_inclusion_path(leaves, 1)
        >>> verify_inclusion_path(path, build_root(leaves))
        True
    """
    if leaf_index < 0 or leaf_index >= len(leaves):
        raise IndexOutOfRange(
            f"Leaf index {leaf_index} out of range (0-{len(leaves) - 1})"
        )

    level = coerce_leaves(leaves)
    leaf = level[leaf_index]
    siblings: List[bytes] = []
    index = leaf_index

    while len(level) > 1:
        if index % 2 == 0:
            # Left child, sibling is right (absent when promoted)
            if index + 1 < len(level):
                siblings.append(level[index + 1])
        else:
            # Right child, sibling is left
            siblings.append(level[index - 1])

        level = next_level(level)
        index //= 2

    return InclusionPath(leaf=leaf, leaf_index=leaf_index, siblings=siblings)


def promotion_level(leaf_index: int, sibling_count: int) -> Optional[int]:
    """
    Find the level from which a path runs along the right edge of the tree.

    Once a node is the last one of its level it stays last on every level
    above it, so from there on an even running index means "promoted, no
    sibling" and an odd one means "left sibling". Below that level every
    level contributes exactly one sibling. The level L therefore satisfies
    ``L + popcount(leaf_index >> L) == sibling_count``.

    Args:
        leaf_index: Original index of the leaf
        sibling_count: Number of siblings in the path

    Returns:
        The smallest matching level, or None when the path has one sibling
        on every level (no promotion on the authenticating path)
    """
    for level in range(leaf_index.bit_length() + 1):
        if level + bin(leaf_index >> level).count("1") == sibling_count:
            return level
    return None


def compute_root_from_path(path: InclusionPath) -> bytes:
    """
    Rebuild the root implied by an inclusion path.

    Args:
        path: Inclusion path (leaf, index and siblings)

    Returns:
        The reconstructed 32-byte root

    Note:
        The running index decides the side of each sibling: even means the
        running hash is on the left, odd means it is on the right, and the
        index is halved after every level. Levels where the node was promoted
        contribute no sibling and are skipped (see ``promotion_level``). When
        the path carries one sibling per level this is exactly the verifier
        contract's loop.
    """
    siblings = path.siblings
    start = promotion_level(path.leaf_index, len(siblings))

    computed = path.leaf
    index = path.leaf_index
    level = 0
    consumed = 0
    while consumed < len(siblings):
        if start is not None and level >= start and index % 2 == 0:
            if index == 0:
                break
            # Promoted unchanged
            index //= 2
            level += 1
            continue

        sibling = siblings[consumed]
        consumed += 1
        if index % 2 == 0:
            computed = hash_pair(computed, sibling)  # Leaf is left
        else:
            computed = hash_pair(sibling, computed)  # Leaf is right
        index //= 2
        level += 1
    return computed


def verify_inclusion_path(path: InclusionPath, root: bytes) -> bool:
    """
    Verify an inclusion path against a known root.

    Verification is a pure predicate: a tampered, truncated or over-long path
    returns False rather than raising.

    Args:
        path: Inclusion path to check
        root: Expected 32-byte root

    Returns:
        True if the path recomputes exactly to root

    Examples:
        >>> is_valid = verify_inclusion_path(path, expected_root)
    """
    if path.leaf_index < 0:
        return False
    computed = compute_root_from_path(path)
    verified = computed == bytes(root)
    if not verified:
        logger.debug(
            f"Inclusion path for leaf {bytes_to_hex(path.leaf)} at index {path.leaf_index} "
            f"recomputed {bytes_to_hex(computed)}, expected {bytes_to_hex(root)}"
        )
    return verified


def batch_verify_paths(paths: Sequence[InclusionPath], root: bytes) -> List[bool]:
    """
    Verify multiple inclusion paths against the same root.

    Args:
        paths: Inclusion paths to check
        root: Expected merkle root

    Returns:
        List of boolean results for each path
    """
    return [verify_inclusion_path(path, root) for path in paths]
