"""
Merkle Tree Building Utilities

This module builds the binary commitment tree over base-proof commitments.
The construction must match the on-chain verifier bit for bit:

- leaves keep the caller's order (they are never sorted)
- consecutive nodes are paired left to right and combined as
  keccak256(left || right)
- when a level has an odd number of nodes, the last node is promoted to the
  next level unchanged (it is neither duplicated nor padded)
"""

import logging
from typing import List, Sequence, Union

from ...errors import EmptyLeafSet
from ..hashing import hash_pair
from ..utils.hex_helpers import to_bytes32

logger = logging.getLogger(__name__)

LeafInput = Union[bytes, str]


def coerce_leaves(leaves: Sequence[LeafInput]) -> List[bytes]:
    """
    Convert caller-supplied leaves into a list of 32-byte values.

    Args:
        leaves: Commitments as 32-byte bytes or 0x-prefixed hex strings

    Returns:
        New list of 32-byte bytes in the same order

    Raises:
        EmptyLeafSet: If no leaves are given
        ValueError: If any leaf is not a 32-byte value
    """
    if len(leaves) == 0:
        raise EmptyLeafSet("Cannot build a commitment tree with zero leaves")
    return [to_bytes32(leaf) for leaf in leaves]


def next_level(level: List[bytes]) -> List[bytes]:
    """
    Compute the parent level of a tree level.

    Args:
        level: Nodes of the current level, left to right

    Returns:
        Parent nodes; an unpaired last node is carried over as-is

    Examples:
        >>> next_level([a, b, c])  # -> [hash_pair(a, b), c]
    """
    parents = []
    for i in range(0, len(level), 2):
        if i + 1 < len(level):
            parents.append(hash_pair(level[i], level[i + 1]))
        else:
            # Odd number, promote the last element
            parents.append(level[i])
    return parents


def build_levels(leaves: Sequence[LeafInput]) -> List[List[bytes]]:
    """
    Build every level of the commitment tree.

    Args:
        leaves: Ordered, non-empty sequence of 32-byte commitments

    Returns:
        List of tree levels from leaves (index 0) to root (last, single node)

    Raises:
        EmptyLeafSet: If leaves is empty
    """
    level = coerce_leaves(leaves)
    levels = [level]
    while len(level) > 1:
        level = next_level(level)
        levels.append(level)

    logger.debug(f"Built commitment tree with {len(leaves)} leaves and {len(levels)} levels")
    return levels


def build_root(leaves: Sequence[LeafInput]) -> bytes:
    """
    Compute the Merkle root of an ordered sequence of commitments.

    A single leaf is its own root (no hashing is applied).

    Args:
        leaves: Ordered, non-empty sequence of 32-byte commitments

    Returns:
        32-byte Merkle root

    Raises:
        EmptyLeafSet: If leaves is empty

    Examples:
        >>> build_root([a, b, c]) == hash_pair(hash_pair(a, b), c)
        True
    """
    level = coerce_leaves(leaves)
    while len(level) > 1:
        level = next_level(level)
    return level[0]


def verify_merkle_root(root: LeafInput, leaves: Sequence[LeafInput]) -> bool:
    """
    Check that a claimed root matches the root of the given leaves.

    This is a predicate: an empty leaf set or malformed input yields False.

    Args:
        root: Claimed 32-byte root
        leaves: Ordered sequence of 32-byte commitments

    Returns:
        True if the recomputed root equals the claimed root
    """
    try:
        expected = to_bytes32(root)
        computed = build_root(leaves)
    except (EmptyLeafSet, ValueError) as e:
        logger.debug(f"Merkle root check rejected input: {e}")
        return False
    return computed == expected


def get_tree_depth(leaf_count: int) -> int:
    """
    Calculate the number of hashing levels above the leaves.

    With promotion of odd nodes, every level halves the node count rounding
    up, so the depth is ceil(log2(leaf_count)).

    Args:
        leaf_count: Number of leaves (must be positive)

    Returns:
        Tree depth (0 for a single leaf)

    Examples:
        >>> get_tree_depth(1)  # Returns 0
        >>> get_tree_depth(5)  # Returns 3
    """
    if leaf_count < 1:
        raise ValueError("Leaf count must be positive")

    return (leaf_count - 1).bit_length()


def validate_tree_structure(tree: List[List[bytes]]) -> bool:
    """
    Validate that a tree has the correct structure for a promoted binary tree.

    Args:
        tree: List of tree levels from leaves to root

    Returns:
        True if tree structure is valid
    """
    if not tree:
        return False

    # Check each level has half the nodes of the previous level
    for i in range(1, len(tree)):
        expected_size = (len(tree[i - 1]) + 1) // 2
        if len(tree[i]) != expected_size:
            return False
        if next_level(tree[i - 1]) != tree[i]:
            return False

    # Root level should have exactly one node
    return len(tree[-1]) == 1
