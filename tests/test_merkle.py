"""
Tests for the commitment tree engine.

Roots are checked against a second construction built on pycryptodome's
keccak, so the engine is verified byte for byte against an independent
hash implementation, including trees whose levels promote an odd node.
"""

import unittest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'src'))

from Crypto.Hash import keccak as pycryptodome_keccak

from snarktor_proofs.commitment.merkle import (
    InclusionPath,
    batch_verify_paths,
    build_levels,
    build_root,
    compute_root_from_path,
    generate_inclusion_path,
    get_tree_depth,
    promotion_level,
    validate_tree_structure,
    verify_inclusion_path,
    verify_merkle_root,
)
from snarktor_proofs.errors import EmptyLeafSet, IndexOutOfRange


def k(data: bytes) -> bytes:
    return pycryptodome_keccak.new(digest_bits=256, data=data).digest()


def reference_root(leaves):
    level = list(leaves)
    while len(level) > 1:
        level = [
            k(level[i] + level[i + 1]) if i + 1 < len(level) else level[i]
            for i in range(0, len(level), 2)
        ]
    return level[0]


def make_leaves(count):
    return [k(f"leaf{i}".encode()) for i in range(count)]


def plain_loop_root(path):
    """Root as the verifier contract computes it: one sibling per level."""
    computed = path.leaf
    index = path.leaf_index
    for sibling in path.siblings:
        computed = k(computed + sibling) if index % 2 == 0 else k(sibling + computed)
        index //= 2
    return computed



class TestBuildRoot(unittest.TestCase):

    def test_single_leaf_is_root(self):
        leaf = k(b"only")
        self.assertEqual(build_root([leaf]), leaf)

    def test_two_leaves(self):
        a, b = make_leaves(2)
        self.assertEqual(build_root([a, b]), k(a + b))

    def test_three_leaves_promote_last(self):
        a, b, c = make_leaves(3)
        self.assertEqual(build_root([a, b, c]), k(k(a + b) + c))

    def test_five_leaves_promote_twice(self):
        a, b, c, d, e = make_leaves(5)
        self.assertEqual(build_root([a, b, c, d, e]), k(k(k(a + b) + k(c + d)) + e))

    def test_order_matters(self):
        a, b = make_leaves(2)
        self.assertNotEqual(build_root([a, b]), build_root([b, a]))

    def test_parity_with_reference(self):
        for count in range(1, 18):
            leaves = make_leaves(count)
            with self.subTest(count=count):
                self.assertEqual(build_root(leaves), reference_root(leaves))

    def test_hex_leaves_accepted(self):
        leaves = make_leaves(3)
        self.assertEqual(build_root(["0x" + leaf.hex() for leaf in leaves]), build_root(leaves))

    def test_empty_leaf_set(self):
        with self.assertRaises(EmptyLeafSet):
            build_root([])
        with self.assertRaises(EmptyLeafSet):
            build_levels([])

    def test_malformed_leaf(self):
        with self.assertRaises(ValueError):
            build_root([b"\x00" * 31])
        with self.assertRaises(ValueError):
            build_root(["0x1234"])

    def test_four_proof_scenario(self):
        p1, p2, p3, p4 = (k(f"proof{i}".encode()) for i in range(1, 5))
        self.assertEqual(build_root([p1, p2, p3, p4]), k(k(p1 + p2) + k(p3 + p4)))


class TestTreeStructure(unittest.TestCase):

    def test_levels(self):
        leaves = make_leaves(5)
        levels = build_levels(leaves)
        self.assertEqual([len(level) for level in levels], [5, 3, 2, 1])
        self.assertEqual(levels[0], leaves)
        self.assertEqual(levels[-1][0], build_root(leaves))
        self.assertTrue(validate_tree_structure(levels))

    def test_invalid_structure(self):
        levels = build_levels(make_leaves(4))
        self.assertFalse(validate_tree_structure([]))
        levels[1] = list(reversed(levels[1]))
        self.assertFalse(validate_tree_structure(levels))

    def test_depth(self):
        self.assertEqual(get_tree_depth(1), 0)
        self.assertEqual(get_tree_depth(2), 1)
        self.assertEqual(get_tree_depth(3), 2)
        self.assertEqual(get_tree_depth(4), 2)
        self.assertEqual(get_tree_depth(5), 3)
        for count in range(1, 18):
            self.assertEqual(get_tree_depth(count), len(build_levels(make_leaves(count))) - 1)
        with self.assertRaises(ValueError):
            get_tree_depth(0)

    def test_verify_merkle_root(self):
        leaves = make_leaves(6)
        root = build_root(leaves)
        self.assertTrue(verify_merkle_root(root, leaves))
        self.assertTrue(verify_merkle_root("0x" + root.hex(), leaves))
        self.assertFalse(verify_merkle_root(root, leaves[:-1]))
        self.assertFalse(verify_merkle_root(root, []))
        self.assertFalse(verify_merkle_root("0x1234", leaves))


class TestInclusionPaths(unittest.TestCase):

    def test_every_leaf_verifies(self):
        for count in range(1, 18):
            leaves = make_leaves(count)
            root = reference_root(leaves)
            for index in range(count):
                with self.subTest(count=count, index=index):
                    path = generate_inclusion_path(leaves, index)
                    self.assertEqual(path.leaf, leaves[index])
                    self.assertEqual(path.leaf_index, index)
                    self.assertLessEqual(len(path.siblings), get_tree_depth(count))
                    self.assertTrue(verify_inclusion_path(path, root))

    def test_four_proof_scenario_path(self):
        p1, p2, p3, p4 = (k(f"proof{i}".encode()) for i in range(1, 5))
        path = generate_inclusion_path([p1, p2, p3, p4], 2)
        self.assertEqual(path.siblings, [p4, k(p1 + p2)])
        self.assertTrue(verify_inclusion_path(path, k(k(p1 + p2) + k(p3 + p4))))

        corrupted = [p1, p2, k(b"corrupted"), p4]
        corrupted_root = build_root(corrupted)
        self.assertNotEqual(corrupted_root, build_root([p1, p2, p3, p4]))
        self.assertFalse(verify_inclusion_path(path, corrupted_root))

    def test_promoted_leaf_path(self):
        a, b, c = make_leaves(3)
        path = generate_inclusion_path([a, b, c], 2)
        self.assertEqual(path.siblings, [k(a + b)])
        self.assertEqual(compute_root_from_path(path), k(k(a + b) + c))
        self.assertTrue(verify_inclusion_path(path, build_root([a, b, c])))

    def test_left_leaf_of_promoted_tree(self):
        a, b, c = make_leaves(3)
        path = generate_inclusion_path([a, b, c], 0)
        self.assertEqual(path.siblings, [b, c])

    def test_plain_loop_agrees_on_full_levels(self):
        for count in (1, 2, 4, 8):
            leaves = make_leaves(count)
            for index in range(count):
                path = generate_inclusion_path(leaves, index)
                with self.subTest(count=count, index=index):
                    self.assertEqual(plain_loop_root(path), build_root(leaves))

    def test_plain_loop_rejects_promoted_leaf_path(self):
        a, b, c = make_leaves(3)
        path = generate_inclusion_path([a, b, c], 2)
        self.assertTrue(verify_inclusion_path(path, build_root([a, b, c])))
        self.assertEqual(plain_loop_root(path), k(c + k(a + b)))
        self.assertNotEqual(plain_loop_root(path), build_root([a, b, c]))


    def test_single_leaf_path(self):
        leaf = k(b"only")
        path = generate_inclusion_path([leaf], 0)
        self.assertEqual(path.siblings, [])
        self.assertTrue(verify_inclusion_path(path, leaf))

    def test_index_out_of_range(self):
        leaves = make_leaves(3)
        with self.assertRaises(IndexOutOfRange):
            generate_inclusion_path(leaves, 3)
        with self.assertRaises(IndexOutOfRange):
            generate_inclusion_path(leaves, -1)

    def test_tampered_sibling_fails(self):
        for count in range(2, 10):
            leaves = make_leaves(count)
            root = build_root(leaves)
            for index in range(count):
                path = generate_inclusion_path(leaves, index)
                for position in range(len(path.siblings)):
                    siblings = list(path.siblings)
                    siblings[position] = bytes([siblings[position][0] ^ 0x01]) + siblings[position][1:]
                    tampered = InclusionPath(path.leaf, path.leaf_index, siblings)
                    with self.subTest(count=count, index=index, position=position):
                        self.assertFalse(verify_inclusion_path(tampered, root))

    def test_wrong_leaf_or_root_fails(self):
        leaves = make_leaves(4)
        root = build_root(leaves)
        path = generate_inclusion_path(leaves, 1)
        self.assertFalse(verify_inclusion_path(InclusionPath(leaves[0], 1, path.siblings), root))
        self.assertFalse(verify_inclusion_path(path, k(b"other root")))
        self.assertFalse(verify_inclusion_path(InclusionPath(path.leaf, -1, path.siblings), root))

    def test_truncated_and_extended_paths_fail(self):
        leaves = make_leaves(4)
        root = build_root(leaves)
        path = generate_inclusion_path(leaves, 0)
        self.assertFalse(verify_inclusion_path(InclusionPath(path.leaf, 0, path.siblings[:1]), root))
        self.assertFalse(verify_inclusion_path(InclusionPath(path.leaf, 0, path.siblings + [k(b"x")]), root))

    def test_batch_verify(self):
        leaves = make_leaves(5)
        root = build_root(leaves)
        paths = [generate_inclusion_path(leaves, i) for i in range(5)]
        paths.append(InclusionPath(k(b"stranger"), 0, paths[0].siblings))
        self.assertEqual(batch_verify_paths(paths, root), [True] * 5 + [False])

    def test_promotion_level(self):
        self.assertEqual(promotion_level(2, 1), 0)
        self.assertEqual(promotion_level(4, 2), 1)
        self.assertIsNone(promotion_level(0, 2))
        self.assertIsNone(promotion_level(2, 3))


class TestInclusionPathSerialization(unittest.TestCase):

    def test_dict_form(self):
        leaves = make_leaves(5)
        path = generate_inclusion_path(leaves, 3)
        data = path.to_dict()
        self.assertEqual(data["leaf_index"], 3)
        self.assertEqual(data["leaf"], "0x" + leaves[3].hex())
        self.assertTrue(all(s.startswith("0x") and len(s) == 66 for s in data["siblings"]))
        self.assertEqual(InclusionPath.from_dict(data), path)

    def test_contract_tuple(self):
        leaves = make_leaves(2)
        path = generate_inclusion_path(leaves, 1)
        self.assertEqual(path.as_contract_tuple(), ([leaves[0]], 1, leaves[1]))


if __name__ == '__main__':
    unittest.main()
