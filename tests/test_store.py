"""
Tests for the injected key-value store and its error surface.
"""

import threading
import unittest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'src'))

from snarktor_proofs.errors import DuplicateProof, StoreUnavailableError
from snarktor_proofs.store import InMemoryStore, store_errors


class TestInMemoryStore(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryStore()

    def test_get_put(self):
        self.assertIsNone(self.store.get("ns", "key"))
        self.store.put("ns", "key", 1)
        self.assertEqual(self.store.get("ns", "key"), 1)
        self.assertTrue(self.store.contains("ns", "key"))
        self.assertFalse(self.store.contains("other", "key"))

    def test_put_if_absent(self):
        self.assertTrue(self.store.put_if_absent("ns", "key", "first"))
        self.assertFalse(self.store.put_if_absent("ns", "key", "second"))
        self.assertEqual(self.store.get("ns", "key"), "first")

    def test_increment(self):
        self.assertEqual(self.store.increment("nonces", "a"), 1)
        self.assertEqual(self.store.increment("nonces", "a"), 2)
        self.assertEqual(self.store.increment("nonces", "b"), 1)
        self.assertEqual(len(self.store), 2)

    def test_transaction_is_reentrant(self):
        with self.store.transaction():
            with self.store.transaction():
                self.store.put("ns", "key", 1)
        self.assertEqual(self.store.get("ns", "key"), 1)

    def test_concurrent_increments(self):
        def worker():
            for _ in range(200):
                self.store.increment("nonces", "shared")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(self.store.get("nonces", "shared"), 1600)

    def test_concurrent_put_if_absent_single_winner(self):
        results = []

        def worker(value):
            results.append(self.store.put_if_absent("ns", "key", value))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(results.count(True), 1)


class TestStoreErrors(unittest.TestCase):

    def test_wraps_backend_failures(self):
        with self.assertRaises(StoreUnavailableError) as ctx:
            with store_errors("lookup"):
                raise ConnectionError("backend down")
        self.assertIsInstance(ctx.exception.__cause__, ConnectionError)
        self.assertIn("lookup", str(ctx.exception))

    def test_domain_errors_pass_through(self):
        with self.assertRaises(DuplicateProof):
            with store_errors("submission"):
                raise DuplicateProof("already there")


if __name__ == '__main__':
    unittest.main()
