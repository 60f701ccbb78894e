"""
Tests for the command-line interface, run through click's CliRunner.
"""

import json
import logging
import unittest
import sys
import os
from unittest.mock import MagicMock, patch

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'src'))

from click.testing import CliRunner
from Crypto.Hash import keccak as pycryptodome_keccak

from snarktor_proofs.authenticator import signing_message, verify_signature
from snarktor_proofs.cli import cli

PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
PI = "0x" + "11" * 32
VK = "0x" + "22" * 32


def k_hex(data: bytes) -> str:
    return "0x" + pycryptodome_keccak.new(digest_bits=256, data=data).hexdigest()


def pair_hex(left: str, right: str) -> str:
    return k_hex(bytes.fromhex(left[2:]) + bytes.fromhex(right[2:]))


LEAVES = [k_hex(f"leaf{i}".encode()) for i in range(3)]


class TestCli(unittest.TestCase):

    def setUp(self):
        self.runner = CliRunner()

    def invoke_json(self, args, **kwargs):
        result = self.runner.invoke(cli, args, **kwargs)
        self.assertEqual(result.exit_code, 0, result.output)
        return json.loads(result.output)

    def test_hash_hex_payload(self):
        data = self.invoke_json(["hash", "0x1234", "--format", "json"])
        self.assertEqual(data["commitment"], k_hex(b"\x12\x34"))
        self.assertEqual(data["size_bytes"], 2)
        self.assertEqual(data["public_input"], k_hex(b"default_public_input"))

    def test_hash_structured_file(self):
        with self.runner.isolated_filesystem():
            with open("proof.json", "w") as f:
                json.dump({"proof": "abc", "publicSignals": [1]}, f)
            data = self.invoke_json(
                ["hash", "--file", "proof.json", "--public-inputs", "[1]", "--format", "json"]
            )
        self.assertEqual(data["commitment"], k_hex(b"abc[1]"))
        self.assertEqual(data["public_input"], k_hex(b"[1]"))
        self.assertEqual(data["verification_key"], k_hex(b"default_verification_key"))

    def test_hash_errors(self):
        self.assertEqual(self.runner.invoke(cli, ["hash"]).exit_code, 2)
        result = self.runner.invoke(cli, ["hash", "not-hex"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("hex", result.output)
        self.assertEqual(self.runner.invoke(cli, ["hash", "0x01", "--public-inputs", "{bad"]).exit_code, 2)

    def test_hash_table_output(self):
        result = self.runner.invoke(cli, ["hash", "0x1234"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Proof Commitments", result.output)

    def test_malformed_json_files(self):
        with self.runner.isolated_filesystem():
            with open("broken.json", "w") as f:
                f.write("{not json")
            for args in (["hash", "--file", "broken.json"], ["verify-path", "broken.json", LEAVES[0]]):
                result = self.runner.invoke(cli, args)
                self.assertEqual(result.exit_code, 2, result.output)
                self.assertIn("Invalid JSON", result.output)
                self.assertIsInstance(result.exception, SystemExit)


    def test_root(self):
        data = self.invoke_json(["root", *LEAVES, "--format", "json"])
        self.assertEqual(data["root"], pair_hex(pair_hex(LEAVES[0], LEAVES[1]), LEAVES[2]))
        self.assertEqual(data["leaf_count"], 3)
        self.assertEqual(data["depth"], 2)

    def test_root_rejects_malformed_leaf(self):
        result = self.runner.invoke(cli, ["root", "0x1234"])
        self.assertEqual(result.exit_code, 2)

    def test_path_and_verify_path(self):
        data = self.invoke_json(["path", "2", *LEAVES])
        self.assertEqual(data["siblings"], [pair_hex(LEAVES[0], LEAVES[1])])
        self.assertEqual(data["leaf"], LEAVES[2])
        root = data.pop("root")

        with self.runner.isolated_filesystem():
            with open("path.json", "w") as f:
                json.dump(data, f)
            ok = self.runner.invoke(cli, ["verify-path", "path.json", root])
            self.assertEqual(ok.exit_code, 0, ok.output)
            self.assertIn("valid", ok.output)

            bad = self.runner.invoke(cli, ["verify-path", "path.json", k_hex(b"other")])
            self.assertEqual(bad.exit_code, 1)

            malformed = self.runner.invoke(cli, ["verify-path", "path.json", "0x12"])
            self.assertEqual(malformed.exit_code, 1)

    def test_path_index_out_of_range(self):
        result = self.runner.invoke(cli, ["path", "3", *LEAVES])
        self.assertEqual(result.exit_code, 1)

    def test_fee_split(self):
        self.assertEqual(
            self.invoke_json(["fee-split", "7", "--format", "json"]),
            {"current": 2, "inclusion": 0, "aggregation": 5},
        )
        table = self.runner.invoke(cli, ["fee-split", "1000"])
        self.assertIn("400", table.output)
        self.assertEqual(self.runner.invoke(cli, ["fee-split", "--", "-1"]).exit_code, 1)

    def test_sign(self):
        data = self.invoke_json([
            "sign",
            "--private-key", PRIVATE_KEY,
            "--fee", "1000",
            "--nonce", "3",
            "--public-input", PI,
            "--verification-key", VK,
            "--format", "json",
        ])
        self.assertEqual(data["signer"], ADDRESS)
        message = signing_message(1000, 3, PI, VK)
        self.assertEqual(data["message"], "0x" + message.hex())
        self.assertTrue(verify_signature(message, data["signature"], ADDRESS))

    def test_sign_key_from_environment(self):
        data = self.invoke_json(
            ["sign", "--fee", "1", "--nonce", "0", "--public-input", PI, "--verification-key", VK, "--format", "json"],
            env={"SNARKTOR_PRIVATE_KEY": PRIVATE_KEY},
        )
        self.assertEqual(data["signer"], ADDRESS)

    def test_sign_rejects_bad_commitment(self):
        result = self.runner.invoke(cli, [
            "sign", "--private-key", PRIVATE_KEY, "--fee", "1", "--nonce", "0",
            "--public-input", "0x12", "--verification-key", VK,
        ])
        self.assertEqual(result.exit_code, 1)

    def test_verify_onchain(self):
        client = MagicMock()
        client.contract_address = "0x" + "ab" * 20
        client.check_root_parity.return_value = {"root": LEAVES[0], "leaf_count": 1, "onchain_verified": True}
        with patch("snarktor_proofs.api.contract_client.SnarktorContractClient", return_value=client) as factory:
            result = self.runner.invoke(
                cli,
                ["verify-onchain", LEAVES[0], "--rpc-url", "http://localhost:8545", "--contract", client.contract_address],
            )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("MATCH", result.output)
        factory.assert_called_once_with(rpc_url="http://localhost:8545", contract_address=client.contract_address)
        client.check_root_parity.assert_called_once()

    def test_verify_onchain_mismatch(self):
        client = MagicMock()
        client.contract_address = "0x" + "ab" * 20
        client.check_root_parity.return_value = {"root": LEAVES[0], "leaf_count": 1, "onchain_verified": False}
        with patch("snarktor_proofs.api.contract_client.SnarktorContractClient", return_value=client):
            result = self.runner.invoke(cli, ["verify-onchain", LEAVES[0]])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("MISMATCH", result.output)

    def test_log_level_from_environment(self):
        with patch("snarktor_proofs.cli.logging.basicConfig") as basic_config:
            result = self.runner.invoke(cli, ["fee-split", "10"], env={"SNARKTOR_LOG_LEVEL": "warning"})
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(basic_config.call_args[1]["level"], "WARNING")

        with patch("snarktor_proofs.cli.logging.basicConfig") as basic_config:
            self.runner.invoke(cli, ["-v", "fee-split", "10"], env={"SNARKTOR_LOG_LEVEL": "warning"})
        self.assertEqual(basic_config.call_args[1]["level"], logging.DEBUG)

    def test_invalid_log_level(self):
        result = self.runner.invoke(cli, ["fee-split", "10"], env={"SNARKTOR_LOG_LEVEL": "chatty"})
        self.assertEqual(result.exit_code, 1)
        self.assertIn("SNARKTOR_LOG_LEVEL", result.output)

    def test_serve(self):

        with patch("snarktor_proofs.api.rest_api.run_server") as run_server:
            result = self.runner.invoke(cli, ["serve", "--host", "0.0.0.0", "--port", "9000"])
        self.assertEqual(result.exit_code, 0, result.output)
        run_server.assert_called_once_with(host="0.0.0.0", port=9000, dev=False)


if __name__ == '__main__':
    unittest.main()
