"""
Verifier Contract Client

This module provides a client for the on-chain SNARKtor verifier contract.
It wraps the contract's submission, query and balance functions, signs
base-proof submissions with the submission authenticator, and checks that
the off-chain commitment tree agrees with the contract's.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

import requests
from eth_account import Account
from web3 import Web3
from web3.exceptions import Web3Exception

from ..authenticator import normalize_address, sign_submission
from ..commitment.merkle import InclusionPath, build_root
from ..commitment.normalizer import normalize
from ..commitment.utils.hex_helpers import bytes_to_hex, to_bytes32
from ..config import Settings
from ..errors import ContractClientError
from ..records import AggregationRecord, ProofRecord
from .abi import SNARKTOR_VERIFIER_ABI

logger = logging.getLogger(__name__)

HashLike = Union[bytes, str]


class SnarktorContractClient:
    """
    Client for the SNARKtor verifier contract.

    Read-only calls work with just an RPC endpoint and contract address;
    submissions, deposits and withdrawals need a private key.
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        contract_address: Optional[str] = None,
        private_key: Optional[str] = None,
        w3: Optional[Web3] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize the contract client.

        Args:
            rpc_url: JSON-RPC endpoint. If None, uses SNARKTOR_RPC_URL.
            contract_address: Verifier contract address. If None, uses SNARKTOR_CONTRACT_ADDRESS.
            private_key: Signer key. If None, uses SNARKTOR_PRIVATE_KEY (optional).
            w3: Preconfigured Web3 instance; rpc_url is ignored when given.
            timeout: Request and receipt timeout in seconds. If None, uses SNARKTOR_RPC_TIMEOUT.
        """
        if rpc_url is None or contract_address is None or private_key is None or timeout is None:
            settings = Settings.from_env()
            rpc_url = rpc_url or settings.rpc_url
            contract_address = contract_address or settings.contract_address
            private_key = private_key or settings.private_key
            if timeout is None:
                timeout = settings.rpc_timeout

        if w3 is None:
            if not rpc_url:
                raise ValueError("SNARKTOR_RPC_URL environment variable is not set")
            session = requests.Session()
            session.headers.update({
                'Content-Type': 'application/json',
                'Accept': 'application/json'
            })
            w3 = Web3(Web3.HTTPProvider(rpc_url, session=session, request_kwargs={"timeout": timeout}))

        if not contract_address:
            raise ValueError("SNARKTOR_CONTRACT_ADDRESS environment variable is not set")

        self.w3 = w3
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.contract_address = Web3.to_checksum_address(contract_address)
        self.contract = self.w3.eth.contract(address=self.contract_address, abi=SNARKTOR_VERIFIER_ABI)
        self.account = Account.from_key(private_key) if private_key else None

        logger.info(f"Initialized SnarktorContractClient for contract {self.contract_address}")

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    @contextmanager
    def _rpc(self, action: str) -> Iterator[None]:
        try:
            yield
        except ContractClientError:
            raise
        except requests.ConnectionError as e:
            raise ContractClientError(
                f"Failed to connect to RPC endpoint at {self.rpc_url} during {action}. "
                f"Please check the node is running and SNARKTOR_RPC_URL is correct. "
                f"Original error: {e}"
            ) from e
        except requests.Timeout as e:
            raise ContractClientError(
                f"Timeout talking to RPC endpoint at {self.rpc_url} during {action}. "
                f"Original error: {e}"
            ) from e
        except (requests.RequestException, Web3Exception, ValueError) as e:
            raise ContractClientError(f"Contract call {action} failed: {e}") from e

    def _require_account(self, action: str):
        if self.account is None:
            raise ContractClientError(f"Wallet required for {action}")
        return self.account

    def _resolve_address(self, address: Optional[str]) -> str:
        if address:
            return normalize_address(address)
        if self.account is None:
            raise ContractClientError("Address required")
        return self.account.address

    def _transact(self, function_call: Any, action: str, value: int = 0) -> Dict[str, Any]:
        account = self._require_account(action)
        with self._rpc(action):
            tx = function_call.build_transaction({
                "from": account.address,
                "value": value,
                "nonce": self.w3.eth.get_transaction_count(account.address),
                "chainId": self.w3.eth.chain_id,
            })
            signed = account.sign_transaction(tx)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            logger.info(f"Sent {action} transaction {bytes_to_hex(tx_hash)}")
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout)

        if receipt.get("status") == 0:
            raise ContractClientError(f"Transaction {bytes_to_hex(tx_hash)} for {action} reverted")

        return {
            "transaction_hash": bytes_to_hex(tx_hash),
            "block_number": receipt.get("blockNumber"),
            "status": receipt.get("status"),
        }

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    def submit_base_proof(
        self,
        proof_data: Any,
        public_input: HashLike,
        verification_key: HashLike,
        fee: int,
    ) -> Dict[str, Any]:
        """
        Sign and submit a base proof for aggregation.

        The signer's nonce is read from the contract on every call, so a
        retried submission always signs over the current nonce.

        Args:
            proof_data: Proof payload in any supported format
            public_input: 32-byte public input commitment
            verification_key: 32-byte verification key commitment
            fee: Aggregation fee in wei, sent as the transaction value

        Returns:
            Dict with the proof commitment, nonce, signature and receipt fields

        Raises:
            ContractClientError: If no wallet is configured or the transaction fails
        """
        account = self._require_account("submitting proofs")
        normalized = normalize(proof_data)
        pi = to_bytes32(public_input)
        vk = to_bytes32(verification_key)

        nonce = self.get_user_nonce(account.address)
        signature = sign_submission(account.key, fee, nonce, pi, vk)

        function_call = self.contract.functions.submitBaseProof(
            normalized.canonical_bytes, pi, vk, fee, signature
        )
        result = self._transact(function_call, "submitBaseProof", value=fee)
        result.update({
            "commitment": bytes_to_hex(normalized.commitment),
            "nonce": nonce,
            "signature": bytes_to_hex(signature),
        })
        return result

    def submit_aggregated_proof(
        self,
        aggregated_proof_data: Any,
        merkle_root: HashLike,
        proven_data: Sequence[ProofRecord],
        disabled_nodes: Sequence[HashLike] = (),
    ) -> Dict[str, Any]:
        """
        Submit an aggregated proof over previously submitted base proofs.

        Args:
            aggregated_proof_data: Aggregated proof payload
            merkle_root: Root over the base-proof commitments
            proven_data: Included base proofs, in tree order
            disabled_nodes: Previously submitted subtree roots

        Returns:
            Dict with the receipt fields
        """
        self._require_account("submitting proofs")
        normalized = normalize(aggregated_proof_data)
        proven = [
            (
                r.commitment,
                r.submitter,
                r.fee,
                r.nonce,
                r.public_input_commitment,
                r.verification_key_commitment,
                r.signature,
            )
            for r in proven_data
        ]
        function_call = self.contract.functions.submitAggregatedProof(
            normalized.canonical_bytes,
            to_bytes32(merkle_root),
            proven,
            [to_bytes32(node) for node in disabled_nodes],
        )
        result = self._transact(function_call, "submitAggregatedProof")
        result["aggregated_commitment"] = bytes_to_hex(normalized.commitment)
        return result

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def verify_proof_inclusion(
        self,
        base_proof_hash: HashLike,
        aggregated_hash: HashLike,
        path: InclusionPath,
    ) -> bool:
        """
        Ask the contract whether a base proof is included in an aggregated proof.

        Note:
            The contract pairs one sibling per level without skipping promoted
            nodes. A path that passes a promoted node, such as index 2 of
            ``[a, b, c]``, verifies off-chain with ``verify_inclusion_path`` but
            is rejected here. Paths over trees whose leaf count is a power of
            two agree on both sides.
        """

        with self._rpc("verifyProofInclusion"):
            return bool(
                self.contract.functions.verifyProofInclusion(
                    to_bytes32(base_proof_hash), to_bytes32(aggregated_hash), path.as_contract_tuple()
                ).call()
            )

    def verify_merkle_root(self, merkle_root: HashLike, leaves: Sequence[HashLike]) -> bool:
        """Ask the contract whether merkle_root is the root over leaves."""
        with self._rpc("verifyMerkleRoot"):
            return bool(
                self.contract.functions.verifyMerkleRoot(
                    to_bytes32(merkle_root), [to_bytes32(leaf) for leaf in leaves]
                ).call()
            )

    def get_base_proof(self, proof_hash: HashLike) -> ProofRecord:
        with self._rpc("getBaseProof"):
            raw = self.contract.functions.getBaseProof(to_bytes32(proof_hash)).call()
        return _decode_base_proof(raw)

    def get_aggregated_proof(self, aggregated_hash: HashLike) -> AggregationRecord:
        with self._rpc("getAggregatedProof"):
            raw = self.contract.functions.getAggregatedProof(to_bytes32(aggregated_hash)).call()

        agg_hash, merkle_root, disabled, proven, total_fee, submitter, timestamp = raw
        return AggregationRecord(
            aggregated_commitment=bytes(agg_hash),
            merkle_root=bytes(merkle_root),
            included_leaves=tuple(_decode_base_proof(p).commitment for p in proven),
            disabled_subtree_roots=frozenset(bytes(d) for d in disabled),
            total_fee=int(total_fee),
            submitter=submitter,
            timestamp=int(timestamp),
        )

    def is_proof_submitted(self, proof_hash: HashLike) -> bool:
        with self._rpc("isProofSubmitted"):
            return bool(self.contract.functions.isProofSubmitted(to_bytes32(proof_hash)).call())

    def get_user_nonce(self, address: Optional[str] = None) -> int:
        """Read the submission nonce of address (defaults to the wallet)."""
        user = self._resolve_address(address)
        with self._rpc("userNonces"):
            return int(self.contract.functions.userNonces(user).call())

    def get_user_balance(self, address: Optional[str] = None) -> int:
        """Read the deposited balance of address (defaults to the wallet)."""
        user = self._resolve_address(address)
        with self._rpc("userBalances"):
            return int(self.contract.functions.userBalances(user).call())

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    def deposit(self, amount: int) -> Dict[str, Any]:
        """Deposit funds for aggregation fees."""
        self._require_account("deposits")
        return self._transact(self.contract.functions.deposit(), "deposit", value=amount)

    def withdraw(self, amount: int) -> Dict[str, Any]:
        """Withdraw unused funds."""
        self._require_account("withdrawals")
        return self._transact(self.contract.functions.withdraw(amount), "withdraw")

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def health_check(self) -> bool:
        """
        Check if the RPC endpoint is reachable.

        Returns:
            True if connected, False otherwise
        """
        try:
            return bool(self.w3.is_connected())
        except Exception:
            return False

    def check_root_parity(self, leaves: Sequence[HashLike]) -> Dict[str, Any]:
        """
        Compare the off-chain root over leaves with the contract's verdict.

        Args:
            leaves: Ordered base-proof commitments

        Returns:
            Dict with the local root, the contract's verdict and whether they agree
        """
        local_root = build_root(leaves)
        onchain = self.verify_merkle_root(local_root, leaves)
        if not onchain:
            logger.warning(f"Contract rejected off-chain root {bytes_to_hex(local_root)} over {len(leaves)} leaves")
        return {
            "root": bytes_to_hex(local_root),
            "leaf_count": len(leaves),
            "onchain_verified": onchain,
        }


def _decode_base_proof(raw: List[Any]) -> ProofRecord:
    proof_hash, user, fee, nonce, public_input, verification_key, signature = raw
    return ProofRecord(
        commitment=bytes(proof_hash),
        submitter=user,
        fee=int(fee),
        nonce=int(nonce),
        public_input_commitment=bytes(public_input),
        verification_key_commitment=bytes(verification_key),
        signature=bytes(signature),
    )
