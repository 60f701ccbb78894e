"""
Submission Records

Value types persisted by the aggregation session: one ProofRecord per
accepted base proof and one AggregationRecord per aggregated proof. Both are
created once and never mutated afterwards.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Tuple

from .commitment.utils.hex_helpers import bytes_to_hex
from .fees import FeeSplit


@dataclass(frozen=True)
class ProofRecord:
    """
    An accepted base-proof submission.

    Attributes:
        commitment: keccak256 of the proof's canonical bytes
        submitter: Checksum address of the signer
        fee: Declared (and paid) fee in wei
        nonce: Signer nonce consumed by this submission
        public_input_commitment: Commitment to the public inputs
        verification_key_commitment: Commitment to the verification key
        signature: 65-byte submission signature
        timestamp: Acceptance time (unix seconds)
        proof_data: Canonical proof bytes
    """
    commitment: bytes
    submitter: str
    fee: int
    nonce: int
    public_input_commitment: bytes
    verification_key_commitment: bytes
    signature: bytes
    timestamp: int = 0
    proof_data: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commitment": bytes_to_hex(self.commitment),
            "submitter": self.submitter,
            "fee": self.fee,
            "nonce": self.nonce,
            "public_input": bytes_to_hex(self.public_input_commitment),
            "verification_key": bytes_to_hex(self.verification_key_commitment),
            "signature": bytes_to_hex(self.signature),
            "timestamp": self.timestamp,
            "proof_data": bytes_to_hex(self.proof_data),
        }


@dataclass(frozen=True)
class AggregationRecord:
    """
    An aggregated proof and the commitment tree it attests to.

    Attributes:
        aggregated_commitment: keccak256 of the aggregated proof bytes
        merkle_root: Root over included_leaves
        included_leaves: Base-proof commitments in tree order
        disabled_subtree_roots: Roots excluded from this round
        total_fee: Sum of the included base-proof fees
        submitter: Identity that recorded the aggregation
        timestamp: Recording time (unix seconds)
        fee_split: 40/5/55 split of total_fee
        proof_data: Canonical aggregated proof bytes
    """
    aggregated_commitment: bytes
    merkle_root: bytes
    included_leaves: Tuple[bytes, ...]
    disabled_subtree_roots: FrozenSet[bytes] = field(default_factory=frozenset)
    total_fee: int = 0
    submitter: Optional[str] = None
    timestamp: int = 0
    fee_split: Optional[FeeSplit] = None
    proof_data: bytes = b""

    @property
    def base_proof_count(self) -> int:
        return len(self.included_leaves)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aggregated_commitment": bytes_to_hex(self.aggregated_commitment),
            "merkle_root": bytes_to_hex(self.merkle_root),
            "included_leaves": [bytes_to_hex(leaf) for leaf in self.included_leaves],
            "disabled_subtree_roots": sorted(bytes_to_hex(r) for r in self.disabled_subtree_roots),
            "total_fee": self.total_fee,
            "submitter": self.submitter,
            "timestamp": self.timestamp,
            "fee_split": self.fee_split.to_dict() if self.fee_split else None,
            "proof_data": bytes_to_hex(self.proof_data),
        }
