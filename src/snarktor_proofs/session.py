"""
Aggregation Session

This module orchestrates the proof aggregation flow: base proofs are
normalized and authenticated into ProofRecords, aggregated proofs commit to
an ordered batch of those records through a Merkle root, and inclusion
queries check a base proof against a recorded aggregation.

Base-proof availability is mandatory for inclusion queries: a base
commitment with no ProofRecord raises BaseNotFound.
"""

import logging
import time
from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

from .authenticator import SubmissionAuthenticator, normalize_address
from .commitment.merkle import (
    InclusionPath,
    build_root,
    generate_inclusion_path,
    verify_inclusion_path,
    verify_merkle_root,
)
from .commitment.normalizer import normalize
from .commitment.utils.hex_helpers import bytes_to_hex, to_bytes32
from .errors import (
    AggregateNotFound,
    BaseNotFound,
    DuplicateAggregate,
    EmptyLeafSet,
    IndexOutOfRange,
    RootMismatch,
)
from .events import (
    AggregatedProofSubmitted,
    EventEmitter,
    MerkleRootValidated,
    ProofInclusionVerified,
    ProofVerified,
)
from .fees import split_fee
from .records import AggregationRecord, ProofRecord
from .store import AGGREGATES_NAMESPACE, PROOFS_NAMESPACE, InMemoryStore, KeyValueStore, store_errors

logger = logging.getLogger(__name__)

RecordRef = Union[ProofRecord, bytes, str]


class AggregationSession:
    """
    Single serializing authority over base proofs and aggregations.

    Args:
        store: Backing key-value store (in-memory by default)
        events: Event emitter notified of submissions and queries
        clock: Callable returning the current unix time in seconds

    Example:
        >>> session = AggregationSession()
        >>> record = session.submit_base_proof(proof, pi, vk, fee, sig, addr, payment=fee)
        >>> agg = session.submit_aggregate(agg_proof, root, [record])
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        events: Optional[EventEmitter] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store if store is not None else InMemoryStore()
        self.events = events if events is not None else EventEmitter()
        self.clock = clock
        self.authenticator = SubmissionAuthenticator(self.store)

    def _now(self) -> int:
        return int(self.clock())

    # ------------------------------------------------------------------
    # Base proofs
    # ------------------------------------------------------------------

    def submit_base_proof(
        self,
        proof_data: Any,
        public_input: Union[bytes, str],
        verification_key: Union[bytes, str],
        fee: int,
        signature: Union[bytes, str],
        submitter: str,
        payment: Optional[int] = None,
    ) -> ProofRecord:
        """
        Normalize, authenticate and record a base proof.

        Args:
            proof_data: Proof payload in any supported format
            public_input: 32-byte public input commitment
            verification_key: 32-byte verification key commitment
            fee: Declared fee in wei
            signature: Submitter's signature over the signing message
            submitter: Claimed signer address
            payment: Attached payment (defaults to fee)

        Returns:
            The accepted ProofRecord

        Raises:
            UnsupportedPayloadFormat: If proof_data cannot be normalized
            DuplicateProof: If the proof was already submitted
            InvalidSignature: If the signature is not the submitter's
            FeeMismatch: If payment differs from fee
        """
        normalized = normalize(proof_data)
        record = self.authenticator.submit(
            commitment=normalized.commitment,
            public_input_commitment=public_input,
            verification_key_commitment=verification_key,
            fee=fee,
            signature=signature,
            submitter=submitter,
            payment=fee if payment is None else payment,
            proof_data=normalized.canonical_bytes,
            timestamp=self._now(),
        )
        self.events.emit(ProofVerified(record.commitment, record.submitter, record.timestamp))
        return record

    def get_base_proof(self, commitment: Union[bytes, str]) -> ProofRecord:
        """
        Look up a base proof record.

        Raises:
            BaseNotFound: If no record exists for the commitment
        """
        key = to_bytes32(commitment)
        with store_errors("base proof lookup"):
            record = self.store.get(PROOFS_NAMESPACE, key)
        if record is None:
            raise BaseNotFound(f"Base proof not found: {bytes_to_hex(key)}")
        return record

    def is_proof_submitted(self, commitment: Union[bytes, str]) -> bool:
        key = to_bytes32(commitment)
        with store_errors("base proof lookup"):
            return self.store.contains(PROOFS_NAMESPACE, key)

    def current_nonce(self, identity: str) -> int:
        return self.authenticator.current_nonce(identity)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def _resolve_records(self, included_records: Iterable[RecordRef]) -> List[ProofRecord]:
        return [
            item if isinstance(item, ProofRecord) else self.get_base_proof(item)
            for item in included_records
        ]

    def submit_aggregate(
        self,
        aggregated_payload: Any,
        claimed_root: Union[bytes, str],
        included_records: Sequence[RecordRef],
        disabled_subtree_roots: Iterable[Union[bytes, str]] = (),
        submitter: Optional[str] = None,
    ) -> AggregationRecord:
        """
        Record an aggregated proof over an ordered batch of base proofs.

        Args:
            aggregated_payload: Aggregated proof payload in any supported format
            claimed_root: Merkle root the aggregated proof attests to
            included_records: Base proofs in tree order, as ProofRecords or
                commitments of stored base proofs
            disabled_subtree_roots: Previously aggregated roots excluded from
                this round
            submitter: Identity recording the aggregation

        Returns:
            The persisted AggregationRecord

        Raises:
            EmptyLeafSet: If included_records is empty
            BaseNotFound: If a commitment reference has no stored base proof
            RootMismatch: If claimed_root differs from the recomputed root
            DuplicateAggregate: If the aggregated commitment was already recorded
        """
        if not included_records:
            raise EmptyLeafSet("An aggregate must include at least one base proof")

        normalized = normalize(aggregated_payload)
        root = to_bytes32(claimed_root)
        records = self._resolve_records(included_records)
        leaves = [r.commitment for r in records]

        computed = build_root(leaves)
        if computed != root:
            logger.warning(f"Root mismatch: claimed {bytes_to_hex(root)}, computed {bytes_to_hex(computed)}")
            raise RootMismatch(
                f"Claimed root {bytes_to_hex(root)} does not match {bytes_to_hex(computed)}"
            )
        self.events.emit(MerkleRootValidated(root, tuple(leaves)))

        total_fee = sum(r.fee for r in records)
        record = AggregationRecord(
            aggregated_commitment=normalized.commitment,
            merkle_root=root,
            included_leaves=tuple(leaves),
            disabled_subtree_roots=frozenset(to_bytes32(r) for r in disabled_subtree_roots),
            total_fee=total_fee,
            submitter=normalize_address(submitter) if submitter else None,
            timestamp=self._now(),
            fee_split=split_fee(total_fee),
            proof_data=normalized.canonical_bytes,
        )

        with store_errors("aggregate submission"), self.store.transaction():
            if not self.store.put_if_absent(AGGREGATES_NAMESPACE, record.aggregated_commitment, record):
                logger.warning(f"Rejected duplicate aggregate {bytes_to_hex(record.aggregated_commitment)}")
                raise DuplicateAggregate(
                    f"Aggregated proof already recorded: {bytes_to_hex(record.aggregated_commitment)}"
                )

        logger.info(
            f"Recorded aggregate {bytes_to_hex(record.aggregated_commitment)} over {len(leaves)} proofs "
            f"(root {bytes_to_hex(root)}, total fee {total_fee})"
        )
        self.events.emit(AggregatedProofSubmitted(record.aggregated_commitment, record.base_proof_count))
        return record

    def get_aggregate(self, aggregated_commitment: Union[bytes, str]) -> AggregationRecord:
        """
        Look up an aggregation record.

        Raises:
            AggregateNotFound: If no record exists for the commitment
        """
        key = to_bytes32(aggregated_commitment)
        with store_errors("aggregate lookup"):
            record = self.store.get(AGGREGATES_NAMESPACE, key)
        if record is None:
            raise AggregateNotFound(f"Aggregated proof not found: {bytes_to_hex(key)}")
        return record

    def is_aggregate_available(self, aggregated_commitment: Union[bytes, str]) -> bool:
        key = to_bytes32(aggregated_commitment)
        with store_errors("aggregate lookup"):
            return self.store.contains(AGGREGATES_NAMESPACE, key)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def verify_inclusion(
        self,
        base_commitment: Union[bytes, str],
        aggregated_commitment: Union[bytes, str],
        path: InclusionPath,
    ) -> bool:
        """
        Check that a base proof is included in a recorded aggregation.

        Args:
            base_commitment: Commitment of the base proof
            aggregated_commitment: Commitment of the aggregated proof
            path: Inclusion path of the base proof

        Returns:
            True if path authenticates base_commitment against the
            aggregation's Merkle root

        Raises:
            AggregateNotFound: If the aggregation is unknown
            BaseNotFound: If the base proof is unknown
        """
        aggregate = self.get_aggregate(aggregated_commitment)
        base = self.get_base_proof(base_commitment)

        if path.leaf != base.commitment:
            verified = False
        else:
            verified = verify_inclusion_path(path, aggregate.merkle_root)

        logger.info(
            f"Inclusion of {bytes_to_hex(base.commitment)} in "
            f"{bytes_to_hex(aggregate.aggregated_commitment)}: {verified}"
        )
        self.events.emit(ProofInclusionVerified(base.commitment, aggregate.aggregated_commitment, verified))
        return verified

    def inclusion_path_for(
        self,
        aggregated_commitment: Union[bytes, str],
        base_commitment: Union[bytes, str],
    ) -> InclusionPath:
        """
        Regenerate the inclusion path of a base proof in a recorded aggregation.

        Raises:
            AggregateNotFound: If the aggregation is unknown
            IndexOutOfRange: If the base proof is not among the included leaves
        """
        aggregate = self.get_aggregate(aggregated_commitment)
        leaf = to_bytes32(base_commitment)
        try:
            index = aggregate.included_leaves.index(leaf)
        except ValueError:
            raise IndexOutOfRange(
                f"Proof {bytes_to_hex(leaf)} is not included in {bytes_to_hex(aggregate.aggregated_commitment)}"
            ) from None
        return generate_inclusion_path(aggregate.included_leaves, index)

    @staticmethod
    def verify_merkle_root(root: Union[bytes, str], leaves: Sequence[Union[bytes, str]]) -> bool:
        return verify_merkle_root(root, leaves)
