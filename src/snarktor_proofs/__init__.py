"""
SNARKtor Proofs

Commitment hashing, Merkle inclusion proofs and authenticated submission for
SNARKtor proof aggregation, bit-compatible with the on-chain verifier.

Usage:
    from snarktor_proofs import AggregationSession, build_root, generate_inclusion_path

    root = build_root(leaves)
    path = generate_inclusion_path(leaves, 2)
"""

__version__ = "0.1.0"

from .authenticator import (
    SubmissionAuthenticator,
    recover_signer,
    sign_submission,
    signing_message,
    verify_signature,
)
from .commitment import (
    InclusionPath,
    build_root,
    derive_proof_hash,
    generate_inclusion_path,
    normalize,
    verify_inclusion_path,
)
from .errors import SnarktorError
from .events import EventEmitter
from .fees import FeeSplit, split_fee
from .records import AggregationRecord, ProofRecord
from .session import AggregationSession
from .store import InMemoryStore, KeyValueStore

__all__ = [
    "__version__",
    "AggregationRecord",
    "AggregationSession",
    "EventEmitter",
    "FeeSplit",
    "InMemoryStore",
    "InclusionPath",
    "KeyValueStore",
    "ProofRecord",
    "SnarktorError",
    "SubmissionAuthenticator",
    "build_root",
    "derive_proof_hash",
    "generate_inclusion_path",
    "normalize",
    "recover_signer",
    "sign_submission",
    "signing_message",
    "split_fee",
    "verify_inclusion_path",
    "verify_signature",
]
