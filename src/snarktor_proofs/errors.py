"""
Error Kinds

This module defines the exceptions raised by the commitment, authentication
and aggregation layers. Every error carries a stable string code so that
outer surfaces (HTTP, CLI) can report it without inspecting messages.
"""


class SnarktorError(Exception):
    """Base exception for all snarktor_proofs errors."""

    code = "SNARKTOR_ERROR"


class UnsupportedPayloadFormat(SnarktorError):
    """Proof payload is neither bytes, a hex string nor a structured object."""

    code = "UNSUPPORTED_PAYLOAD_FORMAT"


class EmptyLeafSet(SnarktorError):
    """A Merkle tree was requested over zero leaves."""

    code = "EMPTY_LEAF_SET"


class IndexOutOfRange(SnarktorError):
    """Leaf index does not address a leaf of the tree."""

    code = "INDEX_OUT_OF_RANGE"


class DuplicateProof(SnarktorError):
    """A base proof with this commitment was already submitted."""

    code = "DUPLICATE_PROOF"


class InvalidSignature(SnarktorError):
    """Submission signature does not recover to the claimed signer."""

    code = "INVALID_SIGNATURE"


class FeeMismatch(SnarktorError):
    """Attached payment differs from the declared fee."""

    code = "FEE_MISMATCH"


class RootMismatch(SnarktorError):
    """Claimed Merkle root differs from the root recomputed over the records."""

    code = "ROOT_MISMATCH"


class DuplicateAggregate(SnarktorError):
    """An aggregated proof with this commitment was already recorded."""

    code = "DUPLICATE_AGGREGATE"


class AggregateNotFound(SnarktorError):
    """No aggregation record exists for the commitment."""

    code = "AGGREGATE_NOT_FOUND"


class BaseNotFound(SnarktorError):
    """No base proof record exists for the commitment."""

    code = "BASE_NOT_FOUND"


class StoreUnavailableError(SnarktorError):
    """Backing store could not be read or written."""

    code = "STORE_UNAVAILABLE"


class ContractClientError(SnarktorError):
    """Exception raised for verifier contract / RPC related errors."""

    code = "CONTRACT_CLIENT_ERROR"
