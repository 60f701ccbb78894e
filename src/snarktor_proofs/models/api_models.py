"""
API Models

This module defines Pydantic models for API request and response validation.
Commitments, roots and signatures travel as 0x-prefixed hex strings.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..commitment.utils.hex_helpers import is_hex_string, validate_hex_length


def _check_hash32(v: str) -> str:
    if not validate_hex_length(v, 32):
        raise ValueError("Must be a 32-byte hex string starting with '0x'")
    return v.lower()


class ErrorResponse(BaseModel):
    """
    Response model for API errors.

    Attributes:
        error: Error message
        code: Error code (string identifier)
        details: Additional error details
    """
    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")
    details: Optional[dict] = Field(default=None, description="Additional error details")


class HealthResponse(BaseModel):
    """
    Response model for health check endpoint.

    Attributes:
        status: Service status
        contract_rpc: RPC connectivity of the configured contract client, None if not configured
        version: Service version
        timestamp: Response timestamp
    """
    status: str = Field(..., description="Service status")
    contract_rpc: Optional[bool] = Field(default=None, description="Contract RPC connectivity")
    version: str = Field(default="0.1.0", description="Service version")
    timestamp: Optional[str] = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Response timestamp",
    )


class NormalizeRequest(BaseModel):
    """Proof payload to normalize, with optional inputs to commit to."""
    payload: Any = Field(..., description="Hex string or structured proof object")
    public_inputs: Optional[Any] = Field(default=None, description="Public inputs (any JSON value)")
    verification_key: Optional[Any] = Field(default=None, description="Verification key (any JSON value)")


class NormalizeResponse(BaseModel):
    commitment: str = Field(..., description="keccak256 of the canonical proof bytes")
    size_bytes: int = Field(..., description="Length of the canonical proof bytes")
    public_input: str = Field(..., description="Public input commitment")
    verification_key: str = Field(..., description="Verification key commitment")


class BaseProofRequest(BaseModel):
    """
    Request model for a base-proof submission.

    Attributes:
        proof_data: Proof payload (hex string or structured object)
        public_input: Public input commitment
        verification_key: Verification key commitment
        fee: Declared fee in wei
        signature: Signature over the signing message
        submitter: Claimed signer address
        payment: Attached payment (defaults to fee)
    """
    proof_data: Any = Field(..., description="Proof payload")
    public_input: str = Field(..., description="Public input commitment (32-byte hex)")
    verification_key: str = Field(..., description="Verification key commitment (32-byte hex)")
    fee: int = Field(..., ge=0, description="Declared fee in wei")
    signature: str = Field(..., description="65-byte signature as hex string")
    submitter: str = Field(..., description="Signer address")
    payment: Optional[int] = Field(default=None, ge=0, description="Attached payment in wei")

    @field_validator('public_input', 'verification_key')
    @classmethod
    def validate_commitment(cls, v):
        """Validate commitments are 32-byte hex strings."""
        return _check_hash32(v)

    @field_validator('signature')
    @classmethod
    def validate_signature(cls, v):
        """Validate signature is a hex string."""
        if not is_hex_string(v):
            raise ValueError("Signature must be a hex string starting with '0x'")
        return v


class ProofRecordResponse(BaseModel):
    commitment: str
    submitter: str
    fee: int
    nonce: int
    public_input: str
    verification_key: str
    signature: str
    timestamp: int
    proof_data: str


class AggregateRequest(BaseModel):
    """
    Request model for recording an aggregated proof.

    Attributes:
        aggregated_proof: Aggregated proof payload
        merkle_root: Claimed root over the included proofs
        included_proofs: Commitments of submitted base proofs, in tree order
        disabled_subtree_roots: Previously aggregated roots excluded from this round
        submitter: Identity recording the aggregation
    """
    aggregated_proof: Any = Field(..., description="Aggregated proof payload")
    merkle_root: str = Field(..., description="Claimed Merkle root (32-byte hex)")
    included_proofs: List[str] = Field(..., description="Base-proof commitments in tree order")
    disabled_subtree_roots: List[str] = Field(default_factory=list, description="Excluded subtree roots")
    submitter: Optional[str] = Field(default=None, description="Submitter address")

    @field_validator('merkle_root')
    @classmethod
    def validate_root(cls, v):
        return _check_hash32(v)

    @field_validator('included_proofs', 'disabled_subtree_roots')
    @classmethod
    def validate_hash_list(cls, v):
        """Validate every entry is a 32-byte hex string."""
        return [_check_hash32(item) for item in v]


class FeeSplitResponse(BaseModel):
    current: int = Field(..., description="Current aggregation level share (40%)")
    inclusion: int = Field(..., description="Inclusion submitter share (5%)")
    aggregation: int = Field(..., description="Further aggregation share (55% plus remainder)")


class AggregateResponse(BaseModel):
    aggregated_commitment: str
    merkle_root: str
    included_leaves: List[str]
    disabled_subtree_roots: List[str]
    total_fee: int
    submitter: Optional[str] = None
    timestamp: int
    fee_split: Optional[FeeSplitResponse] = None
    proof_data: str


class InclusionPathModel(BaseModel):
    """
    Inclusion path of one leaf.

    Attributes:
        siblings: Sibling hashes from the leaf level towards the root
        leaf_index: Position of the leaf
        leaf: The leaf commitment
    """
    siblings: List[str] = Field(default_factory=list, description="Sibling hashes, root-ward")
    leaf_index: int = Field(..., ge=0, description="Leaf index")
    leaf: str = Field(..., description="Leaf commitment (32-byte hex)")

    @field_validator('siblings')
    @classmethod
    def validate_siblings(cls, v):
        return [_check_hash32(item) for item in v]

    @field_validator('leaf')
    @classmethod
    def validate_leaf(cls, v):
        return _check_hash32(v)

    class Config:
        json_schema_extra = {
            "example": {
                "siblings": ["0xabcd...", "0xef01..."],
                "leaf_index": 0,
                "leaf": "0x1234...",
            }
        }


class InclusionRequest(BaseModel):
    base_commitment: str = Field(..., description="Base-proof commitment")
    aggregated_commitment: str = Field(..., description="Aggregated-proof commitment")
    path: InclusionPathModel

    @field_validator('base_commitment', 'aggregated_commitment')
    @classmethod
    def validate_commitments(cls, v):
        return _check_hash32(v)


class LeavesRequest(BaseModel):
    leaves: List[str] = Field(..., description="Ordered leaf commitments")

    @field_validator('leaves')
    @classmethod
    def validate_leaves(cls, v):
        return [_check_hash32(item) for item in v]


class PathRequest(LeavesRequest):
    leaf_index: int = Field(..., description="Leaf to prove")


class VerifyRootRequest(LeavesRequest):
    root: str = Field(..., description="Claimed root")

    @field_validator('root')
    @classmethod
    def validate_root(cls, v):
        return _check_hash32(v)


class VerifyPathRequest(BaseModel):
    path: InclusionPathModel
    root: str = Field(..., description="Expected root")

    @field_validator('root')
    @classmethod
    def validate_root(cls, v):
        return _check_hash32(v)


class RootResponse(BaseModel):
    root: str
    leaf_count: int
    depth: int


class VerificationResponse(BaseModel):
    verified: bool


class NonceResponse(BaseModel):
    address: str
    nonce: int

