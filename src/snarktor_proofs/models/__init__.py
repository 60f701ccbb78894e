"""
API Models Package

This package contains request and response models for the SNARKtor proof API.
It includes Pydantic models for validation and serialization of:

- Proof submissions and records (base and aggregated)
- Merkle roots, inclusion paths and verification results
- Error responses and status models

Usage:
    from snarktor_proofs.models import BaseProofRequest, InclusionPathModel

    path = InclusionPathModel(siblings=[], leaf_index=0, leaf="0x" + "11" * 32)
"""

from .api_models import (
    AggregateRequest,
    AggregateResponse,
    BaseProofRequest,
    ErrorResponse,
    FeeSplitResponse,
    HealthResponse,
    InclusionPathModel,
    InclusionRequest,
    LeavesRequest,
    NonceResponse,
    NormalizeRequest,
    NormalizeResponse,
    PathRequest,
    ProofRecordResponse,
    RootResponse,
    VerificationResponse,
    VerifyPathRequest,
    VerifyRootRequest,
)

__all__ = [
    "AggregateRequest",
    "AggregateResponse",
    "BaseProofRequest",
    "ErrorResponse",
    "FeeSplitResponse",
    "HealthResponse",
    "InclusionPathModel",
    "InclusionRequest",
    "LeavesRequest",
    "NonceResponse",
    "NormalizeRequest",
    "NormalizeResponse",
    "PathRequest",
    "ProofRecordResponse",
    "RootResponse",
    "VerificationResponse",
    "VerifyPathRequest",
    "VerifyRootRequest",
]
