"""
REST API for SNARKtor Proofs

This module provides a FastAPI-based REST API over an aggregation session:
proof normalization, base-proof and aggregate submission, inclusion queries,
and stateless Merkle root/path helpers, with full OpenAPI documentation.
"""

import logging
import traceback
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..commitment.merkle import (
    InclusionPath,
    build_root,
    generate_inclusion_path,
    get_tree_depth,
    verify_inclusion_path,
    verify_merkle_root,
)
from ..commitment.normalizer import derive_proof_hash, normalize
from ..commitment.utils.hex_helpers import bytes_to_hex, to_bytes32
from ..config import Settings, log_level_from_env
from ..errors import (
    AggregateNotFound,
    BaseNotFound,
    ContractClientError,
    DuplicateAggregate,
    DuplicateProof,
    EmptyLeafSet,
    FeeMismatch,
    IndexOutOfRange,
    InvalidSignature,
    RootMismatch,
    SnarktorError,
    StoreUnavailableError,
    UnsupportedPayloadFormat,
)
from ..fees import split_fee
from ..models.api_models import (
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
from ..session import AggregationSession
from .contract_client import SnarktorContractClient

# Configure logging
logging.basicConfig(level=log_level_from_env())
logger = logging.getLogger(__name__)

# HTTP status per error kind; subclasses resolve through the MRO
ERROR_STATUS_CODES = {
    UnsupportedPayloadFormat: 400,
    EmptyLeafSet: 400,
    IndexOutOfRange: 400,
    InvalidSignature: 400,
    FeeMismatch: 400,
    RootMismatch: 400,
    DuplicateProof: 409,
    DuplicateAggregate: 409,
    BaseNotFound: 404,
    AggregateNotFound: 404,
    StoreUnavailableError: 503,
    ContractClientError: 502,
}

# Initialize FastAPI app
app = FastAPI(
    title="SNARKtor Proofs API",
    description="""
    Submit base proofs, record aggregated proofs and verify proof inclusion
    against SNARKtor Merkle commitments.

    ## Features
    - **Normalization**: Commit to proofs given as hex blobs or structured objects
    - **Authenticated Submission**: Nonce-bound signatures over fee and input commitments
    - **Aggregation**: Record aggregated proofs after recomputing their Merkle root
    - **Inclusion Queries**: Verify a base proof against a recorded aggregation
    - **Merkle Helpers**: Stateless root, path and verification endpoints

    ## Encoding
    All commitments, roots and signatures are 0x-prefixed hex strings.
    Commitments are keccak-256 digests, identical to those of the verifier contract.
    """,
    version=__version__,
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT"
    }
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global session and contract client instances
session = None
contract_client = None


def get_session() -> AggregationSession:
    """Dependency to get the aggregation session instance."""
    global session
    if session is None:
        session = AggregationSession()
    return session


def get_contract_client() -> Optional[SnarktorContractClient]:
    """Dependency to get the contract client, or None when no contract is configured."""
    global contract_client
    if contract_client is None:
        settings = Settings.from_env()
        if not (settings.rpc_url and settings.contract_address):
            return None
        contract_client = SnarktorContractClient(
            rpc_url=settings.rpc_url,
            contract_address=settings.contract_address,
            private_key=settings.private_key,
            timeout=settings.rpc_timeout,
        )
    return contract_client


def status_code_for(exc: SnarktorError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


@app.exception_handler(SnarktorError)
async def snarktor_error_handler(request, exc: SnarktorError):
    """Handle domain errors."""
    status_code = status_code_for(exc)
    logger.error(f"{type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=str(exc),
            code=exc.code,
            details={"error_type": type(exc).__name__}
        ).model_dump()
    )


@app.exception_handler(ValueError)
async def value_error_handler(request, exc: ValueError):
    """Handle validation errors."""
    logger.error(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=str(exc),
            code="VALIDATION_ERROR",
            details={"error_type": "ValueError"}
        ).model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected errors."""
    logger.error(f"Unexpected error: {exc}\n{traceback.format_exc()}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code="INTERNAL_ERROR",
            details={"error_type": type(exc).__name__}
        ).model_dump()
    )


@app.get("/", response_model=dict)
async def root():
    """API root endpoint with basic information."""
    return {
        "name": "SNARKtor Proofs API",
        "version": __version__,
        "description": "Merkle commitments and inclusion verification for aggregated proofs",
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", response_model=HealthResponse)
async def health_check(client: Optional[SnarktorContractClient] = Depends(get_contract_client)):
    """
    Health check endpoint.

    Reports RPC connectivity when a verifier contract is configured.
    """
    if client is None:
        return HealthResponse(status="healthy", contract_rpc=None, version=__version__)

    connected = client.health_check()
    return HealthResponse(
        status="healthy" if connected else "degraded",
        contract_rpc=connected,
        version=__version__
    )


# ----------------------------------------------------------------------
# Proofs
# ----------------------------------------------------------------------

@app.post("/proofs/normalize", response_model=NormalizeResponse)
async def normalize_proof(request: NormalizeRequest):
    """
    Compute the commitments of a proof payload without submitting it.

    Missing public inputs or verification key commit to the fixed
    "default_public_input" / "default_verification_key" sentinels.
    """
    normalized = normalize(request.payload)
    hashes = derive_proof_hash(request.payload, request.public_inputs, request.verification_key)
    return NormalizeResponse(
        commitment=bytes_to_hex(normalized.commitment),
        size_bytes=len(normalized.canonical_bytes),
        public_input=bytes_to_hex(hashes.public_input_commitment),
        verification_key=bytes_to_hex(hashes.verification_key_commitment),
    )


@app.post("/proofs/base", response_model=ProofRecordResponse, status_code=201)
async def submit_base_proof(
    request: BaseProofRequest,
    session: AggregationSession = Depends(get_session)
):
    """
    Submit a signed base proof.

    The signature must cover (fee, current nonce of the submitter, public
    input commitment, verification key commitment).
    """
    record = session.submit_base_proof(
        proof_data=request.proof_data,
        public_input=request.public_input,
        verification_key=request.verification_key,
        fee=request.fee,
        signature=request.signature,
        submitter=request.submitter,
        payment=request.payment,
    )
    return ProofRecordResponse(**record.to_dict())


@app.get("/proofs/base/{commitment}", response_model=ProofRecordResponse)
async def get_base_proof(commitment: str, session: AggregationSession = Depends(get_session)):
    """Get details of a submitted base proof."""
    return ProofRecordResponse(**session.get_base_proof(commitment).to_dict())


@app.get("/nonces/{address}", response_model=NonceResponse)
async def get_nonce(address: str, session: AggregationSession = Depends(get_session)):
    """Get the nonce the next submission of address must sign over."""
    nonce = session.current_nonce(address)
    return NonceResponse(address=address, nonce=nonce)


# ----------------------------------------------------------------------
# Aggregates
# ----------------------------------------------------------------------

@app.post("/aggregates", response_model=AggregateResponse, status_code=201)
async def submit_aggregate(
    request: AggregateRequest,
    session: AggregationSession = Depends(get_session)
):
    """
    Record an aggregated proof.

    The claimed root must equal the root recomputed over the included base
    proofs, in the order given.
    """
    record = session.submit_aggregate(
        aggregated_payload=request.aggregated_proof,
        claimed_root=request.merkle_root,
        included_records=request.included_proofs,
        disabled_subtree_roots=request.disabled_subtree_roots,
        submitter=request.submitter,
    )
    return AggregateResponse(**record.to_dict())


@app.get("/aggregates/{aggregated_commitment}", response_model=AggregateResponse)
async def get_aggregate(aggregated_commitment: str, session: AggregationSession = Depends(get_session)):
    """Get details of a recorded aggregated proof."""
    return AggregateResponse(**session.get_aggregate(aggregated_commitment).to_dict())


@app.get("/aggregates/{aggregated_commitment}/paths/{base_commitment}", response_model=InclusionPathModel)
async def get_inclusion_path(
    aggregated_commitment: str,
    base_commitment: str,
    session: AggregationSession = Depends(get_session)
):
    """Regenerate the inclusion path of a base proof in a recorded aggregation."""
    path = session.inclusion_path_for(aggregated_commitment, base_commitment)
    return InclusionPathModel(**path.to_dict())


@app.post("/inclusion/verify", response_model=VerificationResponse)
async def verify_inclusion(request: InclusionRequest, session: AggregationSession = Depends(get_session)):
    """Verify that a base proof is included in a recorded aggregation."""
    path = InclusionPath.from_dict(request.path.model_dump())
    verified = session.verify_inclusion(request.base_commitment, request.aggregated_commitment, path)
    return VerificationResponse(verified=verified)


# ----------------------------------------------------------------------
# Stateless helpers
# ----------------------------------------------------------------------

@app.post("/merkle/root", response_model=RootResponse)
async def merkle_root(request: LeavesRequest):
    """Compute the commitment tree root over ordered leaves."""
    root = build_root(request.leaves)
    return RootResponse(
        root=bytes_to_hex(root),
        leaf_count=len(request.leaves),
        depth=get_tree_depth(len(request.leaves)),
    )


@app.post("/merkle/path", response_model=InclusionPathModel)
async def merkle_path(request: PathRequest):
    """Generate the inclusion path of one leaf."""
    path = generate_inclusion_path(request.leaves, request.leaf_index)
    return InclusionPathModel(**path.to_dict())


@app.post("/merkle/verify-root", response_model=VerificationResponse)
async def merkle_verify_root(request: VerifyRootRequest):
    """Check a claimed root against ordered leaves."""
    return VerificationResponse(verified=verify_merkle_root(request.root, request.leaves))


@app.post("/merkle/verify-path", response_model=VerificationResponse)
async def merkle_verify_path(request: VerifyPathRequest):
    """Check an inclusion path against a root."""
    path = InclusionPath.from_dict(request.path.model_dump())
    return VerificationResponse(verified=verify_inclusion_path(path, to_bytes32(request.root)))


@app.get("/fees/split/{total_fee}", response_model=FeeSplitResponse)
async def fee_split(total_fee: int):
    """Split a total fee 40/5/55 between current, inclusion and aggregation shares."""
    return FeeSplitResponse(**split_fee(total_fee).to_dict())


def run_server(host: str = "127.0.0.1", port: int = 8000, dev: bool = False):
    """
    Run the API server.

    Args:
        host: Host to bind to
        port: Port to bind to
        dev: Enable development mode with auto-reload
    """
    logger.info(f"Starting SNARKtor Proofs API server on {host}:{port}")
    uvicorn.run(
        "snarktor_proofs.api.rest_api:app" if dev else app,
        host=host,
        port=port,
        reload=dev,
        log_level=log_level_from_env().lower()
    )


if __name__ == "__main__":
    run_server()
