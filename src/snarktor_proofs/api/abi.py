"""
Verifier Contract ABI

JSON ABI of the SNARKtor verifier contract, limited to the functions and
events the contract client uses.
"""

from typing import Any, Dict, List


def _param(name: str, type_: str, **extra: Any) -> Dict[str, Any]:
    return {"name": name, "type": type_, "internalType": type_, **extra}


# struct BaseProof
BASE_PROOF_COMPONENTS = [
    _param("proofHash", "bytes32"),
    _param("user", "address"),
    _param("fee", "uint256"),
    _param("nonce", "uint256"),
    _param("publicInput", "bytes32"),
    _param("verificationKey", "bytes32"),
    _param("signature", "bytes"),
]

# struct MerkleProof
MERKLE_PROOF_COMPONENTS = [
    _param("path", "bytes32[]"),
    _param("index", "uint256"),
    _param("leaf", "bytes32"),
]

# struct AggregatedProof
AGGREGATED_PROOF_COMPONENTS = [
    _param("aggregatedHash", "bytes32"),
    _param("merkleRoot", "bytes32"),
    _param("disabledNodes", "bytes32[]"),
    {"name": "provenData", "type": "tuple[]", "components": BASE_PROOF_COMPONENTS},
    _param("totalFee", "uint256"),
    _param("submitter", "address"),
    _param("timestamp", "uint256"),
]


def _function(
    name: str,
    inputs: List[Dict[str, Any]],
    outputs: List[Dict[str, Any]],
    state_mutability: str,
) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": inputs,
        "outputs": outputs,
        "stateMutability": state_mutability,
    }


def _event(name: str, inputs: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"type": "event", "name": name, "inputs": inputs, "anonymous": False}


SNARKTOR_VERIFIER_ABI: List[Dict[str, Any]] = [
    # Events
    _event("ProofVerified", [
        _param("proofHash", "bytes32", indexed=True),
        _param("submitter", "address", indexed=True),
        _param("timestamp", "uint256", indexed=False),
    ]),
    _event("AggregatedProofSubmitted", [
        _param("aggregatedHash", "bytes32", indexed=True),
        _param("baseProofCount", "uint256", indexed=False),
    ]),
    _event("MerkleRootValidated", [
        _param("merkleRoot", "bytes32", indexed=True),
        _param("includedProofs", "bytes32[]", indexed=False),
    ]),
    _event("ProofInclusionVerified", [
        _param("baseProofHash", "bytes32", indexed=True),
        _param("aggregatedHash", "bytes32", indexed=True),
        _param("verified", "bool", indexed=False),
    ]),

    # Functions
    _function("submitBaseProof", [
        _param("_proofData", "bytes"),
        _param("_publicInput", "bytes32"),
        _param("_verificationKey", "bytes32"),
        _param("_fee", "uint256"),
        _param("_signature", "bytes"),
    ], [], "payable"),
    _function("submitAggregatedProof", [
        _param("_aggregatedProofData", "bytes"),
        _param("_merkleRoot", "bytes32"),
        {"name": "_provenData", "type": "tuple[]", "components": BASE_PROOF_COMPONENTS},
        _param("_disabledNodes", "bytes32[]"),
    ], [], "nonpayable"),
    _function("verifyProofInclusion", [
        _param("_baseProofHash", "bytes32"),
        _param("_aggregatedHash", "bytes32"),
        {"name": "_merkleProof", "type": "tuple", "components": MERKLE_PROOF_COMPONENTS},
    ], [_param("", "bool")], "view"),
    _function("verifyMerkleRoot", [
        _param("_merkleRoot", "bytes32"),
        _param("_proofs", "bytes32[]"),
    ], [_param("", "bool")], "pure"),
    _function("getBaseProof", [
        _param("_proofHash", "bytes32"),
    ], [{"name": "", "type": "tuple", "components": BASE_PROOF_COMPONENTS}], "view"),
    _function("getAggregatedProof", [
        _param("_aggregatedHash", "bytes32"),
    ], [{"name": "", "type": "tuple", "components": AGGREGATED_PROOF_COMPONENTS}], "view"),
    _function("isProofSubmitted", [
        _param("_proofHash", "bytes32"),
    ], [_param("", "bool")], "view"),
    _function("deposit", [], [], "payable"),
    _function("withdraw", [
        _param("_amount", "uint256"),
    ], [], "nonpayable"),
    _function("userBalances", [
        _param("", "address"),
    ], [_param("", "uint256")], "view"),
    _function("userNonces", [
        _param("", "address"),
    ], [_param("", "uint256")], "view"),
]
