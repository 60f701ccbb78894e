"""
Verifier Contract Integration Package

This package connects the commitment library to the outside world. It includes:

- SnarktorContractClient: web3 client for the on-chain verifier contract
- SNARKTOR_VERIFIER_ABI: the contract ABI used by the client
- rest_api: FastAPI application over an aggregation session (imported on demand)

Usage:
    from snarktor_proofs.api import SnarktorContractClient

    client = SnarktorContractClient()
    nonce = client.get_user_nonce("0x...")
"""

from .abi import SNARKTOR_VERIFIER_ABI
from .contract_client import SnarktorContractClient

__all__ = [
    'SNARKTOR_VERIFIER_ABI',
    'SnarktorContractClient',
]
