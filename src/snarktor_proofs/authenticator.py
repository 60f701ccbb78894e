"""
Submission Authenticator

This module authorizes base-proof submissions. A submitter signs

    keccak256(abi.encodePacked(uint256 fee, uint256 nonce,
                               bytes32 publicInput, bytes32 verificationKey))

with an EIP-191 personal signature. Binding the signer's current nonce into
the message prevents replay, and binding the fee prevents fee tampering.

The module holds both sides of the scheme: ``sign_submission`` for clients
and ``SubmissionAuthenticator`` for the authority that accepts submissions.
"""

import logging
from typing import Optional, Union

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError
from eth_utils.exceptions import ValidationError
from web3 import Web3

from .commitment.constants import (
    SECP256K1_N,
    SIGNATURE_SIZE_BYTES,
    SIGNATURE_V_VALUES,
    SIGNING_MESSAGE_TYPES,
    UINT256_MAX,
)
from .commitment.utils.hex_helpers import bytes_to_hex, hex_to_bytes, is_hex_string, to_bytes32
from .errors import DuplicateProof, FeeMismatch, InvalidSignature
from .records import ProofRecord
from .store import NONCES_NAMESPACE, PROOFS_NAMESPACE, KeyValueStore, store_errors

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, str]


def normalize_address(identity: str) -> str:
    """
    Normalize an Ethereum address to its EIP-55 checksum form.

    Raises:
        ValueError: If identity is not a 20-byte address
    """
    if not isinstance(identity, str) or not Web3.is_address(identity):
        raise ValueError(f"Invalid address: {identity!r}")
    return Web3.to_checksum_address(identity)


def _check_uint256(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"{name} out of uint256 range: {value}")


def signing_message(
    fee: int,
    nonce: int,
    public_input_commitment: BytesLike,
    verification_key_commitment: BytesLike,
) -> bytes:
    """
    Build the 32-byte message a submitter signs.

    Args:
        fee: Declared fee in wei
        nonce: Signer's current nonce
        public_input_commitment: 32-byte public input commitment
        verification_key_commitment: 32-byte verification key commitment

    Returns:
        keccak256 of the packed fee(32) ++ nonce(32) ++ pi(32) ++ vk(32)

    Raises:
        ValueError: If fee or nonce is outside uint256, or a commitment is not 32 bytes
    """
    _check_uint256("fee", fee)
    _check_uint256("nonce", nonce)
    return bytes(
        Web3.solidity_keccak(
            SIGNING_MESSAGE_TYPES,
            [
                fee,
                nonce,
                to_bytes32(public_input_commitment),
                to_bytes32(verification_key_commitment),
            ],
        )
    )


def sign_message(private_key: Union[str, bytes], message: bytes) -> bytes:
    """Sign a 32-byte message with an EIP-191 personal signature."""
    signed = Account.sign_message(encode_defunct(primitive=message), private_key=private_key)
    return bytes(signed.signature)


def sign_submission(
    private_key: Union[str, bytes],
    fee: int,
    nonce: int,
    public_input_commitment: BytesLike,
    verification_key_commitment: BytesLike,
) -> bytes:
    """
    Produce the signature a client attaches to a base-proof submission.

    Args:
        private_key: Signer's secp256k1 private key
        fee: Declared fee in wei
        nonce: Signer's current nonce (read fresh before every submission)
        public_input_commitment: 32-byte public input commitment
        verification_key_commitment: 32-byte verification key commitment

    Returns:
        65-byte signature r ++ s ++ v

    Examples:
        >>> sig = sign_submission(key, 1000, 0, pi, vk)
        >>> len(sig)
        65
    """
    message = signing_message(fee, nonce, public_input_commitment, verification_key_commitment)
    return sign_message(private_key, message)


def _coerce_signature(signature: BytesLike) -> Optional[bytes]:
    if isinstance(signature, str):
        if not is_hex_string(signature):
            return None
        return hex_to_bytes(signature)
    if isinstance(signature, (bytes, bytearray, memoryview)):
        return bytes(signature)
    return None


def _is_well_formed(signature: bytes) -> bool:
    if len(signature) != SIGNATURE_SIZE_BYTES:
        return False
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    v = signature[64]
    return v in SIGNATURE_V_VALUES and 0 < r < SECP256K1_N and 0 < s < SECP256K1_N


def recover_signer(message: bytes, signature: BytesLike) -> str:
    """
    Recover the checksum address that signed a message.

    Raises:
        ValueError: If the signature is malformed or unrecoverable
    """
    data = _coerce_signature(signature)
    if data is None or not _is_well_formed(data):
        raise ValueError("Malformed signature")
    try:
        return Account.recover_message(encode_defunct(primitive=message), signature=data)
    except (BadSignature, KeyValidationError, ValidationError) as e:
        raise ValueError(f"Unrecoverable signature: {e}") from e


def verify_signature(message: bytes, signature: BytesLike, expected_signer: str) -> bool:
    """
    Check that a signature over message was produced by expected_signer.

    Verification is a predicate: malformed signatures (wrong length, bad v,
    zero r or s, points off the curve) and malformed addresses return False.

    Args:
        message: 32-byte signing message
        signature: 65-byte signature (bytes or 0x hex)
        expected_signer: Claimed signer address

    Returns:
        True if the recovered signer equals expected_signer
    """
    try:
        expected = normalize_address(expected_signer)
        recovered = recover_signer(message, signature)
    except ValueError as e:
        logger.debug(f"Signature rejected: {e}")
        return False
    return recovered == expected


class SubmissionAuthenticator:
    """
    Accepts signed base-proof submissions against an injected store.

    Owns the base-proof and nonce namespaces of the store. Each submission is
    checked and applied in one store transaction: duplicate commitment first,
    then signature over the signer's current nonce, then payment.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def current_nonce(self, identity: str) -> int:
        """Return the next nonce expected from identity (0 if never seen)."""
        address = normalize_address(identity)
        with store_errors("nonce lookup"):
            nonce = self.store.get(NONCES_NAMESPACE, address)
        return nonce or 0

    def submit(
        self,
        commitment: BytesLike,
        public_input_commitment: BytesLike,
        verification_key_commitment: BytesLike,
        fee: int,
        signature: BytesLike,
        submitter: str,
        payment: int,
        proof_data: bytes = b"",
        timestamp: int = 0,
    ) -> ProofRecord:
        """
        Authenticate and persist a base-proof submission.

        Args:
            commitment: 32-byte commitment of the base proof
            public_input_commitment: 32-byte public input commitment
            verification_key_commitment: 32-byte verification key commitment
            fee: Declared fee in wei
            signature: Signature over signing_message(fee, nonce, pi, vk)
            submitter: Claimed signer address
            payment: Amount actually attached to the submission
            proof_data: Canonical proof bytes kept on the record
            timestamp: Acceptance time stamped on the record

        Returns:
            The persisted ProofRecord

        Raises:
            DuplicateProof: If the commitment was already submitted
            InvalidSignature: If the signature does not recover to submitter
            FeeMismatch: If payment differs from fee
            StoreUnavailableError: If the store fails
        """
        _check_uint256("fee", fee)
        key = to_bytes32(commitment)
        pi = to_bytes32(public_input_commitment)
        vk = to_bytes32(verification_key_commitment)
        signature_bytes = _coerce_signature(signature) or b""

        try:
            signer = normalize_address(submitter)
        except ValueError as e:
            raise InvalidSignature(f"Invalid submitter: {e}") from e

        with store_errors("base proof submission"), self.store.transaction():
            if self.store.contains(PROOFS_NAMESPACE, key):
                logger.warning(f"Rejected duplicate proof {bytes_to_hex(key)} from {signer}")
                raise DuplicateProof(f"Proof already submitted: {bytes_to_hex(key)}")

            # Re-read for every attempt, never cached
            nonce = self.store.get(NONCES_NAMESPACE, signer) or 0
            message = signing_message(fee, nonce, pi, vk)
            if not verify_signature(message, signature_bytes, signer):
                logger.warning(f"Rejected proof {bytes_to_hex(key)}: invalid signature for {signer} at nonce {nonce}")
                raise InvalidSignature(f"Invalid signature for {signer}")

            if payment != fee:
                logger.warning(f"Rejected proof {bytes_to_hex(key)}: payment {payment} != fee {fee}")
                raise FeeMismatch(f"Payment {payment} does not match fee {fee}")

            record = ProofRecord(
                commitment=key,
                submitter=signer,
                fee=fee,
                nonce=nonce,
                public_input_commitment=pi,
                verification_key_commitment=vk,
                signature=signature_bytes,
                timestamp=timestamp,
                proof_data=bytes(proof_data),
            )
            if not self.store.put_if_absent(PROOFS_NAMESPACE, key, record):
                raise DuplicateProof(f"Proof already submitted: {bytes_to_hex(key)}")
            self.store.increment(NONCES_NAMESPACE, signer)

        logger.info(f"Accepted proof {bytes_to_hex(key)} from {signer} (nonce {nonce}, fee {fee})")
        return record
