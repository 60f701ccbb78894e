"""
Proof Normalizer

This module turns a proof payload from any supported proving system into a
canonical byte sequence and its 32-byte commitment. Three payload shapes are
supported, each with its own explicit variant:

- RawBytesPayload: raw proof bytes, hashed as-is
- HexPayload: a 0x-prefixed hex string, decoded then hashed
- StructuredPayload: a key-value object (snarkjs-style output), whose
  "proof", "publicSignals" and "vk" fields are serialized in that order

Anything else is rejected with UnsupportedPayloadFormat.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from ..errors import UnsupportedPayloadFormat
from .constants import (
    DEFAULT_PUBLIC_INPUT_SENTINEL,
    DEFAULT_VERIFICATION_KEY_SENTINEL,
    STRUCTURED_PROOF_FIELDS,
)
from .hashing import canonical_json, keccak256, keccak_text
from .utils.hex_helpers import bytes_to_hex, hex_to_bytes, is_hex_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawBytesPayload:
    """Proof given as raw bytes."""
    data: bytes


@dataclass(frozen=True)
class HexPayload:
    """Proof given as a 0x-prefixed hex string."""
    text: str


@dataclass(frozen=True)
class StructuredPayload:
    """Proof given as a key-value object."""
    fields: Mapping[str, Any] = field(default_factory=dict)


Payload = Union[RawBytesPayload, HexPayload, StructuredPayload]


@dataclass(frozen=True)
class NormalizedProof:
    """Canonical form of a proof payload."""
    commitment: bytes
    canonical_bytes: bytes
    structured_echo: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class ProofHashes:
    """The three commitments bound by a base-proof submission."""
    commitment: bytes
    public_input_commitment: bytes
    verification_key_commitment: bytes


@dataclass(frozen=True)
class StandardizedSubmission:
    """A proof payload prepared for submission as a base proof."""
    canonical_bytes: bytes
    commitment: bytes
    public_input_commitment: bytes
    verification_key_commitment: bytes
    fee: int
    original: Any

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proof_data": bytes_to_hex(self.canonical_bytes),
            "commitment": bytes_to_hex(self.commitment),
            "public_input": bytes_to_hex(self.public_input_commitment),
            "verification_key": bytes_to_hex(self.verification_key_commitment),
            "fee": self.fee,
        }


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of validate_structure."""
    ok: bool
    commitment: Optional[bytes] = None
    size_bytes: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.ok:
            return {"ok": False, "error": self.error}
        return {
            "ok": True,
            "commitment": bytes_to_hex(self.commitment),
            "size_bytes": self.size_bytes,
        }


def as_payload(value: Any) -> Payload:
    """
    Classify a plain Python value as one of the payload variants.

    Args:
        value: bytes-like object, hex string, mapping, or an existing variant

    Returns:
        The matching payload variant

    Raises:
        UnsupportedPayloadFormat: For None, booleans, numbers, sequences,
            callables and any other type

    Examples:
        >>> as_payload(b"\\x01")
        RawBytesPayload(data=b'\\x01')
        >>> as_payload({"proof": "0xab"})
        StructuredPayload(fields={'proof': '0xab'})
    """
    if isinstance(value, (RawBytesPayload, HexPayload, StructuredPayload)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return RawBytesPayload(bytes(value))
    if isinstance(value, str):
        return HexPayload(value)
    if isinstance(value, Mapping):
        return StructuredPayload(dict(value))
    raise UnsupportedPayloadFormat(
        f"Unsupported proof data format: {type(value).__name__}"
    )


def _render_json(value: Any) -> str:
    try:
        return canonical_json(value)
    except (TypeError, ValueError) as e:
        raise UnsupportedPayloadFormat(f"Cannot serialize proof component: {e}") from e


def _structured_bytes(fields: Mapping[str, Any]) -> bytes:
    components = []
    for name in STRUCTURED_PROOF_FIELDS:
        value = fields.get(name)
        if value is None or value == "":
            continue
        if name == "proof" and isinstance(value, str):
            # String proofs are concatenated verbatim
            components.append(value)
        else:
            components.append(_render_json(value))

    # No known fields: commit to the whole object
    if not components:
        components.append(_render_json(dict(fields)))

    return "".join(components).encode("utf-8")


def canonical_bytes(payload: Payload) -> bytes:
    """
    Compute the canonical byte form of a payload variant.

    Args:
        payload: A payload variant (see as_payload)

    Returns:
        Canonical bytes

    Raises:
        UnsupportedPayloadFormat: If a hex payload is not valid hex or a
            structured payload holds values JSON cannot represent
    """
    if isinstance(payload, RawBytesPayload):
        return bytes(payload.data)

    if isinstance(payload, HexPayload):
        if not is_hex_string(payload.text):
            raise UnsupportedPayloadFormat(
                "String proof data must be a 0x-prefixed hex string"
            )
        return hex_to_bytes(payload.text)

    if isinstance(payload, StructuredPayload):
        return _structured_bytes(payload.fields)

    raise UnsupportedPayloadFormat(
        f"Unsupported proof data format: {type(payload).__name__}"
    )


def normalize(payload: Any) -> NormalizedProof:
    """
    Normalize a proof payload into its canonical bytes and commitment.

    Args:
        payload: Raw bytes, 0x-prefixed hex string or structured object

    Returns:
        NormalizedProof with commitment = keccak256(canonical_bytes); the
        structured echo holds the original object for structured payloads

    Raises:
        UnsupportedPayloadFormat: If the payload cannot be normalized

    Examples:
        >>> normalize("0x1234").canonical_bytes
        b'\\x124'
    """
    variant = as_payload(payload)
    data = canonical_bytes(variant)
    echo = variant.fields if isinstance(variant, StructuredPayload) else None
    return NormalizedProof(commitment=keccak256(data), canonical_bytes=data, structured_echo=echo)


def commit_optional(value: Any, sentinel: str) -> bytes:
    """
    Commit to an optional input, falling back to a fixed sentinel.

    Args:
        value: JSON-compatible value, or None when the caller omitted it
        sentinel: Literal hashed in place of a missing value

    Returns:
        keccak256 of the canonical JSON of value, or of the sentinel
    """
    if value is None:
        return keccak_text(sentinel)
    return keccak_text(_render_json(value))


def derive_proof_hash(
    payload: Any,
    public_inputs: Any = None,
    verification_key: Any = None,
) -> ProofHashes:
    """
    Derive the proof, public-input and verification-key commitments.

    Args:
        payload: Proof payload accepted by normalize
        public_inputs: Optional public inputs (any JSON-compatible value)
        verification_key: Optional verification key (any JSON-compatible value)

    Returns:
        ProofHashes; missing inputs commit to "default_public_input" and
        "default_verification_key" respectively
    """
    normalized = normalize(payload)
    return ProofHashes(
        commitment=normalized.commitment,
        public_input_commitment=commit_optional(public_inputs, DEFAULT_PUBLIC_INPUT_SENTINEL),
        verification_key_commitment=commit_optional(
            verification_key, DEFAULT_VERIFICATION_KEY_SENTINEL
        ),
    )


def standardize_proof_submission(
    payload: Any,
    public_inputs: Any = None,
    verification_key: Any = None,
    fee: int = 0,
) -> StandardizedSubmission:
    """
    Prepare a proof from any supported format for base-proof submission.

    Args:
        payload: Proof payload accepted by normalize
        public_inputs: Optional public inputs
        verification_key: Optional verification key
        fee: Fee to attach to the submission

    Returns:
        StandardizedSubmission carrying canonical bytes, all commitments,
        the fee and the original payload
    """
    normalized = normalize(payload)
    logger.debug(f"Standardized proof {bytes_to_hex(normalized.commitment)} ({len(normalized.canonical_bytes)} bytes)")
    return StandardizedSubmission(
        canonical_bytes=normalized.canonical_bytes,
        commitment=normalized.commitment,
        public_input_commitment=commit_optional(public_inputs, DEFAULT_PUBLIC_INPUT_SENTINEL),
        verification_key_commitment=commit_optional(
            verification_key, DEFAULT_VERIFICATION_KEY_SENTINEL
        ),
        fee=fee,
        original=normalized.structured_echo if normalized.structured_echo is not None else payload,
    )


def validate_structure(payload: Any) -> ValidationReport:
    """
    Check whether a payload can be normalized, reporting instead of raising.

    Args:
        payload: Candidate proof payload

    Returns:
        ValidationReport with the commitment and canonical size on success,
        or the failure message
    """
    try:
        normalized = normalize(payload)
    except UnsupportedPayloadFormat as e:
        return ValidationReport(ok=False, error=str(e))
    return ValidationReport(
        ok=True,
        commitment=normalized.commitment,
        size_bytes=len(normalized.canonical_bytes),
    )
