"""
Session Events

Notifications emitted by the aggregation session. They mirror the verifier
contract's events so that an off-chain session and the contract can be
observed the same way.
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable, DefaultDict, Deque, List, Tuple, Type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProofVerified:
    """A base proof was accepted."""
    proof_hash: bytes
    submitter: str
    timestamp: int


@dataclass(frozen=True)
class AggregatedProofSubmitted:
    """An aggregated proof was recorded."""
    aggregated_hash: bytes
    base_proof_count: int


@dataclass(frozen=True)
class MerkleRootValidated:
    """A claimed root matched the root over the included proofs."""
    merkle_root: bytes
    included_proofs: Tuple[bytes, ...]


@dataclass(frozen=True)
class ProofInclusionVerified:
    """An inclusion query was answered."""
    base_proof_hash: bytes
    aggregated_hash: bytes
    verified: bool


Handler = Callable[[object], None]

DEFAULT_HISTORY_SIZE = 1024


class EventEmitter:
    """
    Synchronous in-process event dispatcher.

    Handlers subscribed to an event class are called in subscription order
    whenever an instance of that class is emitted. A handler that raises is
    logged and skipped; the remaining handlers still run and the emitting
    call is unaffected. The most recent ``history_size`` events are kept in
    ``history``.
    """

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE):
        self._handlers: DefaultDict[Type, List[Handler]] = defaultdict(list)
        self.history: Deque[object] = deque(maxlen=history_size)

    def subscribe(self, event_type: Type, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: Type, handler: Handler) -> None:
        self._handlers[event_type].remove(handler)

    def emit(self, event: object) -> None:
        logger.debug(f"Emitting {type(event).__name__}")
        self.history.append(event)
        for handler in list(self._handlers[type(event)]):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Handler {handler!r} failed for {type(event).__name__}")

    def events_of(self, event_type: Type) -> List[object]:
        """Return the retained events of one class, oldest first."""
        return [event for event in self.history if isinstance(event, event_type)]
