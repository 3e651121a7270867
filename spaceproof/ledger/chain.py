"""Append-only, hash-chained receipt ledger.

One ReceiptLedger per session, owned by whoever drives the session and
passed explicitly to anything that appends or queries. Receipts are never
updated or removed; reset() is a whole-session restart, not a correction.
"""
import copy
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterator

from ..anchor.hash import Hasher, default_hasher
from ..anchor.merkle import merkle_root
from ..config import features
from ..core.constants import DEFAULT_TENANT_ID, GENESIS, RECEIPT_ANCHOR
from ..core.receipt import EncodingError, Receipt
from .verify import VerificationResult, chain_stats, verify_chain

logger = logging.getLogger("spaceproof.ledger")

Observer = Callable[[Receipt], object]


@dataclass(frozen=True)
class MerkleAnchor:
    """Checkpoint of chain state, mirrored by an "anchor" receipt."""
    root: str
    batch_size: int
    timestamp: str
    receipt_index: int


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_ts(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class ReceiptLedger:
    """Append-only sequence of receipts, each bound to its predecessor.

    Single writer: append, anchor and reset are serialized by one
    re-entrant lock and a receipt becomes visible only once fully built.
    Observers run under the same lock, so they see receipts in chain order
    and may read the ledger from the callback. Reads
    never lock; they work on the prefix that existed when they started.

    Args:
        tenant_id: Stamped on every receipt
        hasher: Dual hasher (default SHA256:BLAKE3)
        clock: Returns the current timezone-aware datetime
    """

    def __init__(
        self,
        tenant_id: str = DEFAULT_TENANT_ID,
        hasher: Hasher | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.tenant_id = tenant_id
        self.hasher = hasher or default_hasher()
        self._clock = clock or _utc_now
        self._receipts: list[Receipt] = []
        self._anchors: list[MerkleAnchor] = []
        self._observers: list[Observer] = []
        self._last_time: datetime | None = None
        self._lock = threading.RLock()

    # -- observers ---------------------------------------------------------

    def subscribe(self, observer: Observer) -> None:
        """Call observer with every receipt after it is appended."""
        self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self._observers.remove(observer)

    def _notify(self, receipt: Receipt) -> None:
        """Deliver receipt to observers. Caller holds the lock."""
        for observer in list(self._observers):
            observer(receipt)

    # -- writes ------------------------------------------------------------

    def _now(self) -> datetime:
        # Timestamps never go backwards, even if the wall clock does
        now = self._clock()
        if self._last_time is not None and now < self._last_time:
            now = self._last_time
        self._last_time = now
        return now

    def _append(self, receipt_type: str, payload: dict) -> Receipt:
        """Build and store one receipt. Caller holds the lock."""
        if not isinstance(payload, dict):
            raise EncodingError(f"Payload must be a mapping, got {type(payload).__name__}")

        payload_hash = self.hasher.hash(payload)
        prev_hash = self._receipts[-1].payload_hash if self._receipts else GENESIS

        receipt = Receipt(
            receipt_type=receipt_type,
            ts=format_ts(self._now()),
            tenant_id=self.tenant_id,
            payload=copy.deepcopy(payload),
            payload_hash=payload_hash,
            prev_hash=prev_hash,
        )
        self._receipts.append(receipt)
        return receipt

    def append(self, receipt_type: str, payload: dict) -> Receipt:
        """Append a receipt for payload and return it.

        Raises:
            EncodingError: If payload has no canonical serialization. The
                ledger is left untouched.
        """
        with self._lock:
            receipt = self._append(receipt_type, payload)
            self._notify(receipt)
        return receipt

    def anchor(self, receipts: list[Receipt] | None = None) -> Receipt:
        """Checkpoint a batch (default: whole ledger) as an anchor receipt.

        Two anchors over the same batch share merkle_root but never a
        payload_hash: each payload carries its own anchored_at and
        anchor_index.
        """
        with self._lock:
            batch = self._receipts[:] if receipts is None else list(receipts)
            root = self.compute_merkle_root(batch)
            receipt = self._append(RECEIPT_ANCHOR, {
                "merkle_root": root,
                "batch_size": len(batch),
                "hash_algorithms": self.hasher.algorithms,
                "anchored_at": format_ts(self._now()),
                "anchor_index": len(self._anchors),
            })
            self._anchors.append(MerkleAnchor(
                root=root,
                batch_size=len(batch),
                timestamp=receipt.ts,
                receipt_index=len(self._receipts) - 1,
            ))
            self._notify(receipt)
        return receipt

    def reset(self) -> None:
        """Start a new session: drop all receipts and anchors."""
        with self._lock:
            dropped = len(self._receipts)
            self._receipts = []
            self._anchors = []
        logger.info("Ledger reset (%d receipts dropped)", dropped)

    # -- reads -------------------------------------------------------------

    def compute_merkle_root(self, receipts: list[Receipt] | None = None) -> str:
        """Merkle root over payload_hash leaves. Read-only."""
        batch = self._receipts if receipts is None else receipts
        return merkle_root([r.payload_hash for r in batch], self.hasher)

    def verify(self, check_payloads: bool | None = None) -> VerificationResult:
        """Check every chain link and, by default, every payload hash."""
        if check_payloads is None:
            check_payloads = features.FEATURE_PAYLOAD_INTEGRITY_CHECK
        return verify_chain(self._receipts, self.hasher, check_payloads)

    def get_stats(self) -> dict:
        stats = chain_stats(self.receipts, self.hasher, features.FEATURE_PAYLOAD_INTEGRITY_CHECK)
        stats["anchors"] = len(self._anchors)
        stats["tenant_id"] = self.tenant_id
        return stats

    def export_ledger(self) -> list[str]:
        """One JSON line per receipt, in append order."""
        return [r.to_json() for r in self.receipts]

    @property
    def receipts(self) -> tuple[Receipt, ...]:
        return tuple(self._receipts)

    @property
    def anchors(self) -> tuple[MerkleAnchor, ...]:
        return tuple(self._anchors)

    @property
    def last_receipt(self) -> Receipt | None:
        receipts = self._receipts
        return receipts[-1] if receipts else None

    @property
    def is_empty(self) -> bool:
        return not self._receipts

    def __len__(self) -> int:
        return len(self._receipts)

    def __iter__(self) -> Iterator[Receipt]:
        return iter(self.receipts)

    def __getitem__(self, index: int) -> Receipt:
        return self._receipts[index]
