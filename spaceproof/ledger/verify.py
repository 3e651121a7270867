"""Chain integrity verification.

Tampering is reported as a result value, never raised: a ledger with a
broken chain must stay queryable so the break can be reported.
"""
from dataclasses import asdict, dataclass
from typing import Iterable, Sequence

from ..anchor.hash import Hasher, default_hasher
from ..anchor.merkle import merkle_root
from ..core.constants import GENESIS
from ..core.receipt import EncodingError, Receipt, parse_receipt_line

VIOLATION_LINK = "link"
VIOLATION_PAYLOAD = "payload"

VERIFY_SCHEMA = {
    "required": ["valid", "total_receipts", "merkle_root", "violation"],
    "properties": {
        "valid": {"type": "boolean"},
        "total_receipts": {"type": "integer"},
        "merkle_root": {"type": ["string", "null"]},
        "violation": {"type": ["object", "null"]},
    },
}


@dataclass(frozen=True)
class ChainIntegrityViolation:
    """First point where the chain stops proving itself.

    kind is "link" when prev_hash does not match the previous payload_hash
    (or GENESIS at index 0), "payload" when the stored payload_hash does not
    match a fresh hash of the stored payload.
    """
    index: int
    kind: str
    expected: str
    found: str

    @property
    def message(self) -> str:
        if self.kind == VIOLATION_PAYLOAD:
            return f"Payload tampered at index {self.index}"
        return f"Chain break at index {self.index}"


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    total_receipts: int
    merkle_root: str | None = None
    violation: ChainIntegrityViolation | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        if self.violation is not None:
            data["violation"]["message"] = self.violation.message
        return data


def _payload_violation(index: int, receipt: Receipt, hasher: Hasher) -> ChainIntegrityViolation | None:
    try:
        recomputed = hasher.hash(receipt.payload)
    except EncodingError as e:
        return ChainIntegrityViolation(index, VIOLATION_PAYLOAD, f"unencodable payload: {e}", receipt.payload_hash)
    if recomputed != receipt.payload_hash:
        return ChainIntegrityViolation(index, VIOLATION_PAYLOAD, recomputed, receipt.payload_hash)
    return None


def verify_chain(
    receipts: Sequence[Receipt],
    hasher: Hasher | None = None,
    check_payloads: bool = True,
) -> VerificationResult:
    """Walk receipts once and report the first integrity violation.

    Args:
        receipts: Receipts in append order
        hasher: Hasher the chain was built with
        check_payloads: Also recompute each payload_hash from its payload

    Returns:
        VerificationResult; on success carries the Merkle root of the chain
    """
    hasher = hasher or default_hasher()
    total = len(receipts)

    for i in range(total):
        receipt = receipts[i]

        if check_payloads:
            violation = _payload_violation(i, receipt, hasher)
            if violation is not None:
                return VerificationResult(False, total, None, violation)

        expected = GENESIS if i == 0 else receipts[i - 1].payload_hash
        if receipt.prev_hash != expected:
            violation = ChainIntegrityViolation(i, VIOLATION_LINK, expected, receipt.prev_hash)
            return VerificationResult(False, total, None, violation)

    root = merkle_root([receipts[i].payload_hash for i in range(total)], hasher)
    return VerificationResult(True, total, root, None)


def verify_export(
    lines: Iterable[str],
    hasher: Hasher | None = None,
    check_payloads: bool = True,
) -> VerificationResult:
    """Replay a JSONL export through verify_chain.

    Raises:
        ReceiptFormatError: If a non-blank line is not a valid receipt
    """
    receipts = [parse_receipt_line(line) for line in lines if line.strip()]
    return verify_chain(receipts, hasher, check_payloads)


def chain_stats(
    receipts: Sequence[Receipt],
    hasher: Hasher | None = None,
    check_payloads: bool = True,
) -> dict:
    """Aggregate counts, root and validity over a receipt sequence."""
    hasher = hasher or default_hasher()
    by_type: dict[str, int] = {}
    for receipt in receipts:
        by_type[receipt.receipt_type] = by_type.get(receipt.receipt_type, 0) + 1

    return {
        "total_receipts": len(receipts),
        "by_type": by_type,
        "last_receipt_ts": receipts[-1].ts if receipts else None,
        "merkle_root": merkle_root([r.payload_hash for r in receipts], hasher),
        "chain_valid": verify_chain(receipts, hasher, check_payloads).valid,
    }
