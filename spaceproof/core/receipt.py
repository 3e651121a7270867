"""Core receipt primitives shared by every SpaceProof module.

Classes:
    Receipt: Immutable, hash-chained record of one event
    StopRule: Exception for stoprule triggers
    EncodingError: Payload cannot be canonically serialized
    ReceiptFormatError: Serialized receipt cannot be parsed back

Functions:
    parse_receipt_line: Parse one exported JSONL line into a Receipt
"""
import json
from dataclasses import asdict, dataclass

RECEIPT_FIELDS = ("receipt_type", "ts", "tenant_id", "payload", "payload_hash", "prev_hash")


class StopRule(Exception):
    """Raised when stoprule triggers. Never catch silently."""
    pass


class EncodingError(StopRule, ValueError):
    """Raised when a payload has no canonical serialization."""
    pass


class ReceiptFormatError(StopRule, ValueError):
    """Raised when a serialized receipt is malformed."""
    pass


@dataclass(frozen=True)
class Receipt:
    """One immutable, hash-chained ledger entry.

    Attributes:
        receipt_type: Open-ended event tag (e.g. "mode_switch", "anchor")
        ts: ISO-8601 UTC timestamp recorded at append time
        tenant_id: Ledger-wide tenant identifier
        payload: Caller data, stored verbatim and never interpreted. The
            ledger keeps a private deep copy, but the dict returned here
            is that copy, not a read-only view: editing it in place is an
            out-of-band tamper that only verify with payload checks sees
        payload_hash: Dual hash of payload alone
        prev_hash: payload_hash of the preceding receipt, or GENESIS
    """
    receipt_type: str
    ts: str
    tenant_id: str
    payload: dict
    payload_hash: str
    prev_hash: str

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        """Serialize as one compact JSON line with sorted keys."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict) -> "Receipt":
        """Rebuild a Receipt from its serialized form.

        Raises:
            ReceiptFormatError: If a field is missing or has the wrong shape
        """
        if not isinstance(data, dict):
            raise ReceiptFormatError("Receipt must be a JSON object")

        missing = [name for name in RECEIPT_FIELDS if name not in data]
        if missing:
            raise ReceiptFormatError(f"Missing required field(s): {', '.join(missing)}")

        for name in RECEIPT_FIELDS:
            expected = dict if name == "payload" else str
            if not isinstance(data[name], expected):
                raise ReceiptFormatError(
                    f"Field {name} must be {expected.__name__}, got {type(data[name]).__name__}"
                )

        return cls(**{name: data[name] for name in RECEIPT_FIELDS})


def parse_receipt_line(line: str) -> Receipt:
    """Parse one line of a JSONL ledger export.

    Raises:
        ReceiptFormatError: On invalid JSON or a malformed receipt
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise ReceiptFormatError(f"Invalid JSON: {e}") from e
    except RecursionError as e:
        raise ReceiptFormatError("Receipt nesting too deep") from e
    return Receipt.from_dict(data)
