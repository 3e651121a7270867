"""Core subpackage for SpaceProof receipt primitives.

Exports all from receipt.py and constants.py.
"""
from .receipt import (
    EncodingError,
    Receipt,
    ReceiptFormatError,
    StopRule,
    parse_receipt_line,
)
from .constants import (
    DEFAULT_TENANT_ID,
    EMPTY_BATCH_SEED,
    GENESIS,
    HASH_ALGORITHMS,
)

__all__ = [
    # Receipt primitives
    "Receipt",
    "parse_receipt_line",
    "StopRule",
    "EncodingError",
    "ReceiptFormatError",
    # Constants
    "GENESIS",
    "DEFAULT_TENANT_ID",
    "HASH_ALGORITHMS",
    "EMPTY_BATCH_SEED",
]
