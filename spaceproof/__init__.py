"""SpaceProof: hash-chained receipts for orbital hardware verification.

Public API:
- Core: Receipt, StopRule, EncodingError, GENESIS
- Anchor: Hasher, dual_hash, merkle_root
- Ledger: ReceiptLedger, VerificationResult, LedgerStore
- Demo: DemoSession
"""

__version__ = "1.0.0"

from .anchor import Hasher, dual_hash, merkle_root
from .core import GENESIS, EncodingError, Receipt, ReceiptFormatError, StopRule
from .demo import DemoSession
from .ledger import (
    ChainIntegrityViolation,
    LedgerStore,
    MerkleAnchor,
    ReceiptLedger,
    VerificationResult,
    verify_export,
)

__all__ = [
    # Core
    "Receipt",
    "StopRule",
    "EncodingError",
    "ReceiptFormatError",
    "GENESIS",
    # Anchor
    "Hasher",
    "dual_hash",
    "merkle_root",
    # Ledger
    "ReceiptLedger",
    "MerkleAnchor",
    "VerificationResult",
    "ChainIntegrityViolation",
    "LedgerStore",
    "verify_export",
    # Demo
    "DemoSession",
    "__version__",
]
