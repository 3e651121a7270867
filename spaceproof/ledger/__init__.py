"""Ledger module: hash-chained receipts with Merkle anchoring."""
from .chain import MerkleAnchor, ReceiptLedger
from .emit import (
    emit_artifact_receipt,
    emit_location_proof_receipt,
    emit_mode_switch_receipt,
    emit_orbital_verification_receipt,
    emit_verification_receipt,
    format_receipt_for_display,
    log_receipt,
)
from .store import LedgerStore
from .verify import (
    VERIFY_SCHEMA,
    ChainIntegrityViolation,
    VerificationResult,
    chain_stats,
    verify_chain,
    verify_export,
)

__all__ = [
    "ReceiptLedger",
    "MerkleAnchor",
    "LedgerStore",
    "ChainIntegrityViolation",
    "VerificationResult",
    "verify_chain",
    "chain_stats",
    "verify_export",
    "VERIFY_SCHEMA",
    "emit_verification_receipt",
    "emit_orbital_verification_receipt",
    "emit_mode_switch_receipt",
    "emit_location_proof_receipt",
    "emit_artifact_receipt",
    "format_receipt_for_display",
    "log_receipt",
]
