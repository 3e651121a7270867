"""Typed receipt emitters and observers.

Each emitter fixes the payload shape for one receipt type and delegates to
ReceiptLedger.append. Printing and logging live in observers, never in the
append path.
"""
import json
import logging

from ..core.constants import (
    DISPLAY_HASH_PREFIX,
    DISPLAY_LINK_PREFIX,
    GENESIS,
    MODE_ORBITAL,
    ORBITAL_TEMP_C,
    RECEIPT_ARTIFACT_GENERATION,
    RECEIPT_COMPONENT_VERIFICATION,
    RECEIPT_LOCATION_PROOF,
    RECEIPT_MODE_SWITCH,
    RECEIPT_ORBITAL_VERIFICATION,
    TERRESTRIAL_TEMP_C,
)
from ..core.receipt import Receipt
from .chain import ReceiptLedger

logger = logging.getLogger("spaceproof.ledger")


def emit_verification_receipt(ledger: ReceiptLedger, result: dict,
                              receipt_type: str = RECEIPT_COMPONENT_VERIFICATION) -> Receipt:
    """Record one entropy verification result."""
    return ledger.append(receipt_type, {
        "component_id": result["component_id"],
        "component_type": result["component_type"],
        "mode": result["mode"],
        "entropy": result["entropy"]["measured"],
        "entropy_noise": result["entropy"]["noise_floor"],
        "threshold": result["threshold"],
        "is_genuine": result["is_genuine"],
        "confidence": result["confidence"],
        "thermal_baseline": result["thermal_baseline"],
        "verification_time_ms": result["verification_time_ms"],
    })


def emit_orbital_verification_receipt(ledger: ReceiptLedger, terrestrial: dict,
                                      orbital: dict, location_proof: dict) -> Receipt:
    """Record a terrestrial vs orbital comparison backed by a location proof."""
    return ledger.append(RECEIPT_ORBITAL_VERIFICATION, {
        "component_id": orbital["component_id"],
        "entropy_terrestrial": terrestrial["entropy"]["measured"],
        "entropy_orbital": orbital["entropy"]["measured"],
        "confidence_terrestrial": terrestrial["confidence"],
        "confidence_orbital": orbital["confidence"],
        "orbital_node": location_proof["ephemeris"]["node_id"],
        "kepler_signature": location_proof["response"],
        "tee_attestation": location_proof["tee_attestation"]["hardware_id"],
        "latency_ms": location_proof["actual_latency_ms"],
        "improvement": {
            "confidence_delta": round(orbital["confidence"] - terrestrial["confidence"], 3),
            "noise_reduction": f"{terrestrial['entropy']['noise_floor']} -> {orbital['entropy']['noise_floor']}",
        },
    })


def emit_mode_switch_receipt(ledger: ReceiptLedger, from_mode: str, to_mode: str,
                             node_info: dict | None = None) -> Receipt:
    node_info = node_info or {}
    baseline = ORBITAL_TEMP_C if to_mode == MODE_ORBITAL else TERRESTRIAL_TEMP_C
    return ledger.append(RECEIPT_MODE_SWITCH, {
        "from_mode": from_mode,
        "to_mode": to_mode,
        "node_id": node_info.get("node_id", "N/A"),
        "altitude_km": node_info.get("altitude_km", 0),
        "thermal_baseline": f"{baseline}C",
        "latency_ms": node_info.get("latency_ms", 0),
    })


def emit_location_proof_receipt(ledger: ReceiptLedger, proof: dict) -> Receipt:
    return ledger.append(RECEIPT_LOCATION_PROOF, {
        "challenge": proof["challenge"],
        "response": proof["response"],
        "altitude_km": proof["altitude_km"],
        "latency_ms": proof["actual_latency_ms"],
        "latency_valid": proof["latency_valid"],
        "tee_attestation": proof["tee_attestation"],
        "ephemeris": proof["ephemeris"],
        "verified": proof["verified"],
    })


def emit_artifact_receipt(ledger: ReceiptLedger, artifact: dict) -> Receipt:
    """Record artifact generation, pinned to the chain state at that moment."""
    return ledger.append(RECEIPT_ARTIFACT_GENERATION, {
        "artifact_type": artifact["type"],
        "component_id": artifact["component_id"],
        "verification_mode": artifact["mode"],
        "confidence": artifact["confidence"],
        "roi_value": artifact["roi_value"],
        "merkle_root": ledger.compute_merkle_root(),
        "receipt_count": len(ledger),
    })


def format_receipt_for_display(receipt: Receipt) -> dict:
    if receipt.prev_hash == GENESIS:
        chain_link = GENESIS
    else:
        chain_link = receipt.prev_hash[:DISPLAY_LINK_PREFIX] + "..."

    return {
        "type": receipt.receipt_type,
        "timestamp": receipt.ts,
        "hash": receipt.payload_hash[:DISPLAY_HASH_PREFIX] + "...",
        "chain_link": chain_link,
    }


def log_receipt(receipt: Receipt) -> None:
    """Ledger observer: one INFO line per receipt, full JSON at DEBUG."""
    logger.info("[RECEIPT] %s %s", receipt.receipt_type, receipt.payload_hash[:DISPLAY_HASH_PREFIX])
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(json.dumps(receipt.to_dict(), sort_keys=True))
