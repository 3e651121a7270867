"""Orbital verification node simulator.

Kepler-period ephemeris, light-speed latency, and a timing-based
challenge-response proof of location. Deterministic functions of the
supplied time plus constants; only the challenge nonce and latency jitter
are random.
"""
import math
import random
import secrets
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from .anchor.hash import dual_hash
from .core.constants import (
    DEFAULT_NODE_ALTITUDE_KM,
    DEFAULT_NODE_ECCENTRICITY,
    DEFAULT_NODE_ID,
    DEFAULT_NODE_INCLINATION_DEG,
    EARTH_MU_KM3_S2,
    EARTH_RADIUS_KM,
    FIBER_REFRACTIVE_INDEX,
    LATENCY_JITTER_MS,
    LATENCY_TOLERANCE,
    ORBITAL_TEMP_C,
    P99_MARGIN,
    RECEIPT_VERIFY_COST_MS,
    SPEED_OF_LIGHT_KM_MS,
)


@dataclass(frozen=True)
class OrbitalNode:
    id: str = DEFAULT_NODE_ID
    altitude_km: float = DEFAULT_NODE_ALTITUDE_KM
    inclination_deg: float = DEFAULT_NODE_INCLINATION_DEG
    longitude_deg: float = 0.0
    eccentricity: float = DEFAULT_NODE_ECCENTRICITY
    mean_anomaly_deg: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_NODE = OrbitalNode()


def _iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def calculate_orbital_period(altitude_km: float) -> float:
    """Kepler's third law, T = 2*pi*sqrt(a^3/mu). Returns seconds."""
    a = EARTH_RADIUS_KM + altitude_km
    return 2 * math.pi * math.sqrt(a ** 3 / EARTH_MU_KM3_S2)


def calculate_latency(altitude_km: float) -> float:
    """Round-trip light time straight up and back, in ms."""
    return (altitude_km * 2) / SPEED_OF_LIGHT_KM_MS


def compare_latency(distance_km: float) -> dict:
    """Vacuum vs fiber one-way latency over distance_km."""
    vacuum_ms = distance_km / SPEED_OF_LIGHT_KM_MS
    fiber_ms = distance_km / (SPEED_OF_LIGHT_KM_MS / FIBER_REFRACTIVE_INDEX)

    return {
        "vacuum_ms": vacuum_ms,
        "fiber_ms": fiber_ms,
        "improvement_pct": round((fiber_ms - vacuum_ms) / fiber_ms * 100, 1),
        "formula": f"t_vacuum = t_fiber x (c/n) where n={FIBER_REFRACTIVE_INDEX}",
    }


def get_current_ephemeris(node: OrbitalNode = DEFAULT_NODE,
                          now: datetime | None = None) -> dict:
    """Simplified two-body position at time now (true anomaly ~ mean anomaly)."""
    now = now or datetime.now(timezone.utc)
    period_s = calculate_orbital_period(node.altitude_km)

    elapsed_s = now.timestamp() % period_s
    mean_motion = 360 / period_s
    anomaly = (node.mean_anomaly_deg + elapsed_s * mean_motion) % 360

    lat = node.inclination_deg * math.sin(math.radians(anomaly))
    lon = (node.longitude_deg + anomaly) % 360 - 180

    return {
        "node_id": node.id,
        "timestamp": _iso(now),
        "altitude_km": node.altitude_km,
        "latitude_deg": round(lat, 1),
        "longitude_deg": round(lon, 1),
        "inclination_deg": node.inclination_deg,
        "orbital_period_min": round(period_s / 60, 1),
        "mean_anomaly_deg": round(anomaly, 2),
        "eccentricity": node.eccentricity,
    }


def generate_challenge() -> str:
    """8-byte nonce from the OS CSPRNG, as 0x-prefixed upper hex."""
    return "0x" + secrets.token_hex(8).upper()


def sign_challenge(challenge: str, node: OrbitalNode, now: datetime) -> str:
    return "0x" + dual_hash(f"{challenge}{node.id}{_iso(now)}").split(":")[0][:16].upper()


def generate_tee_attestation(node: OrbitalNode, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    return {
        "hardware_id": f"GPU-ORBIT-{node.id.split('-')[-1]}",
        "manufacturer": "VERIFIED",
        "attestation_type": "orbital_tee",
        "integrity_verified": True,
        "timestamp": _iso(now),
    }


def generate_location_proof(node: OrbitalNode = DEFAULT_NODE,
                            rng: random.Random | None = None,
                            now: datetime | None = None,
                            challenge: str | None = None) -> dict:
    """Challenge-response proof that compute ran at orbital altitude.

    The response is valid when the observed round trip lies within
    +/-20% of the light-time to the node's altitude.
    """
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    challenge = challenge or generate_challenge()

    expected_ms = calculate_latency(node.altitude_km)
    actual_ms = expected_ms + rng.random() * LATENCY_JITTER_MS
    latency_valid = (
        expected_ms * (1 - LATENCY_TOLERANCE) <= actual_ms <= expected_ms * (1 + LATENCY_TOLERANCE)
    )

    return {
        "challenge": challenge,
        "response": sign_challenge(challenge, node, now),
        "expected_latency_ms": round(expected_ms, 1),
        "actual_latency_ms": round(actual_ms, 1),
        "latency_valid": latency_valid,
        "altitude_km": node.altitude_km,
        "ephemeris": get_current_ephemeris(node, now),
        "proof_type": "kepler_signature",
        "tee_attestation": generate_tee_attestation(node, now),
        "verified": latency_valid,
    }


def calculate_receipt_latency(chain_length: int) -> dict:
    """p99 time to walk a receipt chain, fiber vs vacuum links."""
    orbital_ms = chain_length * RECEIPT_VERIFY_COST_MS
    terrestrial_ms = orbital_ms * FIBER_REFRACTIVE_INDEX

    improvement = (terrestrial_ms - orbital_ms) / terrestrial_ms * 100 if terrestrial_ms else 0.0

    return {
        "chain_length": chain_length,
        "terrestrial_p99_ms": round(terrestrial_ms * P99_MARGIN, 1),
        "orbital_p99_ms": round(orbital_ms * P99_MARGIN, 1),
        "improvement_pct": round(improvement),
        "physics": compare_latency(1000),
    }


def link_status_lines(node: OrbitalNode = DEFAULT_NODE, now: datetime | None = None) -> list[str]:
    """Acquisition messages for the mode switch."""
    ephemeris = get_current_ephemeris(node, now)
    latency = calculate_latency(node.altitude_km)

    return [
        f"ACQUIRING {node.id}...",
        f"ORBITAL EPHEMERIS CONFIRMED: {ephemeris['latitude_deg']}N "
        f"{ephemeris['longitude_deg']}E ALT={ephemeris['altitude_km']}km",
        f"THERMAL BASELINE: {ORBITAL_TEMP_C}C (radiative equilibrium)",
        f"LASER LINK ESTABLISHED: {latency:.1f}ms latency",
    ]
