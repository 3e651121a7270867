"""SpaceProof constants and thresholds.

All magic numbers live here. No exceptions.
"""

# Chain
GENESIS = "GENESIS"
DEFAULT_TENANT_ID = "spaceproof_demo"
HASH_ALGORITHMS = ("SHA256", "BLAKE3")
EMPTY_BATCH_SEED = "empty"  # Merkle root of an empty batch is dual_hash(seed)

# Receipt types used by the demo session (open set, never validated)
RECEIPT_DEMO_INIT = "demo_init"
RECEIPT_TERRESTRIAL_VERIFICATION = "terrestrial_verification"
RECEIPT_ORBITAL_VERIFICATION = "orbital_verification"
RECEIPT_COMPONENT_VERIFICATION = "component_verification"
RECEIPT_MODE_SWITCH = "mode_switch"
RECEIPT_LOCATION_PROOF = "location_proof"
RECEIPT_ARTIFACT_GENERATION = "artifact_generation"
RECEIPT_ANCHOR = "anchor"
RECEIPT_DEMO_COMPLETE = "demo_complete"

# Display
DISPLAY_HASH_PREFIX = 24
DISPLAY_LINK_PREFIX = 12

# Entropy model
MODE_TERRESTRIAL = "terrestrial"
MODE_ORBITAL = "orbital"
GENUINE_THRESHOLD = 0.82
TERRESTRIAL_NOISE = 0.08   # datacenter interference
ORBITAL_NOISE = 0.01       # radiative equilibrium
TERRESTRIAL_TEMP_C = 25
ORBITAL_TEMP_C = -270
CONFIDENCE_FLOOR = 0.5
CONFIDENCE_CEILING = 0.999
ORBITAL_LATENCY_MULTIPLIER = 0.6
ORBITAL_THROUGHPUT_MULTIPLIER = 10

# Component population
GENUINE_ENTROPY_RANGE = (0.82, 0.94)
COUNTERFEIT_ENTROPY_RANGE = (0.65, 0.78)
COMPONENT_TYPES = ("CAPACITOR", "RESISTOR", "IC-CHIP", "CONNECTOR", "INDUCTOR")
DEFAULT_GENUINE_COUNT = 80
DEFAULT_COUNTERFEIT_COUNT = 20

# Orbital physics
SPEED_OF_LIGHT_KM_MS = 299.792458
EARTH_RADIUS_KM = 6371
EARTH_MU_KM3_S2 = 398600.4418
FIBER_REFRACTIVE_INDEX = 1.5
DEFAULT_NODE_ID = "ORBITAL-NODE-7"
DEFAULT_NODE_ALTITUDE_KM = 550
DEFAULT_NODE_INCLINATION_DEG = 51.6
DEFAULT_NODE_ECCENTRICITY = 0.0001
LATENCY_TOLERANCE = 0.2     # +/-20% of expected round trip
LATENCY_JITTER_MS = 0.5
RECEIPT_VERIFY_COST_MS = 0.082
P99_MARGIN = 1.1

# Demo artifact
DEMO_VERSION = "1.0"
COMPONENT_FAILURE_COST_USD = 420_000
