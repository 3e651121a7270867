"""Cryptographic immutability via dual-hash Merkle proofs.

Standalone crypto primitives for SpaceProof.
"""
from .hash import Hasher, canonicalize, default_hasher, dual_hash, hash_chain
from .merkle import build_tree, empty_root, merkle_proof, merkle_root, verify_proof

PROOF_SCHEMA = {
    "item_hash": "str",
    "path": ["str"],
    "indices": ["int"],
    "root": "str",
}

__all__ = [
    "Hasher",
    "canonicalize",
    "default_hasher",
    "dual_hash",
    "hash_chain",
    "merkle_root",
    "empty_root",
    "build_tree",
    "merkle_proof",
    "verify_proof",
    "PROOF_SCHEMA",
]
