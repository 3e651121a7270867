"""Merkle tree operations over dual-hash leaves.

Leaves are digest strings (a receipt's payload_hash). Odd levels duplicate
their last element at every level, and the fold always runs at least once,
so a single leaf h has root hash_chain(h, h).
"""
from ..core.constants import EMPTY_BATCH_SEED
from .hash import Hasher, default_hasher


def _fold(level: list[str], hasher: Hasher) -> list[str]:
    """Combine one level into the next. Pads odd counts in place."""
    if len(level) % 2 == 1:
        level.append(level[-1])
    return [hasher.hash_chain(level[i], level[i + 1]) for i in range(0, len(level), 2)]


def empty_root(hasher: Hasher | None = None) -> str:
    """Fixed, well-known root of an empty batch."""
    return (hasher or default_hasher()).hash(EMPTY_BATCH_SEED)


def merkle_root(leaves: list[str], hasher: Hasher | None = None) -> str:
    """Compute Merkle root from a list of leaf digests.

    - Empty list: dual_hash("empty")
    - Odd count at any level: duplicate last hash
    - Pairwise hash_chain until single root

    Args:
        leaves: Leaf digests in order
        hasher: Hasher to use (default SHA256:BLAKE3)

    Returns:
        Merkle root as dual-hash string
    """
    hasher = hasher or default_hasher()
    if not leaves:
        return empty_root(hasher)

    level = list(leaves)
    while True:
        level = _fold(level, hasher)
        if len(level) == 1:
            return level[0]


def build_tree(leaves: list[str], hasher: Hasher | None = None) -> dict:
    """Build full Merkle tree structure for proof generation.

    Returns:
        dict with root, levels (leaves first, root last), and leaves
    """
    hasher = hasher or default_hasher()
    if not leaves:
        return {"root": empty_root(hasher), "levels": [], "leaves": []}

    levels = [list(leaves)]
    current = list(leaves)
    while True:
        current = _fold(current, hasher)
        levels.append(current[:])
        if len(current) == 1:
            break

    return {"root": current[0], "levels": levels, "leaves": list(leaves)}


def merkle_proof(leaf: str, leaves: list[str], hasher: Hasher | None = None) -> dict:
    """Generate inclusion proof for leaf.

    Returns:
        dict with item_hash, path (sibling hashes), indices (0=left, 1=right), root

    Raises:
        ValueError: If leaf not found in leaves
    """
    tree = build_tree(leaves, hasher)
    if leaf not in tree["leaves"]:
        raise ValueError("Item not in tree")

    idx = tree["leaves"].index(leaf)
    path = []
    indices = []

    for level in tree["levels"][:-1]:
        level_copy = level[:]
        if len(level_copy) % 2 == 1:
            level_copy.append(level_copy[-1])

        path.append(level_copy[idx ^ 1])
        indices.append(idx % 2)
        idx //= 2

    return {
        "item_hash": leaf,
        "path": path,
        "indices": indices,
        "root": tree["root"],
    }


def verify_proof(proof: dict, root: str, hasher: Hasher | None = None) -> bool:
    """Recompute root from item_hash and proof path, compare to expected root."""
    hasher = hasher or default_hasher()
    current = proof.get("item_hash", "")

    for sibling, position in zip(proof.get("path", []), proof.get("indices", [])):
        if position == 0:
            current = hasher.hash_chain(current, sibling)
        else:
            current = hasher.hash_chain(sibling, current)

    return current == root
