"""Dual-hash cryptographic primitive. Belt and suspenders.

Every digest is "{algo_a}:{algo_b}" over the same canonical bytes, so a
forgery needs simultaneous collisions in two unrelated algorithms.
"""
import hashlib
import json
import math
from typing import Any, Callable

import blake3

from ..core.constants import HASH_ALGORITHMS
from ..core.receipt import EncodingError

DEFAULT_ALGORITHMS: tuple[tuple[str, Callable], ...] = (
    (HASH_ALGORITHMS[0], hashlib.sha256),
    (HASH_ALGORITHMS[1], blake3.blake3),
)


def _canonical(value: Any, seen: set[int]) -> Any:
    """Validate value recursively and return a copy with sorted mappings."""
    if value is None or isinstance(value, (bool, str, int)):
        return value

    if isinstance(value, float):
        if not math.isfinite(value):
            raise EncodingError(f"Non-finite number cannot be serialized: {value!r}")
        return value

    if isinstance(value, (dict, list, tuple)):
        marker = id(value)
        if marker in seen:
            raise EncodingError("Circular reference detected in payload")
        seen.add(marker)
        try:
            if isinstance(value, dict):
                for key in value:
                    if not isinstance(key, str):
                        raise EncodingError(f"Mapping keys must be strings, got {type(key).__name__}")
                return {key: _canonical(value[key], seen) for key in sorted(value)}
            return [_canonical(item, seen) for item in value]
        finally:
            seen.discard(marker)

    raise EncodingError(f"Unsupported payload type: {type(value).__name__}")


def canonicalize(data: Any) -> bytes:
    """Return the canonical byte form of data.

    bytes pass through and str is UTF-8 encoded verbatim. Anything else must
    be JSON-compatible and is serialized with sorted keys and compact
    separators, so key insertion order never affects the result.

    Raises:
        EncodingError: Non-finite floats, cycles, non-string keys,
            unsupported types, unencodable text (lone surrogates), or
            nesting deeper than the interpreter can walk
    """
    if isinstance(data, bytes):
        return data

    try:
        if isinstance(data, str):
            return data.encode("utf-8")

        canonical = _canonical(data, set())
        return json.dumps(
            canonical,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        ).encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(f"Payload text is not valid UTF-8: {e.reason}") from e
    except RecursionError as e:
        raise EncodingError("Payload nesting too deep") from e


class Hasher:
    """Compound digest over two independent hash algorithms.

    Args:
        algorithms: Two (name, constructor) pairs. Each constructor takes
            bytes and returns an object with hexdigest(). Defaults to
            SHA256 and BLAKE3.
    """

    def __init__(self, algorithms: list[tuple[str, Callable]] | None = None):
        algorithms = tuple(algorithms or DEFAULT_ALGORITHMS)
        if len(algorithms) != 2:
            raise ValueError(f"Dual hash needs exactly 2 algorithms, got {len(algorithms)}")
        if algorithms[0][0] == algorithms[1][0]:
            raise ValueError("Dual hash algorithms must be distinct")
        self._algorithms = algorithms

    @property
    def algorithms(self) -> list[str]:
        return [name for name, _ in self._algorithms]

    def digest(self, data: bytes) -> str:
        return ":".join(factory(data).hexdigest() for _, factory in self._algorithms)

    def hash(self, payload: Any) -> str:
        """Dual hash of payload's canonical form. Pure function."""
        return self.digest(canonicalize(payload))

    def hash_chain(self, left: str, right: str) -> str:
        """Combine two digests by hashing their concatenation."""
        return self.digest((left + right).encode("utf-8"))


_default_hasher = Hasher()


def default_hasher() -> Hasher:
    return _default_hasher


def dual_hash(data: Any) -> str:
    """SHA256:BLAKE3 - ALWAYS use this, never single hash.

    Returns format: "{sha256}:{blake3}"
    """
    return _default_hasher.hash(data)


def hash_chain(left: str, right: str) -> str:
    return _default_hasher.hash_chain(left, right)
