"""Node hashing and zero-hash precomputation.

Nodes are fixed-width digests carried as lowercase hex strings.  Hashing
two nodes concatenates their *decoded bytes*, never the hex text:

- Parent node:  H(bytes(left) || bytes(right))
- Empty leaf:   all-zero digest of the hash's output width
- Zero hash:    Z[0] = empty leaf, Z[i] = H(Z[i-1], Z[i-1])

``Z[i]`` is the root of a tree of height ``i`` with no leaves set.
"""

from __future__ import annotations

import hashlib
import string
from typing import Callable

from zero_merkle.config import settings
from zero_merkle.errors import InvalidNodeError

HashFn = Callable[[str, str], str]

_HEX_DIGITS = frozenset(string.digits + "abcdef")


class NodeHasher:
    """Combines two nodes into their parent using a ``hashlib`` algorithm.

    Instances are callable as ``hasher(left, right)`` so they can be passed
    anywhere a plain ``HashFn`` is expected.
    """

    def __init__(self, algorithm: str = "sha256") -> None:
        try:
            sample = hashlib.new(algorithm)
        except ValueError as exc:
            raise ValueError(f"unsupported hash algorithm: {algorithm!r}") from exc
        if sample.digest_size == 0 or algorithm.lower().startswith("shake"):
            raise ValueError(f"hash algorithm {algorithm!r} has no fixed digest width")
        self._algorithm = algorithm
        self._digest_size = sample.digest_size
        self._empty_node = "00" * sample.digest_size

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def digest_size(self) -> int:
        return self._digest_size

    @property
    def empty_node(self) -> str:
        """The canonical empty-leaf value, an all-zero digest."""
        return self._empty_node

    def __call__(self, left: str, right: str) -> str:
        h = hashlib.new(self._algorithm)
        h.update(bytes.fromhex(left))
        h.update(bytes.fromhex(right))
        return h.hexdigest()

    def hash_leaf(self, data: bytes) -> str:
        """Hash an arbitrary payload down to a digest-width leaf value."""
        return hashlib.new(self._algorithm, data).hexdigest()

    def encode_int(self, value: int) -> str:
        """Encode a non-negative integer as a big-endian digest-width node."""
        if value < 0:
            raise ValueError(f"cannot encode negative integer {value}")
        return value.to_bytes(self._digest_size, "big").hex()

    def __repr__(self) -> str:
        return f"NodeHasher({self._algorithm!r})"


_default_hashers: dict[str, NodeHasher] = {}


def default_hasher() -> NodeHasher:
    """Return the hasher named by ``settings.hash_algorithm``."""
    algorithm = settings.hash_algorithm
    hasher = _default_hashers.get(algorithm)
    if hasher is None:
        hasher = _default_hashers[algorithm] = NodeHasher(algorithm)
    return hasher


def compute_zero_hashes(height: int, hasher: NodeHasher | None = None) -> list[str]:
    """Return ``Z[0..height]``, the empty-subtree value at every height."""
    if height < 0:
        raise ValueError(f"height must be non-negative, got {height}")
    hasher = hasher or default_hasher()
    current = hasher.empty_node
    zero_hashes = [current]
    for _ in range(height):
        current = hasher(current, current)
        zero_hashes.append(current)
    return zero_hashes


def check_node(value: str, hasher: NodeHasher) -> str:
    """Raise InvalidNodeError unless *value* is a canonical node for *hasher*."""
    if not isinstance(value, str):
        raise InvalidNodeError(f"node must be a hex string, got {type(value).__name__}")
    width = 2 * hasher.digest_size
    if len(value) != width:
        raise InvalidNodeError(
            f"node must be {width} hex characters, got {len(value)}: {value[:16]!r}"
        )
    if not _HEX_DIGITS.issuperset(value):
        raise InvalidNodeError(f"node must be lowercase hex: {value[:16]!r}...")
    return value
