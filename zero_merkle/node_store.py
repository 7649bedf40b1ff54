"""Sparse (level, index) -> node storage backed by zero hashes."""

from __future__ import annotations

from zero_merkle.hashing import NodeHasher, compute_zero_hashes


class SparseNodeStore:
    """Stores only the nodes that have been written.

    A node that was never written resolves to the zero hash for its level,
    ``Z[height - level]``.  Entries are only ever added or overwritten.
    Coordinates are not bounds-checked; the tree never asks for nodes
    outside ``0 <= level <= height``, ``0 <= index < 2**level``.
    """

    def __init__(self, height: int, hasher: NodeHasher | None = None) -> None:
        self._height = height
        self._zero_hashes = compute_zero_hashes(height, hasher)
        self._nodes: dict[tuple[int, int], str] = {}

    @property
    def height(self) -> int:
        return self._height

    @property
    def zero_hashes(self) -> list[str]:
        return list(self._zero_hashes)

    def __len__(self) -> int:
        return len(self._nodes)

    def contains(self, level: int, index: int) -> bool:
        return (level, index) in self._nodes

    def set(self, level: int, index: int, value: str) -> None:
        self._nodes[(level, index)] = value

    def get(self, level: int, index: int) -> str:
        node = self._nodes.get((level, index))
        if node is None:
            return self._zero_hashes[self._height - level]
        return node
