"""Append-only fixed-height Merkle tree that keeps a single proof.

Leaves are written strictly left to right.  The tree stores nothing but
the inclusion proof of the most recently appended leaf (``last_proof``),
so memory is O(height) however many leaves have been appended.

Deriving the new leaf's siblings from the previous proof, level by level
(``L = 0`` is the leaf layer):

- The ancestor index did not change: the old sibling is still valid,
  reuse it.
- The ancestor index changed and is even (left child): its right
  sibling subtree has never been written, so the sibling is ``Z[L]``.
- The ancestor index changed and is odd (right child): its left sibling
  is exactly the previous leaf's ancestor at that level, which is
  recomputed from ``last_proof``.

An append always lands to the right of everything written so far, so it
never needs any other node and no node store is required.

**Thread safety:** none.  Callers must serialize appends on one tree.
"""

from __future__ import annotations

import logging

from zero_merkle.config import check_height, settings
from zero_merkle.errors import ProofVerificationError, TreeFullError
from zero_merkle.hashing import NodeHasher, check_node, compute_zero_hashes, default_hasher
from zero_merkle.schemas import DeltaMerkleProof, MerkleProof
from zero_merkle.verify import (
    compute_merkle_path_from_proof,
    compute_merkle_root_from_proof,
    verify_delta_merkle_proof,
)

logger = logging.getLogger(__name__)


class AppendOnlyMerkleTree:
    """Append-only Merkle tree tracking only the latest leaf's path."""

    def __init__(
        self,
        height: int,
        hasher: NodeHasher | None = None,
        verify_updates: bool | None = None,
    ) -> None:
        self._height = check_height(height)
        self._hasher = hasher or default_hasher()
        self._verify_updates = (
            verify_updates if verify_updates is not None else settings.verify_updates
        )
        self._zero_hashes = compute_zero_hashes(self._height, self._hasher)

        # Before the first append every sibling is a zero hash; index -1
        # marks "no leaf yet".
        self._last_proof = MerkleProof(
            root=self._zero_hashes[self._height],
            siblings=self._zero_hashes[: self._height],
            index=-1,
            value=self._zero_hashes[self._height],
        )
        logger.debug(
            "AppendOnlyMerkleTree created (height=%d, hash=%s)",
            self._height,
            self._hasher.algorithm,
        )

    @property
    def height(self) -> int:
        return self._height

    @property
    def hasher(self) -> NodeHasher:
        return self._hasher

    @property
    def zero_hashes(self) -> list[str]:
        return list(self._zero_hashes)

    @property
    def last_proof(self) -> MerkleProof:
        return self._last_proof

    @property
    def root(self) -> str:
        return self._last_proof.root

    def get_root(self) -> str:
        return self._last_proof.root

    @property
    def size(self) -> int:
        """Number of leaves appended so far."""
        return self._last_proof.index + 1

    @property
    def capacity(self) -> int:
        return 1 << self._height

    def append_leaf(self, value: str) -> DeltaMerkleProof:
        """Append *value* as the next leaf and return the delta proof.

        Raises:
            TreeFullError: all ``2**height`` slots are already used.
            InvalidNodeError: *value* is not a digest-width lowercase hex node.
            ProofVerificationError: self-verification is enabled and the
                resulting delta proof does not verify.
        """
        check_node(value, self._hasher)
        last = self._last_proof
        prev_index = last.index
        new_index = prev_index + 1
        if new_index >= self.capacity:
            logger.warning(
                "Append rejected: tree of height %d is full (%d leaves)",
                self._height,
                self.capacity,
            )
            raise TreeFullError(
                f"append-only tree of height {self._height} is full ({self.capacity} leaves)"
            )

        old_path = compute_merkle_path_from_proof(
            last.siblings, last.index, last.value, self._hasher
        )
        # Appends only ever fill empty slots.
        old_value = self._zero_hashes[0]

        siblings: list[str] = []
        for level in range(self._height):
            prev_level_index = prev_index >> level
            new_level_index = new_index >> level

            if new_level_index == prev_level_index:
                siblings.append(last.siblings[level])
            elif new_level_index % 2 == 0:
                siblings.append(self._zero_hashes[level])
            else:
                siblings.append(old_path[level])

        new_root = compute_merkle_root_from_proof(siblings, new_index, value, self._hasher)
        delta = DeltaMerkleProof(
            index=new_index,
            siblings=siblings,
            old_root=last.root,
            old_value=old_value,
            new_root=new_root,
            new_value=value,
        )

        if self._verify_updates and not verify_delta_merkle_proof(delta, self._hasher):
            logger.error(
                "Delta proof self-verification failed: index=%d old_root=%s new_root=%s",
                new_index,
                last.root[:16] + "...",
                new_root[:16] + "...",
            )
            raise ProofVerificationError(
                f"delta proof for appended leaf {new_index} does not verify; tree left unchanged"
            )

        self._last_proof = MerkleProof(
            root=new_root,
            siblings=siblings,
            index=new_index,
            value=value,
        )
        logger.debug(
            "Leaf %d appended: root %s -> %s",
            new_index,
            last.root[:16] + "...",
            new_root[:16] + "...",
        )
        return delta
