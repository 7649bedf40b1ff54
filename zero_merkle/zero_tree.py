"""Sparse, randomly addressable fixed-height Merkle tree.

Every one of the ``2**height`` leaf slots can be set independently; slots
that were never set hold the empty leaf, and every untouched subtree
resolves to its zero hash.  Only nodes on paths that were actually
written are stored.

Each ``set_leaf`` returns a ``DeltaMerkleProof`` that a verifier holding
only the previous root can check with ``verify_delta_merkle_proof``.

**Thread safety:** none.  Callers must serialize mutations of a single
tree; returned proofs are immutable and safe to share.
"""

from __future__ import annotations

import logging

from zero_merkle.config import check_height, settings
from zero_merkle.errors import LeafIndexError, ProofVerificationError
from zero_merkle.hashing import NodeHasher, check_node, default_hasher
from zero_merkle.node_store import SparseNodeStore
from zero_merkle.schemas import DeltaMerkleProof, MerkleProof
from zero_merkle.verify import verify_delta_merkle_proof

logger = logging.getLogger(__name__)


class ZeroMerkleTree:
    """Sparse Merkle tree with zero-hash defaults.

    Level 0 is the root and level ``height`` is the leaf layer.
    """

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
        self._store = SparseNodeStore(self._height, self._hasher)
        logger.debug(
            "ZeroMerkleTree created (height=%d, hash=%s)", self._height, self._hasher.algorithm
        )

    @property
    def height(self) -> int:
        return self._height

    @property
    def hasher(self) -> NodeHasher:
        return self._hasher

    @property
    def root(self) -> str:
        return self._store.get(0, 0)

    def get_root(self) -> str:
        return self._store.get(0, 0)

    def get_leaf(self, index: int) -> str:
        self._check_index(index)
        return self._store.get(self._height, index)

    def get_proof(self, index: int) -> MerkleProof:
        """Build an inclusion proof for the leaf slot at *index*.

        Works for unset slots as well; their value is the empty leaf.
        """
        self._check_index(index)
        siblings: list[str] = []
        current_index = index
        for level in range(self._height, 0, -1):
            siblings.append(self._store.get(level, current_index ^ 1))
            current_index //= 2
        return MerkleProof(
            root=self._store.get(0, 0),
            siblings=siblings,
            index=index,
            value=self._store.get(self._height, index),
        )

    def set_leaf(self, index: int, value: str) -> DeltaMerkleProof:
        """Set the leaf at *index* to *value* and return the delta proof.

        The whole path is folded before anything is written, so a failure
        leaves the tree exactly as it was.

        Raises:
            LeafIndexError: *index* is outside ``[0, 2**height)``.
            InvalidNodeError: *value* is not a digest-width lowercase hex node.
            ProofVerificationError: self-verification is enabled and the
                resulting delta proof does not verify.
        """
        self._check_index(index)
        check_node(value, self._hasher)

        old_root = self._store.get(0, 0)
        old_value = self._store.get(self._height, index)

        siblings: list[str] = []
        writes: list[tuple[int, int, str]] = []
        current_index = index
        current_value = value

        # The root (level 0) has no sibling; it is written after the loop.
        for level in range(self._height, 0, -1):
            writes.append((level, current_index, current_value))

            if current_index % 2 == 0:
                sibling = self._store.get(level, current_index + 1)
                current_value = self._hasher(current_value, sibling)
            else:
                sibling = self._store.get(level, current_index - 1)
                current_value = self._hasher(sibling, current_value)
            siblings.append(sibling)

            current_index //= 2

        writes.append((0, 0, current_value))

        delta = DeltaMerkleProof(
            index=index,
            siblings=siblings,
            old_root=old_root,
            old_value=old_value,
            new_root=current_value,
            new_value=value,
        )

        if self._verify_updates and not verify_delta_merkle_proof(delta, self._hasher):
            logger.error(
                "Delta proof self-verification failed: index=%d old_root=%s new_root=%s",
                index,
                old_root[:16] + "...",
                current_value[:16] + "...",
            )
            raise ProofVerificationError(
                f"delta proof for leaf {index} does not verify; tree left unchanged"
            )

        for level, node_index, node in writes:
            self._store.set(level, node_index, node)

        logger.debug(
            "Leaf %d set: root %s -> %s",
            index,
            old_root[:16] + "...",
            current_value[:16] + "...",
        )
        return delta

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise LeafIndexError(f"leaf index must be an int, got {type(index).__name__}")
        capacity = 1 << self._height
        if index < 0 or index >= capacity:
            raise LeafIndexError(f"leaf index {index} out of range [0, {capacity})")
