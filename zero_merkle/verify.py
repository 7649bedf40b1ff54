"""Stateless Merkle proof folding and verification.

Left/right rule, used by every path computation in this package: a node
with an even index at its level is the left argument of the hash when
combined with its sibling, an odd index makes it the right argument, and
the parent's index is always ``index // 2``.

Verification by third parties needs only the proof itself; no tree
instance is involved.  A proof that does not reach its claimed root
yields ``False``.  A structurally malformed proof raises: a bad node
encoding, an index outside ``[0, 2**len(siblings))``, or a sibling count
that differs from an explicitly given height.
"""

from __future__ import annotations

from collections.abc import Sequence

from zero_merkle.errors import MalformedProofError
from zero_merkle.hashing import NodeHasher, check_node, default_hasher
from zero_merkle.schemas import DeltaMerkleProof, MerkleProof


def compute_merkle_path_from_proof(
    siblings: Sequence[str],
    index: int,
    value: str,
    hasher: NodeHasher | None = None,
) -> list[str]:
    """Return every node on the leaf's path, ``[value, ..., root]``.

    The result has ``len(siblings) + 1`` entries; entry ``i`` is the path
    node ``i`` levels above the leaf.
    """
    hasher = hasher or default_hasher()
    node = value
    node_index = index
    path = [value]
    for sibling in siblings:
        if node_index % 2 == 0:
            node = hasher(node, sibling)
        else:
            node = hasher(sibling, node)
        node_index //= 2
        path.append(node)
    return path


def compute_merkle_root_from_proof(
    siblings: Sequence[str],
    index: int,
    value: str,
    hasher: NodeHasher | None = None,
) -> str:
    """Fold *value* up through *siblings* and return the resulting root."""
    return compute_merkle_path_from_proof(siblings, index, value, hasher)[-1]


def _check_shape(
    siblings: Sequence[str],
    index: int,
    nodes: Sequence[str],
    hasher: NodeHasher,
    height: int | None,
) -> None:
    if height is not None and len(siblings) != height:
        raise MalformedProofError(
            f"proof has {len(siblings)} siblings, expected {height}"
        )
    # Only the low len(siblings) bits of the index reach the fold, so any
    # larger index would alias a different leaf.
    capacity = 1 << len(siblings)
    if index < 0 or index >= capacity:
        raise MalformedProofError(f"proof index {index} out of range [0, {capacity})")
    for node in (*nodes, *siblings):
        check_node(node, hasher)


def verify_merkle_proof(
    proof: MerkleProof,
    hasher: NodeHasher | None = None,
    height: int | None = None,
) -> bool:
    """Return True only if the proof folds to its claimed root."""
    hasher = hasher or default_hasher()
    _check_shape(proof.siblings, proof.index, (proof.root, proof.value), hasher, height)
    return proof.root == compute_merkle_root_from_proof(
        proof.siblings, proof.index, proof.value, hasher
    )


def verify_delta_merkle_proof(
    delta: DeltaMerkleProof,
    hasher: NodeHasher | None = None,
    height: int | None = None,
) -> bool:
    """Return True only if both the old and the new proof verify.

    Both checks share ``delta.siblings``, so a passing delta proof
    certifies that the leaf at ``delta.index`` is the only one that changed.
    """
    hasher = hasher or default_hasher()
    return verify_merkle_proof(delta.old_proof(), hasher, height) and verify_merkle_proof(
        delta.new_proof(), hasher, height
    )
