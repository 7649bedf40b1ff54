"""Tests for the AppendOnlyMerkleTree and its sibling-reuse rule."""

from __future__ import annotations

import pytest

from zero_merkle.append_only import AppendOnlyMerkleTree
from zero_merkle.errors import InvalidNodeError, LeafIndexError, ProofVerificationError, TreeFullError
from zero_merkle.hashing import NodeHasher, compute_zero_hashes
from zero_merkle.verify import verify_delta_merkle_proof, verify_merkle_proof
from zero_merkle.zero_tree import ZeroMerkleTree


def leaf(n: int) -> str:
    return n.to_bytes(32, "big").hex()


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------


class TestInitialState:
    def test_sentinel_last_proof(self):
        tree = AppendOnlyMerkleTree(4)
        zeros = compute_zero_hashes(4)
        proof = tree.last_proof
        assert proof.index == -1
        assert proof.value == zeros[4]
        assert proof.root == zeros[4]
        assert proof.siblings == tuple(zeros[:4])
        assert tree.size == 0
        assert tree.capacity == 16
        assert tree.get_root() == zeros[4]

    def test_empty_root_matches_sparse_tree(self):
        for height in (0, 1, 5, 32):
            assert AppendOnlyMerkleTree(height).root == ZeroMerkleTree(height).get_root()

    def test_zero_hashes_copy(self):
        tree = AppendOnlyMerkleTree(2)
        zeros = tree.zero_hashes
        zeros.clear()
        assert len(tree.zero_hashes) == 3


# ---------------------------------------------------------------------------
# Appends
# ---------------------------------------------------------------------------


class TestAppendLeaf:
    def test_first_append(self, hasher):
        tree = AppendOnlyMerkleTree(2)
        zeros = compute_zero_hashes(2)
        delta = tree.append_leaf(leaf(8))
        assert delta.index == 0
        assert delta.siblings == (zeros[0], zeros[1])
        assert delta.old_root == zeros[2]
        assert delta.old_value == zeros[0]
        assert delta.new_value == leaf(8)
        assert delta.new_root == hasher(hasher(leaf(8), zeros[0]), zeros[1])
        assert verify_delta_merkle_proof(delta, height=2)

    def test_sibling_reuse_rule(self, hasher):
        tree = AppendOnlyMerkleTree(2)
        zeros = compute_zero_hashes(2)
        tree.append_leaf(leaf(1))

        # index 1: odd at level 0 -> previous leaf; level 1 unchanged -> reused
        second = tree.append_leaf(leaf(2))
        assert second.siblings == (leaf(1), zeros[1])

        # index 2: even at level 0 -> empty; odd at level 1 -> previous ancestor
        third = tree.append_leaf(leaf(3))
        assert third.siblings == (zeros[0], hasher(leaf(1), leaf(2)))

        # index 3: odd at level 0 -> previous leaf; level 1 unchanged -> reused
        fourth = tree.append_leaf(leaf(4))
        assert fourth.siblings == (leaf(3), hasher(leaf(1), leaf(2)))

        expected_root = hasher(hasher(leaf(1), leaf(2)), hasher(leaf(3), leaf(4)))
        assert tree.root == expected_root

    def test_fifty_appends_on_height_fifty(self):
        tree = AppendOnlyMerkleTree(50)
        proofs = [tree.append_leaf(leaf(i)) for i in range(50)]
        for i, proof in enumerate(proofs):
            assert proof.index == i
            assert len(proof.siblings) == 50
            assert verify_delta_merkle_proof(proof, height=50), f"proof {i} failed"
            if i > 0:
                assert proof.old_root == proofs[i - 1].new_root
        assert tree.last_proof.index == 49
        assert tree.size == 50
        assert verify_merkle_proof(tree.last_proof, height=50)

    def test_appends_after_mixed_leaves_chain(self):
        tree = AppendOnlyMerkleTree(50)
        delta_a = tree.append_leaf(leaf(8))
        delta_b = tree.append_leaf(leaf(7))
        assert verify_delta_merkle_proof(delta_a)
        assert verify_delta_merkle_proof(delta_b)
        assert delta_a.new_root == delta_b.old_root

        previous = delta_b
        for i in range(50):
            delta = tree.append_leaf(leaf(i))
            assert verify_delta_merkle_proof(delta)
            assert delta.old_root == previous.new_root
            previous = delta
        assert tree.size == 52

    def test_old_value_always_empty(self):
        tree = AppendOnlyMerkleTree(3)
        for i in range(8):
            assert tree.append_leaf(leaf(i + 100)).old_value == "00" * 32

    def test_last_proof_tracks_latest_leaf(self):
        tree = AppendOnlyMerkleTree(6)
        for i in range(10):
            delta = tree.append_leaf(leaf(i))
            assert tree.last_proof.index == delta.index
            assert tree.last_proof.siblings == delta.siblings
            assert tree.last_proof.value == delta.new_value
            assert tree.last_proof.root == delta.new_root

    def test_custom_hasher(self):
        hasher = NodeHasher("blake2s")
        tree = AppendOnlyMerkleTree(4, hasher=hasher)
        delta = tree.append_leaf(leaf(1))
        assert tree.hasher is hasher
        assert verify_delta_merkle_proof(delta, hasher)


# ---------------------------------------------------------------------------
# Equivalence with the sparse tree
# ---------------------------------------------------------------------------


class TestEquivalenceWithSparseTree:
    @pytest.mark.parametrize("height", [0, 1, 2, 3, 4, 5])
    def test_full_tree_roots_match(self, height):
        append_tree = AppendOnlyMerkleTree(height)
        sparse_tree = ZeroMerkleTree(height)
        for i in range(1 << height):
            value = leaf(i * 7 + 1)
            appended = append_tree.append_leaf(value)
            set_ = sparse_tree.set_leaf(i, value)
            assert appended == set_
            assert append_tree.last_proof == sparse_tree.get_proof(i)
        assert append_tree.root == sparse_tree.get_root()

    def test_partial_tree_roots_match(self):
        append_tree = AppendOnlyMerkleTree(20)
        sparse_tree = ZeroMerkleTree(20)
        for i in range(37):
            append_tree.append_leaf(leaf(i))
            sparse_tree.set_leaf(i, leaf(i))
        assert append_tree.root == sparse_tree.get_root()


# ---------------------------------------------------------------------------
# Contract violations
# ---------------------------------------------------------------------------


class TestAppendOnlyErrors:
    def test_full_tree_rejects_append(self):
        tree = AppendOnlyMerkleTree(2)
        for i in range(4):
            tree.append_leaf(leaf(i))
        root = tree.root
        last = tree.last_proof
        with pytest.raises(TreeFullError):
            tree.append_leaf(leaf(99))
        assert tree.root == root
        assert tree.last_proof is last

    def test_tree_full_is_leaf_index_error(self):
        tree = AppendOnlyMerkleTree(0)
        tree.append_leaf(leaf(1))
        with pytest.raises(LeafIndexError):
            tree.append_leaf(leaf(2))

    def test_height_zero_single_leaf(self):
        tree = AppendOnlyMerkleTree(0)
        delta = tree.append_leaf(leaf(5))
        assert delta.siblings == ()
        assert delta.new_root == leaf(5)
        assert verify_delta_merkle_proof(delta)

    def test_invalid_value_rejected(self):
        tree = AppendOnlyMerkleTree(3)
        with pytest.raises(InvalidNodeError):
            tree.append_leaf("00" * 16)
        assert tree.size == 0

    def test_height_out_of_range(self):
        with pytest.raises(ValueError):
            AppendOnlyMerkleTree(-1)


# ---------------------------------------------------------------------------
# Self-verification
# ---------------------------------------------------------------------------


class TestAppendOnlySelfVerification:
    def test_corrupted_root_fold_is_rejected(self, corrupting_hasher):
        # Calls 1-3 recompute the previous path, 4-6 fold the new root.
        hasher = corrupting_hasher(corrupt_call=4)
        tree = AppendOnlyMerkleTree(3, hasher=hasher, verify_updates=True)
        hasher.arm()
        with pytest.raises(ProofVerificationError):
            tree.append_leaf(leaf(1))
        assert tree.size == 0
        assert tree.root == compute_zero_hashes(3)[3]

        delta = tree.append_leaf(leaf(1))
        assert delta.index == 0
        assert verify_delta_merkle_proof(delta)
