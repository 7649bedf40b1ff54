"""Exception taxonomy for tree contract violations.

A proof that simply does not match its claimed root is not an error:
the verification functions return ``False`` for that.  Everything here
signals a programmer error and is raised before any tree state changes.
"""

from __future__ import annotations


class MerkleTreeError(Exception):
    """Base class for all zero-merkle errors."""


class LeafIndexError(MerkleTreeError, IndexError):
    """Raised when a leaf index falls outside ``[0, 2**height)``."""


class TreeFullError(LeafIndexError):
    """Raised when appending to an append-only tree that has no free slot."""


class InvalidNodeError(MerkleTreeError, ValueError):
    """Raised when a node is not lowercase hex of the hasher's digest width."""


class MalformedProofError(MerkleTreeError, ValueError):
    """Raised when a proof's sibling count does not match the tree height."""


class ProofVerificationError(MerkleTreeError):
    """Raised when a tree's own delta proof fails self-verification."""
