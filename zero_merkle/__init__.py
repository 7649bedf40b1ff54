"""zero-merkle: fixed-height sparse and append-only Merkle trees with delta proofs."""

from zero_merkle.append_only import AppendOnlyMerkleTree
from zero_merkle.config import MerkleSettings, settings
from zero_merkle.errors import (
    InvalidNodeError,
    LeafIndexError,
    MalformedProofError,
    MerkleTreeError,
    ProofVerificationError,
    TreeFullError,
)
from zero_merkle.hashing import HashFn, NodeHasher, compute_zero_hashes, default_hasher
from zero_merkle.node_store import SparseNodeStore
from zero_merkle.schemas import DeltaMerkleProof, MerkleProof, export_json_schemas
from zero_merkle.verify import (
    compute_merkle_path_from_proof,
    compute_merkle_root_from_proof,
    verify_delta_merkle_proof,
    verify_merkle_proof,
)
from zero_merkle.zero_tree import ZeroMerkleTree

__all__ = [
    # Trees
    "ZeroMerkleTree",
    "AppendOnlyMerkleTree",
    "SparseNodeStore",
    # Hashing
    "HashFn",
    "NodeHasher",
    "compute_zero_hashes",
    "default_hasher",
    # Proofs
    "MerkleProof",
    "DeltaMerkleProof",
    "export_json_schemas",
    "compute_merkle_path_from_proof",
    "compute_merkle_root_from_proof",
    "verify_merkle_proof",
    "verify_delta_merkle_proof",
    # Configuration
    "settings",
    "MerkleSettings",
    # Errors
    "MerkleTreeError",
    "LeafIndexError",
    "TreeFullError",
    "InvalidNodeError",
    "MalformedProofError",
    "ProofVerificationError",
]

__version__ = "0.1.0"
