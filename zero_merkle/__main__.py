"""CLI entrypoint for zero-merkle.

Usage:
    zero-merkle zero-hashes --height 32          # Print Z[0..32]
    zero-merkle set-leaves --height 3 1 3 3 7    # Sparse tree, one delta proof per leaf
    zero-merkle append --height 50 --count 50    # Append-only tree
    zero-merkle verify proofs.json               # Verify proofs read from a file or stdin

Leaves may be given as digest-width hex or as non-negative integers
(decimal or 0x-prefixed), which are encoded big-endian to digest width.
An argument exactly as long as a hex digest (64 characters for sha256)
is always read as hex, even if it is all decimal digits; write such
integers in 0x-prefixed hex instead.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from zero_merkle.append_only import AppendOnlyMerkleTree
from zero_merkle.config import settings
from zero_merkle.errors import MalformedProofError, MerkleTreeError
from zero_merkle.hashing import NodeHasher, compute_zero_hashes
from zero_merkle.schemas import DeltaMerkleProof
from zero_merkle.verify import verify_delta_merkle_proof
from zero_merkle.zero_tree import ZeroMerkleTree

logger = logging.getLogger("zero_merkle.cli")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_leaf(raw: str, hasher: NodeHasher) -> str:
    if len(raw) == 2 * hasher.digest_size and not raw.lower().startswith("0x"):
        return raw.lower()
    return hasher.encode_int(int(raw, 0))


def _dump_proofs(proofs: list[DeltaMerkleProof]) -> None:
    print(json.dumps([p.model_dump(mode="json", by_alias=True) for p in proofs], indent=2))


def _cmd_zero_hashes(args: argparse.Namespace, hasher: NodeHasher) -> int:
    print(json.dumps(compute_zero_hashes(args.height, hasher), indent=2))
    return 0


def _cmd_set_leaves(args: argparse.Namespace, hasher: NodeHasher) -> int:
    tree = ZeroMerkleTree(args.height, hasher=hasher)
    proofs = [
        tree.set_leaf(index, _parse_leaf(raw, hasher)) for index, raw in enumerate(args.leaves)
    ]
    _dump_proofs(proofs)
    logger.info("Root after %d leaves: %s", len(proofs), tree.get_root())
    return 0


def _cmd_append(args: argparse.Namespace, hasher: NodeHasher) -> int:
    if (args.count is None) == (not args.leaves):
        raise ValueError("give either --count or a list of leaves, not both")
    if args.count is not None:
        leaves = [hasher.encode_int(i) for i in range(args.count)]
    else:
        leaves = [_parse_leaf(raw, hasher) for raw in args.leaves]
    tree = AppendOnlyMerkleTree(args.height, hasher=hasher)
    proofs = [tree.append_leaf(leaf) for leaf in leaves]
    _dump_proofs(proofs)
    logger.info("Root after %d appends: %s", tree.size, tree.get_root())
    return 0


def _cmd_verify(args: argparse.Namespace, hasher: NodeHasher) -> int:
    raw = args.file.read()
    data = json.loads(raw)
    records = data if isinstance(data, list) else [data]
    proofs = [DeltaMerkleProof.model_validate(r) for r in records]

    for i, proof in enumerate(proofs):
        try:
            verified = verify_delta_merkle_proof(proof, hasher, args.height)
        except MalformedProofError as exc:
            print(f"INVALID: delta proof #{i} (index {proof.index}) is malformed: {exc}")
            return 1
        if not verified:
            print(f"INVALID: delta proof #{i} (index {proof.index}) does not verify")
            return 1
        if i > 0 and proof.old_root != proofs[i - 1].new_root:
            print(
                f"INVALID: delta proof #{i} (index {proof.index}) does not chain "
                "from the previous proof's new root"
            )
            return 1

    print(f"OK: {len(proofs)} delta proof(s) verified")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zero-merkle",
        description="Sparse and append-only Merkle trees with delta proofs",
    )
    parser.add_argument(
        "--algorithm",
        default=settings.hash_algorithm,
        help=f"hashlib algorithm for node hashing (default: {settings.hash_algorithm})",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=_LOG_LEVELS,
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("zero-hashes", help="Print the zero hash of every level")
    p.add_argument("--height", type=int, default=settings.default_height)
    p.set_defaults(handler=_cmd_zero_hashes)

    p = sub.add_parser("set-leaves", help="Set leaves 0.. on a sparse tree")
    p.add_argument("--height", type=int, default=settings.default_height)
    p.add_argument("leaves", nargs="+", metavar="LEAF")
    p.set_defaults(handler=_cmd_set_leaves)

    p = sub.add_parser("append", help="Append leaves to an append-only tree")
    p.add_argument("--height", type=int, default=settings.default_height)
    p.add_argument("--count", type=int, help="Append the integers 0..COUNT-1")
    p.add_argument("leaves", nargs="*", metavar="LEAF")
    p.set_defaults(handler=_cmd_append)

    p = sub.add_parser("verify", help="Verify a delta proof or a JSON list of them")
    p.add_argument(
        "file",
        nargs="?",
        type=argparse.FileType("r"),
        default=sys.stdin,
        help="JSON file (default: stdin)",
    )
    p.add_argument(
        "--height",
        type=int,
        default=None,
        help="Require exactly HEIGHT siblings per proof",
    )
    p.set_defaults(handler=_cmd_verify)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        hasher = NodeHasher(args.algorithm)
        return args.handler(args, hasher)
    except (MerkleTreeError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
