"""Configuration for the zero-merkle trees.

All settings are driven by environment variables with sensible defaults.
Constructor arguments on the trees always take precedence over these.
"""

from __future__ import annotations

import os


def _get_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    return int(val)


def _get_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    return val.strip().lower() in {"1", "true", "yes", "y", "on"}


class MerkleSettings:
    # --- Hashing ---
    # Any fixed-width hashlib algorithm name (sha256, sha3_256, blake2s, ...).
    hash_algorithm: str = os.getenv("MERKLE_HASH_ALGORITHM", "sha256")

    # --- Tree shape ---
    # Height used by the CLI when --height is not given.
    default_height: int = _get_int("MERKLE_DEFAULT_HEIGHT", 32)
    # Upper bound accepted by the tree constructors.
    max_height: int = _get_int("MERKLE_MAX_HEIGHT", 256)

    # --- Update policy ---
    # If True, every set_leaf/append_leaf verifies its own delta proof
    # before committing and hard-fails on mismatch.
    verify_updates: bool = _get_bool("MERKLE_VERIFY_UPDATES", False)

    # --- CLI ---
    log_level: str = os.getenv("MERKLE_LOG_LEVEL", "INFO")


settings = MerkleSettings()


def check_height(height: int) -> int:
    """Validate a tree height against the configured bounds."""
    if isinstance(height, bool) or not isinstance(height, int):
        raise TypeError(f"height must be an int, got {type(height).__name__}")
    if height < 0 or height > settings.max_height:
        raise ValueError(f"height {height} out of range [0, {settings.max_height}]")
    return height
