"""Shared fixtures for the zero-merkle test suite."""

from __future__ import annotations

import pytest

from zero_merkle.hashing import NodeHasher


class CorruptingHasher(NodeHasher):
    """sha256 hasher that returns a wrong digest on one call after ``arm()``.

    Calls are counted from 1 once armed, so the zero hashes computed at
    tree construction stay honest.
    """

    def __init__(self, corrupt_call: int) -> None:
        super().__init__("sha256")
        self.corrupt_call = corrupt_call
        self.calls = 0
        self.armed = False

    def arm(self) -> None:
        self.calls = 0
        self.armed = True

    def __call__(self, left: str, right: str) -> str:
        if self.armed:
            self.calls += 1
            if self.calls == self.corrupt_call:
                return "ff" * self.digest_size
        return super().__call__(left, right)


@pytest.fixture
def corrupting_hasher():
    return CorruptingHasher


@pytest.fixture
def hasher():
    return NodeHasher("sha256")
