"""
Block clock.

The engine reads time as a monotonically non-decreasing block number supplied
by the host. `ManualClock` is the in-memory implementation used by tests and
the replay CLI.
"""

from abc import ABC, abstractmethod


class BlockClock(ABC):
    """Source of the current block number."""

    @abstractmethod
    def current_time(self) -> int:
        """Return the current block number."""


class ManualClock(BlockClock):
    """Clock advanced explicitly by the caller."""

    def __init__(self, block: int = 0):
        if block < 0:
            raise ValueError("Block number cannot be negative")
        self._block = block

    def current_time(self) -> int:
        return self._block

    def set_block(self, block: int) -> None:
        if block < self._block:
            raise ValueError(
                f"Clock cannot move backwards ({self._block} -> {block})"
            )
        self._block = block

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError("Cannot advance by a negative number of blocks")
        self._block += blocks
        return self._block

    def __repr__(self) -> str:
        return f"<ManualClock block={self._block}>"
