"""
Call origins.

The host's authorization layer decides who is calling; the engine only needs
to tell a privileged (root) origin from a signed account origin.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..exceptions import BadOriginError


class OriginKind(Enum):
    """Kind of dispatch origin."""
    ROOT = "root"        # Privileged / administrative
    SIGNED = "signed"    # Ordinary account with a valid signature
    NONE = "none"        # Unsigned


@dataclass(frozen=True)
class Origin:
    """Authorization context of a single call."""
    kind: OriginKind
    account: Optional[str] = None

    @classmethod
    def root(cls) -> "Origin":
        return cls(OriginKind.ROOT)

    @classmethod
    def signed(cls, account: str) -> "Origin":
        if not account:
            raise ValueError("Signed origin requires an account")
        return cls(OriginKind.SIGNED, account)

    @classmethod
    def none(cls) -> "Origin":
        return cls(OriginKind.NONE)

    def ensure_root(self) -> None:
        if self.kind is not OriginKind.ROOT:
            raise BadOriginError(f"Root origin required, got {self.kind.value}")

    def ensure_signed(self) -> str:
        """Return the signing account or raise BadOriginError."""
        if self.kind is not OriginKind.SIGNED:
            raise BadOriginError(f"Signed origin required, got {self.kind.value}")
        return self.account

    def __repr__(self) -> str:
        if self.kind is OriginKind.SIGNED:
            return f"<Origin signed={self.account}>"
        return f"<Origin {self.kind.value}>"
