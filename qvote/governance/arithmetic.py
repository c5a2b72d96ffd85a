"""
Bounded unsigned integer domain.

Balances, tallies, vote counts and proposal ids are fixed-width unsigned
integers. Python ints never wrap, so every add/sub/mul that feeds stored
state goes through a `UintDomain` which raises instead of leaving the range.
"""

from dataclasses import dataclass

from ..exceptions import (
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    InvalidAmountError,
)


@dataclass(frozen=True)
class UintDomain:
    """Unsigned integers of ``bits`` width."""
    bits: int
    name: str = "uint"

    @property
    def max_value(self) -> int:
        return (1 << self.bits) - 1

    def check(self, value, what: str = "value") -> int:
        """Validate that *value* is representable and return it."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidAmountError(f"{what} must be an integer, got {value!r}")
        if value < 0:
            raise InvalidAmountError(f"{what} must be non-negative, got {value}")
        if value > self.max_value:
            raise ArithmeticOverflowError(
                f"{what} {value} exceeds {self.name} maximum {self.max_value}"
            )
        return value

    def add(self, a: int, b: int) -> int:
        result = a + b
        if result > self.max_value:
            raise ArithmeticOverflowError(f"{a} + {b} overflows {self.name}")
        return result

    def sub(self, a: int, b: int) -> int:
        if b > a:
            raise ArithmeticUnderflowError(f"{a} - {b} underflows {self.name}")
        return a - b

    def mul(self, a: int, b: int) -> int:
        result = a * b
        if result > self.max_value:
            raise ArithmeticOverflowError(f"{a} * {b} overflows {self.name}")
        return result

    def square(self, a: int) -> int:
        """Quadratic cost of *a* votes."""
        return self.mul(a, a)
