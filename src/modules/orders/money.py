"""Fixed-point money value object.

Amounts are non-negative ``Decimal`` values with exactly two decimal
places, capped at ``MAX_AMOUNT`` so every value fits the storage columns.
Inputs carrying more precision than that are rejected instead of being
rounded, so sums never drift away from what the caller supplied.  Results
of ``+`` and ``*`` above the cap raise ``ValueError`` like any other
invalid amount.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Union

CENT = Decimal("0.01")

# Column precision of every stored amount (12 digits, 2 of them decimals).
MAX_DIGITS = 12
DECIMAL_PLACES = 2
MAX_AMOUNT = Decimal("9999999999.99")

AmountLike = Union["Money", Decimal, int, str, float]


@dataclass(frozen=True, order=True)
class Money:
    """Immutable, non-negative amount with a scale of 2."""

    amount: Decimal

    def __post_init__(self) -> None:
        value = self.amount
        if not isinstance(value, Decimal):
            raise TypeError("Money.amount must be a Decimal; use Money.of().")
        if not value.is_finite():
            raise ValueError(f"Amount must be a finite number, got {value}.")
        if value < 0:
            raise ValueError(f"Amount cannot be negative, got {value}.")
        if value > MAX_AMOUNT:
            raise ValueError(f"Amount {value} exceeds the maximum of {MAX_AMOUNT}.")
        quantized = value.quantize(CENT)
        if quantized != value:
            raise ValueError(
                f"Amount {value} has more than 2 decimal places."
            )
        object.__setattr__(self, "amount", quantized)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def of(cls, value: AmountLike) -> Money:
        """Build a Money from a Decimal, int, numeric string or float.

        Floats are converted through ``str()`` so ``9.99`` stays ``9.99``.
        """
        if isinstance(value, Money):
            return value
        if isinstance(value, bool):
            raise TypeError("Booleans are not valid amounts.")
        if isinstance(value, float):
            value = str(value)
        if isinstance(value, str):
            try:
                value = Decimal(value.strip())
            except InvalidOperation as exc:
                raise ValueError(f"Invalid amount: {value!r}.") from exc
        elif isinstance(value, int):
            value = Decimal(value)
        elif not isinstance(value, Decimal):
            raise TypeError(f"Unsupported amount type: {type(value).__name__}.")
        return cls(value)

    @classmethod
    def zero(cls) -> Money:
        return cls(Decimal("0.00"))

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other: object) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.amount + other.amount)

    def __radd__(self, other: object) -> Money:
        # ``sum()`` starts from the int 0.
        if other == 0:
            return self
        return self.__add__(other)

    def __mul__(self, quantity: object) -> Money:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            return NotImplemented
        try:
            product = self.amount * quantity
        except ArithmeticError as exc:
            raise ValueError(f"Amount {self} x {quantity} is out of range.") from exc
        return Money(product)

    __rmul__ = __mul__

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:.2f}"
