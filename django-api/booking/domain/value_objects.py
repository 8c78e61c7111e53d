"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Self
from uuid import UUID

CENT = Decimal("0.01")


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event on the ticketing API."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EventPriceId:
    """Unique identifier for an EventPrice (ticket tier)."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TicketId:
    """Unique identifier for a Ticket created by the ticketing API."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BookingId:
    """Unique identifier for a booking wizard session."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Currency amount, non-negative and held at cent precision."""

    amount: Decimal

    def __post_init__(self) -> None:
        amount = Decimal(self.amount)
        if amount < 0:
            raise ValueError("Money amount cannot be negative")
        object.__setattr__(self, "amount", amount.quantize(CENT, rounding=ROUND_HALF_UP))

    @classmethod
    def zero(cls) -> Self:
        return cls(amount=Decimal("0"))

    @classmethod
    def from_value(cls, value: object) -> Self:
        """Build from a JSON number or string without float artefacts."""
        return cls(amount=Decimal(str(value)))

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class Quantity:
    """Number of tickets in a booking; always at least one."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 1:
            raise ValueError("Quantity must be at least 1")


@dataclass(frozen=True)
class LoyaltyPoints:
    """Whole loyalty points. One point is worth one currency unit."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Loyalty points cannot be negative")

    def as_money(self) -> Money:
        return Money(amount=Decimal(self.value))
