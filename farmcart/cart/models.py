"""Cart projection models: the engine's in-memory view of one principal's cart."""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from farmcart.services.models import CartLine
from farmcart.services.money import to_float, total


class SessionState(str, Enum):
    """Engine lifecycle for one principal session."""
    NO_SESSION = "no_session"  # Anonymous, projection empty
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"  # Load failed; usable, but load_error is set


class CartEventKind(str, Enum):
    """What kind of committed change a CartEvent carries."""
    RESET = "reset"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"
    ADDED = "added"
    UPDATED = "updated"
    REMOVED = "removed"
    CLEARED = "cleared"


@dataclass(frozen=True)
class CartProjection:
    """Ordered, immutable set of confirmed lines for one principal.

    Mutators return a new projection and leave this one untouched.
    """
    principal_id: Optional[str]
    lines: tuple[CartLine, ...] = ()

    @property
    def total_items(self) -> int:
        """Sum of quantities over all lines."""
        return sum(line.quantity for line in self.lines)

    @property
    def total_amount(self) -> Decimal:
        """Sum of quantity x snapshot price over all lines."""
        return total(line.line_total for line in self.lines)

    def find(self, line_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.id == line_id), None)

    def find_by_product(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product_id == product_id), None)

    def upsert(self, line: CartLine) -> "CartProjection":
        """Replace the line with the same id or product in place, else append."""
        for index, current in enumerate(self.lines):
            if current.id == line.id or current.product_id == line.product_id:
                lines = self.lines[:index] + (line,) + self.lines[index + 1:]
                return CartProjection(self.principal_id, lines)
        return CartProjection(self.principal_id, self.lines + (line,))

    def replace(self, line: CartLine) -> "CartProjection":
        """Swap in a confirmed line; unchanged if the id is no longer present."""
        return CartProjection(
            self.principal_id,
            tuple(line if current.id == line.id else current for current in self.lines),
        )

    def without(self, line_id: str) -> "CartProjection":
        return CartProjection(
            self.principal_id,
            tuple(line for line in self.lines if line.id != line_id),
        )


@dataclass(frozen=True)
class CartSnapshot:
    """Read-only view handed to the presentation layer."""
    principal_id: Optional[str]
    lines: tuple[CartLine, ...]
    total_items: int
    total_amount: Decimal
    state: SessionState
    load_error: Optional[str] = None

    @classmethod
    def from_projection(
        cls,
        projection: CartProjection,
        state: SessionState,
        load_error: Optional[str] = None,
    ) -> "CartSnapshot":
        return cls(
            principal_id=projection.principal_id,
            lines=projection.lines,
            total_items=projection.total_items,
            total_amount=projection.total_amount,
            state=state,
            load_error=load_error,
        )

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def loading(self) -> bool:
        return self.state == SessionState.LOADING

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly summary for the storefront."""
        return {
            "is_empty": self.is_empty,
            "state": self.state.value,
            "load_error": self.load_error,
            "total_items": self.total_items,
            "total_amount": to_float(self.total_amount),
            "items": [
                {
                    "id": line.id,
                    "product_id": line.product_id,
                    "product_name": line.product.name,
                    "seller_id": line.product.seller_id,
                    "is_available": line.product.is_available,
                    "quantity": line.quantity,
                    "unit_price": to_float(line.unit_price),
                    "total": to_float(line.line_total),
                }
                for line in self.lines
            ],
        }


@dataclass(frozen=True)
class CartEvent:
    """Change notification fired after a committed projection mutation."""
    kind: CartEventKind
    snapshot: CartSnapshot


@dataclass(frozen=True)
class CartNotice:
    """User-facing message (the storefront shows these as toasts)."""
    level: str  # success | error
    message: str
    code: Optional[str] = None
