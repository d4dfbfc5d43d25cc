"""Cart Line Repository - cart_items table operations."""
from typing import Any

from pydantic import ValidationError

from farmcart.errors import LineNotFoundError, PersistenceError
from farmcart.logging import get_logger, sanitize_id_for_logging
from farmcart.services.models import CartLine
from .base import BaseRepository

logger = get_logger(__name__)

# Line joined with its product and the product's seller
CART_LINE_SELECT = "*, product:products(*, seller:users(*))"


class CartLineRepository(BaseRepository):
    """Cart line database operations.

    Assumes a unique constraint on (user_id, product_id); a second insert
    for the same pair surfaces as ``LineConflictError``.
    """

    def __init__(self, client, table: str = "cart_items") -> None:
        super().__init__(client)
        self.table = table

    async def list_lines(self, principal_id: str) -> list[CartLine]:
        """Get all lines for a principal, oldest first."""
        result = await self._execute(
            self.client.table(self.table)
            .select(CART_LINE_SELECT)
            .eq("user_id", principal_id)
            .order("created_at"),
            "Failed to list cart lines",
        )
        return [self._parse(row) for row in result.data or []]

    async def insert_line(self, principal_id: str, product_id: str, quantity: int) -> CartLine:
        """Insert a new line and return it joined with its product."""
        result = await self._execute(
            self.client.table(self.table).insert(
                {"user_id": principal_id, "product_id": product_id, "quantity": quantity}
            ),
            "Failed to insert cart line",
        )
        if not result.data:
            raise PersistenceError("Insert returned no row")
        # PostgREST inserts do not return embedded resources
        return await self._fetch(result.data[0]["id"])

    async def update_line(self, line_id: str, quantity: int) -> CartLine:
        """Set a line's quantity and return the stored line."""
        result = await self._execute(
            self.client.table(self.table).update({"quantity": quantity}).eq("id", line_id),
            "Failed to update cart line",
        )
        if not result.data:
            raise LineNotFoundError(line_id)
        return await self._fetch(line_id)

    async def delete_line(self, line_id: str) -> None:
        await self._execute(
            self.client.table(self.table).delete().eq("id", line_id),
            "Failed to delete cart line",
        )

    async def delete_all_lines(self, principal_id: str) -> None:
        """Delete every line owned by the principal in one statement."""
        await self._execute(
            self.client.table(self.table).delete().eq("user_id", principal_id),
            "Failed to clear cart lines",
        )
        logger.debug("Deleted all cart lines for %s", sanitize_id_for_logging(principal_id))

    async def _fetch(self, line_id: str) -> CartLine:
        result = await self._execute(
            self.client.table(self.table).select(CART_LINE_SELECT).eq("id", line_id).limit(1),
            "Failed to read cart line",
        )
        if not result.data:
            raise LineNotFoundError(line_id)
        return self._parse(result.data[0])

    @staticmethod
    def _parse(row: dict[str, Any]) -> CartLine:
        try:
            return CartLine.model_validate(row)
        except ValidationError as e:
            logger.error(
                "Malformed cart row %s: %s",
                sanitize_id_for_logging(row.get("id")),
                e.error_count(),
            )
            raise PersistenceError("Malformed cart line", raw_error=e) from e
