"""Contract between the sync engine and the cart store."""
from typing import Protocol

from farmcart.services.models import CartLine


class CartStore(Protocol):
    """Remote persistent cart line store.

    Implementations raise ``LineConflictError`` when a line for
    (principal, product) already exists and ``PersistenceError`` for any
    other failure. Returned lines are joined with their product.
    """

    async def list_lines(self, principal_id: str) -> list[CartLine]: ...

    async def insert_line(self, principal_id: str, product_id: str, quantity: int) -> CartLine: ...

    async def update_line(self, line_id: str, quantity: int) -> CartLine: ...

    async def delete_line(self, line_id: str) -> None: ...

    async def delete_all_lines(self, principal_id: str) -> None: ...
