"""Pytest configuration and fixtures"""
import asyncio
import itertools
import os
from typing import Optional
from unittest.mock import AsyncMock, Mock

import pytest

# Set test environment variables
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test_key")

from farmcart.errors import CartError, LineConflictError, LineNotFoundError
from farmcart.services.models import CartLine, CatalogEntry


class InMemoryCartStore:
    """Cart store fake with the (user, product) unique constraint.

    ``gates[op]`` holds a call in flight until the event is set;
    ``fail_next[op]`` makes the next call of ``op`` raise.
    """

    def __init__(self) -> None:
        self.products: dict[str, CatalogEntry] = {}
        self.rows: dict[str, dict] = {}
        self.calls: list[str] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.fail_next: dict[str, CartError] = {}
        self._ids = itertools.count(1)

    def add_product(self, entry: CatalogEntry) -> CatalogEntry:
        self.products[entry.id] = entry
        return entry

    def seed_line(self, user_id: str, product_id: str, quantity: int) -> str:
        line_id = f"line-{next(self._ids)}"
        self.rows[line_id] = {"user_id": user_id, "product_id": product_id, "quantity": quantity}
        return line_id

    async def _enter(self, op: str) -> None:
        self.calls.append(op)
        gate = self.gates.get(op)
        if gate is not None:
            await gate.wait()
        error = self.fail_next.pop(op, None)
        if error is not None:
            raise error

    def _line(self, line_id: str) -> CartLine:
        row = self.rows[line_id]
        return CartLine(
            id=line_id,
            user_id=row["user_id"],
            product_id=row["product_id"],
            quantity=row["quantity"],
            product=self.products[row["product_id"]],
        )

    async def list_lines(self, principal_id: str) -> list[CartLine]:
        await self._enter("list_lines")
        return [self._line(line_id) for line_id, row in self.rows.items() if row["user_id"] == principal_id]

    async def insert_line(self, principal_id: str, product_id: str, quantity: int) -> CartLine:
        await self._enter("insert_line")
        for row in self.rows.values():
            if row["user_id"] == principal_id and row["product_id"] == product_id:
                raise LineConflictError()
        return self._line(self.seed_line(principal_id, product_id, quantity))

    async def update_line(self, line_id: str, quantity: int) -> CartLine:
        await self._enter("update_line")
        if line_id not in self.rows:
            raise LineNotFoundError(line_id)
        self.rows[line_id]["quantity"] = quantity
        return self._line(line_id)

    async def delete_line(self, line_id: str) -> None:
        await self._enter("delete_line")
        self.rows.pop(line_id, None)

    async def delete_all_lines(self, principal_id: str) -> None:
        await self._enter("delete_all_lines")
        for line_id in [k for k, row in self.rows.items() if row["user_id"] == principal_id]:
            del self.rows[line_id]


def make_product(product_id: str, price: float = 100.0, name: Optional[str] = None) -> CatalogEntry:
    return CatalogEntry(
        id=product_id,
        name=name or f"Product {product_id}",
        price=price,
        category="cut_meat",
        seller_id="seller-1",
    )


@pytest.fixture
def mock_supabase_client():
    """Mock async Supabase client; every builder call returns the same query mock."""
    client = Mock()

    table_mock = Mock()
    table_mock.select.return_value = table_mock
    table_mock.insert.return_value = table_mock
    table_mock.update.return_value = table_mock
    table_mock.delete.return_value = table_mock
    table_mock.eq.return_value = table_mock
    table_mock.in_.return_value = table_mock
    table_mock.or_.return_value = table_mock
    table_mock.order.return_value = table_mock
    table_mock.limit.return_value = table_mock
    table_mock.execute = AsyncMock(return_value=Mock(data=[], count=0))

    client.table.return_value = table_mock
    return client


@pytest.fixture
def sample_seller():
    """Sample seller row"""
    return {
        "id": "seller-1",
        "email": "farmer@example.com",
        "full_name": "Green Valley Farm",
        "role": "farmer",
        "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2025-01-01T00:00:00Z",
    }


@pytest.fixture
def sample_product(sample_seller):
    """Sample product row joined with its seller"""
    return {
        "id": "product-123",
        "name": "Boer Goat",
        "description": "Healthy 8 month old Boer goat",
        "price": 250.5,
        "category": "live_animal",
        "subcategory": "goats",
        "images": ["https://example.com/goat.jpg"],
        "seller_id": "seller-1",
        "seller": sample_seller,
        "stock_quantity": 4,
        "weight": 32.5,
        "weight_unit": "kg",
        "breed": "Boer",
        "age_months": 8,
        "certifications": None,
        "is_available": True,
        "rating": 4.7,
        "review_count": 12,
        "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2025-01-01T00:00:00Z",
    }


@pytest.fixture
def sample_cart_row(sample_product):
    """Sample cart_items row with embedded product"""
    return {
        "id": "line-1",
        "user_id": "user-123",
        "product_id": "product-123",
        "quantity": 2,
        "created_at": "2025-01-02T00:00:00Z",
        "product": sample_product,
    }


@pytest.fixture
def memory_store():
    store = InMemoryCartStore()
    store.add_product(make_product("goat", price=250.0))
    store.add_product(make_product("ribeye", price=18.75))
    store.add_product(make_product("lamb", price=42.1))
    return store


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def engine(memory_store):
    from farmcart.cart import CartSyncEngine

    return CartSyncEngine(memory_store)
