"""Cart session: ties one engine's lifecycle to the identity provider."""
from typing import Callable, Optional

from supabase._async.client import AsyncClient

from farmcart.auth.identity import IdentityProvider
from farmcart.config import get_settings
from farmcart.db import get_supabase
from farmcart.services.repositories import CartLineRepository
from .engine import CartSyncEngine
from .models import CartSnapshot
from .store import CartStore


class CartSession:
    """
    Owns a CartSyncEngine for as long as the storefront session lives.

    The engine is handed to the presentation layer by reference; every
    principal change (sign-in, sign-out, restore) reloads it.

    Usage:
        async with CartSession(identity, store) as session:
            await session.engine.add_to_cart(product)
    """

    def __init__(self, identity: IdentityProvider, store: CartStore) -> None:
        self.identity = identity
        self.engine = CartSyncEngine(store)
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def started(self) -> bool:
        return self._unsubscribe is not None

    async def start(self) -> CartSnapshot:
        """Subscribe to principal changes and load the current principal's cart."""
        if self._unsubscribe is None:
            self._unsubscribe = self.identity.subscribe(self.engine.load)
        return await self.engine.load(self.identity.current)

    async def close(self) -> None:
        """Stop following the identity provider and drop the projection."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.engine.reset()

    async def __aenter__(self) -> "CartSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


async def create_cart_session(
    identity: IdentityProvider,
    client: Optional[AsyncClient] = None,
) -> CartSession:
    """Build a started session backed by the Supabase cart table."""
    if client is None:
        client = await get_supabase()
    store = CartLineRepository(client, table=get_settings().cart_table)
    session = CartSession(identity, store)
    await session.start()
    return session
