"""Identity provider: the observable "who is signed in" value."""
from typing import Awaitable, Callable, Optional

from farmcart.errors import CartError
from farmcart.logging import get_logger, sanitize_id_for_logging

logger = get_logger(__name__)

# No authenticated principal
ANONYMOUS: Optional[str] = None

PrincipalListener = Callable[[Optional[str]], Awaitable[None]]


class IdentityProvider:
    """
    Holds the current principal id and pushes changes to subscribers.

    Usage:
        identity = IdentityProvider()
        unsubscribe = identity.subscribe(engine.load)
        await identity.set_principal("user-123")
    """

    def __init__(self, principal_id: Optional[str] = ANONYMOUS) -> None:
        self._principal_id = principal_id
        self._listeners: list[PrincipalListener] = []

    @property
    def current(self) -> Optional[str]:
        return self._principal_id

    @property
    def is_authenticated(self) -> bool:
        return self._principal_id is not ANONYMOUS

    def subscribe(self, listener: PrincipalListener) -> Callable[[], None]:
        """Register a coroutine called with the new principal on every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def set_principal(self, principal_id: Optional[str]) -> None:
        """Switch principal and notify subscribers; unchanged value is a no-op."""
        if principal_id == self._principal_id:
            return
        self._principal_id = principal_id
        logger.info("Principal changed to %s", sanitize_id_for_logging(principal_id))

        for listener in list(self._listeners):
            try:
                await listener(principal_id)
            except CartError as e:
                # Superseded loads and store failures are already reported by the engine
                logger.debug("Principal listener reported %s", e.code)
