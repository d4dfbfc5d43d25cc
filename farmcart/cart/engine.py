"""
Cart Synchronization Engine

Keeps one principal's cart projection consistent with the remote cart
store. Intents run request -> confirm -> apply: the store's returned
line, never the requested values, is written into the projection, and
nothing is applied before the store confirms.

Usage:
    engine = CartSyncEngine(CartLineRepository(client))
    engine.subscribe(render)
    await engine.load(user_id)
    await engine.add_to_cart(product, quantity=2)
    snapshot = engine.snapshot()
"""
from decimal import Decimal
from typing import Callable, Optional

from farmcart.auth.identity import ANONYMOUS
from farmcart.errors import (
    ERROR_ADD_FAILED,
    ERROR_CLEAR_FAILED,
    ERROR_LOAD_FAILED,
    ERROR_REMOVE_FAILED,
    ERROR_UPDATE_FAILED,
    NOTICE_ADDED,
    NOTICE_CLEARED,
    NOTICE_REMOVED,
    CartError,
    InvalidQuantityError,
    LineConflictError,
    LineNotFoundError,
    SessionChangedError,
    UnauthenticatedError,
)
from farmcart.logging import get_logger, sanitize_id_for_logging
from farmcart.services.models import CartLine, CatalogEntry
from .models import CartEvent, CartEventKind, CartNotice, CartProjection, CartSnapshot, SessionState
from .store import CartStore

logger = get_logger(__name__)

CartListener = Callable[[CartEvent], None]
NoticeListener = Callable[[CartNotice], None]

# (principal, session) captured when an intent starts
_Ticket = tuple[Optional[str], int]


def _validate_quantity(quantity: object) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(quantity)
    return quantity


class CartSyncEngine:
    """
    Sole owner and mutator of the cart projection for one session.

    The existence check in ``add_to_cart`` is a fast path only: two
    concurrent adds for a new product both reach the store, which keeps
    one line per (principal, product) and rejects the other with
    ``LineConflictError``.
    """

    def __init__(self, store: CartStore) -> None:
        self._store = store
        self._projection = CartProjection(principal_id=ANONYMOUS)
        self._state = SessionState.NO_SESSION
        self._load_error: Optional[str] = None
        # Bumped on every load and reset; results issued under an older session are dropped
        self._session = 0
        self._listeners: list[CartListener] = []
        self._notice_listeners: list[NoticeListener] = []

    # ==================== READ ACCESSORS ====================

    @property
    def principal(self) -> Optional[str]:
        return self._projection.principal_id

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return self._projection.lines

    @property
    def total_items(self) -> int:
        return self._projection.total_items

    @property
    def total_amount(self) -> Decimal:
        return self._projection.total_amount

    @property
    def loading(self) -> bool:
        return self._state == SessionState.LOADING

    @property
    def load_error(self) -> Optional[str]:
        return self._load_error

    def snapshot(self) -> CartSnapshot:
        """Current projection and aggregates. Never does I/O."""
        return CartSnapshot.from_projection(self._projection, self._state, self._load_error)

    # ==================== SUBSCRIPTIONS ====================

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call ``listener`` after every committed projection change."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def on_notice(self, listener: NoticeListener) -> Callable[[], None]:
        """Call ``listener`` with user-facing success/error messages."""
        self._notice_listeners.append(listener)
        return lambda: self._notice_listeners.remove(listener) if listener in self._notice_listeners else None

    # ==================== LIFECYCLE ====================

    def reset(self) -> None:
        """Drop the session: empty projection, no principal, in-flight results discarded."""
        self._session += 1
        self._load_error = None
        self._commit(CartProjection(ANONYMOUS), SessionState.NO_SESSION, CartEventKind.RESET)

    async def load(self, principal_id: Optional[str]) -> CartSnapshot:
        """
        Replace the projection with the store's lines for ``principal_id``.

        The projection is cleared before the fetch so two principals'
        lines are never shown together. A store failure leaves the
        projection empty with ``load_error`` set; it is not retried.

        Intents still in flight when a load starts are discarded, even for
        the same principal; the load result is the confirmed state.

        Returns:
            Snapshot after the load

        Raises:
            SessionChangedError: If another load or reset started meanwhile
        """
        if principal_id is ANONYMOUS:
            self.reset()
            return self.snapshot()

        self._session += 1
        ticket = (principal_id, self._session)
        self._load_error = None
        self._commit(CartProjection(principal_id), SessionState.LOADING, CartEventKind.RESET)

        try:
            lines = await self._store.list_lines(principal_id)
        except CartError as e:
            self._ensure_current(ticket)
            logger.warning(
                "Cart load failed for %s: %s", sanitize_id_for_logging(principal_id), e.code
            )
            self._load_error = ERROR_LOAD_FAILED
            self._commit(CartProjection(principal_id), SessionState.EMPTY, CartEventKind.LOAD_FAILED)
            self._notify(CartNotice("error", ERROR_LOAD_FAILED, e.code))
            return self.snapshot()

        self._ensure_current(ticket)
        projection = CartProjection(principal_id)
        for line in lines:
            projection = projection.upsert(line)
        self._commit(projection, SessionState.READY, CartEventKind.LOADED)
        logger.info(
            "Cart loaded for %s: %d lines", sanitize_id_for_logging(principal_id), len(projection.lines)
        )
        return self.snapshot()

    # ==================== INTENTS ====================

    async def add_to_cart(self, entry: CatalogEntry, quantity: int = 1) -> CartLine:
        """
        Add ``quantity`` of ``entry``: accumulate onto its existing line or create one.

        Returns:
            The confirmed line

        Raises:
            UnauthenticatedError, InvalidQuantityError: Before any store call
            LineConflictError: Store already holds a line for this product
            PersistenceError: Store call failed
            SessionChangedError: Principal changed while in flight
        """
        principal_id = self._require_principal()
        quantity = _validate_quantity(quantity)
        if quantity <= 0:
            raise InvalidQuantityError(quantity)

        existing = self._projection.find_by_product(entry.id)
        if existing is not None:
            return await self._update(existing.id, existing.quantity + quantity, NOTICE_ADDED)

        ticket = self._ticket()
        try:
            line = await self._store.insert_line(principal_id, entry.id, quantity)
        except CartError as e:
            self._report_failure(ERROR_ADD_FAILED, e, ticket)
            raise

        self._ensure_current(ticket)
        self._commit(self._projection.upsert(line), self._state, CartEventKind.ADDED, NOTICE_ADDED)
        return line

    async def update_quantity(self, line_id: str, quantity: int) -> Optional[CartLine]:
        """
        Set a line's quantity; zero or below removes the line.

        Returns:
            The confirmed line, or None when the line was removed
        """
        self._require_principal()
        quantity = _validate_quantity(quantity)
        if quantity <= 0:
            await self.remove_from_cart(line_id)
            return None
        return await self._update(line_id, quantity)

    async def remove_from_cart(self, line_id: str) -> None:
        self._require_principal()
        self._require_line(line_id)

        ticket = self._ticket()
        try:
            await self._store.delete_line(line_id)
        except CartError as e:
            self._report_failure(ERROR_REMOVE_FAILED, e, ticket)
            raise

        self._ensure_current(ticket)
        self._commit(self._projection.without(line_id), self._state, CartEventKind.REMOVED, NOTICE_REMOVED)

    async def clear_cart(self) -> None:
        """Delete all of the principal's lines; all or nothing."""
        principal_id = self._require_principal()
        if not self._projection.lines:
            logger.debug("Clear on empty cart is a no-op")
            return

        ticket = self._ticket()
        try:
            await self._store.delete_all_lines(principal_id)
        except CartError as e:
            self._report_failure(ERROR_CLEAR_FAILED, e, ticket)
            raise

        self._ensure_current(ticket)
        self._commit(CartProjection(principal_id), self._state, CartEventKind.CLEARED, NOTICE_CLEARED)

    # ==================== INTERNALS ====================

    async def _update(self, line_id: str, quantity: int, notice: Optional[str] = None) -> CartLine:
        self._require_line(line_id)

        ticket = self._ticket()
        try:
            line = await self._store.update_line(line_id, quantity)
        except CartError as e:
            self._report_failure(ERROR_UPDATE_FAILED, e, ticket)
            raise

        self._ensure_current(ticket)
        if self._projection.find(line_id) is None:
            # Removed by an intent that confirmed first
            error = LineNotFoundError(line_id)
            self._report_failure(ERROR_UPDATE_FAILED, error, ticket)
            raise error
        self._commit(self._projection.replace(line), self._state, CartEventKind.UPDATED, notice)
        return line

    def _ticket(self) -> _Ticket:
        return (self._projection.principal_id, self._session)

    def _ensure_current(self, ticket: _Ticket) -> None:
        if ticket != self._ticket():
            logger.warning(
                "Discarding cart result for stale session %s", sanitize_id_for_logging(ticket[0])
            )
            raise SessionChangedError()

    def _require_principal(self) -> str:
        principal_id = self._projection.principal_id
        if principal_id is ANONYMOUS:
            error = UnauthenticatedError()
            self._notify(CartNotice("error", error.message, error.code))
            raise error
        return principal_id

    def _require_line(self, line_id: str) -> CartLine:
        line = self._projection.find(line_id)
        if line is None:
            raise LineNotFoundError(line_id)
        return line

    def _report_failure(self, message: str, error: CartError, ticket: _Ticket) -> None:
        logger.warning("%s (%s)", message, error.code, exc_info=error.raw_error is not None)
        if ticket != self._ticket():
            # The user who issued the intent is gone
            return
        if isinstance(error, LineConflictError):
            message = error.message
        self._notify(CartNotice("error", message, error.code))

    def _commit(
        self,
        projection: CartProjection,
        state: SessionState,
        kind: CartEventKind,
        notice: Optional[str] = None,
    ) -> None:
        self._projection = projection
        self._state = state
        event = CartEvent(kind, self.snapshot())
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.warning("Cart listener failed on %s", kind.value, exc_info=True)
        if notice:
            self._notify(CartNotice("success", notice))

    def _notify(self, notice: CartNotice) -> None:
        for listener in list(self._notice_listeners):
            try:
                listener(notice)
            except Exception:
                logger.warning("Notice listener failed", exc_info=True)
