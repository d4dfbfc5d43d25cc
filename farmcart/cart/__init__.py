"""Cart package: projection models, sync engine and session lifecycle."""
from .engine import CartSyncEngine
from .models import CartEvent, CartEventKind, CartNotice, CartProjection, CartSnapshot, SessionState
from .session import CartSession, create_cart_session
from .store import CartStore

__all__ = [
    "CartEvent",
    "CartEventKind",
    "CartNotice",
    "CartProjection",
    "CartSnapshot",
    "CartStore",
    "CartSession",
    "CartSyncEngine",
    "SessionState",
    "create_cart_session",
]
