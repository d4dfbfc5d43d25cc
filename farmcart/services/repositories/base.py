"""Base repository with shared Supabase client."""

from typing import Any

from supabase._async.client import AsyncClient

from farmcart.errors import LineConflictError, PersistenceError, is_duplicate_key_error


class BaseRepository:
    """Base class for all repositories.

    Every PostgREST call goes through ``_execute`` so callers only ever
    see ``LineConflictError`` or ``PersistenceError``.
    """

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def _execute(self, query: Any, failure_message: str) -> Any:
        try:
            return await query.execute()
        except Exception as e:
            if is_duplicate_key_error(e):
                raise LineConflictError(raw_error=e) from e
            raise PersistenceError(f"{failure_message}: {type(e).__name__}", raw_error=e) from e
