"""Supabase Auth adapter feeding the IdentityProvider.

The sign-in screens live in the storefront; this module only turns
Supabase auth results into principal changes.
"""
from typing import Any, Optional

from farmcart.auth.identity import ANONYMOUS, IdentityProvider
from farmcart.errors import UnauthenticatedError
from farmcart.logging import get_logger

logger = get_logger(__name__)

ERROR_INVALID_CREDENTIALS = "Invalid login credentials"


class SupabaseIdentity:
    """Drives an IdentityProvider from a supabase ``AsyncGoTrueClient``."""

    def __init__(self, auth: Any, identity: IdentityProvider) -> None:
        self.auth = auth
        self.identity = identity

    async def restore(self) -> Optional[str]:
        """Pick up a persisted session (e.g. on app start)."""
        try:
            session = await self.auth.get_session()
        except Exception as e:
            logger.warning("Session restore failed: %s", type(e).__name__)
            session = None
        principal_id = session.user.id if session and session.user else ANONYMOUS
        await self.identity.set_principal(principal_id)
        return principal_id

    async def sign_in_with_password(self, email: str, password: str) -> str:
        """
        Sign in and publish the new principal.

        Raises:
            UnauthenticatedError: If Supabase rejects the credentials
        """
        try:
            response = await self.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.warning("Sign-in failed: %s", type(e).__name__)
            raise UnauthenticatedError(ERROR_INVALID_CREDENTIALS) from e

        if response is None or response.user is None:
            raise UnauthenticatedError(ERROR_INVALID_CREDENTIALS)
        await self.identity.set_principal(response.user.id)
        return response.user.id

    async def sign_out(self) -> None:
        """Sign out remotely; the local principal is cleared even if that fails."""
        try:
            await self.auth.sign_out()
        except Exception as e:
            logger.warning("Remote sign-out failed: %s", type(e).__name__)
        finally:
            await self.identity.set_principal(ANONYMOUS)
