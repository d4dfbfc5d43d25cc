"""
Tests for identity tracking and the Supabase Auth adapter
"""

from unittest.mock import AsyncMock, Mock

import pytest

from farmcart.auth import ANONYMOUS, IdentityProvider, SupabaseIdentity
from farmcart.errors import PersistenceError, UnauthenticatedError


class TestIdentityProvider:
    """Tests for IdentityProvider."""

    @pytest.mark.asyncio
    async def test_notifies_on_change(self):
        identity = IdentityProvider()
        seen = []

        async def listener(principal_id):
            seen.append(principal_id)

        identity.subscribe(listener)
        await identity.set_principal("user-1")
        await identity.set_principal("user-1")
        await identity.set_principal(ANONYMOUS)

        assert seen == ["user-1", None]
        assert not identity.is_authenticated

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        identity = IdentityProvider()
        listener = AsyncMock()
        unsubscribe = identity.subscribe(listener)

        unsubscribe()
        await identity.set_principal("user-1")

        listener.assert_not_called()

    @pytest.mark.asyncio
    async def test_cart_errors_do_not_stop_other_listeners(self):
        """Test a failing listener does not block the next one."""
        identity = IdentityProvider()
        failing = AsyncMock(side_effect=PersistenceError())
        after = AsyncMock()
        identity.subscribe(failing)
        identity.subscribe(after)

        await identity.set_principal("user-1")

        after.assert_awaited_once_with("user-1")


class TestSupabaseIdentity:
    """Tests for SupabaseIdentity."""

    @pytest.fixture
    def auth(self):
        auth = Mock()
        auth.get_session = AsyncMock()
        auth.sign_in_with_password = AsyncMock()
        auth.sign_out = AsyncMock()
        return auth

    @pytest.mark.asyncio
    async def test_restore_with_session(self, auth):
        auth.get_session.return_value = Mock(user=Mock(id="user-9"))
        identity = IdentityProvider()

        principal_id = await SupabaseIdentity(auth, identity).restore()

        assert principal_id == "user-9"
        assert identity.current == "user-9"

    @pytest.mark.asyncio
    async def test_restore_without_session(self, auth):
        auth.get_session.return_value = None
        identity = IdentityProvider("stale-user")

        await SupabaseIdentity(auth, identity).restore()

        assert identity.current is ANONYMOUS

    @pytest.mark.asyncio
    async def test_sign_in(self, auth):
        auth.sign_in_with_password.return_value = Mock(user=Mock(id="user-3"))
        identity = IdentityProvider()

        await SupabaseIdentity(auth, identity).sign_in_with_password("a@b.com", "secret")

        auth.sign_in_with_password.assert_awaited_once_with({"email": "a@b.com", "password": "secret"})
        assert identity.current == "user-3"

    @pytest.mark.asyncio
    async def test_sign_in_rejected(self, auth):
        auth.sign_in_with_password.side_effect = RuntimeError("Invalid login credentials")
        identity = IdentityProvider()

        with pytest.raises(UnauthenticatedError):
            await SupabaseIdentity(auth, identity).sign_in_with_password("a@b.com", "wrong")

        assert identity.current is ANONYMOUS

    @pytest.mark.asyncio
    async def test_sign_out_clears_even_when_remote_fails(self, auth):
        auth.sign_out.side_effect = RuntimeError("network down")
        identity = IdentityProvider("user-3")

        await SupabaseIdentity(auth, identity).sign_out()

        assert identity.current is ANONYMOUS
