"""Authentication: principal tracking and the Supabase Auth adapter."""
from .identity import ANONYMOUS, IdentityProvider
from .supabase_auth import SupabaseIdentity

__all__ = ["ANONYMOUS", "IdentityProvider", "SupabaseIdentity"]
