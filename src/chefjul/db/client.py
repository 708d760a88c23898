"""
Chef Jul - Supabase Client.

Low-level Supabase access. The anon client validates user tokens; the
service client (service role key) backs the document store, since
background jobs outlive the request that started them.
"""

from supabase import Client, create_client

from chefjul.config import settings

# Singleton client instances
_client: Client | None = None
_service_client: Client | None = None


def get_client() -> Client:
    """Get the anon-key Supabase client (singleton)."""
    global _client

    if _client is None:
        _client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _client


def get_service_client() -> Client:
    """Get the service-role Supabase client (bypasses RLS; server-side only)."""
    global _service_client

    if _service_client is None:
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client
