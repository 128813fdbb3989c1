"""Supabase client singleton for progress storage and auth lookups."""

from typing import Optional
import os
from supabase import create_client, Client

_supabase: Optional[Client] = None


def _service_key() -> Optional[str]:
    # Edge functions in the Supabase dashboard call it SERVICE_ROLE_KEY.
    return os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY")


def get_supabase() -> Client:
    """Get or create the shared Supabase client.

    Requires SUPABASE_URL and a service role key
    (SUPABASE_SERVICE_KEY or SUPABASE_SERVICE_ROLE_KEY).

    Raises:
        ValueError: If required environment variables are not set
    """
    global _supabase

    if _supabase is None:
        url = os.getenv("SUPABASE_URL")
        key = _service_key()

        if not url or not key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY environment variables must be set "
                "to store quest progress in Supabase."
            )

        _supabase = create_client(url, key)
        print(f"[Supabase] Connected to {url}")

    return _supabase
