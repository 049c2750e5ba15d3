"""Object storage adapters."""

from marketplace_chat.infrastructure.storage.supabase_object_storage import (
    SupabaseObjectStorage,
    create_supabase_client,
)

__all__ = ["SupabaseObjectStorage", "create_supabase_client"]
