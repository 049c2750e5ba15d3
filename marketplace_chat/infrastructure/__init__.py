"""
Infrastructure Layer - adapters for the domain ports.

- persistence/ → Prisma repositories (PostgreSQL)
- storage/     → Supabase Storage object store
- realtime/    → PostgreSQL LISTEN/NOTIFY change feed
- cache/       → Redis client and presence store
- notifier/    → Redis push outbox
"""
