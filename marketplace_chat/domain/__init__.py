"""
DOMAIN LAYER - conversation access control and messaging rules

This layer contains:
- Entities: Message, Interest, Listing, Notification, domain events
- Value Objects: UserId, ListingId, MessageId, AttachmentPath, ...
- Ports: Interfaces that infrastructure implements
- Services: Access policy, thread id derivation
- Exceptions: Domain-specific errors

RULES:
1. NO framework imports (no FastAPI, Prisma, Redis, Pydantic, etc.)
2. NO direct I/O (lookups go through ports)
3. Only depends on Python stdlib
"""
