"""
APPLICATION LAYER - Use Cases & Orchestration

This layer contains:
- commands/  → Write operations (CQRS)
- queries/   → Read operations (CQRS)
- services/  → Notification dispatch
- realtime/  → Conversation sync engine (change feed consumer)
- dto/       → Data Transfer Objects
- common/    → Shared interfaces (Command, Query base classes)

Rules:
- Depends on Domain layer only
- No HTTP/framework code here
- Coordinates entities, repositories, external services
"""
