"""
QUERIES - Read operations (CQRS)

Queries retrieve data without modifying state. Each query has:
- Query class: Parameters for the read
- Handler class: Executes the read

Subfolders:
- messages/      → list_messages, can_message, unread_count, list_conversations
- attachments/   → get_signed_url
- notifications/ → list_notifications, unread_count
"""
