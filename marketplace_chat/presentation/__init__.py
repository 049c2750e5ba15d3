"""
Presentation Layer - HTTP and WebSocket endpoints (FastAPI).
"""
