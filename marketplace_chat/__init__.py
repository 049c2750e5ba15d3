"""Listing conversations: access control, realtime sync and notifications."""

__version__ = "1.0.0"
