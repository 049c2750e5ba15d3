"""Attachment queries."""

from .get_signed_url import GetSignedUrlQuery, GetSignedUrlHandler, SignedUrlResult

__all__ = ["GetSignedUrlQuery", "GetSignedUrlHandler", "SignedUrlResult"]
