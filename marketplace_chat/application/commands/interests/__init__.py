"""Interest (application) commands."""

from .apply_to_listing import ApplyToListingCommand, ApplyToListingHandler
from .decide_interest import DecideInterestCommand, DecideInterestHandler

__all__ = [
    "ApplyToListingCommand",
    "ApplyToListingHandler",
    "DecideInterestCommand",
    "DecideInterestHandler",
]
