"""Error taxonomy.

Absence (an unknown CID, an offer without matches) is a normal result and
never raised.
"""

from __future__ import annotations


class OfferindError(Exception):
    """Base class for all offerind failures."""


class DecodeError(OfferindError):
    """A raw log or contract value has an unexpected shape or type."""


class TransportError(OfferindError):
    """A query or subscription failed at the log source."""
