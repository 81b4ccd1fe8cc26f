"""Application use cases: live following, historical resync, state queries."""

from offerind.core.use_cases.live_sync import LiveSync, nop_error
from offerind.core.use_cases.offer_state import OfferStateService
from offerind.core.use_cases.resync import ResyncConfig, ResyncService, resolve_floor

__all__ = [
    "LiveSync",
    "nop_error",
    "OfferStateService",
    "ResyncConfig",
    "ResyncService",
    "resolve_floor",
]
