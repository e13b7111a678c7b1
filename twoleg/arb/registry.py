"""
Allow-list registry for venues and tradable assets.

Two independent key-unique mappings, default deny: anything never added,
or added and later disabled, is not approved. Lookups are never cached by
callers because administration can flip entries between any two steps of
an attempt.
"""

import threading
from typing import Optional

from twoleg.core.logging import LoggerMixin
from twoleg.domain.models import AllowListEntry


class AllowListRegistry(LoggerMixin):
    """Authoritative set of venues and assets eligible for arbitrage."""

    def __init__(
        self,
        venues: Optional[list[str]] = None,
        assets: Optional[list[str]] = None,
    ):
        self._lock = threading.Lock()
        self._venues: dict[str, AllowListEntry] = {}
        self._assets: dict[str, AllowListEntry] = {}

        for venue in venues or []:
            self.set_venue_approval(venue, True)
        for asset in assets or []:
            self.set_token_approval(asset, True)

    def is_venue_approved(self, venue: str) -> bool:
        with self._lock:
            entry = self._venues.get(venue)
            return bool(entry and entry.enabled)

    def is_asset_approved(self, asset: str) -> bool:
        with self._lock:
            entry = self._assets.get(asset)
            return bool(entry and entry.enabled)

    def set_venue_approval(self, venue: str, enabled: bool) -> None:
        with self._lock:
            self._venues[venue] = AllowListEntry(address=venue, enabled=enabled)
        self.logger.info(f"Venue {venue} approval set to {enabled}")

    def set_token_approval(self, asset: str, enabled: bool) -> None:
        with self._lock:
            self._assets[asset] = AllowListEntry(address=asset, enabled=enabled)
        self.logger.info(f"Asset {asset} approval set to {enabled}")

    def venues(self) -> list[AllowListEntry]:
        with self._lock:
            return list(self._venues.values())

    def assets(self) -> list[AllowListEntry]:
        with self._lock:
            return list(self._assets.values())
