"""Auction records.

Auctions can only be opened and read. Bidding and closing are not supported.
"""

from __future__ import annotations

from typing import Any

from services.records.models import Auction, AuctionPayload

from .base import EntityService


class AuctionService(EntityService[Auction, AuctionPayload]):
    entity_name = "Auction"
    record_model = Auction
    required_fields = ("item_name", "description")
    positive_fields = ("starting_bid", "auction_duration")

    def _defaults(self, payload: AuctionPayload, now: int) -> dict[str, Any]:
        return {
            "current_bid": payload.starting_bid,
            "auction_end_time": now + payload.auction_duration,
            "winner": None,
        }


__all__ = ["AuctionService"]
