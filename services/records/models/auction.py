"""Auction record and payload models.

Bid placement and winner resolution are not implemented; ``current_bid`` and
``winner`` keep their creation values.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, Field


class AuctionPayload(BaseModel):
    """Caller supplied fields for opening an auction."""

    item_name: str = Field(default="", title="Item Name")
    description: str = Field(default="", title="Description")
    starting_bid: int = Field(default=0, ge=0, title="Starting Bid")
    auction_duration: int = Field(
        default=0,
        ge=0,
        title="Auction Duration",
        description="Length of the auction in nanoseconds",
    )


class Auction(BaseModel):
    """Stored auction record."""

    MAX_SIZE: ClassVar[int] = 2048

    id: int = Field(ge=0)
    item_name: str
    description: str
    starting_bid: int = Field(ge=0)
    current_bid: int = Field(ge=0)
    auction_end_time: int = Field(ge=0, description="Absolute end time in nanoseconds")
    winner: str | None = Field(default=None, description="Principal of the winning bidder")


__all__ = ["Auction", "AuctionPayload"]
