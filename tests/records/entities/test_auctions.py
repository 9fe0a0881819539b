from __future__ import annotations

import pytest

from services.records.context import RecordServices
from services.records.entities import MutableEntityService
from services.records.errors import EmptyFieldsError, NotFoundError
from services.records.models import AuctionPayload


def test_create_auction_derives_bid_and_end_time(services: RecordServices, clock) -> None:
    auction = services.auctions.create(
        AuctionPayload(item_name="Vase", description="Ming", starting_bid=100, auction_duration=3600)
    )

    assert auction.current_bid == auction.starting_bid == 100
    assert auction.auction_end_time == clock.now + 3600
    assert auction.winner is None
    assert services.auctions.get(auction.id) == auction


def test_auction_requires_positive_amounts(services: RecordServices) -> None:
    with pytest.raises(EmptyFieldsError) as excinfo:
        services.auctions.create(AuctionPayload(item_name="Vase", description="Ming"))

    assert excinfo.value.fields == ["starting_bid", "auction_duration"]
    assert "Starting Bid, Auction Duration" in excinfo.value.msg
    assert services.auctions.list() == []


def test_unknown_auction_is_not_found(services: RecordServices) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        services.auctions.get(42)

    assert excinfo.value.msg == "Auction with ID 42 can not be found"


def test_auctions_cannot_be_updated_or_deleted(services: RecordServices) -> None:
    assert not isinstance(services.auctions, MutableEntityService)
    assert not hasattr(services.auctions, "update")
    assert not hasattr(services.auctions, "delete")
