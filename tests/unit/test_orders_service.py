import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from dispatch_api.core.exceptions import (
    InvalidRequestError, OrderAlreadyTakenError, OrderNotFoundError, UpstreamError,
    DistanceUnavailableError,
)
from dispatch_api.modules.orders.repository import ClaimResult
from dispatch_api.modules.orders.schemas import PlaceOrderRequest
from dispatch_api.modules.orders.service import OrdersService, to_order_response


class FakeRepository:
    def __init__(self, orders=None, claim_results=None):
        self.orders = list(orders or [])
        self.claim_results = list(claim_results or [])
        self.created = []
        self.claimed = []
        self.list_calls = []

    def create(self, distance):
        order = SimpleNamespace(id=len(self.created) + 1, distance=distance, is_taken=False)
        self.created.append(order)
        return order

    def claim_atomic(self, order_id):
        self.claimed.append(order_id)
        return self.claim_results.pop(0)

    def list(self, limit, offset):
        self.list_calls.append((limit, offset))
        return self.orders


def make_service(resolver, repository):
    service = OrdersService(MagicMock(), resolver)
    service.repository = repository
    return service


def location():
    return PlaceOrderRequest(origin=["22.33", "114.14"], destination=["22.32", "114.14"])


def test_projection_labels():
    assert to_order_response(SimpleNamespace(id=1, distance=10.0, is_taken=False)).status == "UNASSIGN"
    assert to_order_response(SimpleNamespace(id=1, distance=10.0, is_taken=True)).status == "taken"


def test_place_order_resolves_then_persists(fake_resolver):
    repo = FakeRepository()
    result = asyncio.run(make_service(fake_resolver, repo).place_order(location()))

    assert fake_resolver.calls == [(["22.33", "114.14"], ["22.32", "114.14"])]
    assert result.model_dump() == {"id": 1, "distance": 500.0, "status": "UNASSIGN"}
    assert len(repo.created) == 1


@pytest.mark.parametrize("error", [UpstreamError("timeout"), DistanceUnavailableError("0m")])
def test_place_order_does_not_persist_on_resolver_failure(fake_resolver, error):
    fake_resolver.error = error
    repo = FakeRepository()

    with pytest.raises(UpstreamError):
        asyncio.run(make_service(fake_resolver, repo).place_order(location()))
    assert repo.created == []


def test_take_order_success(fake_resolver):
    repo = FakeRepository(claim_results=[ClaimResult.CLAIMED])
    result = asyncio.run(make_service(fake_resolver, repo).take_order(7, "taken"))
    assert result.status == "SUCCESS"
    assert repo.claimed == [7]


def test_take_order_maps_claim_results(fake_resolver):
    repo = FakeRepository(claim_results=[ClaimResult.ALREADY_TAKEN, ClaimResult.NOT_FOUND])
    service = make_service(fake_resolver, repo)

    with pytest.raises(OrderAlreadyTakenError) as conflict:
        asyncio.run(service.take_order(1, "taken"))
    assert conflict.value.status_code == 409
    assert conflict.value.detail == "ORDER_ALREADY_BEEN_TAKEN"

    with pytest.raises(OrderNotFoundError):
        asyncio.run(service.take_order(999, "taken"))


@pytest.mark.parametrize("order_id,status", [
    (0, "taken"),
    (-3, "taken"),
    (1, "TAKEN"),
    (1, "Taken"),
    (1, "assigned"),
    (1, ""),
])
def test_take_order_rejects_before_touching_store(fake_resolver, order_id, status):
    repo = FakeRepository()
    with pytest.raises(InvalidRequestError):
        asyncio.run(make_service(fake_resolver, repo).take_order(order_id, status))
    assert repo.claimed == []


@pytest.mark.parametrize("order_id", [2 ** 31, 10 ** 20])
def test_take_order_beyond_id_range_is_not_found(fake_resolver, order_id):
    repo = FakeRepository()
    with pytest.raises(OrderNotFoundError):
        asyncio.run(make_service(fake_resolver, repo).take_order(order_id, "taken"))
    assert repo.claimed == []


@pytest.mark.parametrize("page,limit", [(-1, 10), (0, 0), (0, 1001), (2, -5)])
def test_list_orders_rejects_out_of_range(fake_resolver, page, limit):
    repo = FakeRepository()
    with pytest.raises(InvalidRequestError):
        asyncio.run(make_service(fake_resolver, repo).list_orders(page, limit))
    assert repo.list_calls == []


@pytest.mark.parametrize("page,limit,offset", [(0, 1, 0), (0, 1000, 0), (3, 25, 75)])
def test_list_orders_computes_offset(fake_resolver, page, limit, offset):
    repo = FakeRepository()
    asyncio.run(make_service(fake_resolver, repo).list_orders(page, limit))
    assert repo.list_calls == [(limit, offset)]


@pytest.mark.parametrize("page,limit", [(2 ** 31, 1), (10 ** 19, 1000)])
def test_list_orders_beyond_id_range_skips_store(fake_resolver, page, limit):
    repo = FakeRepository(orders=[SimpleNamespace(id=1, distance=10.0, is_taken=False)])
    result = asyncio.run(make_service(fake_resolver, repo).list_orders(page, limit))
    assert result == []
    assert repo.list_calls == []


def test_list_orders_sorts_by_id(fake_resolver):
    repo = FakeRepository(orders=[
        SimpleNamespace(id=3, distance=30.0, is_taken=False),
        SimpleNamespace(id=1, distance=10.0, is_taken=True),
        SimpleNamespace(id=2, distance=20.0, is_taken=False),
    ])
    result = asyncio.run(make_service(fake_resolver, repo).list_orders(0, 10))

    assert [o.id for o in result] == [1, 2, 3]
    assert [o.status for o in result] == ["taken", "UNASSIGN", "UNASSIGN"]
