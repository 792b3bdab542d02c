"""
Tests for OrdersRepository against a real (SQLite) database.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from dispatch_api.config.database import SessionLocal
from dispatch_api.core.exceptions import StorageError
from dispatch_api.modules.orders.repository import ClaimResult, OrdersRepository
from dispatch_api.shared.database.models import DeliveryOrder


@pytest.fixture
def repository(db_session):
    return OrdersRepository(db_session)


def test_create_assigns_increasing_ids(repository):
    first = repository.create(500.0)
    second = repository.create(750.5)

    assert first.id == 1
    assert second.id == 2
    assert second.distance == 750.5
    assert first.is_taken is False


def test_claim_is_monotone(repository, db_session):
    order = repository.create(100.0)

    assert repository.claim_atomic(order.id) == ClaimResult.CLAIMED
    for _ in range(3):
        assert repository.claim_atomic(order.id) == ClaimResult.ALREADY_TAKEN

    db_session.expire_all()
    assert db_session.get(DeliveryOrder, order.id).is_taken is True


def test_claim_unknown_id(repository):
    assert repository.claim_atomic(999) == ClaimResult.NOT_FOUND


def test_claim_does_not_touch_other_orders(repository):
    orders = [repository.create(float(d)) for d in (10, 20, 30)]
    repository.claim_atomic(orders[1].id)

    statuses = {o.id: o.is_taken for o in repository.list(10, 0)}
    assert statuses == {1: False, 2: True, 3: False}


@pytest.mark.parametrize("claimants", [2, 8])
def test_concurrent_claims_only_one_wins(repository, claimants):
    order_id = repository.create(500.0).id
    barrier = threading.Barrier(claimants)

    def claim(_):
        session = SessionLocal()
        try:
            barrier.wait()
            return OrdersRepository(session).claim_atomic(order_id)
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=claimants) as pool:
        results = list(pool.map(claim, range(claimants)))

    assert results.count(ClaimResult.CLAIMED) == 1
    assert results.count(ClaimResult.ALREADY_TAKEN) == claimants - 1


def test_list_is_deterministic_and_ordered(repository):
    for distance in range(1, 8):
        repository.create(float(distance * 100))

    page_0 = [o.id for o in repository.list(3, 0)]
    page_1 = [o.id for o in repository.list(3, 3)]
    page_2 = [o.id for o in repository.list(3, 6)]

    assert page_0 == [1, 2, 3]
    assert page_1 == [4, 5, 6]
    assert page_2 == [7]
    assert [o.id for o in repository.list(3, 3)] == page_1
    assert repository.list(3, 9) == []


def test_store_failures_become_storage_error():
    session = MagicMock()
    session.execute.side_effect = OperationalError("UPDATE", {}, Exception("server closed the connection"))
    session.query.side_effect = OperationalError("SELECT", {}, Exception("server closed the connection"))
    session.commit.side_effect = OperationalError("COMMIT", {}, Exception("server closed the connection"))
    repository = OrdersRepository(session)

    with pytest.raises(StorageError) as claim_error:
        repository.claim_atomic(1)
    assert claim_error.value.detail == "Database Error"

    with pytest.raises(StorageError):
        repository.list(10, 0)

    with pytest.raises(StorageError):
        repository.create(10.0)

    assert session.rollback.call_count == 3
