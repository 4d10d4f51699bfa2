"""
Tests for transaction scopes and the coordinator
"""

import pytest

from vending_machine.storage import InMemoryStorage, SQLiteStorage
from vending_machine.coordinator import TransactionCoordinator
from vending_machine.errors import ConflictError, InternalError


@pytest.fixture(params=["memory", "sqlite"])
def storage(request):
    backend = InMemoryStorage() if request.param == "memory" else SQLiteStorage()
    yield backend
    backend.close()


class TestTransactionCoordinator:
    """Test commit, rollback and scope joining"""

    def test_commit_on_success(self, storage):
        coordinator = TransactionCoordinator(storage)

        with coordinator.atomic() as tx:
            tx.save("items", "a", {"id": "a", "quantity": 1})

        assert storage.load("items", "a")["quantity"] == 1
        assert not storage.in_transaction

    def test_rollback_on_error(self, storage):
        coordinator = TransactionCoordinator(storage)
        storage.save("items", "a", {"id": "a", "quantity": 1})

        with pytest.raises(ConflictError):
            with coordinator.atomic() as tx:
                tx.save("items", "a", {"id": "a", "quantity": 2})
                tx.save("items", "b", {"id": "b", "quantity": 1})
                raise ConflictError("boom")

        assert storage.load("items", "a")["quantity"] == 1
        assert storage.load("items", "b") is None
        assert not storage.in_transaction

    def test_unexpected_error_propagates_unchanged(self, storage):
        coordinator = TransactionCoordinator(storage)

        with pytest.raises(KeyError):
            with coordinator.atomic() as tx:
                tx.save("items", "a", {"id": "a"})
                raise KeyError("x")

        assert storage.load("items", "a") is None

    def test_joined_scope_shares_outcome(self, storage):
        """Inner blocks joining a scope are undone with the outer one"""
        coordinator = TransactionCoordinator(storage)

        with pytest.raises(ConflictError):
            with coordinator.atomic() as outer:
                with coordinator.atomic(outer) as inner:
                    assert inner is outer
                    inner.save("items", "a", {"id": "a"})
                # Still open after the inner block exits
                assert storage.in_transaction
                raise ConflictError("late failure")

        assert storage.load("items", "a") is None

    def test_scope_unusable_after_exit(self, storage):
        coordinator = TransactionCoordinator(storage)

        with coordinator.atomic() as tx:
            pass

        assert not tx.active
        with pytest.raises(InternalError):
            tx.save("items", "a", {"id": "a"})
        with pytest.raises(InternalError):
            with coordinator.atomic(tx):
                pass

    def test_sequential_scopes(self, storage):
        coordinator = TransactionCoordinator(storage)

        for i in range(3):
            with coordinator.atomic() as tx:
                tx.save("items", str(i), {"id": str(i)})

        assert storage.count("items") == 3
