"""
Transaction Coordinator Module

Wraps multi-ledger mutations in a single atomic unit. A ``TransactionScope``
is handed explicitly to every ledger and order call that must share the same
commit/rollback; nothing relies on an ambient connection.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional
import uuid

from .errors import InternalError
from .storage import StorageInterface
from .logging_config import get_logger


class TransactionScope:
    """
    Handle for one open unit of work.

    All reads and writes that must be undone on failure go through the scope.
    The scope is only usable between begin and commit/rollback.
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.id = str(uuid.uuid4())
        self.active = False

    def _check_active(self) -> None:
        if not self.active:
            raise InternalError(f"Transaction scope {self.id} is not active")

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        self._check_active()
        return self.storage.load(table, record_id)

    def load_for_update(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a row and hold it until the scope ends"""
        self._check_active()
        return self.storage.load_for_update(table, record_id)

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        self._check_active()
        return self.storage.find(table, filters)

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        self._check_active()
        self.storage.save(table, record_id, data)


class TransactionCoordinator:
    """Opens, commits and rolls back transaction scopes on one storage backend"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.logger = get_logger("vending.coordinator")

    @contextmanager
    def atomic(self, tx: Optional[TransactionScope] = None) -> Iterator[TransactionScope]:
        """
        Run a block inside a transaction scope.

        If ``tx`` is an active scope the block joins it and the outermost owner
        decides commit or rollback. Otherwise a new scope is opened, committed
        on success and rolled back on any exception, which is re-raised unchanged.

        Args:
            tx: Scope supplied by an enclosing operation, if any

        Yields:
            The scope to pass to nested ledger calls
        """
        if tx is not None:
            if not tx.active:
                raise InternalError(f"Transaction scope {tx.id} is not active")
            yield tx
            return

        scope = TransactionScope(self.storage)
        self.storage.begin_transaction()
        scope.active = True
        self.logger.debug(f"Transaction {scope.id} started")
        try:
            yield scope
        except BaseException:
            scope.active = False
            self.storage.rollback()
            self.logger.debug(f"Transaction {scope.id} rolled back")
            raise
        else:
            scope.active = False
            try:
                self.storage.commit()
            except Exception as e:
                self.logger.error(f"Transaction {scope.id} commit failed: {e}")
                raise InternalError(f"Commit failed: {e}") from e
            self.logger.debug(f"Transaction {scope.id} committed")
