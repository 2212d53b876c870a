"""Key-value persistence for per-user values.

Every value lives under a ``(scope, key)`` pair, where the scope is the
owning user's id. Writes replace the whole value (last write wins) and are
pushed to subscribers of that pair after they succeed.
"""

import copy
import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.models.user_data import UserData
from src.services.errors import StoreError

logger = logging.getLogger(__name__)

OnChange = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class KeyValueStore(Protocol):
    """Persistence adapter contract."""

    def get(self, scope: str, key: str) -> Any | None: ...

    def set(self, scope: str, key: str, value: Any) -> None: ...

    def subscribe(self, scope: str, key: str, on_change: OnChange) -> Unsubscribe: ...


class SubscriptionRegistry:
    """In-process change notification shared by store instances."""

    def __init__(self) -> None:
        self._listeners: dict[tuple[str, str], list[OnChange]] = defaultdict(list)

    def subscribe(self, scope: str, key: str, on_change: OnChange) -> Unsubscribe:
        listeners = self._listeners[(scope, key)]
        listeners.append(on_change)

        def unsubscribe() -> None:
            if on_change in listeners:
                listeners.remove(on_change)

        return unsubscribe

    def publish(self, scope: str, key: str, value: Any) -> None:
        for listener in list(self._listeners.get((scope, key), [])):
            try:
                listener(copy.deepcopy(value))
            except Exception as e:
                logger.error(f"Subscriber for {scope}/{key} failed: {e}")


registry = SubscriptionRegistry()


class SqlKeyValueStore:
    """Store backed by the ``user_data`` table."""

    def __init__(self, db: Session, subscriptions: SubscriptionRegistry | None = None) -> None:
        self.db = db
        self.subscriptions = subscriptions or registry

    def _row(self, scope: str, key: str) -> UserData | None:
        return (
            self.db.query(UserData)
            .filter(UserData.user_id == int(scope))
            .filter(UserData.key == key)
            .first()
        )

    def get(self, scope: str, key: str) -> Any | None:
        try:
            row = self._row(scope, key)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read {scope}/{key}: {e}") from e
        return copy.deepcopy(row.value) if row else None

    def set(self, scope: str, key: str, value: Any) -> None:
        try:
            row = self._row(scope, key)
            if row is None:
                self.db.add(UserData(user_id=int(scope), key=key, value=value))
            else:
                row.value = value
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Failed to write {scope}/{key}: {e}") from e

        logger.debug(f"Stored {scope}/{key}")
        self.subscriptions.publish(scope, key, value)

    def subscribe(self, scope: str, key: str, on_change: OnChange) -> Unsubscribe:
        return self.subscriptions.subscribe(scope, key, on_change)


class InMemoryKeyValueStore:
    """Store keeping values in a dict, for tests and single-process use."""

    def __init__(self, subscriptions: SubscriptionRegistry | None = None) -> None:
        self._values: dict[tuple[str, str], Any] = {}
        self.subscriptions = subscriptions or SubscriptionRegistry()

    def get(self, scope: str, key: str) -> Any | None:
        return copy.deepcopy(self._values.get((scope, key)))

    def set(self, scope: str, key: str, value: Any) -> None:
        self._values[(scope, key)] = copy.deepcopy(value)
        self.subscriptions.publish(scope, key, value)

    def subscribe(self, scope: str, key: str, on_change: OnChange) -> Unsubscribe:
        return self.subscriptions.subscribe(scope, key, on_change)
