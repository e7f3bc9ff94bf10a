"""Key-value persistence and typed collections on top of it."""

import json
from collections import defaultdict
from collections.abc import Callable
from typing import Any, Generic, Protocol, TypeVar, cast

import redis
import structlog
from pydantic import BaseModel, TypeAdapter

from consultorio.config import Settings

logger = structlog.get_logger(__name__)

Subscriber = Callable[[Any], None]
T = TypeVar("T", bound=BaseModel)


class KeyValueStore(Protocol):
    """Durable store with get/set/subscribe semantics."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def subscribe(self, key: str, callback: Subscriber) -> Callable[[], None]: ...

    def ping(self) -> bool: ...

    def close(self) -> None: ...


class InMemoryStore:
    """Process-local store. Values are kept as JSON-compatible data."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._subscribers: dict[str, list[Subscriber]] = defaultdict(list)

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        for callback in list(self._subscribers[key]):
            callback(value)

    def subscribe(self, key: str, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for ``key``; returns an unsubscribe function."""
        self._subscribers[key].append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers[key]:
                self._subscribers[key].remove(callback)

        return unsubscribe

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        self._subscribers.clear()


class RedisStore:
    """Redis-backed store.

    Values are serialized to JSON. Each ``set`` also publishes the key on
    ``<prefix>:changes`` so other processes can observe writes; local
    subscribers are notified in-process.
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = "consultorio"):
        """Initialize store with Redis client."""
        self.redis = redis_client
        self.key_prefix = key_prefix
        self._subscribers: dict[str, list[Subscriber]] = defaultdict(list)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    @property
    def changes_channel(self) -> str:
        return f"{self.key_prefix}:changes"

    def get(self, key: str) -> Any | None:
        """
        Get JSON value and deserialize.

        Args:
            key: Store key without prefix

        Returns:
            Deserialized value or None
        """
        value = cast(str | bytes | None, self.redis.get(self._key(key)))
        if value is None:
            return None
        return json.loads(value)

    def set(self, key: str, value: Any) -> None:
        """
        Serialize and set JSON value.

        Args:
            key: Store key without prefix
            value: JSON-compatible value
        """
        try:
            self.redis.set(self._key(key), json.dumps(value, default=str))
            self.redis.publish(self.changes_channel, key)
        except redis.RedisError as e:
            logger.error("store_write_failed", key=key, error=str(e))
            raise
        for callback in list(self._subscribers[key]):
            callback(value)

    def subscribe(self, key: str, callback: Subscriber) -> Callable[[], None]:
        self._subscribers[key].append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers[key]:
                self._subscribers[key].remove(callback)

        return unsubscribe

    def ping(self) -> bool:
        """
        Check if Redis connection is healthy.

        Returns:
            True if the server answered, False otherwise
        """
        try:
            return bool(self.redis.ping())
        except redis.RedisError as e:
            logger.warning("store_ping_failed", error=str(e))
            return False

    def close(self) -> None:
        self._subscribers.clear()
        self.redis.close()


def create_store(settings: Settings) -> KeyValueStore:
    """Build the configured store backend."""
    if settings.store_backend == "redis":
        client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username,
            password=settings.redis_password,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )
        return RedisStore(client, key_prefix=settings.redis_key_prefix)
    return InMemoryStore()


class Collection(Generic[T]):
    """Typed get-all / replace-all view over one store key.

    ``replace_all`` writes the whole list with a single ``set`` so a caller
    that derives the next list from the current one never leaves a partial
    update behind.
    """

    def __init__(self, store: KeyValueStore, key: str, model: type[T]):
        self.store = store
        self.key = key
        self.model = model
        self._adapter = TypeAdapter(list[model])  # type: ignore[valid-type]

    def get_all(self) -> list[T]:
        raw = self.store.get(self.key)
        if raw is None:
            return []
        return self._adapter.validate_python(raw)

    def replace_all(self, items: list[T]) -> None:
        self.store.set(self.key, self._adapter.dump_python(items, mode="json"))

    def subscribe(self, callback: Callable[[list[T]], None]) -> Callable[[], None]:
        return self.store.subscribe(
            self.key, lambda raw: callback(self._adapter.validate_python(raw or []))
        )
