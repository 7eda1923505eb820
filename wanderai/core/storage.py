import json
import logging
import secrets
import time
from typing import Any, Callable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wanderai.core.errors import PersistenceUnavailableError
from wanderai.models.sql import KeyValueEntry

logger = logging.getLogger("wanderai_server.storage")

KEY_PREFIX = "wanderai_"


def generate_id() -> str:
    """Millisecond timestamp plus a random suffix, unique within one store."""
    return f"{int(time.time() * 1000)}{secrets.token_hex(3)}"


class KeyValueStore:
    """
    String key/value persistence backed by the `kv_entries` table.

    A store built without a session factory has no storage context: reads
    return nothing and writes are silently dropped.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self.session_factory = session_factory

    @property
    def available(self) -> bool:
        return self.session_factory is not None

    def get(self, key: str) -> Optional[str]:
        if not self.available:
            return None
        try:
            with self.session_factory() as db:
                entry = db.get(KeyValueEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read key '{key}': {e}")
            return None

    def set(self, key: str, value: str) -> None:
        if not self.available:
            return
        try:
            with self.session_factory() as db:
                entry = db.get(KeyValueEntry, key)
                if entry:
                    entry.value = value
                else:
                    db.add(KeyValueEntry(key=key, value=value))
                db.commit()
        except SQLAlchemyError as e:
            logger.exception(f"Failed to write key '{key}'")
            raise PersistenceUnavailableError(str(e)) from e

    def remove(self, key: str) -> None:
        if not self.available:
            return
        try:
            with self.session_factory() as db:
                db.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
                db.commit()
        except SQLAlchemyError as e:
            logger.exception(f"Failed to remove key '{key}'")
            raise PersistenceUnavailableError(str(e)) from e

    def list_keys(self, prefix: str = "") -> List[str]:
        if not self.available:
            return []
        try:
            with self.session_factory() as db:
                stmt = (
                    select(KeyValueEntry.key)
                    .where(KeyValueEntry.key.startswith(prefix, autoescape=True))
                    .order_by(KeyValueEntry.key)
                )
                return list(db.scalars(stmt))
        except SQLAlchemyError as e:
            logger.error(f"Failed to list keys with prefix '{prefix}': {e}")
            return []

    def clear_prefix(self, prefix: str = KEY_PREFIX) -> int:
        """Removes every key starting with `prefix`. Returns the count removed."""
        keys = self.list_keys(prefix)
        for key in keys:
            self.remove(key)
        if keys:
            logger.info(f"Cleared {len(keys)} keys with prefix '{prefix}'")
        return len(keys)

    def get_json(self, key: str, default: Any = None) -> Any:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing stored JSON for '{key}': {e}")
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value))
