import logging
import sqlite3
import threading
from typing import List

from airgradient_core.domain.models import DeviceVariant

from airgradient_bridge.records import DeviceRecord

logger = logging.getLogger(__name__)


class SQLiteAccessoryCache:
    """Persists device identities so they can be restored after a restart.

    Only identity is stored (token, key, variant, display name). Readings are
    never persisted.
    """

    CREATE_SQL = """
    CREATE TABLE IF NOT EXISTS accessories (
        uuid          TEXT PRIMARY KEY,
        device_key    TEXT NOT NULL,
        variant       TEXT NOT NULL,
        display_name  TEXT
    );
    """

    UPSERT_SQL = """
    INSERT INTO accessories (uuid, device_key, variant, display_name) VALUES (?, ?, ?, ?)
    ON CONFLICT(uuid) DO UPDATE SET
        device_key = excluded.device_key,
        variant = excluded.variant,
        display_name = excluded.display_name;
    """

    SELECT_SQL = """
    SELECT uuid, device_key, variant, display_name FROM accessories ORDER BY device_key;
    """

    DELETE_SQL = """
    DELETE FROM accessories WHERE uuid = ?;
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._lock = threading.Lock()
        with self._lock, self.conn:
            self.conn.executescript(self.CREATE_SQL)
        logger.info("Initialized accessory cache")

    @classmethod
    def open(cls, path: str) -> "SQLiteAccessoryCache":
        # pollers update display names from their own threads
        return cls(sqlite3.connect(path, check_same_thread=False))

    def load(self) -> List[DeviceRecord]:
        with self._lock:
            rows = list(self.conn.execute(self.SELECT_SQL))

        records = []
        for token, device_key, variant, display_name in rows:
            try:
                records.append(
                    DeviceRecord(
                        device_key=device_key,
                        variant=DeviceVariant(variant),
                        token=token,
                        display_name=display_name,
                    )
                )
            except ValueError:
                logger.warning("Skipping cached accessory %s with unknown variant %r", token, variant)
        logger.debug("Loaded %d cached accessories", len(records))
        return records

    def save(self, record: DeviceRecord) -> None:
        logger.debug("Caching accessory %s (%s)", record.token, record.device_key)
        with self._lock, self.conn:
            self.conn.execute(
                self.UPSERT_SQL,
                (record.token, record.device_key, record.variant.value, record.display_name),
            )

    def remove(self, token: str) -> None:
        with self._lock, self.conn:
            result = self.conn.execute(self.DELETE_SQL, (token,))
        if result.rowcount == 0:
            logger.warning("No cached accessory with uuid %s", token)

    def close(self) -> None:
        with self._lock:
            self.conn.close()
