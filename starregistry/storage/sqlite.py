# starregistry/storage/sqlite.py
import sqlite3
from pathlib import Path
from typing import List, Optional, Union

from starregistry.config import RegistrySettings
from starregistry.core.types import Block
from . import StorageBackend


class SQLiteStorage(StorageBackend):
    """SQLite persistent storage for committed blocks."""

    def __init__(self, db_path: Union[str, Path, None] = None):
        if db_path is None:
            db_path = RegistrySettings.from_env().db_path

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = self.db_path.resolve()

        self._conn: Optional[sqlite3.Connection] = None
        self._connect()

    def _connect(self):
        self._conn = sqlite3.connect(str(self.db_path), isolation_level=None, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._create_schema()

    def _create_schema(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS blocks (
                height          INTEGER PRIMARY KEY,
                hash            TEXT    NOT NULL UNIQUE,
                previous_hash   TEXT,
                timestamp       INTEGER NOT NULL,
                payload         TEXT    NOT NULL
            )
        """)

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Storage connection is closed")
        return self._conn

    def append(self, block: Block) -> None:
        self.conn.execute("""
            INSERT INTO blocks (height, hash, previous_hash, timestamp, payload)
            VALUES (?, ?, ?, ?, ?)
        """, (block.height, block.hash, block.previous_hash, block.timestamp, block.payload))

    def load_blocks(self) -> List[Block]:
        cursor = self.conn.execute("""
            SELECT height, hash, previous_hash, timestamp, payload
            FROM blocks ORDER BY height ASC
        """)
        return [
            Block(height=h, timestamp=ts, previous_hash=prev, payload=payload, hash=digest)
            for h, digest, prev, ts, payload in cursor
        ]

    def block_count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM blocks").fetchone()[0]

    def latest_timestamp(self) -> Optional[int]:
        row = self.conn.execute("SELECT MAX(timestamp) FROM blocks").fetchone()
        return row[0] if row and row[0] is not None else None

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
