"""
SQLite3 상태 저장소 모듈

aiosql(sqlite3 드라이버)로 SQL 파일의 쿼리를 로드하여 워커 상태를 저장합니다.
여러 프로세스가 같은 DB 파일을 공유하므로 WAL 모드와 busy_timeout을 사용합니다.
"""

import json
import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import aiosql

from database.base import StateStore

logger = logging.getLogger(__name__)

SQL_PATH = Path(__file__).parent / "sql" / "state.sql"


@dataclass
class SqliteOptions:
    """SQLite 연결 옵션"""
    busy_timeout: int = 5000
    journal_mode: str = 'WAL'
    synchronous: str = 'NORMAL'


class SQLiteStateStore(StateStore):
    """
    SQLite 기반 상태 저장소

    값은 JSON 텍스트로 저장하여 int/str 타입을 보존합니다.

    사용 예시:
        store = SQLiteStateStore('./data/cronark.db')
        store.set('current_job_index', 2, 'main')
        store.close()
    """

    def __init__(self, db_path: str | Path, options: SqliteOptions | None = None):
        self._db_path = str(db_path)
        self._options = options or SqliteOptions()
        self._queries = aiosql.from_path(str(SQL_PATH), "sqlite3")
        self._connection: sqlite3.Connection | None = None

        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        self._queries.create_state_table(self.connection)
        logger.debug(f"SQLiteStateStore initialized: {self._db_path}")

    @property
    def connection(self) -> sqlite3.Connection:
        """연결 반환 (최초 접근 시 생성)"""
        if self._connection is None:
            self._connection = self._create_connection()
        return self._connection

    def _create_connection(self) -> sqlite3.Connection:
        """새로운 SQLite 연결 생성 (PRAGMA 적용)"""
        conn = sqlite3.connect(self._db_path, timeout=self._options.busy_timeout / 1000.0)
        conn.execute(f"PRAGMA busy_timeout={self._options.busy_timeout}")
        conn.execute(f"PRAGMA journal_mode={self._options.journal_mode}")
        conn.execute(f"PRAGMA synchronous={self._options.synchronous}")
        return conn

    def get(self, key: str, worker: str | None = None) -> Any:
        try:
            raw = self._queries.get_value(self.connection, scope=self.scope_of(worker), key=key)
        except sqlite3.Error as e:
            logger.error(f"Failed to read state '{key}' for scope '{self.scope_of(worker)}': {e}")
            return None

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Invalid state value for '{key}': {raw!r}")
            return None

    def set(self, key: str, value: Any, worker: str | None = None) -> bool:
        scope = self.scope_of(worker)
        conn = self.connection
        try:
            if value is None:
                self._queries.delete_value(conn, scope=scope, key=key)
            else:
                self._queries.upsert_value(conn, scope=scope, key=key, value=json.dumps(value))
            conn.commit()
        except (sqlite3.Error, TypeError, ValueError) as e:
            conn.rollback()
            logger.error(f"Failed to write state '{key}' for scope '{scope}': {e}")
            return False
        return True

    def clear(self, worker: str | None = None) -> bool:
        conn = self.connection
        try:
            self._queries.delete_scope(conn, scope=self.scope_of(worker))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Failed to clear scope '{self.scope_of(worker)}': {e}")
            return False
        return True

    def close(self) -> None:
        """연결 종료"""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.debug(f"SQLiteStateStore closed: {self._db_path}")
