"""
워커 상태 저장소 패키지

사용 예시:
    from database import create_store

    store = create_store({'driver': 'sqlite', 'path': './data/cronark.db'})
    store.set('jobs_hash', '...', 'main')
"""

import logging
from typing import Any

from database.base import StateStore, GLOBAL_SCOPE
from database.exception import DatabaseError, UnknownStoreDriverError
from database.file import FileStateStore
from database.sqlite3 import SQLiteStateStore, SqliteOptions

logger = logging.getLogger(__name__)

__all__ = [
    'StateStore',
    'GLOBAL_SCOPE',
    'FileStateStore',
    'SQLiteStateStore',
    'SqliteOptions',
    'DatabaseError',
    'UnknownStoreDriverError',
    'create_store',
]


def create_store(config: dict[str, Any]) -> StateStore:
    """
    설정(dict)으로 상태 저장소 생성

    Args:
        config: {'driver': 'file' | 'sqlite', 'path': ..., 'options': {...}}

    Raises:
        UnknownStoreDriverError: 지원하지 않는 드라이버
    """
    driver = config.get('driver', 'file')
    path = config.get('path')

    if driver == 'file':
        store = FileStateStore(path)
    elif driver == 'sqlite':
        opts = config.get('options') or {}
        options = SqliteOptions(
            busy_timeout=opts.get('busy_timeout', 5000),
            journal_mode=opts.get('journal_mode', 'WAL'),
            synchronous=opts.get('synchronous', 'NORMAL'),
        )
        store = SQLiteStateStore(path or './data/cronark.db', options)
    else:
        raise UnknownStoreDriverError(driver)

    logger.info(f"State store created (driver={driver}, path={path})")
    return store
