"""
SQLite3 상태 저장소 패키지

사용 예시:
    from database.sqlite3 import SQLiteStateStore, SqliteOptions

    store = SQLiteStateStore('./data/cronark.db', SqliteOptions(journal_mode='WAL'))
    store.set('pid', 1234, 'main')
"""

from database.sqlite3.store import SQLiteStateStore, SqliteOptions

__all__ = [
    'SQLiteStateStore',
    'SqliteOptions',
]
