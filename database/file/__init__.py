"""파일 기반 상태 저장소 패키지"""

from database.file.store import FileStateStore

__all__ = ['FileStateStore']
