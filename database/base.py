"""
상태 저장소 기본 인터페이스

워커별 상태(jobs_hash, current_job_index, pid)를 보관하는 키/값 저장소의
공통 인터페이스를 정의합니다.
"""

from abc import ABC, abstractmethod
from typing import Any

# worker 인자가 생략되었을 때 사용하는 스코프
GLOBAL_SCOPE = "global"


class StateStore(ABC):
    """
    상태 저장소 기본 클래스

    파일, SQLite 등 다양한 저장소를 지원하기 위한 공통 인터페이스입니다.
    워커 스코프마다 키가 분리되어야 하며, 쓰기 실패는 예외 대신 False로 알립니다.
    """

    @abstractmethod
    def get(self, key: str, worker: str | None = None) -> Any:
        """
        값 조회

        Args:
            key: 조회할 키
            worker: 워커 이름 (None이면 global 스코프)

        Returns:
            저장된 값, 없으면 None
        """
        ...

    @abstractmethod
    def set(self, key: str, value: Any, worker: str | None = None) -> bool:
        """
        값 저장 (value가 None이면 키 삭제)

        Returns:
            bool: 저장 성공 여부
        """
        ...

    @abstractmethod
    def clear(self, worker: str | None = None) -> bool:
        """워커 스코프 전체 삭제"""
        ...

    @staticmethod
    def scope_of(worker: str | None) -> str:
        """워커 이름 -> 스코프 이름"""
        return GLOBAL_SCOPE if worker is None else worker
