"""
워커 상태 접근 모듈

상태 저장소 위에서 워커 단위로 jobs_hash, current_job_index, pid를 읽고 씁니다.
"""

from typing import Any

from database.base import StateStore
from worker.registry import JobRegistry, DEFAULT_WORKER

JOBS_HASH_KEY = "jobs_hash"
CURRENT_JOB_INDEX_KEY = "current_job_index"
PID_KEY = "pid"


class WorkerState:
    """
    워커 상태 접근 객체

    current_job_index는 저장된 jobs_hash가 현재 레지스트리 해시와 같을 때만 유효합니다.
    """

    def __init__(self, registry: JobRegistry, store: StateStore):
        self._registry = registry
        self._store = store

    @property
    def store(self) -> StateStore:
        return self._store

    def get_saved_hash(self, worker: str | None = None) -> str | None:
        """저장된 jobs_hash"""
        saved = self._store.get(JOBS_HASH_KEY, worker)
        return saved if isinstance(saved, str) else None

    def save_hash(self, jobs_hash: str | None, worker: str | None = None) -> bool:
        return self._store.set(JOBS_HASH_KEY, jobs_hash, worker)

    def hash_changed(self, worker: str | None = None) -> bool:
        """잡 목록이 마지막 저장 이후 바뀌었는지"""
        return self._registry.hash(worker) != self.get_saved_hash(worker)

    def get_current_index(self, worker: str = DEFAULT_WORKER) -> int | None:
        """
        현재 잡 인덱스

        Returns:
            잡이 없거나, 해시가 바뀌었거나, 저장된 값이 없거나,
            더 이상 유효한 위치가 아니면 None
        """
        if not self._registry.has_any(worker) or self.hash_changed(worker):
            return None

        index = self._store.get(CURRENT_JOB_INDEX_KEY, worker)
        if not _is_int(index) or not self._registry.has(index, worker):
            return None
        return index

    def set_current_index(self, index: int | None, worker: str = DEFAULT_WORKER) -> bool:
        return self._store.set(CURRENT_JOB_INDEX_KEY, index, worker)

    def get_pid(self, worker: str = DEFAULT_WORKER) -> int | None:
        """저장된 pid (숫자 문자열도 허용)"""
        pid = self._store.get(PID_KEY, worker)
        if _is_int(pid):
            return pid
        if isinstance(pid, str) and pid.strip().isdigit():
            return int(pid)
        return None

    def set_pid(self, pid: int | None, worker: str = DEFAULT_WORKER) -> bool:
        return self._store.set(PID_KEY, pid, worker)


def _is_int(value: Any) -> bool:
    # bool은 int의 하위 타입이므로 제외
    return isinstance(value, int) and not isinstance(value, bool)
