"""
잡 레지스트리 모듈

워커별로 실행할 잡 식별자 목록을 순서대로 보관합니다.
레지스트리는 메모리에만 존재하며, 변경 감지는 hash()로 합니다.
"""

import hashlib
import json

DEFAULT_WORKER = "main"


class JobRegistry:
    """
    워커 -> 잡 식별자 목록

    같은 잡을 여러 번 등록할 수 있고, 목록 순서가 곧 실행 순서입니다.
    """

    def __init__(self):
        self._workers: dict[str, list[str]] = {}

    def register(self, worker: str) -> None:
        """워커 등록 (이미 있으면 무시)"""
        self._workers.setdefault(worker, [])

    def is_registered(self, worker: str) -> bool:
        return worker in self._workers

    @property
    def workers(self) -> list[str]:
        """등록된 워커 이름 (등록 순서)"""
        return list(self._workers)

    def jobs(self, worker: str) -> list[str]:
        """워커의 잡 목록 사본"""
        return list(self._workers.get(worker, []))

    def add(self, job: str, worker: str = DEFAULT_WORKER, position: int | None = None) -> None:
        """
        잡 추가

        Args:
            job: 잡 식별자
            worker: 워커 이름 (없으면 자동 등록)
            position: 0부터 시작하는 삽입 위치 (None, 음수, 범위 밖이면 맨 뒤에 추가)
        """
        self.register(worker)
        jobs = self._workers[worker]

        if position is None or position < 0 or position >= len(jobs):
            jobs.append(job)
        else:
            jobs.insert(position, job)

    def get(self, position: int | None, worker: str = DEFAULT_WORKER) -> str | None:
        """위치의 잡 식별자 (워커가 없거나 범위 밖이면 None)"""
        if not self.has(position, worker):
            return None
        return self._workers[worker][position]

    def has(self, position: int | None, worker: str = DEFAULT_WORKER) -> bool:
        """위치에 잡이 있는지"""
        if position is None or position < 0:
            return False
        return position < len(self._workers.get(worker, []))

    def has_any(self, worker: str | None = None) -> bool:
        """잡이 하나라도 있는지 (worker=None이면 전체 워커 기준)"""
        return self.count(worker) > 0

    def count(self, worker: str | None = None) -> int:
        """잡 개수 (worker=None이면 전체 합계)"""
        if worker is None:
            return sum(len(jobs) for jobs in self._workers.values())
        return len(self._workers.get(worker, []))

    def hash(self, worker: str | None = None) -> str:
        """
        잡 목록 해시 (변경 감지용)

        순서/추가/삭제가 바뀌면 값이 달라지고, 같은 목록이면 재시작 후에도 같은 값입니다.
        worker=None이면 전체 워커를 워커별로 묶어서 계산합니다.
        """
        if worker is None:
            payload = json.dumps(self._workers, sort_keys=True, ensure_ascii=False)
        else:
            payload = json.dumps(self._workers.get(worker, []), ensure_ascii=False)
        return hashlib.md5(payload.encode('utf-8')).hexdigest()
