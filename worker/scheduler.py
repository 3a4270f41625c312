"""
Scheduler: 워커 루프 모듈

크론 등으로 주기적으로 호출되어 워커 하나당 하나의 장기 실행 프로세스만 유지합니다.
등록된 잡을 순서대로 무한 반복 실행하고, 실행 위치를 저장하여 재시작 시 이어서 실행합니다.

사용 예시:
    scheduler = Scheduler(FileStateStore('/var/lib/cronark'))
    scheduler.add_job(CleanupJob, 'main')
    scheduler.add_job('sample', 'main')
    scheduler.start('main')  # 루프가 끝날 때까지 블로킹
"""

import logging
import signal
import sys
import time

from database.base import StateStore
from database.file import FileStateStore
from worker.base import get_job, job_name_of
from worker.exception import JobNotFoundError, StatePersistenceError
from worker.model.scheduler import SchedulerConfig, WorkerStatus
from worker.process import ProcessMonitor
from worker.registry import JobRegistry, DEFAULT_WORKER
from worker.state import WorkerState, JOBS_HASH_KEY, CURRENT_JOB_INDEX_KEY, PID_KEY

logger = logging.getLogger(__name__)


class Scheduler:
    """
    워커 스케줄러

    start()는 다음 순서로 동작합니다:
    1. 등록된 워커인지 확인
    2. 현재 잡 목록 해시 저장 (목록이 바뀌었으면 저장된 인덱스는 무효)
    3. 같은 워커를 실행 중인 프로세스가 있는지 확인
    4. 현재 pid 저장 (워커 점유)
    5. 잡 실행 -> pid 재확인 -> 다음 인덱스 -> 대기 를 반복

    다른 프로세스가 pid를 덮어쓰면 현재 잡 실행 후 루프를 종료합니다.
    can_* / on_* 메서드는 하위 클래스에서 오버라이드할 수 있습니다.
    """

    def __init__(
        self,
        store: StateStore | None = None,
        process: ProcessMonitor | None = None,
        config: SchedulerConfig | None = None,
    ):
        """
        Args:
            store: 상태 저장소 (None이면 임시 디렉토리의 FileStateStore)
            process: 프로세스 모니터 (None이면 기본 ProcessMonitor)
            config: Scheduler 설정
        """
        self._config = config or SchedulerConfig()
        self._registry = JobRegistry()
        self._state = WorkerState(self._registry, store or FileStateStore())
        self._process = process or ProcessMonitor(self._config.terminate_timeout_seconds)
        self._job_types: dict[str, type] = {}
        self._delay = self._config.delay_seconds
        self._console = self._config.console if self._config.console is not None else sys.stdout.isatty()

        self._current_worker: str | None = None
        self._current_job: str | None = None
        self._status = WorkerStatus.NOT_STARTED

    # ------------------------------------------------------------
    # 잡 레지스트리
    # ------------------------------------------------------------

    @property
    def registry(self) -> JobRegistry:
        return self._registry

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def process(self) -> ProcessMonitor:
        return self._process

    def register_worker(self, worker: str) -> None:
        """워커 등록 (빈 잡 목록 생성)"""
        self._registry.register(worker)

    def add_job(self, job: str | type, worker: str = DEFAULT_WORKER, position: int | None = None) -> None:
        """
        워커에 잡 추가

        Args:
            job: 잡 식별자 또는 잡 클래스
            worker: 워커 이름
            position: 삽입 위치 (None이면 맨 뒤)
        """
        if isinstance(job, type):
            name = job_name_of(job)
            self._job_types[name] = job
        else:
            name = job
        self._registry.add(name, worker, position)

    def get_job(self, position: int | None, worker: str | None = None) -> str | None:
        """위치의 잡 식별자 (worker=None이면 현재 워커)"""
        return self._registry.get(position, worker or self._current_worker or DEFAULT_WORKER)

    def has_job(self, position: int | None, worker: str = DEFAULT_WORKER) -> bool:
        return self._registry.has(position, worker)

    def has_any_job(self, worker: str | None = None) -> bool:
        return self._registry.has_any(worker)

    def get_jobs_count(self, worker: str | None = None) -> int:
        return self._registry.count(worker)

    def get_jobs_hash(self, worker: str | None = None) -> str:
        return self._registry.hash(worker)

    def resolve_job(self, job: str) -> type:
        """잡 식별자 -> 잡 클래스 (add_job으로 받은 클래스 우선)"""
        if job in self._job_types:
            return self._job_types[job]
        return get_job(job)

    # ------------------------------------------------------------
    # 저장된 상태
    # ------------------------------------------------------------

    def get_saved_jobs_hash(self, worker: str | None = None) -> str | None:
        return self._state.get_saved_hash(worker)

    def save_jobs_hash(self, jobs_hash: str | None, worker: str | None = None) -> bool:
        return self._state.save_hash(jobs_hash, worker)

    def has_jobs_hash_changed(self, worker: str | None = None) -> bool:
        return self._state.hash_changed(worker)

    def get_current_job_index(self, worker: str = DEFAULT_WORKER) -> int | None:
        return self._state.get_current_index(worker)

    def set_current_job_index(self, index: int | None, worker: str = DEFAULT_WORKER) -> bool:
        return self._state.set_current_index(index, worker)

    def get_pid(self, worker: str = DEFAULT_WORKER) -> int | None:
        return self._state.get_pid(worker)

    def set_pid(self, pid: int | None, worker: str = DEFAULT_WORKER) -> bool:
        return self._state.set_pid(pid, worker)

    # ------------------------------------------------------------
    # 실행 상태
    # ------------------------------------------------------------

    @property
    def current_worker(self) -> str | None:
        """현재 루프를 실행 중인 워커 이름"""
        return self._current_worker

    @property
    def current_job(self) -> str | None:
        """현재 실행 중인 잡 식별자"""
        return self._current_job

    @property
    def status(self) -> WorkerStatus:
        return self._status

    @property
    def delay(self) -> float:
        """잡 실행 사이 대기 시간 (초)"""
        return self._delay

    def set_delay(self, seconds: float) -> "Scheduler":
        """대기 시간 설정 (음수는 0)"""
        self._delay = max(0.0, seconds)
        return self

    # ------------------------------------------------------------
    # 중복 실행 방지
    # ------------------------------------------------------------

    def is_active(self, worker: str = DEFAULT_WORKER) -> bool:
        """
        워커가 다른 프로세스에서 실행 중인지

        저장된 pid의 프로세스가 살아 있고 같은 스크립트를 실행 중이면 True.
        스크립트 경로를 알 수 없으면 중복 실행을 피하기 위해 True로 판단합니다.
        """
        pid = self.get_pid(worker)
        if not pid or not self._process.process_exists(pid):
            return False

        current_path = self._process.script_path_of(self._process.current_process_id())
        target_path = self._process.script_path_of(pid)

        if current_path is None or target_path is None:
            return True
        return current_path == target_path

    def kill(self, worker: str = DEFAULT_WORKER) -> bool:
        """
        워커 프로세스 종료

        Returns:
            bool: 종료했거나 이미 없는 프로세스라서 pid를 지웠으면 True
        """
        pid = self.get_pid(worker)
        if not pid:
            return False

        killed = self._process.terminate(pid)

        if killed or not self._process.process_exists(pid):
            self.set_pid(None, worker)
            logger.info(f"Worker '{worker}' killed (pid={pid}, terminated={killed})")
            return True

        logger.warning(f"Failed to kill worker '{worker}' (pid={pid})")
        return False

    def kill_all(self) -> None:
        """등록된 모든 워커 종료 (개별 실패는 무시)"""
        for worker in self._registry.workers:
            self.kill(worker)

    # ------------------------------------------------------------
    # 순환 인덱스
    # ------------------------------------------------------------

    def next_job_index(self, worker: str = DEFAULT_WORKER) -> int | None:
        """
        다음 잡 인덱스로 이동

        Returns:
            다음 인덱스 (마지막 다음은 0), 잡이 없거나 해시가 바뀌었으면 None

        Raises:
            StatePersistenceError: 인덱스 저장 실패
        """
        if not self.has_any_job(worker) or self.has_jobs_hash_changed(worker):
            return None

        current = self.get_current_job_index(worker)
        if current is None:
            current = -1

        next_index = current + 1
        if not self.has_job(next_index, worker):
            next_index = 0

        if not self.set_current_job_index(next_index, worker):
            raise StatePersistenceError(CURRENT_JOB_INDEX_KEY, worker)

        return next_index

    def next_job(self, worker: str = DEFAULT_WORKER) -> str | None:
        """다음 잡 식별자"""
        index = self.next_job_index(worker)
        if index is None:
            return None
        return self.get_job(index, worker)

    # ------------------------------------------------------------
    # 메인 루프
    # ------------------------------------------------------------

    def start(self, worker: str) -> None:
        """
        워커 루프 시작 (크론에서 호출하는 진입점)

        루프가 끝날 때까지 블로킹합니다. 예외는 on_error로 전달되며 호출자에게 전파되지 않습니다.
        """
        self._status = WorkerStatus.VALIDATING

        try:
            if not self.can_start(worker):
                self.log(f"Worker '{worker}' cannot start (not registered)", worker)
                return

            self._current_worker = worker
            self.log("Started", worker)
            self.on_started(worker)

            self.log(f"Jobs count: {self.get_jobs_count(worker)}", worker)

            # 현재 잡 목록 해시 저장
            jobs_hash = self.get_jobs_hash(worker)
            if not self.save_jobs_hash(jobs_hash, worker):
                raise StatePersistenceError(JOBS_HASH_KEY, worker)
            self.log(f"Saved jobs hash: {jobs_hash}", worker)

            if not self.has_any_job(worker):
                self.log("No jobs found", worker)
                return

            # 중복 실행 확인
            if self.is_active(worker):
                self.log(f"Already running under PID {self.get_pid(worker)}, aborting", worker)
                return

            # 워커 점유
            if not self.set_pid(self._process.current_process_id(), worker):
                raise StatePersistenceError(PID_KEY, worker)
            self._status = WorkerStatus.CLAIMED

            if not self.set_current_job_index(None, worker):
                raise StatePersistenceError(CURRENT_JOB_INDEX_KEY, worker)

            _disable_time_limit()

            job_index = self.next_job_index(worker)
            job = self.get_job(job_index, worker)
            if job is not None:
                self.log(f"Starting with job index: {job_index}, job: {job}", worker)

            self._status = WorkerStatus.LOOPING
            is_first = True

            while self.can_loop(job, job_index, worker, is_first):
                self.handle(job, job_index, worker, is_first)

                # pid가 바뀌었으면 다른 프로세스가 워커를 넘겨받은 것
                if self.can_check_pid(job, job_index, worker, is_first):
                    saved_pid = self.get_pid(worker)
                    current_pid = self._process.current_process_id()
                    if saved_pid != current_pid:
                        self.log(f"PID mismatch (saved: {saved_pid}, current: {current_pid}), stopping", worker)
                        break

                job_index = self.next_job_index(worker)
                job = self.get_job(job_index, worker)

                if not self.can_resume(job, job_index, worker):
                    self.log("Cannot resume loop", worker)
                    break

                self.on_resume(job, job_index, worker, is_first)
                is_first = False

                if self._delay > 0:
                    time.sleep(self._delay)

        except Exception as e:
            try:
                self.on_error(e, worker)
            except Exception as hook_error:
                logger.exception(f"Worker '{worker}' on_error hook failed: {hook_error}")

        finally:
            self._status = WorkerStatus.STOPPING
            self._current_worker = None
            self.log("Stopped", worker)
            try:
                self.on_stopped(worker)
            except Exception as hook_error:
                logger.exception(f"Worker '{worker}' on_stopped hook failed: {hook_error}")
            finally:
                self._status = WorkerStatus.STOPPED

    def handle(self, job: str | None, index: int | None, worker: str = DEFAULT_WORKER, is_first: bool = True) -> bool:
        """
        잡 한 번 실행

        Returns:
            bool: 실행 성공 여부 (잡 예외는 on_error로 전달하고 False 반환)
        """
        try:
            if not self.can_handle(job, index, worker):
                self.log("Cannot handle job (validation failed)", worker)
                return False

            try:
                job_class = self.resolve_job(job)
            except JobNotFoundError:
                self.log(f"Job class not found: {job}", worker)
                return False

            self._current_job = job
            self.on_job_creating(job, worker)

            instance = job_class(self)
            instance.handle()
            self.log("Job completed", worker)
            return True

        except Exception as e:
            self.on_error(e, worker)
            return False

        finally:
            self._current_job = None

    # ------------------------------------------------------------
    # 판단 훅 (오버라이드 가능)
    # ------------------------------------------------------------

    def can_start(self, worker: str) -> bool:
        return self._registry.is_registered(worker)

    def can_handle(self, job: str | None, index: int | None, worker: str) -> bool:
        return job is not None and index is not None and self.has_job(index, worker)

    def can_loop(self, job: str | None, index: int | None, worker: str, is_first: bool = True) -> bool:
        return job is not None and index is not None and self.has_job(index, worker)

    def can_check_pid(self, job: str | None, index: int | None, worker: str, is_first: bool = True) -> bool:
        return True

    def can_resume(self, job: str | None, index: int | None, worker: str) -> bool:
        return job is not None

    # ------------------------------------------------------------
    # 라이프사이클 훅 (오버라이드 가능)
    # ------------------------------------------------------------

    def on_job_creating(self, job: str, worker: str) -> None:
        """잡 인스턴스 생성 직전"""
        pass

    def on_started(self, worker: str) -> None:
        """워커 시작"""
        pass

    def on_resume(self, job: str | None, index: int | None, worker: str, is_first: bool) -> None:
        """다음 루프 진입 직전"""
        pass

    def on_stopped(self, worker: str) -> None:
        """워커 종료 (모든 종료 경로에서 호출)"""
        pass

    def on_error(self, error: Exception, worker: str) -> None:
        """에러 발생"""
        logger.error(f"Worker '{worker}' error: {error}", exc_info=error)
        self.log(f"Error: {error}", worker)

    # ------------------------------------------------------------
    # 진단 출력
    # ------------------------------------------------------------

    def log(self, message: str, worker: str | None = None) -> None:
        """'> Cronark::worker.Job: message' 형식의 진단 메시지 (콘솔 모드에서만 출력)"""
        prefix = "> Cronark"

        worker = worker if worker is not None else self._current_worker
        if worker is not None:
            prefix += f"::{worker}"
        if self._current_job is not None:
            prefix += "." + self._current_job.rpartition('.')[2]

        line = f"{prefix}: {message}"
        logger.debug(line)
        if self._console:
            print(line, flush=True)


def _disable_time_limit() -> None:
    """예약된 SIGALRM 취소 (무한 루프가 시간 제한으로 중단되지 않도록)"""
    if hasattr(signal, "alarm"):
        signal.alarm(0)
