"""Worker 모듈 - 순환 잡 실행 루프"""

from worker.base import BaseJob, job, get_job
from worker.exception import WorkerError, JobNotFoundError, StatePersistenceError
from worker.process import ProcessMonitor
from worker.registry import JobRegistry
from worker.scheduler import Scheduler
from worker.state import WorkerState

__all__ = [
    "BaseJob",
    "job",
    "get_job",
    "WorkerError",
    "JobNotFoundError",
    "StatePersistenceError",
    "ProcessMonitor",
    "JobRegistry",
    "Scheduler",
    "WorkerState",
]
