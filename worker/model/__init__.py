"""Worker 모델"""

from worker.model.scheduler import WorkerStatus, StorageConfig, SchedulerConfig, LoggingConfig

__all__ = ['WorkerStatus', 'StorageConfig', 'SchedulerConfig', 'LoggingConfig']
