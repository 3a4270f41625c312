"""
Worker 관련 예외 클래스 정의
"""


class WorkerError(Exception):
    """Worker 기본 예외"""
    pass


class JobNotFoundError(WorkerError):
    """잡 클래스를 찾을 수 없음"""
    def __init__(self, name: str):
        self.name = name
        self.message = f"Job not found: {name}"
        super().__init__(self.message)


class StatePersistenceError(WorkerError):
    """워커 상태 저장 실패"""
    def __init__(self, key: str, worker: str, message: str = None):
        self.key = key
        self.worker = worker
        self.message = message or f"Can't save {key} for worker {worker}"
        super().__init__(self.message)
