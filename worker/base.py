import importlib
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from worker.exception import JobNotFoundError

if TYPE_CHECKING:
    from worker.scheduler import Scheduler

__all__ = ['job', 'get_job', 'get_registered_jobs', 'job_name_of', 'BaseJob', 'JobNotFoundError']

# 잡 레지스트리 (모듈 레벨, 이름 -> 클래스)
_registry: dict[str, type["BaseJob"]] = {}


def job(name: str):
    """잡 등록 데코레이터"""
    def decorator(cls):
        _registry[name] = cls
        cls.job_name = name
        return cls
    return decorator


def get_job(name: str) -> type["BaseJob"]:
    """
    잡 식별자 -> 잡 클래스

    @job 데코레이터로 등록된 이름을 먼저 찾고, 없으면 'package.module.ClassName'
    형태의 import 경로로 해석합니다.

    Raises:
        JobNotFoundError: 해석할 수 없는 식별자
    """
    if name in _registry:
        return _registry[name]

    module_name, _, attr = name.rpartition('.')
    if not module_name:
        raise JobNotFoundError(name)

    try:
        module = importlib.import_module(module_name)
        cls = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise JobNotFoundError(name) from e

    if not isinstance(cls, type):
        raise JobNotFoundError(name)
    return cls


def job_name_of(cls: type) -> str:
    """잡 클래스의 식별자 (데코레이터 이름, 없으면 import 경로)"""
    # 상속된 job_name은 무시
    return cls.__dict__.get('job_name') or f"{cls.__module__}.{cls.__qualname__}"


def get_registered_jobs() -> dict[str, type["BaseJob"]]:
    """등록된 잡 목록 반환 (테스트용)"""
    return _registry.copy()


class BaseJob(ABC):
    """
    백그라운드 잡 기본 클래스

    워커 루프가 차례가 올 때마다 새 인스턴스를 만들고 handle()을 한 번 호출합니다.
    """

    def __init__(self, scheduler: "Scheduler"):
        """
        Args:
            scheduler: 잡을 실행하는 Scheduler (현재 워커 조회, 로깅 등에 사용)
        """
        self.scheduler = scheduler

    @abstractmethod
    def handle(self) -> None:
        """
        잡 실행 로직

        Raises:
            Exception: 실행 실패 시 예외 발생 (루프는 다음 잡으로 계속 진행)
        """
        pass
