"""
Scheduler 설정 및 상태 모델
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class WorkerStatus(str, Enum):
    """start() 상태 머신의 상태"""
    NOT_STARTED = "NOT_STARTED"
    VALIDATING = "VALIDATING"
    CLAIMED = "CLAIMED"
    LOOPING = "LOOPING"
    STOPPING = "STOPPING"
    STOPPED = "STOPPED"


class StorageConfig(BaseModel):
    """상태 저장소 설정"""
    driver: str = Field(default="file", description="file | sqlite")
    path: str | None = Field(default=None, description="file: 디렉토리, sqlite: DB 파일 경로")
    options: dict[str, Any] = Field(default_factory=dict, description="sqlite PRAGMA 옵션")


class SchedulerConfig(BaseModel):
    """Scheduler 설정"""
    delay_seconds: float = Field(default=0.1, description="잡 실행 사이 대기 시간 (음수는 0으로)")
    console: bool | None = Field(default=None, description="콘솔 출력 여부 (None이면 TTY 자동 감지)")
    terminate_timeout_seconds: float = Field(default=3.0, ge=0, le=60)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    workers: dict[str, list[str]] = Field(default_factory=dict, description="워커 -> 잡 식별자 목록")

    @field_validator("delay_seconds")
    @classmethod
    def clamp_delay(cls, value: float) -> float:
        return max(0.0, value)


class LoggingConfig(BaseModel):
    """로깅 설정"""
    level: str = "INFO"
    json_format: bool = False
    log_file: str | None = None
