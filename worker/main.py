"""
워커 실행 진입점

설정 파일의 워커/잡 목록으로 Scheduler를 만들고 워커 루프를 실행합니다.
크론에서 매 분 호출해도 워커당 하나의 프로세스만 유지됩니다.

실행 방법:
    python -m worker.main main
    python -m worker.main main --config config/cronark.yaml

크론 예시:
    * * * * * cd /opt/cronark && python -m worker.main main >/dev/null 2>&1
"""

import argparse
import logging
from pathlib import Path

import yaml

from common.logging import setup_logging
from database import create_store
from worker.model.scheduler import SchedulerConfig, LoggingConfig
from worker.scheduler import Scheduler

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "cronark.yaml"


def load_config(path: str | Path | None = None) -> tuple[SchedulerConfig, LoggingConfig]:
    """
    YAML 설정 로드

    Args:
        path: 설정 파일 경로 (None이면 config/cronark.yaml)

    Raises:
        FileNotFoundError: 설정 파일 없음
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    scheduler_config = SchedulerConfig(**(raw.get("cronark") or {}))
    logging_config = LoggingConfig(**(raw.get("logging") or {}))
    return scheduler_config, logging_config


def build_scheduler(config: SchedulerConfig) -> Scheduler:
    """설정으로 Scheduler 생성 (잡 모듈 로드, 저장소 생성, 워커/잡 등록)"""
    _load_jobs()

    store = create_store(config.storage.model_dump())
    scheduler = Scheduler(store, config=config)

    for worker, jobs in config.workers.items():
        scheduler.register_worker(worker)
        for job in jobs:
            scheduler.add_job(job, worker)
        logger.debug(f"Registered worker '{worker}' with {len(jobs)} jobs")

    return scheduler


def run(worker: str, config_path: str | Path | None = None) -> None:
    """설정 로드 후 워커 루프 실행 (블로킹)"""
    scheduler_config, logging_config = load_config(config_path)
    setup_logging(**logging_config.model_dump())

    scheduler = build_scheduler(scheduler_config)
    logger.info(f"Starting worker '{worker}'...")
    scheduler.start(worker)


def _load_jobs() -> None:
    """잡 모듈 로드 (데코레이터 등록을 위해, 하위 폴더 재귀 탐색)"""
    import importlib
    import pkgutil

    # worker 패키지가 job 데코레이터를 export하므로 서브패키지는 경로로 import
    job_pkg = importlib.import_module("worker.job")

    def load_recursive(package, prefix: str):
        for _, module_name, is_pkg in pkgutil.iter_modules(package.__path__):
            full_name = f"{prefix}.{module_name}"
            module = importlib.import_module(full_name)
            logger.debug(f"Loaded job module: {full_name}")
            if is_pkg:
                load_recursive(module, full_name)

    load_recursive(job_pkg, "worker.job")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(prog="python -m worker.main", description="Run a cronark worker loop")
    parser.add_argument("worker", nargs="?", default="main", help="Worker name (default: main)")
    parser.add_argument("-c", "--config", default=None, help="Config file path")
    args = parser.parse_args()

    try:
        run(args.worker, args.config)
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
