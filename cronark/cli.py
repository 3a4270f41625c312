"""cronark CLI"""

import argparse
import logging
import sys

from common.logging import setup_logging
from worker.main import load_config, build_scheduler
from worker.scheduler import Scheduler

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def start_worker(scheduler: Scheduler, worker: str) -> int:
    """워커 루프 실행 (이미 실행 중이거나 설정에 없는 워커여도 진단 메시지만 남기고 정상 종료)"""
    if not scheduler.registry.is_registered(worker):
        logger.warning(f"Worker '{worker}' is not configured")

    scheduler.start(worker)
    return 0


def kill_worker(scheduler: Scheduler, worker: str) -> int:
    """워커 프로세스 종료"""
    pid = scheduler.get_pid(worker)
    if pid is None:
        print(f"Worker '{worker}' has no saved PID")
        return 1

    if scheduler.kill(worker):
        print(f"Worker '{worker}' stopped (PID {pid})")
        return 0

    print(f"Error: Failed to stop worker '{worker}' (PID {pid})")
    return 1


def kill_all_workers(scheduler: Scheduler) -> int:
    """모든 워커 프로세스 종료"""
    scheduler.kill_all()
    for worker in scheduler.registry.workers:
        pid = scheduler.get_pid(worker)
        status = f"still running (PID {pid})" if pid else "stopped"
        print(f"{worker}: {status}")
    return 0


def show_status(scheduler: Scheduler, workers: list[str]) -> int:
    """워커 상태 출력"""
    for worker in workers:
        pid = scheduler.get_pid(worker)
        print(
            f"{worker}: pid={pid or '-'} "
            f"active={'yes' if scheduler.is_active(worker) else 'no'} "
            f"jobs={scheduler.get_jobs_count(worker)} "
            f"index={_or_dash(scheduler.get_current_job_index(worker))} "
            f"hash_changed={'yes' if scheduler.has_jobs_hash_changed(worker) else 'no'}"
        )
    print(f"jobs hash (all workers): {scheduler.get_jobs_hash()}")
    return 0


def _or_dash(value) -> str:
    return '-' if value is None else str(value)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="cronark",
        description="cronark - cron 기반 단일 머신 백그라운드 잡 실행기"
    )
    parser.add_argument("-c", "--config", default=None, help="Config file path (default: config/cronark.yaml)")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # 하위 명령 뒤에도 -c 허용 (cronark start main -c config.yaml)
    config_parent = argparse.ArgumentParser(add_help=False)
    config_parent.add_argument("-c", "--config", default=argparse.SUPPRESS, help="Config file path")

    # start command
    start_parser = subparsers.add_parser("start", parents=[config_parent], help="Run a worker loop (blocks)")
    start_parser.add_argument("worker", help="Worker name")

    # kill command
    kill_parser = subparsers.add_parser("kill", parents=[config_parent], help="Terminate a running worker")
    kill_parser.add_argument("worker", help="Worker name")

    # kill-all command
    subparsers.add_parser("kill-all", parents=[config_parent], help="Terminate all configured workers")

    # status command
    status_parser = subparsers.add_parser("status", parents=[config_parent], help="Show worker state")
    status_parser.add_argument("worker", nargs="?", default=None, help="Worker name (default: all)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        scheduler_config, logging_config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: Config file not found: {e.filename}")
        return 1

    setup_logging(**logging_config.model_dump())
    scheduler = build_scheduler(scheduler_config)

    if args.command == "start":
        return start_worker(scheduler, args.worker)
    if args.command == "kill":
        return kill_worker(scheduler, args.worker)
    if args.command == "kill-all":
        return kill_all_workers(scheduler)
    workers = [args.worker] if args.worker else scheduler.registry.workers
    return show_status(scheduler, workers)


if __name__ == "__main__":
    sys.exit(main())
