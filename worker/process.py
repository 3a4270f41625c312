"""
프로세스 모니터 모듈

psutil로 현재 pid, 프로세스 존재 여부, 실행 중인 스크립트 경로, 종료를 다룹니다.
Linux/macOS/Windows에서 같은 방식으로 동작합니다.
"""

import logging
import os
import signal

import psutil

logger = logging.getLogger(__name__)


class ProcessMonitor:
    """OS 프로세스 조회/종료"""

    def __init__(self, terminate_timeout_seconds: float = 3.0):
        self._terminate_timeout = max(0.0, terminate_timeout_seconds)

    def current_process_id(self) -> int:
        """현재 프로세스 pid"""
        return os.getpid()

    def process_exists(self, pid: int) -> bool:
        """프로세스 존재 여부 (좀비 프로세스는 종료된 것으로 간주)"""
        if pid <= 0:
            return False
        try:
            proc = psutil.Process(pid)
            return proc.is_running() and proc.status() != psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:
            return False
        except psutil.AccessDenied:
            # 다른 사용자의 프로세스: 존재는 확인됨
            return True

    def script_path_of(self, pid: int) -> str | None:
        """
        프로세스가 실행 중인 스크립트 경로

        명령행의 두 번째 인자를 스크립트로 보고, 상대 경로면 프로세스의 작업 디렉토리
        기준으로 해석합니다. `python -m module` 형태는 '-m module'을 반환합니다.

        Returns:
            스크립트 경로, 알 수 없으면 None
        """
        if not self.process_exists(pid):
            return None

        try:
            proc = psutil.Process(pid)
            args = [arg for arg in proc.cmdline() if arg]
            if len(args) < 2:
                return None

            script = _script_argument(args)
            if script is None or script.startswith('-'):
                return script

            if os.path.isabs(script):
                return os.path.realpath(script)

            try:
                resolved = os.path.join(proc.cwd(), script)
            except (psutil.AccessDenied, psutil.ZombieProcess):
                return script
            return os.path.realpath(resolved) if os.path.exists(resolved) else script

        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess) as e:
            logger.debug(f"Can't read command line of pid {pid}: {e}")
            return None

    def terminate(self, pid: int, sig: int = signal.SIGTERM) -> bool:
        """
        프로세스 종료

        시그널을 보낸 뒤 terminate_timeout_seconds 동안 종료를 기다립니다.

        Returns:
            bool: 프로세스가 종료되었으면 True
        """
        if pid <= 0 or not self.process_exists(pid):
            return False

        try:
            proc = psutil.Process(pid)
            proc.send_signal(sig)
            proc.wait(timeout=self._terminate_timeout)
        except psutil.NoSuchProcess:
            return True
        except psutil.TimeoutExpired:
            logger.warning(f"Process {pid} still alive {self._terminate_timeout}s after signal {sig}")
        except psutil.AccessDenied as e:
            logger.warning(f"Not allowed to signal process {pid}: {e}")
            return False

        return not self.process_exists(pid)


def _script_argument(args: list[str]) -> str | None:
    """인터프리터 옵션을 건너뛰고 스크립트 인자를 찾음"""
    rest = iter(args[1:])
    for arg in rest:
        if arg in ('-m', '-c'):
            target = next(rest, None)
            return f"{arg} {target}" if target else None
        if arg in ('-W', '-X'):
            next(rest, None)
            continue
        if arg.startswith('-') and arg != '-':
            continue
        return arg
    return None
