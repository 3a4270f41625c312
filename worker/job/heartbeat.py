"""Heartbeat 잡 - 워커가 살아 있음을 상태 저장소에 기록"""

import logging
from datetime import datetime, timezone

from worker.base import BaseJob, job

logger = logging.getLogger(__name__)

HEARTBEAT_KEY = "heartbeat_at"


@job("heartbeat")
class HeartbeatJob(BaseJob):
    """현재 시각(UTC, ISO 8601)을 워커 스코프의 heartbeat_at 키에 저장"""

    def handle(self) -> None:
        worker = self.scheduler.current_worker
        now = datetime.now(timezone.utc).isoformat()

        if not self.scheduler.state.store.set(HEARTBEAT_KEY, now, worker):
            raise RuntimeError(f"Failed to save heartbeat for worker '{worker}'")
        logger.debug(f"Heartbeat saved: worker={worker}, at={now}")
