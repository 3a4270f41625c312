"""샘플 잡 - 테스트용"""

import logging

from worker.base import BaseJob, job

logger = logging.getLogger(__name__)


@job("sample")
class SampleJob(BaseJob):
    """테스트용 샘플 잡"""

    def handle(self) -> None:
        logger.info(f"SampleJob executed by worker '{self.scheduler.current_worker}'")
        self.scheduler.log("Hello from SampleJob!")
