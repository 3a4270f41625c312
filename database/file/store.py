"""
파일 기반 상태 저장소 모듈

워커마다 하나의 JSON 파일에 상태를 저장합니다.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any
from urllib.parse import quote

from database.base import StateStore

logger = logging.getLogger(__name__)


class FileStateStore(StateStore):
    """
    파일 기반 상태 저장소

    사용 예시:
        store = FileStateStore('/var/lib/cronark')
        store.set('pid', 1234, 'main')
        store.get('pid', 'main')  # 1234
    """

    def __init__(self, path: str | Path | None = None):
        self._path = Path(path) if path else Path(tempfile.gettempdir()) / "cronark"
        self._path.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """저장 디렉토리"""
        return self._path

    def file_path(self, worker: str | None = None) -> Path:
        """워커 상태 파일 경로 (워커 이름은 퍼센트 인코딩)"""
        scope = quote(self.scope_of(worker), safe="")
        return self._path / f"worker_{scope}.json"

    def get(self, key: str, worker: str | None = None) -> Any:
        return self._load(self.file_path(worker)).get(key)

    def set(self, key: str, value: Any, worker: str | None = None) -> bool:
        file = self.file_path(worker)
        data = self._load(file)

        if value is None:
            data.pop(key, None)
        else:
            data[key] = value

        try:
            self._write(file, data)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write state file {file}: {e}")
            return False
        return True

    def clear(self, worker: str | None = None) -> bool:
        file = self.file_path(worker)
        try:
            file.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove state file {file}: {e}")
            return False
        return True

    def _load(self, file: Path) -> dict[str, Any]:
        """상태 파일 로드 (없거나 손상되면 빈 dict)"""
        try:
            data = json.loads(file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable state file {file}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, file: Path, data: dict[str, Any]) -> None:
        """임시 파일에 쓴 뒤 교체 (원자적 쓰기)"""
        payload = json.dumps(data, ensure_ascii=False)
        fd, tmp_name = tempfile.mkstemp(dir=self._path, prefix=f".{file.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
