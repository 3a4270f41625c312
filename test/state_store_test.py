"""
상태 저장소 테스트

테스트 항목:
1. FileStateStore / SQLiteStateStore 공통 동작 (get/set/None 삭제/clear)
2. 워커 스코프 분리, global 스코프
3. 인스턴스 간 영속성
4. 손상된 상태 파일 처리
5. create_store() 팩토리

실행: python -m pytest test/state_store_test.py -v
"""

import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from database import (
    create_store,
    FileStateStore,
    SQLiteStateStore,
    SqliteOptions,
    UnknownStoreDriverError,
)

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# ============================================================
# Fixtures
# ============================================================

def _open_store(kind: str, tmp_path: Path):
    if kind == "file":
        return FileStateStore(tmp_path / "state")
    return SQLiteStateStore(tmp_path / "state.db", SqliteOptions(busy_timeout=1000))


@pytest.fixture(params=["file", "sqlite"])
def store_kind(request):
    return request.param


@pytest.fixture
def store(store_kind, tmp_path):
    """테스트용 저장소 (파일/SQLite 각각 실행)"""
    store = _open_store(store_kind, tmp_path)
    yield store
    if isinstance(store, SQLiteStateStore):
        store.close()


# ============================================================
# 공통 동작
# ============================================================

class TestStateStore:
    """저장소 공통 동작 테스트"""

    def test_get_missing_key_returns_none(self, store):
        assert store.get("missing", "w") is None

    def test_set_and_get(self, store):
        assert store.set("jobs_hash", "abc", "w") is True
        assert store.get("jobs_hash", "w") == "abc"

    def test_preserves_types(self, store):
        """int/str 타입 보존"""
        store.set("pid", 1234, "w")
        store.set("current_job_index", 0, "w")
        store.set("jobs_hash", "123", "w")

        assert store.get("pid", "w") == 1234
        assert isinstance(store.get("pid", "w"), int)
        assert store.get("current_job_index", "w") == 0
        assert store.get("jobs_hash", "w") == "123"

    def test_overwrite(self, store):
        store.set("pid", 1, "w")
        store.set("pid", 2, "w")

        assert store.get("pid", "w") == 2

    def test_set_none_removes_key(self, store):
        """None 저장은 키 삭제"""
        store.set("pid", 1, "w")
        store.set("jobs_hash", "abc", "w")

        assert store.set("pid", None, "w") is True
        assert store.get("pid", "w") is None
        assert store.get("jobs_hash", "w") == "abc"

    def test_set_none_on_missing_key(self, store):
        assert store.set("pid", None, "w") is True

    def test_workers_are_isolated(self, store):
        """워커별로 키가 분리됨"""
        store.set("pid", 1, "w1")
        store.set("pid", 2, "w2")

        assert store.get("pid", "w1") == 1
        assert store.get("pid", "w2") == 2

    def test_worker_names_are_case_sensitive(self, store_kind, store):
        if store_kind == "file" and _case_insensitive_fs(store.path):
            pytest.skip("case-insensitive filesystem")

        store.set("pid", 1, "Main")
        store.set("pid", 2, "main")

        assert store.get("pid", "Main") == 1
        assert store.get("pid", "main") == 2

    def test_global_scope(self, store):
        """worker 생략 시 global 스코프"""
        store.set("key", "global-value")
        store.set("key", "worker-value", "w")

        assert store.get("key") == "global-value"
        assert store.get("key", "global") == "global-value"
        assert store.get("key", "w") == "worker-value"

    def test_clear_removes_worker_scope(self, store):
        store.set("pid", 1, "w1")
        store.set("jobs_hash", "abc", "w1")
        store.set("pid", 2, "w2")

        assert store.clear("w1") is True
        assert store.get("pid", "w1") is None
        assert store.get("jobs_hash", "w1") is None
        assert store.get("pid", "w2") == 2

    def test_clear_missing_scope(self, store):
        assert store.clear("never-used") is True

    def test_persists_across_instances(self, store_kind, store, tmp_path):
        """다른 인스턴스(다른 프로세스)에서도 같은 값"""
        store.set("current_job_index", 3, "w")

        other = _open_store(store_kind, tmp_path)
        try:
            assert other.get("current_job_index", "w") == 3
            other.set("current_job_index", 4, "w")
            assert store.get("current_job_index", "w") == 4
        finally:
            if isinstance(other, SQLiteStateStore):
                other.close()


def _case_insensitive_fs(path: Path) -> bool:
    probe = path / "CaseProbe"
    probe.touch()
    try:
        return (path / "caseprobe").exists()
    finally:
        probe.unlink()


# ============================================================
# FileStateStore
# ============================================================

class TestFileStateStore:
    """파일 저장소 전용 테스트"""

    def test_creates_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir"
        FileStateStore(path)

        assert path.is_dir()

    def test_worker_name_with_path_separator(self, tmp_path):
        """워커 이름의 '/'는 파일 경로로 해석되지 않음"""
        store = FileStateStore(tmp_path)
        store.set("pid", 7, "team/jobs")

        assert store.get("pid", "team/jobs") == 7
        assert store.file_path("team/jobs").parent == tmp_path

    def test_corrupted_file_reads_as_empty(self, tmp_path):
        """손상된 파일은 빈 상태로 취급하고 다음 쓰기에서 복구"""
        store = FileStateStore(tmp_path)
        store.file_path("w").write_text("{not json", encoding="utf-8")

        assert store.get("pid", "w") is None
        assert store.set("pid", 1, "w") is True
        assert store.get("pid", "w") == 1

    def test_no_temp_files_left(self, tmp_path):
        store = FileStateStore(tmp_path)
        for i in range(5):
            store.set("current_job_index", i, "w")

        assert [p.name for p in tmp_path.iterdir()] == ["worker_w.json"]

    def test_unserializable_value_returns_false(self, tmp_path):
        store = FileStateStore(tmp_path)

        assert store.set("bad", object(), "w") is False
        assert store.get("bad", "w") is None


# ============================================================
# create_store()
# ============================================================

class TestCreateStore:
    """create_store() 팩토리 테스트"""

    def test_file_driver(self, tmp_path):
        store = create_store({"driver": "file", "path": str(tmp_path)})

        assert isinstance(store, FileStateStore)
        assert store.path == tmp_path

    def test_default_driver_is_file(self, tmp_path):
        store = create_store({"path": str(tmp_path)})

        assert isinstance(store, FileStateStore)

    def test_sqlite_driver(self, tmp_path):
        store = create_store({
            "driver": "sqlite",
            "path": str(tmp_path / "cronark.db"),
            "options": {"journal_mode": "DELETE"},
        })
        try:
            assert isinstance(store, SQLiteStateStore)
            assert store.set("pid", 1, "w") is True
            assert store.get("pid", "w") == 1
        finally:
            store.close()

    def test_unknown_driver(self):
        with pytest.raises(UnknownStoreDriverError) as exc_info:
            create_store({"driver": "redis"})

        assert "redis" in str(exc_info.value)
