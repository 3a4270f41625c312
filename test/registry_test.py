"""
JobRegistry 테스트

테스트 항목:
1. 워커 등록 / 잡 추가 (위치 지정, 범위 밖 위치)
2. get() / has() 조회
3. count() / has_any() 집계
4. hash() 변경 감지

실행: python -m pytest test/registry_test.py -v
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from worker.registry import JobRegistry


# ============================================================
# 등록 / 추가
# ============================================================

class TestRegister:
    """register() / add() 테스트"""

    def test_register_creates_empty_worker(self):
        """register()는 빈 워커를 만듦"""
        registry = JobRegistry()
        registry.register("w")

        assert registry.is_registered("w")
        assert registry.jobs("w") == []
        assert registry.count("w") == 0

    def test_register_is_idempotent(self):
        """이미 있는 워커를 다시 등록해도 잡 목록 유지"""
        registry = JobRegistry()
        registry.add("a", "w")
        registry.register("w")

        assert registry.jobs("w") == ["a"]

    def test_add_registers_worker(self):
        """add()는 워커를 자동 등록"""
        registry = JobRegistry()
        registry.add("a", "w")

        assert registry.workers == ["w"]

    def test_add_default_worker_is_main(self):
        """worker를 생략하면 main 워커"""
        registry = JobRegistry()
        registry.add("a")

        assert registry.jobs("main") == ["a"]

    def test_add_at_position_shifts_right(self):
        """위치 지정 시 뒤의 잡은 오른쪽으로 밀림"""
        registry = JobRegistry()
        registry.add("a", "w")
        registry.add("c", "w")
        registry.add("b", "w", 1)
        registry.add("start", "w", 0)

        assert registry.jobs("w") == ["start", "a", "b", "c"]
        for i, name in enumerate(["start", "a", "b", "c"]):
            assert registry.get(i, "w") == name

    def test_add_out_of_range_position_appends(self):
        """범위 밖 위치 / 음수 위치는 맨 뒤에 추가"""
        registry = JobRegistry()
        registry.add("a", "w")
        registry.add("b", "w", 10)
        registry.add("c", "w", -1)

        assert registry.jobs("w") == ["a", "b", "c"]

    def test_duplicates_allowed(self):
        """같은 잡을 여러 번 등록할 수 있음"""
        registry = JobRegistry()
        registry.add("a", "w")
        registry.add("a", "w")

        assert registry.jobs("w") == ["a", "a"]

    def test_jobs_returns_copy(self):
        """jobs()는 사본을 반환"""
        registry = JobRegistry()
        registry.add("a", "w")
        registry.jobs("w").append("b")

        assert registry.count("w") == 1


# ============================================================
# 조회
# ============================================================

class TestLookup:
    """get() / has() 테스트"""

    def test_get_unknown_worker_and_out_of_range(self):
        """알 수 없는 워커와 범위 밖 인덱스는 모두 None"""
        registry = JobRegistry()
        registry.add("a", "w")

        assert registry.get(0, "unknown") is None
        assert registry.get(1, "w") is None
        assert registry.get(-1, "w") is None
        assert registry.get(None, "w") is None

    def test_has(self):
        registry = JobRegistry()
        registry.add("a", "w")

        assert registry.has(0, "w") is True
        assert registry.has(1, "w") is False
        assert registry.has(-1, "w") is False


# ============================================================
# 집계
# ============================================================

class TestAggregate:
    """count() / has_any() 테스트"""

    def test_count_per_worker_and_total(self):
        registry = JobRegistry()
        registry.add("a", "w1")
        registry.add("b", "w1")
        registry.add("c", "w2")

        assert registry.count("w1") == 2
        assert registry.count("w2") == 1
        assert registry.count("unknown") == 0
        assert registry.count() == 3

    def test_has_any(self):
        """has_any()는 워커 지정 또는 전체 기준"""
        registry = JobRegistry()
        assert registry.has_any() is False

        registry.register("empty")
        assert registry.has_any() is False
        assert registry.has_any("empty") is False

        registry.add("a", "w")
        assert registry.has_any() is True
        assert registry.has_any("w") is True
        assert registry.has_any("empty") is False


# ============================================================
# 해시
# ============================================================

class TestHash:
    """hash() 테스트"""

    def test_hash_is_deterministic(self):
        """같은 목록이면 인스턴스가 달라도 같은 해시"""
        first = JobRegistry()
        second = JobRegistry()
        for registry in (first, second):
            registry.add("a", "w")
            registry.add("b", "w")

        assert first.hash("w") == second.hash("w")
        assert first.hash() == second.hash()

    def test_hash_changes_on_insert(self):
        registry = JobRegistry()
        registry.add("a", "w")
        before = registry.hash("w")

        registry.add("b", "w")
        assert registry.hash("w") != before

    def test_hash_changes_on_reorder(self):
        """순서가 다르면 다른 해시"""
        ab = JobRegistry()
        ab.add("a", "w")
        ab.add("b", "w")

        ba = JobRegistry()
        ba.add("b", "w")
        ba.add("a", "w")

        assert ab.hash("w") != ba.hash("w")

    def test_hash_per_worker_is_independent(self):
        """다른 워커의 변경은 워커 해시에 영향 없음"""
        registry = JobRegistry()
        registry.add("a", "w1")
        before = registry.hash("w1")
        all_before = registry.hash()

        registry.add("b", "w2")

        assert registry.hash("w1") == before
        assert registry.hash() != all_before

    def test_unknown_worker_hash_equals_empty_worker_hash(self):
        registry = JobRegistry()
        registry.register("empty")

        assert registry.hash("empty") == registry.hash("unknown")
