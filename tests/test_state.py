"""Tests for CrawlState admission and bookkeeping."""

from concurrent.futures import ThreadPoolExecutor

from steam_crawler.adapters.base import ProductRecord
from steam_crawler.engines.state import CrawlState


def _record(app_id: int, name: str = "Game") -> ProductRecord:
    return ProductRecord(app_id=app_id, name=name, tags=["Action"], price=1.0)


class TestAdmission:
    def test_admits_once(self):
        state = CrawlState([1])
        assert state.try_admit(1)
        assert not state.try_admit(1)

    def test_resolved_ids_are_never_readmitted(self):
        state = CrawlState()
        for app_id in (1, 2, 3):
            assert state.try_admit(app_id)
        state.record_success(_record(1))
        state.record_skip(2)
        state.record_failure(3)

        assert not state.try_admit(1)
        assert not state.try_admit(2)
        assert not state.try_admit(3)
        assert state.in_flight == set()

    def test_release_only_touches_reserved_ids(self):
        state = CrawlState()
        state.try_admit(1)
        state.try_admit(2)
        state.record_success(_record(2))

        assert state.release(1)
        assert not state.release(2)
        assert state.failed == {1}
        assert state.visited == {2}
        assert not state.try_admit(1)

    def test_capacity_counts_reservations(self):
        state = CrawlState(capacity=2)
        assert state.try_admit(1)
        assert state.try_admit(2)
        assert state.saturated()
        assert not state.try_admit(3)
        assert 3 not in state.in_flight
        assert 3 not in state.skipped

        # A skip frees the reserved slot.
        state.record_skip(1)
        assert state.try_admit(3)

    def test_no_capacity_without_count_policy(self):
        state = CrawlState(capacity=None)
        assert all(state.try_admit(i) for i in range(1, 500))
        assert not state.saturated()

    def test_concurrent_admission_is_exclusive(self):
        state = CrawlState()
        ids = list(range(1, 201))

        def admit_all():
            return [i for i in ids if state.try_admit(i)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            admitted = [i for batch in pool.map(lambda _: admit_all(), range(8)) for i in batch]

        assert sorted(admitted) == ids


class TestFrontier:
    def test_fifo_order(self):
        state = CrawlState([5, 6])
        state.enqueue_discovered([7, 8])
        assert [state.pop_frontier() for _ in range(4)] == [5, 6, 7, 8]
        assert state.pop_frontier() is None

    def test_enqueue_filters_known_ids(self):
        state = CrawlState()
        state.try_admit(1)
        state.record_success(_record(1))
        state.try_admit(2)

        assert state.enqueue_discovered([1, 2, 3]) == 1
        assert list(state.frontier) == [3]

    def test_size_and_snapshot(self):
        state = CrawlState([9])
        state.try_admit(4)
        state.try_admit(2)
        state.record_success(_record(4))
        state.record_success(_record(2))

        snap = state.snapshot()
        assert state.size() == 2
        assert state.pending() == 0
        assert [r.app_id for r in snap.records] == [2, 4]
        assert snap.frontier == [9]


class TestProductRecordIdentity:
    def test_equality_is_by_id_only(self):
        a = ProductRecord(app_id=1, name="Portal", tags=["Puzzle"], price=9.75)
        b = ProductRecord(app_id=1, name="Portal (old)", tags=[], price=0.0)
        assert a == b
        assert len({a, b}) == 1

    def test_different_ids_differ(self):
        assert _record(1) != _record(2)

    def test_to_dict(self):
        assert _record(7, "Seven").to_dict() == {"id": 7, "name": "Seven", "tags": ["Action"], "price": 1.0}
