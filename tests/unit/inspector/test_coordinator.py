"""Unit tests for inspector coordinators – batching profile requests."""
from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from mp_pprof.application.scheduler import InMemoryScheduler
from mp_pprof.inspector import CpuProfileCoordinator, HeapProfileCoordinator, SessionState
from mp_pprof.testing import (
    FakeAllocatorStats,
    FakeCpuSampler,
    FakeHeapProfiler,
    RecordingHttpServer,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def server() -> RecordingHttpServer:
    return RecordingHttpServer()


@pytest.fixture
def scheduler() -> InMemoryScheduler:
    return InMemoryScheduler()


def make_cpu(
    server: RecordingHttpServer,
    scheduler: InMemoryScheduler,
    tmp_path: Path,
    sampler: FakeCpuSampler | None = None,
) -> tuple[CpuProfileCoordinator, FakeCpuSampler]:
    sampler = sampler or FakeCpuSampler(payload=b"P1")
    coordinator = CpuProfileCoordinator(
        server, scheduler, sampler, profile_file=tmp_path / "profile.dat"
    )
    server.register("/pprof/profile", coordinator.request_profile)
    return coordinator, sampler


def make_heap(
    server: RecordingHttpServer,
    scheduler: InMemoryScheduler,
    tmp_path: Path,
    environ: dict[str, str] | None = None,
) -> tuple[HeapProfileCoordinator, FakeHeapProfiler, FakeAllocatorStats]:
    profiler = FakeHeapProfiler(profile="H1")
    allocator = FakeAllocatorStats(sample="SAMPLE")
    coordinator = HeapProfileCoordinator(
        server,
        scheduler,
        profiler,
        allocator,
        heap_profile_file=tmp_path / "heap.dat",
        environ=environ if environ is not None else {},
    )
    server.register("/pprof/heap", coordinator.request_heap_profile)
    return coordinator, profiler, allocator


# ---------------------------------------------------------------------------
# CPU profile
# ---------------------------------------------------------------------------


class TestCpuProfileCoordinator:
    def test_single_requester_answered_after_window(self, server, scheduler, tmp_path) -> None:
        coordinator, sampler = make_cpu(server, scheduler, tmp_path)
        cid = server.request("/pprof/profile", params={"seconds": "5"})

        assert sampler.start_count == 1
        assert not server.is_closed(cid)
        assert coordinator.snapshot().state is SessionState.RUNNING

        scheduler.advance(4.9)
        assert not server.is_closed(cid)

        scheduler.advance(0.1)
        assert server.body(cid) == b"P1"
        assert server.close_count[cid] == 1
        assert sampler.flush_count == 1
        assert sampler.stop_count == 1
        assert coordinator.snapshot().state is SessionState.IDLE

    def test_default_window(self, server, scheduler, tmp_path) -> None:
        make_cpu(server, scheduler, tmp_path)
        server.request("/pprof/profile")
        assert [t.delay_seconds for t in scheduler.pending] == [30]

    def test_joiners_share_one_run(self, server, scheduler, tmp_path) -> None:
        coordinator, sampler = make_cpu(server, scheduler, tmp_path)
        ids = [server.request("/pprof/profile", params={"seconds": "5"}) for _ in range(4)]

        assert sampler.start_count == 1
        assert len(scheduler.pending) == 1
        assert coordinator.snapshot().waiters == frozenset(ids)

        scheduler.advance(5)
        assert {server.body(cid) for cid in ids} == {b"P1"}
        assert all(server.close_count[cid] == 1 for cid in ids)

    def test_later_joiner_window_ignored(self, server, scheduler, tmp_path) -> None:
        coordinator, _ = make_cpu(server, scheduler, tmp_path)
        first = server.request("/pprof/profile", params={"seconds": "10"})
        scheduler.advance(3)
        second = server.request("/pprof/profile", params={"seconds": "1"})

        scheduler.advance(6.9)
        assert not server.is_closed(second)
        assert coordinator.snapshot().window_seconds == 10

        scheduler.advance(0.1)
        assert server.body(first) == server.body(second) == b"P1"

    def test_new_run_after_completion(self, server, scheduler, tmp_path) -> None:
        coordinator, sampler = make_cpu(server, scheduler, tmp_path)
        first = server.request("/pprof/profile", params={"seconds": "2"})
        scheduler.advance(2)

        sampler.payload = b"P2"
        second = server.request("/pprof/profile", params={"seconds": "7"})
        assert sampler.start_count == 2
        assert [t.delay_seconds for t in scheduler.pending] == [7]

        scheduler.advance(7)
        assert server.body(first) == b"P1"
        assert server.body(second) == b"P2"
        assert coordinator.snapshot().generation == 2

    def test_trailing_characters_after_seconds_ignored(self, server, scheduler, tmp_path) -> None:
        make_cpu(server, scheduler, tmp_path)
        cid = server.request("/pprof/profile", params={"seconds": "5s"})
        assert cid not in server.errors
        assert [t.delay_seconds for t in scheduler.pending] == [5]
        scheduler.advance(5)
        assert server.body(cid) == b"P1"

    def test_zero_seconds_fires_on_next_tick(self, server, scheduler, tmp_path) -> None:
        make_cpu(server, scheduler, tmp_path)
        cid = server.request("/pprof/profile", params={"seconds": "0"})
        assert not server.is_closed(cid)
        scheduler.advance(0)
        assert server.body(cid) == b"P1"

    @pytest.mark.parametrize("seconds", ["abc", "601", "-3", "x1"])
    def test_bad_seconds_rejected_without_state_change(
        self, server, scheduler, tmp_path, seconds: str
    ) -> None:
        coordinator, sampler = make_cpu(server, scheduler, tmp_path)
        cid = server.request("/pprof/profile", params={"seconds": seconds})

        error = server.errors[cid]
        assert error.status == 400
        assert error.message == "Invalid Profile Seconds Parameter"
        assert sampler.start_count == 0
        assert scheduler.pending == []
        assert coordinator.snapshot().state is SessionState.IDLE

    def test_bad_seconds_does_not_disturb_running_session(
        self, server, scheduler, tmp_path
    ) -> None:
        coordinator, _ = make_cpu(server, scheduler, tmp_path)
        good = server.request("/pprof/profile", params={"seconds": "1"})
        bad = server.request("/pprof/profile", params={"seconds": "x"})
        assert coordinator.snapshot().waiters == frozenset({good})
        scheduler.advance(1)
        assert server.body(good) == b"P1"
        assert server.body(bad) == b""

    def test_non_get_rejected(self, server, scheduler, tmp_path) -> None:
        _, sampler = make_cpu(server, scheduler, tmp_path)
        cid = server.request("/pprof/profile", method="POST")
        assert server.errors[cid].status == 400
        assert server.errors[cid].message == "Only accept Get method"
        assert sampler.start_count == 0

    def test_start_failure_degrades_to_empty_body(self, server, scheduler, tmp_path) -> None:
        coordinator, _ = make_cpu(
            server, scheduler, tmp_path, sampler=FakeCpuSampler(fail_start=True)
        )
        cid = server.request("/pprof/profile", params={"seconds": "1"})
        assert coordinator.snapshot().state is SessionState.RUNNING

        scheduler.advance(1)
        assert server.body(cid) == b""
        assert server.close_count[cid] == 1
        assert coordinator.snapshot().state is SessionState.IDLE

    def test_finish_failure_still_answers_waiters(self, server, scheduler, tmp_path) -> None:
        class ExplodingSampler(FakeCpuSampler):
            def flush(self) -> None:
                raise RuntimeError("flush failed")

        sampler = ExplodingSampler()
        coordinator, _ = make_cpu(server, scheduler, tmp_path, sampler=sampler)
        ids = [server.request("/pprof/profile", params={"seconds": "1"}) for _ in range(2)]

        events = scheduler.advance(1)
        assert all(e.success for e in events)
        assert sampler.stop_count == 1
        assert all(server.body(cid) == b"" and server.is_closed(cid) for cid in ids)
        assert coordinator.snapshot().state is SessionState.IDLE

    def test_concurrent_first_joiners_start_once(self, server, scheduler, tmp_path) -> None:
        coordinator, sampler = make_cpu(server, scheduler, tmp_path)
        barrier = threading.Barrier(16)

        def hit() -> None:
            barrier.wait()
            server.request("/pprof/profile", params={"seconds": "5"})

        threads = [threading.Thread(target=hit) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sampler.start_count == 1
        assert len(scheduler.pending) == 1
        assert len(coordinator.snapshot().waiters) == 16

        scheduler.advance(5)
        assert len(server.sent) == 16
        assert {server.body(cid) for cid in server.sent} == {b"P1"}

    def test_joiner_racing_completion_starts_next_run(self, server, scheduler, tmp_path) -> None:
        flushing = threading.Event()
        release = threading.Event()

        class GatedSampler(FakeCpuSampler):
            def start(self, path) -> None:
                super().start(path)
                self.payload = f"gen-{self.start_count}".encode()

            def flush(self) -> None:
                flushing.set()
                assert release.wait(timeout=5)
                super().flush()

        coordinator, sampler = make_cpu(server, scheduler, tmp_path, sampler=GatedSampler())
        first = server.request("/pprof/profile", params={"seconds": "5"})

        completion = threading.Thread(target=scheduler.advance, args=(5,))
        completion.start()
        assert flushing.wait(timeout=5)

        late_ids: list[int] = []
        late = threading.Thread(
            target=lambda: late_ids.append(
                server.request("/pprof/profile", params={"seconds": "7"})
            )
        )
        late.start()
        time.sleep(0.1)
        # still blocked behind the finishing run
        assert late_ids == []
        assert not server.is_closed(first)

        release.set()
        completion.join(timeout=5)
        late.join(timeout=5)

        (late_id,) = late_ids
        assert server.body(first) == b"gen-1"
        assert not server.is_closed(late_id)
        snap = coordinator.snapshot()
        assert snap.state is SessionState.RUNNING
        assert snap.generation == 2
        assert snap.waiters == frozenset({late_id})
        assert [t.delay_seconds for t in scheduler.pending] == [7]

        scheduler.advance(6.9)
        assert not server.is_closed(late_id)
        scheduler.advance(0.1)
        assert server.body(late_id) == b"gen-2"
        assert server.close_count[first] == server.close_count[late_id] == 1
        assert sampler.start_count == 2


# ---------------------------------------------------------------------------
# Heap profile
# ---------------------------------------------------------------------------


class TestHeapProfileCoordinator:
    def test_continuous_sampling_answers_immediately(self, server, scheduler, tmp_path) -> None:
        coordinator, profiler, allocator = make_heap(
            server, scheduler, tmp_path, environ={"PYTHONTRACEMALLOC": "1"}
        )
        cid = server.request("/pprof/heap")
        assert server.body(cid) == b"SAMPLE"
        assert server.close_count[cid] == 1
        assert profiler.start_count == 0
        assert scheduler.pending == []
        assert coordinator.snapshot().state is SessionState.IDLE

    def test_flag_read_per_request(self, server, scheduler, tmp_path) -> None:
        environ: dict[str, str] = {}
        coordinator, _, _ = make_heap(server, scheduler, tmp_path, environ=environ)
        assert not coordinator.continuous_sampling()
        environ["PYTHONTRACEMALLOC"] = "5"
        assert coordinator.continuous_sampling()
        environ["PYTHONTRACEMALLOC"] = ""
        assert not coordinator.continuous_sampling()

    def test_fixed_window(self, server, scheduler, tmp_path) -> None:
        _, profiler, _ = make_heap(server, scheduler, tmp_path)
        first = server.request("/pprof/heap", params={"seconds": "1"})
        second = server.request("/pprof/heap")

        assert profiler.start_count == 1
        assert profiler.path == tmp_path / "heap.dat"
        assert [t.delay_seconds for t in scheduler.pending] == [30]

        scheduler.advance(29)
        assert not server.is_closed(first)
        scheduler.advance(1)
        assert server.body(first) == server.body(second) == b"H1"
        assert profiler.stop_count == 1

    def test_non_get_rejected(self, server, scheduler, tmp_path) -> None:
        make_heap(server, scheduler, tmp_path)
        cid = server.request("/pprof/heap", method="DELETE")
        assert server.errors[cid].status == 400

    def test_independent_of_cpu_sessions(self, server, scheduler, tmp_path) -> None:
        cpu, _ = make_cpu(server, scheduler, tmp_path)
        heap, _, _ = make_heap(server, scheduler, tmp_path)
        cpu_id = server.request("/pprof/profile", params={"seconds": "5"})
        heap_id = server.request("/pprof/heap")

        assert cpu.snapshot().waiters == frozenset({cpu_id})
        assert heap.snapshot().waiters == frozenset({heap_id})

        scheduler.advance(5)
        assert server.body(cpu_id) == b"P1"
        assert not server.is_closed(heap_id)
        assert heap.snapshot().state is SessionState.RUNNING

        scheduler.advance(25)
        assert server.body(heap_id) == b"H1"
