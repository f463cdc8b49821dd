"""
Login-State Store: single consumption, expiry and pruning.
"""

import threading

from hypothesis import given, settings
from hypothesis import strategies as st

from lochub.db import make_engine, migrate
from lochub.state_store import STATE_ALPHABET, LoginStateStore, generate_state


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _memory_store(**kwargs) -> LoginStateStore:
    engine = make_engine("sqlite://")
    migrate(engine)
    return LoginStateStore(engine, **kwargs)


@given(length=st.integers(min_value=1, max_value=64))
def test_generate_state_is_alphanumeric(length: int) -> None:
    state = generate_state(length)
    assert len(state) == length
    assert set(state) <= set(STATE_ALPHABET)


@given(attempts=st.integers(min_value=1, max_value=8))
@settings(max_examples=20, deadline=None)
def test_issued_state_consumed_exactly_once(attempts: int) -> None:
    store = _memory_store()
    state = store.issue()

    results = [store.consume(state) for _ in range(attempts)]

    assert results.count(True) == 1
    assert results[0] is True
    assert store.count() == 0


def test_concurrent_consumers_see_one_success(tmp_path) -> None:
    engine = make_engine(f"sqlite:///{tmp_path / 'states.db'}")
    migrate(engine)
    store = LoginStateStore(engine)
    state = store.issue()

    workers = 8
    barrier = threading.Barrier(workers)
    results = []
    lock = threading.Lock()

    def consume():
        barrier.wait()
        outcome = store.consume(state)
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=consume) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == [False] * (workers - 1) + [True]
    assert store.count() == 0
    engine.dispose()


def test_unknown_state_leaves_rows_untouched(store) -> None:
    issued = [store.issue() for _ in range(3)]

    assert store.consume("unknown-token") is False
    assert store.count() == 3
    assert all(store.consume(s) for s in issued)


def test_expired_state_is_rejected_and_spent() -> None:
    clock = FakeClock()
    store = _memory_store(ttl=600, clock=clock)
    state = store.issue()

    clock.now += 601

    assert store.consume(state) is False
    assert store.count() == 0


def test_state_within_window_is_accepted() -> None:
    clock = FakeClock()
    store = _memory_store(ttl=600, clock=clock)
    state = store.issue()

    clock.now += 599

    assert store.consume(state) is True


def test_issue_prunes_expired_rows() -> None:
    clock = FakeClock()
    store = _memory_store(ttl=60, clock=clock)
    store.issue()
    store.issue()

    clock.now += 61
    fresh = store.issue()

    assert store.count() == 1
    assert store.consume(fresh) is True
