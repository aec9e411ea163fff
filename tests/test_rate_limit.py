import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from portfolio_api.core.rate_limit import ServerRateLimiter
from portfolio_api.lifecycles import sweep_rate_limits

DAY = 24 * 60 * 60


@pytest.fixture()
def limiter(clock):
    return ServerRateLimiter(max_requests=10, window_seconds=DAY, clock=clock)


def test_first_check_opens_window_without_consuming(limiter, clock):
    decision = limiter.check("1.2.3.4")
    assert decision.allowed is True
    assert decision.remaining == 10
    assert decision.reset_at == DAY

    assert limiter.check("1.2.3.4").remaining == 10


def test_daily_scenario(limiter, clock):
    remaining = [limiter.check_and_increment("1.2.3.4") for _ in range(10)]
    assert all(d.allowed for d in remaining)
    assert [d.remaining for d in remaining] == list(range(9, -1, -1))

    clock.advance(0.001)
    blocked = limiter.check_and_increment("1.2.3.4")
    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.reset_at_ms == DAY * 1000

    clock.now = DAY + 1
    fresh = limiter.check_and_increment("1.2.3.4")
    assert fresh.allowed is True
    assert fresh.remaining == 9
    assert fresh.reset_at == DAY + 1 + DAY


def test_last_slot_is_admitted(clock):
    limiter = ServerRateLimiter(max_requests=2, window_seconds=DAY, clock=clock)
    decisions = [limiter.check_and_increment("visitor") for _ in range(3)]
    assert [(d.allowed, d.remaining) for d in decisions] == [(True, 1), (True, 0), (False, 0)]


def test_remaining_tracks_count_and_never_goes_negative(limiter):
    for count in range(1, 15):
        limiter.increment("visitor")
        decision = limiter.check("visitor")
        assert decision.remaining == max(0, 10 - count)
        assert decision.allowed is (count < 10)


def test_increment_past_limit_does_not_raise(limiter):
    for _ in range(10):
        limiter.increment("visitor")
    limiter.increment("visitor")
    assert limiter.check("visitor").allowed is False


def test_rollover_replaces_window(limiter, clock):
    clock.now = 100.0
    first = limiter.check("visitor")
    for _ in range(4):
        limiter.increment("visitor")

    clock.now = first.reset_at + 5
    decision = limiter.check("visitor")
    assert decision.remaining == 10
    assert decision.reset_at == clock.now + DAY


def test_identities_are_independent(limiter):
    for _ in range(10):
        limiter.check_and_increment("a")
    assert limiter.check_and_increment("a").allowed is False
    assert limiter.check_and_increment("b").allowed is True


def test_concurrent_check_and_increment_admits_exactly_max():
    limiter = ServerRateLimiter(max_requests=10, window_seconds=DAY)
    with ThreadPoolExecutor(max_workers=16) as pool:
        decisions = list(pool.map(lambda _: limiter.check_and_increment("1.2.3.4"), range(37)))

    assert sum(d.allowed for d in decisions) == 10
    assert sum(not d.allowed for d in decisions) == 27
    assert sorted(d.remaining for d in decisions if d.allowed) == list(range(10))


def test_backwards_clock_keeps_block(limiter, clock):
    clock.now = 1000.0
    for _ in range(10):
        limiter.check_and_increment("visitor")
    clock.now = 10.0
    decision = limiter.check_and_increment("visitor")
    assert decision.allowed is False
    assert decision.reset_at == 1000.0 + DAY


def test_cleanup_expired_drops_only_stale_windows(limiter, clock):
    limiter.check_and_increment("old")
    clock.advance(DAY / 2)
    limiter.check_and_increment("recent")
    clock.advance(DAY / 2)

    assert limiter.cleanup_expired() == 1
    assert len(limiter) == 1
    assert limiter.check("recent").remaining == 9


def test_sweeper_task_cleans_periodically(limiter, clock):
    limiter.check_and_increment("visitor")
    clock.advance(DAY)

    async def run():
        task = asyncio.create_task(sweep_rate_limits(limiter, 0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())
    assert len(limiter) == 0


@pytest.mark.parametrize("kwargs", [{"max_requests": 0}, {"window_seconds": 0}])
def test_rejects_invalid_configuration(kwargs):
    with pytest.raises(ValueError):
        ServerRateLimiter(**kwargs)
