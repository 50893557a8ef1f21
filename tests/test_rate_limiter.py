import pytest
from unittest.mock import patch

from src.platforms.rate_limiter import RateLimiter


def test_first_request_is_allowed_immediately(clock):
    limiter = RateLimiter("coingecko", 6.0, clock=clock)
    assert limiter.can_make_request()
    assert limiter.get_wait_time() == 0.0
    assert limiter.last_request_at is None


@pytest.mark.asyncio
async def test_consecutive_requests_are_spaced_by_delay(clock):
    limiter = RateLimiter("coingecko", 6.0, clock=clock)

    with patch("src.platforms.rate_limiter.asyncio.sleep", side_effect=clock.sleep) as mock_sleep:
        await limiter.wait_for_next()
        first = limiter.last_request_at
        await limiter.wait_for_next()
        second = limiter.last_request_at

    assert second - first >= 6.0
    mock_sleep.assert_called_once()


@pytest.mark.asyncio
async def test_wait_time_shrinks_as_time_passes(clock):
    limiter = RateLimiter("newsdata", 12.0, clock=clock)
    await limiter.wait_for_next()

    assert not limiter.can_make_request()
    assert limiter.get_wait_time() == pytest.approx(12.0)

    clock.advance(5)
    assert limiter.get_wait_time() == pytest.approx(7.0)

    clock.advance(7)
    assert limiter.can_make_request()
    assert limiter.get_wait_time() == 0.0


@pytest.mark.asyncio
async def test_no_sleep_once_delay_elapsed(clock):
    limiter = RateLimiter("coingecko", 6.0, clock=clock)
    await limiter.wait_for_next()
    clock.advance(10)

    with patch("src.platforms.rate_limiter.asyncio.sleep", side_effect=clock.sleep) as mock_sleep:
        await limiter.wait_for_next()

    mock_sleep.assert_not_called()
    assert limiter.last_request_at == clock.now


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        RateLimiter("coingecko", -1)
