import pytest

from backoffice.application.auth_rate_limit import (
    AUTH_RATE_LIMIT_MAX_ATTEMPTS,
    RateLimitExceededError,
    SoftRateLimiter,
    check_login_rate_limit,
    record_login_failure,
    reset_login_limit,
)


def test_limiter_blocks_after_max_attempts_within_window() -> None:
    limiter = SoftRateLimiter(max_attempts=3, window_seconds=60)

    for offset in range(3):
        assert not limiter.is_limited("key", now=1000.0 + offset)
        limiter.record_failure("key", now=1000.0 + offset)

    assert limiter.is_limited("key", now=1010.0)
    assert not limiter.is_limited("other", now=1010.0)


def test_limiter_forgets_attempts_outside_window() -> None:
    limiter = SoftRateLimiter(max_attempts=2, window_seconds=60)
    limiter.record_failure("key", now=1000.0)
    limiter.record_failure("key", now=1001.0)

    assert limiter.is_limited("key", now=1030.0)
    assert not limiter.is_limited("key", now=1062.0)


def test_login_limit_is_keyed_by_email_and_ip() -> None:
    key = check_login_rate_limit("Admin@Example.com", "10.0.0.1")
    for _ in range(AUTH_RATE_LIMIT_MAX_ATTEMPTS):
        record_login_failure(key)

    with pytest.raises(RateLimitExceededError):
        check_login_rate_limit("admin@example.com", "10.0.0.1")
    # a different client is not affected
    check_login_rate_limit("admin@example.com", "10.0.0.2")

    reset_login_limit(key)
    assert check_login_rate_limit("admin@example.com", "10.0.0.1") == key


def test_login_limit_requires_identifier() -> None:
    with pytest.raises(ValueError):
        check_login_rate_limit("", "10.0.0.1")
