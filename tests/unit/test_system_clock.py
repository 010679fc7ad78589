from datetime import UTC, datetime

from cms_versioning.adapters.clock import SystemClock


def test_system_clock_is_utc() -> None:
    now = SystemClock().now_utc()
    assert now.tzinfo is not None
    assert now.utcoffset().total_seconds() == 0
    # Sanity check: close to real now
    assert abs((datetime.now(UTC) - now).total_seconds()) < 1.0
